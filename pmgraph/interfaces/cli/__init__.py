"""CLI interface for PMGraph using Typer.

Usage:
    pmgraph presets list          # Show department presets
    pmgraph replay script.json    # Run scripted operations, print the view
    pmgraph config show           # Show effective configuration

The CLI is structured as:
- app: Main Typer application
- commands/: Individual command groups
- common.py: Shared output helpers
- main.py: Entry point that runs the app
"""

import logging
from typing import Optional

import typer

from pmgraph import __version__
from pmgraph.interfaces.cli.commands import config, presets
from pmgraph.interfaces.cli.commands.replay import replay_command

app = typer.Typer(
    name="pmgraph",
    help="Node-graph task board state engine",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pmgraph version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log store operations"),
) -> None:
    """PMGraph - task cards, groups and typed edges on a canvas."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# =============================================================================
# Register Command Groups
# =============================================================================

app.add_typer(presets.app, name="presets")
app.add_typer(config.app, name="config")
app.command("replay")(replay_command)
