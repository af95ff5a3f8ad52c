"""Preset commands: list the department presets and their categories."""

import typer

from pmgraph.config import get_config
from pmgraph.domain.graph import PresetRegistry
from pmgraph.interfaces.cli.common import print_header, print_info

app = typer.Typer(help="Department presets")


@app.command("list")
def list_presets() -> None:
    """List presets with their categories."""
    default = get_config().default_preset
    registry = PresetRegistry()

    print_header("Presets")
    for preset in registry:
        marker = " (default)" if preset.id == default else ""
        print_info(f"{preset.id}: {preset.label}{marker}")
        for category in preset.categories:
            typer.echo(f"  - {category.name} {category.color}")
