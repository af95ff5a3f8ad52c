"""Configuration commands: show and change ~/.pmgraph/config.json."""

import json

import typer
from pydantic import ValidationError

from pmgraph.config import GraphConfig, get_config, get_config_dir, save_config
from pmgraph.domain.shared import Err
from pmgraph.interfaces.cli.common import print_error, print_success

app = typer.Typer(help="Configuration")


@app.command("show")
def show() -> None:
    """Print the effective configuration."""
    typer.echo(f"# {get_config_dir() / 'config.json'}")
    typer.echo(json.dumps(get_config().model_dump(), indent=2))


@app.command("set")
def set_value(
    key: str = typer.Argument(..., help="Config field, e.g. default_preset"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Change one configuration value."""
    if key not in GraphConfig.model_fields:
        print_error(f"Unknown config key: {key}")
        raise typer.Exit(1)

    try:
        config = GraphConfig(**{**get_config().model_dump(), key: value})
    except ValidationError as e:
        print_error(f"Invalid value for {key}: {e.errors()[0]['msg']}")
        raise typer.Exit(1)

    result = save_config(config)
    if isinstance(result, Err):
        print_error(result.error)
        raise typer.Exit(1)
    print_success(f"{key} = {getattr(config, key)}")
