"""Replay command: run a JSON script of store operations and print the result."""

import json
import logging
from pathlib import Path

import typer

from pmgraph.application import GraphStore, build_view, parse_script, replay
from pmgraph.config import get_config
from pmgraph.domain.graph import GroupNode
from pmgraph.domain.shared import Err, flat_map
from pmgraph.infrastructure.storage import JsonStorage
from pmgraph.interfaces.cli.common import (
    format_edge,
    format_node,
    print_error,
    print_header,
    print_separator,
)

logger = logging.getLogger(__name__)


def replay_command(
    script: Path = typer.Argument(..., help="JSON list of steps to run"),
    as_json: bool = typer.Option(False, "--json", help="Print the render view as JSON"),
) -> None:
    """Replay a script of store operations and show the derived view."""
    steps = flat_map(JsonStorage().load_json(script), parse_script)
    if isinstance(steps, Err):
        print_error(steps.error)
        raise typer.Exit(1)

    store = GraphStore(config=get_config())
    result = replay(store, steps.value)
    if isinstance(result, Err):
        print_error(result.error)
        raise typer.Exit(1)

    view = build_view(store)
    if as_json:
        typer.echo(json.dumps(view.model_dump(mode="json"), indent=2))
        return

    # Prefer script aliases for display, then titles
    names = {node.id: node.data.title for node in store.nodes}
    names.update({node_id: alias for alias, node_id in result.value.items()})

    print_header(f"{len(steps.value)} steps replayed (preset: {view.preset.label})")
    typer.echo("Nodes:")
    for node_view in view.nodes:
        node = node_view.node
        dim = "" if node_view.opacity == 1.0 else f" (opacity {node_view.opacity})"
        line = format_node(node, names) + dim
        if isinstance(node, GroupNode) and (node_view.deps_in or node_view.deps_out):
            line += f" deps in={node_view.deps_in} out={node_view.deps_out}"
        typer.echo(f"  {line}")

    typer.echo("Edges:")
    for edge in view.edges:
        typer.echo(f"  {format_edge(edge, names)}")

    print_separator("-")
    for column in view.columns:
        typer.echo(f"{column.label}: {len(column.node_ids)}")
    typer.echo(f"undo={'yes' if view.can_undo else 'no'} redo={'yes' if view.can_redo else 'no'}")
