"""Replay scripted operations against a graph store.

A script is a JSON list of steps:

    [
        {"op": "add_node", "args": {"position": {"x": 0, "y": 0}}, "as": "a"},
        {"op": "add_node", "args": {"position": {"x": 200, "y": 0}}, "as": "b"},
        {"op": "add_edge", "args": {"connection": {"source": "$a", "target": "$b"}}}
    ]

Strings of the form "$name" are replaced by the id returned from the
step stored under that name. Useful for demos, fixtures and reproducing
bug reports without a canvas.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from pmgraph.application.graph_store import GraphStore
from pmgraph.domain.graph import NodeChange
from pmgraph.domain.shared.result import Err, Ok, Result

logger = logging.getLogger(__name__)

REPLAYABLE_OPS = frozenset(
    {
        "add_node",
        "add_node_connected",
        "update_node",
        "set_node_status",
        "delete_node",
        "set_node_position",
        "set_selected_node",
        "add_group_node",
        "toggle_group_collapse",
        "move_node_to_group",
        "add_edge",
        "remove_edge",
        "cycle_edge_type",
        "set_edge_type",
        "apply_node_changes",
        "set_filters",
        "clear_filters",
        "set_preset",
        "set_task_panel_open",
        "set_active_view",
        "undo",
        "redo",
    }
)

_node_changes = TypeAdapter(list[NodeChange])


class ReplayStep(BaseModel):
    """One scripted store call."""

    op: str
    args: dict[str, Any] = Field(default_factory=dict)
    alias: str | None = Field(default=None, alias="as")

    model_config = {"populate_by_name": True, "extra": "forbid"}


def parse_script(data: Any) -> Result[list[ReplayStep], str]:
    """Validate raw JSON into replay steps."""
    if not isinstance(data, list):
        return Err("Script must be a JSON list of steps")
    try:
        steps = [ReplayStep.model_validate(item) for item in data]
    except ValidationError as e:
        return Err(f"Invalid step: {e}")
    for index, step in enumerate(steps, start=1):
        if step.op not in REPLAYABLE_OPS:
            return Err(f"Step {index}: unknown operation '{step.op}'")
    return Ok(steps)


def _resolve(value: Any, aliases: dict[str, str]) -> Any:
    if isinstance(value, str) and value.startswith("$"):
        name = value[1:]
        if name not in aliases:
            raise KeyError(name)
        return aliases[name]
    if isinstance(value, dict):
        return {k: _resolve(v, aliases) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve(v, aliases) for v in value]
    return value


def replay(store: GraphStore, steps: list[ReplayStep]) -> Result[dict[str, str], str]:
    """Run steps in order against the store.

    Stops at the first step that cannot be run (unknown alias, bad
    arguments). Steps the store itself ignores are not failures.

    Returns:
        Ok(aliases) mapping each "as" name to the id it captured
    """
    aliases: dict[str, str] = {}
    for index, step in enumerate(steps, start=1):
        try:
            args = _resolve(step.args, aliases)
        except KeyError as e:
            return Err(f"Step {index} ({step.op}): unknown alias ${e.args[0]}")

        if step.op == "apply_node_changes":
            try:
                args["changes"] = _node_changes.validate_python(args.get("changes", []))
            except ValidationError as e:
                return Err(f"Step {index} ({step.op}): {e}")

        try:
            returned = getattr(store, step.op)(**args)
        except (TypeError, ValueError) as e:
            return Err(f"Step {index} ({step.op}): {e}")

        logger.debug(f"Step {index}: {step.op} -> {returned}")
        if step.alias is not None:
            if not isinstance(returned, str):
                return Err(f"Step {index} ({step.op}): returned no id to store as '{step.alias}'")
            aliases[step.alias] = returned

    return Ok(aliases)
