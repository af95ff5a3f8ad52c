"""Entity factory for task and group nodes.

Builds default-initialized entities; unset fields take the defaults
declared on the data models.
"""

from collections.abc import Mapping
from typing import Any
from uuid import uuid4

from .models import Dimensions, GroupNode, GroupNodeData, Position, TaskNode, TaskNodeData


def generate_id() -> str:
    """Return a fresh, unique entity id."""
    return str(uuid4())


def create_task_node(
    position: Position,
    data: Mapping[str, Any] | TaskNodeData | None = None,
) -> TaskNode:
    """Create a task node at a canvas position.

    Args:
        position: Absolute canvas position
        data: Partial task fields; anything omitted gets its default

    Returns:
        New top-level TaskNode with a fresh id
    """
    if isinstance(data, TaskNodeData):
        node_data = data
    else:
        node_data = TaskNodeData.model_validate(dict(data or {}))
    return TaskNode(id=generate_id(), position=position, data=node_data)


def create_group_node(
    position: Position,
    title: str,
    color: str,
    dimensions: Dimensions | None = None,
) -> GroupNode:
    """Create an expanded group container at a canvas position."""
    return GroupNode(
        id=generate_id(),
        position=position,
        data=GroupNodeData(title=title, color=color, collapsed=False),
        dimensions=dimensions or Dimensions(),
    )
