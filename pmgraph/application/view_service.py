"""View service.

Assembles what a renderer needs from the store's current state: nodes
with their opacity, the derived edge list, board columns and group
badges. Everything is recomputed from scratch on each call.
"""

from pydantic import BaseModel

from pmgraph.application.graph_store import GraphStore
from pmgraph.domain.graph import (
    BOARD_COLUMNS,
    DerivedEdge,
    GroupNode,
    Node,
    Preset,
    get_category_color,
    group_dependency_counts,
    node_opacity,
    tasks_by_status,
)


class NodeView(BaseModel):
    """A node plus the presentation values derived for it."""

    node: Node
    opacity: float
    color: str
    deps_in: int = 0
    deps_out: int = 0


class BoardColumn(BaseModel):
    status: str
    label: str
    node_ids: list[str]


class GraphView(BaseModel):
    """Everything a canvas render consumes, in one payload."""

    preset: Preset
    nodes: list[NodeView]
    edges: list[DerivedEdge]
    visible_ids: list[str]
    columns: list[BoardColumn]
    can_undo: bool
    can_redo: bool


def build_view(store: GraphStore) -> GraphView:
    """Build the render view for the store's current state."""
    preset = store.active_preset()
    visible = store.visible_ids()

    node_views: list[NodeView] = []
    for node in store.nodes:
        if isinstance(node, GroupNode):
            deps_in, deps_out = group_dependency_counts(store.nodes, store.edges, node.id)
            color = node.data.color
        else:
            deps_in = deps_out = 0
            color = get_category_color(preset.categories, node.data.department)
        node_views.append(
            NodeView(
                node=node,
                opacity=node_opacity(node, visible, store.config.node_dim_opacity),
                color=color,
                deps_in=deps_in,
                deps_out=deps_out,
            )
        )

    by_status = tasks_by_status(store.nodes, visible)
    columns = [
        BoardColumn(
            status=status.value,
            label=label,
            node_ids=[task.id for task in by_status[status]],
        )
        for status, label in BOARD_COLUMNS
    ]

    return GraphView(
        preset=preset,
        nodes=node_views,
        edges=store.derived_edges(),
        visible_ids=sorted(visible),
        columns=columns,
        can_undo=store.can_undo,
        can_redo=store.can_redo,
    )
