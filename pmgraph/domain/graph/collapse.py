"""Group collapse engine.

Derives the edge list the renderer draws. Real edges whose endpoints
sit inside a collapsed group are folded into synthetic edges attached
to the group itself, one per (source, target) pair after remapping.

All functions in this module are pure. Stored edges are never modified;
re-expanding a group simply stops producing its synthetic edges.
"""

from collections.abc import Iterable, Sequence

from .edge_types import stronger
from .filtering import EDGE_DIM_OPACITY, edge_opacity
from .models import DerivedEdge, Edge, GroupNode, TaskNode

SYNTHETIC_PREFIX = "synthetic-"


def is_synthetic_id(edge_id: str) -> bool:
    return edge_id.startswith(SYNTHETIC_PREFIX)


def synthetic_edge_id(source: str, target: str) -> str:
    return f"{SYNTHETIC_PREFIX}{source}-{target}"


def collapsed_child_map(
    nodes: Iterable[TaskNode | GroupNode],
    collapsed_groups: set[str] | frozenset[str],
) -> dict[str, str]:
    """Map each child of a collapsed group to its owning group id."""
    child_to_group: dict[str, str] = {}
    for node in nodes:
        if isinstance(node, TaskNode) and node.parent_id in collapsed_groups:
            child_to_group[node.id] = node.parent_id
    return child_to_group


def _pass_through(edge: Edge, visible: set[str], dim: float) -> DerivedEdge:
    return DerivedEdge(
        id=edge.id,
        source=edge.source,
        target=edge.target,
        source_handle=edge.source_handle,
        target_handle=edge.target_handle,
        edge_type=edge.edge_type,
        opacity=edge_opacity(edge, visible, dim),
    )


def derive_edges(
    nodes: Sequence[TaskNode | GroupNode],
    edges: Sequence[Edge],
    collapsed_groups: set[str] | frozenset[str],
    visible: set[str],
    dim: float = EDGE_DIM_OPACITY,
) -> list[DerivedEdge]:
    """Build the derived edge view.

    Edges are processed in input order. When several real edges fold
    into the same synthetic edge, its type is the strongest contributing
    type (blocks > triggers > relates); on a tie the first-seen type
    stays.

    Args:
        nodes: Full node collection
        edges: Stored edges, in collection order
        collapsed_groups: Ids of collapsed group nodes
        visible: Visible ids from the filter engine
        dim: Opacity for filtered-out, non-blocking edges

    Returns:
        Pass-through real edges followed by synthetic edges
    """
    child_to_group = collapsed_child_map(nodes, collapsed_groups)

    if not child_to_group:
        return [_pass_through(edge, visible, dim) for edge in edges]

    real: list[DerivedEdge] = []
    synthetic: dict[tuple[str, str], DerivedEdge] = {}

    for edge in edges:
        source_group = child_to_group.get(edge.source)
        target_group = child_to_group.get(edge.target)

        if source_group is None and target_group is None:
            real.append(_pass_through(edge, visible, dim))
            continue

        source = source_group or edge.source
        target = target_group or edge.target
        if source == target:
            # Internal to one collapsed group
            continue

        key = (source, target)
        existing = synthetic.get(key)
        if existing is None:
            synthetic[key] = DerivedEdge(
                id=synthetic_edge_id(source, target),
                source=source,
                target=target,
                edge_type=edge.edge_type,
                synthetic=True,
                count=1,
            )
        else:
            synthetic[key] = existing.model_copy(
                update={
                    "count": existing.count + 1,
                    "edge_type": stronger(existing.edge_type, edge.edge_type),
                }
            )

    return [*real, *synthetic.values()]


def group_dependency_counts(
    nodes: Iterable[TaskNode | GroupNode],
    edges: Iterable[Edge],
    group_id: str,
) -> tuple[int, int]:
    """Count real edges crossing a group's boundary.

    Returns:
        (incoming, outgoing) edge counts for the group's children
    """
    child_ids = {
        node.id
        for node in nodes
        if isinstance(node, TaskNode) and node.parent_id == group_id
    }
    incoming = 0
    outgoing = 0
    for edge in edges:
        source_inside = edge.source in child_ids
        target_inside = edge.target in child_ids
        if source_inside and not target_inside:
            outgoing += 1
        elif target_inside and not source_inside:
            incoming += 1
    return incoming, outgoing
