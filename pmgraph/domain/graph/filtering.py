"""Filter engine.

Pure functions mapping a node collection and filter criteria to the set
of visible node ids, plus the opacity rules the renderer applies to
that set. All functions in this module are pure.
"""

from collections.abc import Callable, Iterable

from .models import Edge, EdgeType, Filters, GroupNode, Status, TaskNode

NODE_DIM_OPACITY = 0.15
EDGE_DIM_OPACITY = 0.1


# =============================================================================
# Predicates
# =============================================================================


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def matches_filters(node: TaskNode, filters: Filters) -> bool:
    """Check a single task node against every criterion (logical AND)."""
    data = node.data

    if filters.departments and data.department not in filters.departments:
        return False
    if filters.priority is not None and data.priority != filters.priority:
        return False
    if filters.assignee and not _contains(data.assignee, filters.assignee):
        return False
    if filters.search and not (
        _contains(data.title, filters.search) or _contains(data.assignee, filters.search)
    ):
        return False
    if filters.statuses and (data.status or Status.TODO) not in filters.statuses:
        return False
    return True


def filter_predicate(filters: Filters) -> Callable[[TaskNode | GroupNode], bool]:
    """Return a node predicate for the given criteria.

    Groups always pass; only task nodes are evaluated.
    """

    def predicate(node: TaskNode | GroupNode) -> bool:
        if not isinstance(node, TaskNode):
            return True
        return matches_filters(node, filters)

    return predicate


# =============================================================================
# Visibility
# =============================================================================


def visible_ids(nodes: Iterable[TaskNode | GroupNode], filters: Filters) -> set[str]:
    """Compute the ids of nodes that match the filters.

    With every criterion at its match-all value, all ids are returned
    without evaluating any node.

    Args:
        nodes: Full node collection
        filters: Active filter criteria

    Returns:
        Set of matching node ids (group nodes always included)
    """
    if filters.is_default():
        return {node.id for node in nodes}

    predicate = filter_predicate(filters)
    return {node.id for node in nodes if predicate(node)}


def node_opacity(node: TaskNode | GroupNode, visible: set[str], dim: float = NODE_DIM_OPACITY) -> float:
    """Opacity of a node: hidden children vanish, unmatched nodes dim."""
    if isinstance(node, TaskNode) and node.hidden:
        return 0.0
    return 1.0 if node.id in visible else dim


def edge_opacity(edge: Edge, visible: set[str], dim: float = EDGE_DIM_OPACITY) -> float:
    """Opacity of a real edge.

    Blocking edges stay fully opaque regardless of the filters. Other
    edges dim unless both endpoints are visible.
    """
    if edge.edge_type == EdgeType.BLOCKS:
        return 1.0
    if edge.source in visible and edge.target in visible:
        return 1.0
    return dim
