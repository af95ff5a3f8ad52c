"""Edge type machine.

Edges move through a fixed three-state cycle
blocks -> relates -> triggers -> blocks. New edges always start as
blocks. Aggregation ranks types by strength.
"""

from .models import EdgeType

EDGE_TYPE_CYCLE: tuple[EdgeType, ...] = (
    EdgeType.BLOCKS,
    EdgeType.RELATES,
    EdgeType.TRIGGERS,
)

INITIAL_EDGE_TYPE = EdgeType.BLOCKS

# Higher = stronger; used when several real edges fold into one synthetic edge
EDGE_STRENGTH: dict[EdgeType, int] = {
    EdgeType.BLOCKS: 3,
    EdgeType.TRIGGERS: 2,
    EdgeType.RELATES: 1,
}


def next_edge_type(current: EdgeType) -> EdgeType:
    """Return the type one step further along the cycle."""
    idx = EDGE_TYPE_CYCLE.index(current)
    return EDGE_TYPE_CYCLE[(idx + 1) % len(EDGE_TYPE_CYCLE)]


def stronger(existing: EdgeType, candidate: EdgeType) -> EdgeType:
    """Pick the stronger of two types; ties keep the existing one."""
    if EDGE_STRENGTH[candidate] > EDGE_STRENGTH[existing]:
        return candidate
    return existing
