"""Board selectors.

Pure functions that arrange task nodes into status columns for
board-style views.
"""

from collections.abc import Iterable

from .models import GroupNode, Status, TaskNode

BOARD_COLUMNS: tuple[tuple[Status, str], ...] = (
    (Status.TODO, "Todo"),
    (Status.IN_PROGRESS, "In Progress"),
    (Status.DONE, "Done"),
)


def status_of(node: TaskNode) -> Status:
    """Status of a task; tasks that never got one count as todo."""
    return node.data.status or Status.TODO


def tasks_by_status(
    nodes: Iterable[TaskNode | GroupNode],
    visible: set[str] | None = None,
) -> dict[Status, list[TaskNode]]:
    """Group task nodes into board columns.

    Args:
        nodes: Full node collection (groups are skipped)
        visible: Optional visible-id set; tasks outside it are left out

    Returns:
        Dict with one entry per column, in board order, each list in
        node collection order
    """
    columns: dict[Status, list[TaskNode]] = {status: [] for status, _ in BOARD_COLUMNS}
    for node in nodes:
        if not isinstance(node, TaskNode):
            continue
        if visible is not None and node.id not in visible:
            continue
        columns[status_of(node)].append(node)
    return columns
