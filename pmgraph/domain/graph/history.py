"""History manager.

Bounded, linear undo/redo over (nodes, edges) snapshots. Any new record
after an undo discards the redo branch; there is no tree of histories.
"""

from pydantic import BaseModel, Field

from .models import Edge, Node

MAX_HISTORY = 50


class HistorySlice(BaseModel):
    """An immutable point-in-time copy of the structural state."""

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()

    model_config = {"frozen": True}


class History(BaseModel):
    """Past and future stacks, each holding at most `limit` slices.

    past[-1] is the most recent snapshot; future[0] is the next redo.
    """

    limit: int = Field(default=MAX_HISTORY, ge=1)
    past: list[HistorySlice] = Field(default_factory=list)
    future: list[HistorySlice] = Field(default_factory=list)

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    def _push_past(self, snapshot: HistorySlice) -> None:
        # Oldest slices are evicted once the stack is full
        self.past = [*self.past, snapshot][-self.limit :]

    def record(self, current: HistorySlice) -> None:
        """Push a pre-mutation snapshot and clear the redo stack."""
        self._push_past(current)
        self.future = []

    def undo(self, current: HistorySlice) -> HistorySlice | None:
        """Step back one snapshot.

        Args:
            current: The store's state right now, saved for redo

        Returns:
            The slice to restore, or None when there is nothing to undo
        """
        if not self.past:
            return None
        previous = self.past[-1]
        self.past = self.past[:-1]
        self.future = [current, *self.future[: self.limit - 1]]
        return previous

    def redo(self, current: HistorySlice) -> HistorySlice | None:
        """Step forward one snapshot, or return None if the future is empty."""
        if not self.future:
            return None
        upcoming = self.future[0]
        self._push_past(current)
        self.future = self.future[1:]
        return upcoming
