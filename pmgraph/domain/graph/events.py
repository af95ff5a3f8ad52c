"""Graph domain events.

Published by the graph store after a mutation has been applied. They
are pure data: subscribers use them to re-read state, log, or push
updates to a UI.
"""

from pmgraph.domain.shared.events import DomainEvent

from .models import ActiveView, EdgeType, Filters, Status


class NodeAdded(DomainEvent):
    """A task or group node was created."""

    node_id: str
    node_type: str


class NodeUpdated(DomainEvent):
    """Fields of a node's data were replaced."""

    node_id: str
    fields: list[str]


class NodeStatusChanged(DomainEvent):
    node_id: str
    status: Status


class NodeDeleted(DomainEvent):
    """A node was removed along with every edge touching it.

    detached_children lists task ids released from a deleted group.
    """

    node_id: str
    removed_edge_ids: list[str]
    detached_children: list[str] = []


class NodeMovedToGroup(DomainEvent):
    node_id: str
    group_id: str | None


class GroupCollapseToggled(DomainEvent):
    group_id: str
    collapsed: bool


class NodesChanged(DomainEvent):
    """Positions, sizes or selection arrived from the rendering surface.

    gesture_settled is True when a drag ended and one undo step was
    recorded for it.
    """

    node_ids: list[str]
    gesture_settled: bool = False


class EdgeAdded(DomainEvent):
    edge_id: str
    source: str
    target: str


class EdgeRemoved(DomainEvent):
    """One or more edges were removed in a single step."""

    edge_ids: list[str]


class EdgeTypeChanged(DomainEvent):
    edge_id: str
    edge_type: EdgeType


class FiltersChanged(DomainEvent):
    filters: Filters


class PresetChanged(DomainEvent):
    """The active preset switched and departments were reconciled."""

    preset_id: str
    reset_node_ids: list[str]


class SelectionChanged(DomainEvent):
    node_id: str | None


class PanelToggled(DomainEvent):
    open: bool


class ViewChanged(DomainEvent):
    view: ActiveView


class HistoryRestored(DomainEvent):
    """An undo or redo replaced the structural state."""

    direction: str
