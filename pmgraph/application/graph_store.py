"""Graph store - the single authoritative owner of board state.

Holds nodes, edges, selection, filters, the active preset and the
undo/redo history. All state changes go through the methods below;
every method runs to completion synchronously and then notifies
subscribers with a domain event. Public operations hold a re-entrant
lock, so callers on several threads (a threaded HTTP server) are
serialized.

Invalid operations (unknown ids, self-loops, duplicate edges, synthetic
edge ids, empty history) are silent no-ops: nothing changes, nothing is
recorded, nobody is notified.
"""

import functools
import logging
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from pmgraph.config import GraphConfig
from pmgraph.domain.graph import (
    INITIAL_EDGE_TYPE,
    ActiveView,
    Connection,
    DerivedEdge,
    DimensionsChange,
    Edge,
    EdgeAdded,
    EdgeRemoveChange,
    EdgeRemoved,
    EdgeType,
    EdgeTypeChanged,
    Filters,
    FiltersChanged,
    GroupCollapseToggled,
    GroupNode,
    History,
    HistoryRestored,
    HistorySlice,
    Node,
    NodeAdded,
    NodeChange,
    NodeDeleted,
    NodeMovedToGroup,
    NodesChanged,
    NodeStatusChanged,
    NodeUpdated,
    PanelToggled,
    Position,
    PositionChange,
    Preset,
    PresetChanged,
    PresetRegistry,
    SelectChange,
    SelectionChanged,
    Status,
    TaskNode,
    TaskNodeData,
    ViewChanged,
    create_group_node,
    create_task_node,
    derive_edges,
    generate_id,
    next_edge_type,
    visible_ids,
)
from pmgraph.domain.shared.events import DomainEvent

logger = logging.getLogger(__name__)

Listener = Callable[[DomainEvent], None]


def _synchronized(method):
    """Run a store method while holding the store lock."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class GraphState(BaseModel):
    """A read-only copy of everything the store owns, minus history."""

    nodes: list[Node]
    edges: list[Edge]
    filters: Filters
    active_preset_id: str
    collapsed_group_ids: list[str]
    selected_node_id: str | None
    task_panel_open: bool
    active_view: ActiveView


def _as_position(value: Position | Mapping[str, float]) -> Position:
    if isinstance(value, Position):
        return value
    return Position.model_validate(value)


def _as_connection(value: Connection | Mapping[str, Any]) -> Connection:
    if isinstance(value, Connection):
        return value
    return Connection.model_validate(value)


class GraphStore:
    """Owns the board graph and exposes its mutation API.

    Structural mutations (nodes and edges) record a pre-mutation
    snapshot in the history and clear the redo stack. View-state changes
    (filters, preset, selection, panels, in-progress drags) do not.

    Example:
        store = GraphStore()
        a = store.add_node({"x": 0, "y": 0}, {"title": "Rig boss"})
        b = store.add_node({"x": 200, "y": 0}, {"title": "Animate boss"})
        store.add_edge({"source": a, "target": b})
        store.undo()  # edge gone again
    """

    def __init__(
        self,
        config: GraphConfig | None = None,
        presets: PresetRegistry | None = None,
    ) -> None:
        self.config = config or GraphConfig()
        self.presets = presets or PresetRegistry()

        self._nodes: tuple[Node, ...] = ()
        self._edges: tuple[Edge, ...] = ()
        self._selected_node_id: str | None = None
        self._filters = Filters()
        self._active_preset_id = self.presets.get(self.config.default_preset).id
        self._task_panel_open = False
        self._active_view = ActiveView.GRAPH
        self._history = History(limit=self.config.history_limit)
        # Snapshot taken when the current drag gesture started
        self._drag_origin: HistorySlice | None = None
        self._listeners: list[Listener] = []
        # Re-entrant: add_node_connected calls add_node and add_edge
        self._lock = threading.RLock()

    # =========================================================================
    # Read access
    # =========================================================================

    @property
    def lock(self):
        """Held by every mutation; hold it to read several fields consistently."""
        return self._lock

    @property
    def nodes(self) -> tuple[Node, ...]:
        return self._nodes

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self._edges

    @property
    def selected_node_id(self) -> str | None:
        return self._selected_node_id

    @property
    def filters(self) -> Filters:
        return self._filters

    @property
    def active_preset_id(self) -> str:
        return self._active_preset_id

    @property
    def task_panel_open(self) -> bool:
        return self._task_panel_open

    @property
    def active_view(self) -> ActiveView:
        return self._active_view

    @property
    def collapsed_group_ids(self) -> frozenset[str]:
        """Ids of collapsed groups, read off the groups themselves.

        Deriving the set keeps it in step with the nodes across undo
        and redo.
        """
        return frozenset(
            node.id for node in self._nodes if isinstance(node, GroupNode) and node.data.collapsed
        )

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def history_depth(self) -> tuple[int, int]:
        """(past, future) stack sizes."""
        return len(self._history.past), len(self._history.future)

    def get_node(self, node_id: str | None) -> Node | None:
        if node_id is None:
            return None
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Edge | None:
        for edge in self._edges:
            if edge.id == edge_id:
                return edge
        return None

    def snapshot(self) -> HistorySlice:
        """Point-in-time copy of the structural state."""
        return HistorySlice(nodes=self._nodes, edges=self._edges)

    @_synchronized
    def state(self) -> GraphState:
        return GraphState(
            nodes=list(self._nodes),
            edges=list(self._edges),
            filters=self._filters,
            active_preset_id=self._active_preset_id,
            collapsed_group_ids=sorted(self.collapsed_group_ids),
            selected_node_id=self._selected_node_id,
            task_panel_open=self._task_panel_open,
            active_view=self._active_view,
        )

    # =========================================================================
    # Selectors (recomputed on every call)
    # =========================================================================

    def active_preset(self) -> Preset:
        return self.presets.get(self._active_preset_id)

    def visible_ids(self) -> set[str]:
        return visible_ids(self._nodes, self._filters)

    def derived_edges(self) -> list[DerivedEdge]:
        return derive_edges(
            self._nodes,
            self._edges,
            self.collapsed_group_ids,
            self.visible_ids(),
            dim=self.config.edge_dim_opacity,
        )

    # =========================================================================
    # Subscription
    # =========================================================================

    @_synchronized
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, event: DomainEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _commit(
        self,
        event: DomainEvent,
        nodes: Iterable[Node] | None = None,
        edges: Iterable[Edge] | None = None,
    ) -> None:
        """Apply a structural change: record history, swap collections, notify."""
        self._history.record(self.snapshot())
        self._drag_origin = None
        if nodes is not None:
            self._nodes = tuple(nodes)
        if edges is not None:
            self._edges = tuple(edges)
        logger.debug(f"{event.name}: {len(self._nodes)} nodes, {len(self._edges)} edges")
        self._publish(event)

    def _replace_node(self, replacement: Node) -> tuple[Node, ...]:
        return tuple(replacement if n.id == replacement.id else n for n in self._nodes)

    def _clean_task_fields(self, fields: dict[str, Any]) -> dict[str, Any]:
        # Departments must name a category of some preset
        department = fields.get("department")
        if department and department not in self.presets.all_category_names():
            logger.warning(f"Unknown department '{department}', storing as uncategorized")
            fields["department"] = ""
        return fields

    def _merge_data(self, node: Node, data: Mapping[str, Any]) -> Node:
        fields = dict(data)
        if isinstance(node, GroupNode):
            # Collapse state only changes through toggle_group_collapse
            if fields.pop("collapsed", None) is not None:
                logger.debug(f"Ignoring 'collapsed' in update of group {node.id}")
        else:
            fields = self._clean_task_fields(fields)
        merged = type(node.data).model_validate({**node.data.model_dump(), **fields})
        return node.model_copy(update={"data": merged})

    def _absolute_position(self, node: TaskNode) -> Position:
        parent = self.get_node(node.parent_id)
        if parent is None:
            return node.position
        return node.position.offset(parent.position)

    # =========================================================================
    # Node operations
    # =========================================================================

    @_synchronized
    def add_node(
        self,
        position: Position | Mapping[str, float],
        data: Mapping[str, Any] | None = None,
    ) -> str:
        """Create a task node and return its id."""
        fields = self._clean_task_fields(dict(data or {}))
        node = create_task_node(_as_position(position), TaskNodeData.model_validate(fields))
        self._commit(NodeAdded(node_id=node.id, node_type=node.type), nodes=(*self._nodes, node))
        return node.id

    @_synchronized
    def add_node_connected(
        self,
        position: Position | Mapping[str, float],
        data: Mapping[str, Any] | None,
        source: str,
        source_handle: str | None = None,
        target_handle: str | None = "in",
    ) -> str:
        """Create a task node wired from an existing node (wire-to-create)."""
        node_id = self.add_node(position, data)
        self.add_edge(
            Connection(
                source=source,
                target=node_id,
                source_handle=source_handle,
                target_handle=target_handle,
            )
        )
        return node_id

    @_synchronized
    def update_node(self, node_id: str, data: Mapping[str, Any]) -> None:
        """Shallow-merge fields into a node's data."""
        node = self.get_node(node_id)
        if node is None:
            logger.debug(f"update_node ignored: no node {node_id}")
            return
        updated = self._merge_data(node, data)
        if updated == node:
            return
        self._commit(
            NodeUpdated(node_id=node_id, fields=sorted(data)),
            nodes=self._replace_node(updated),
        )

    @_synchronized
    def set_node_status(self, node_id: str, status: Status) -> None:
        node = self.get_node(node_id)
        if not isinstance(node, TaskNode) or node.data.status == status:
            return
        updated = self._merge_data(node, {"status": status})
        self._commit(
            NodeStatusChanged(node_id=node_id, status=status),
            nodes=self._replace_node(updated),
        )

    @_synchronized
    def delete_node(self, node_id: str) -> None:
        """Remove a node and every edge touching it.

        Deleting a group detaches its children: they move back to
        top level at their absolute position and become visible.
        """
        node = self.get_node(node_id)
        if node is None:
            logger.debug(f"delete_node ignored: no node {node_id}")
            return

        removed = [e.id for e in self._edges if e.touches(node_id)]
        detached: list[str] = []
        nodes: list[Node] = []
        for other in self._nodes:
            if other.id == node_id:
                continue
            if isinstance(other, TaskNode) and other.parent_id == node_id:
                detached.append(other.id)
                other = other.model_copy(
                    update={
                        "parent_id": None,
                        "position": other.position.offset(node.position),
                        "hidden": False,
                    }
                )
            nodes.append(other)

        if self._selected_node_id == node_id:
            self._selected_node_id = None
            self._task_panel_open = False

        self._commit(
            NodeDeleted(node_id=node_id, removed_edge_ids=removed, detached_children=detached),
            nodes=nodes,
            edges=(e for e in self._edges if not e.touches(node_id)),
        )

    @_synchronized
    def set_node_position(self, node_id: str, position: Position | Mapping[str, float]) -> None:
        """Move a node without recording history."""
        node = self.get_node(node_id)
        if node is None:
            return
        self._nodes = self._replace_node(node.model_copy(update={"position": _as_position(position)}))
        self._publish(NodesChanged(node_ids=[node_id]))

    @_synchronized
    def set_selected_node(self, node_id: str | None) -> None:
        if node_id is not None and self.get_node(node_id) is None:
            logger.debug(f"set_selected_node ignored: no node {node_id}")
            return
        self._selected_node_id = node_id
        self._publish(SelectionChanged(node_id=node_id))

    # =========================================================================
    # Group operations
    # =========================================================================

    @_synchronized
    def add_group_node(
        self,
        position: Position | Mapping[str, float],
        title: str = "New Group",
        color: str = "#6b7280",
    ) -> str:
        """Create an expanded group container and return its id."""
        group = create_group_node(_as_position(position), title, color)
        self._commit(NodeAdded(node_id=group.id, node_type=group.type), nodes=(*self._nodes, group))
        return group.id

    @_synchronized
    def toggle_group_collapse(self, group_id: str) -> None:
        """Collapse or expand a group, hiding or showing its children."""
        group = self.get_node(group_id)
        if not isinstance(group, GroupNode):
            logger.debug(f"toggle_group_collapse ignored: no group {group_id}")
            return

        collapsed = not group.data.collapsed
        nodes: list[Node] = []
        for node in self._nodes:
            if node.id == group_id:
                node = node.model_copy(
                    update={"data": group.data.model_copy(update={"collapsed": collapsed})}
                )
            elif isinstance(node, TaskNode) and node.parent_id == group_id:
                node = node.model_copy(update={"hidden": collapsed})
            nodes.append(node)

        self._commit(GroupCollapseToggled(group_id=group_id, collapsed=collapsed), nodes=nodes)

    @_synchronized
    def move_node_to_group(self, node_id: str, group_id: str | None) -> None:
        """Reparent a task node, converting its position between frames.

        Entering a group makes the position group-relative, clamped
        below the group's header. Leaving adds the group's position back.
        """
        node = self.get_node(node_id)
        if not isinstance(node, TaskNode):
            logger.debug(f"move_node_to_group ignored: {node_id} is not a task node")
            return

        absolute = self._absolute_position(node)

        if group_id is None:
            if node.parent_id is None:
                return
            moved = node.model_copy(update={"parent_id": None, "position": absolute, "hidden": False})
        else:
            group = self.get_node(group_id)
            if not isinstance(group, GroupNode) or node.parent_id == group_id:
                logger.debug(f"move_node_to_group ignored: bad target {group_id}")
                return
            relative = absolute.relative_to(group.position)
            moved = node.model_copy(
                update={
                    "parent_id": group_id,
                    "position": Position(
                        x=max(self.config.group_inset_x, relative.x),
                        y=max(self.config.group_inset_y, relative.y),
                    ),
                    "hidden": group.data.collapsed,
                }
            )

        self._commit(
            NodeMovedToGroup(node_id=node_id, group_id=group_id),
            nodes=self._replace_node(moved),
        )

    # =========================================================================
    # Edge operations
    # =========================================================================

    @_synchronized
    def add_edge(self, connection: Connection | Mapping[str, Any]) -> str | None:
        """Connect two nodes with a new blocking edge.

        Returns:
            The new edge id, or None if the connection was ignored
        """
        conn = _as_connection(connection)
        if conn.source == conn.target:
            logger.debug(f"add_edge ignored: self-loop on {conn.source}")
            return None
        if self.get_node(conn.source) is None or self.get_node(conn.target) is None:
            logger.debug(f"add_edge ignored: unknown endpoint {conn.source} -> {conn.target}")
            return None
        if any(edge.same_endpoints(conn) for edge in self._edges):
            logger.debug(f"add_edge ignored: duplicate {conn.source} -> {conn.target}")
            return None

        edge = Edge(
            id=generate_id(),
            source=conn.source,
            target=conn.target,
            source_handle=conn.source_handle,
            target_handle=conn.target_handle,
            edge_type=INITIAL_EDGE_TYPE,
        )
        self._commit(
            EdgeAdded(edge_id=edge.id, source=edge.source, target=edge.target),
            edges=(*self._edges, edge),
        )
        return edge.id

    @_synchronized
    def remove_edge(self, edge_id: str) -> None:
        if self.get_edge(edge_id) is None:
            logger.debug(f"remove_edge ignored: no edge {edge_id}")
            return
        self._commit(EdgeRemoved(edge_ids=[edge_id]), edges=(e for e in self._edges if e.id != edge_id))

    @_synchronized
    def cycle_edge_type(self, edge_id: str) -> None:
        """Advance an edge one step: blocks -> relates -> triggers -> blocks."""
        edge = self.get_edge(edge_id)
        if edge is None:
            logger.debug(f"cycle_edge_type ignored: no edge {edge_id}")
            return
        self._set_type(edge, next_edge_type(edge.edge_type))

    @_synchronized
    def set_edge_type(self, edge_id: str, edge_type: EdgeType) -> None:
        edge = self.get_edge(edge_id)
        if edge is None or edge.edge_type == edge_type:
            return
        self._set_type(edge, EdgeType(edge_type))

    def _set_type(self, edge: Edge, edge_type: EdgeType) -> None:
        updated = edge.model_copy(update={"edge_type": edge_type})
        self._commit(
            EdgeTypeChanged(edge_id=edge.id, edge_type=edge_type),
            edges=(updated if e.id == edge.id else e for e in self._edges),
        )

    # =========================================================================
    # Change intake from the rendering surface
    # =========================================================================

    @_synchronized
    def apply_node_changes(self, changes: Sequence[NodeChange]) -> None:
        """Apply a batch of position, size and selection changes.

        Nothing is recorded while a drag is in progress. The report that
        ends a drag (dragging=False) records the state from before the
        drag started, so the whole gesture is a single undo step.
        """
        if not changes:
            return

        before = self.snapshot()
        nodes = {node.id: node for node in self._nodes}
        touched: list[str] = []
        settled = False

        for change in changes:
            node = nodes.get(change.id)
            if node is None:
                continue
            if isinstance(change, PositionChange):
                if change.dragging and self._drag_origin is None:
                    self._drag_origin = before
                if change.dragging is False:
                    settled = True
                if change.position is not None:
                    nodes[node.id] = node.model_copy(update={"position": change.position})
            elif isinstance(change, DimensionsChange):
                if isinstance(node, GroupNode) and change.dimensions is not None:
                    nodes[node.id] = node.model_copy(update={"dimensions": change.dimensions})
            elif isinstance(change, SelectChange):
                if change.selected:
                    self._selected_node_id = node.id
                elif self._selected_node_id == node.id:
                    self._selected_node_id = None
            touched.append(node.id)

        if not touched:
            return

        self._nodes = tuple(nodes[node.id] for node in self._nodes)

        if settled:
            origin = self._drag_origin or before
            self._drag_origin = None
            if origin.nodes != self._nodes:
                self._history.record(origin)
            else:
                settled = False

        self._publish(NodesChanged(node_ids=touched, gesture_settled=settled))

    @_synchronized
    def apply_edge_changes(self, changes: Sequence[EdgeRemoveChange]) -> None:
        """Remove edges deleted on the canvas as one undo step."""
        doomed = {c.id for c in changes if self.get_edge(c.id) is not None}
        if not doomed:
            return
        self._commit(
            EdgeRemoved(edge_ids=sorted(doomed)),
            edges=(e for e in self._edges if e.id not in doomed),
        )

    # =========================================================================
    # View state (no history)
    # =========================================================================

    @_synchronized
    def set_filters(self, partial: Mapping[str, Any] | None = None, **fields: Any) -> None:
        """Merge criteria into the active filters."""
        updates = {**(partial or {}), **fields}
        self._filters = Filters.model_validate({**self._filters.model_dump(), **updates})
        self._publish(FiltersChanged(filters=self._filters))

    @_synchronized
    def clear_filters(self) -> None:
        self._filters = Filters()
        self._publish(FiltersChanged(filters=self._filters))

    @_synchronized
    def set_preset(self, preset_id: str) -> None:
        """Switch presets and reconcile departments.

        Task departments that the new preset does not define are reset
        to uncategorized, and the department filter is cleared. An
        unknown preset id changes nothing (no fallback to the default).
        """
        preset = self.presets.find(preset_id)
        if preset is None:
            logger.warning(f"set_preset ignored: unknown preset '{preset_id}'")
            return

        names = preset.category_names()
        reset: list[str] = []
        nodes: list[Node] = []
        for node in self._nodes:
            if isinstance(node, TaskNode) and node.data.department and node.data.department not in names:
                reset.append(node.id)
                node = node.model_copy(
                    update={"data": node.data.model_copy(update={"department": ""})}
                )
            nodes.append(node)

        self._nodes = tuple(nodes)
        self._active_preset_id = preset.id
        self._filters = self._filters.model_copy(update={"departments": frozenset()})
        logger.info(f"Active preset is now '{preset.id}' ({len(reset)} tasks uncategorized)")
        self._publish(PresetChanged(preset_id=preset.id, reset_node_ids=reset))

    @_synchronized
    def set_task_panel_open(self, open: bool) -> None:
        self._task_panel_open = open
        self._publish(PanelToggled(open=open))

    @_synchronized
    def set_active_view(self, view: ActiveView) -> None:
        self._active_view = ActiveView(view)
        self._publish(ViewChanged(view=self._active_view))

    # =========================================================================
    # History
    # =========================================================================

    def _restore(self, restored: HistorySlice, direction: str) -> None:
        self._nodes = tuple(restored.nodes)
        self._edges = tuple(restored.edges)
        self._drag_origin = None
        if self.get_node(self._selected_node_id) is None:
            self._selected_node_id = None
            self._task_panel_open = False
        logger.debug(f"{direction}: {len(self._nodes)} nodes, {len(self._edges)} edges")
        self._publish(HistoryRestored(direction=direction))

    @_synchronized
    def undo(self) -> None:
        restored = self._history.undo(self.snapshot())
        if restored is not None:
            self._restore(restored, "undo")

    @_synchronized
    def redo(self) -> None:
        restored = self._history.redo(self.snapshot())
        if restored is not None:
            self._restore(restored, "redo")
