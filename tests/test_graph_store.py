"""Tests for GraphStore mutations, history and derived views."""

import sys
from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import ValidationError

from pmgraph.application import GraphStore
from pmgraph.config import GraphConfig
from pmgraph.domain.graph import (
    MAX_HISTORY,
    ActiveView,
    EdgeAdded,
    EdgeRemoveChange,
    EdgeType,
    GroupNode,
    NodeAdded,
    Position,
    PositionChange,
    Priority,
    SelectChange,
    Status,
    TaskNode,
)


# =============================================================================
# Nodes
# =============================================================================


def test_add_node_applies_defaults(store: GraphStore):
    node_id = store.add_node({"x": 10, "y": 20})

    node = store.get_node(node_id)
    assert isinstance(node, TaskNode)
    assert node.position == Position(x=10, y=20)
    assert node.data.title == "Untitled"
    assert node.data.priority == Priority.MEDIUM
    assert node.data.department == ""
    assert node.data.labels == []
    assert node.data.due_date is None
    assert store.can_undo


def test_add_node_with_partial_data(store: GraphStore):
    node_id = store.add_node(
        Position(x=0, y=0),
        {"title": "Sculpt boss", "department": "Art", "labels": [{"text": "v1", "color": "#fff"}]},
    )

    data = store.get_node(node_id).data
    assert data.title == "Sculpt boss"
    assert data.department == "Art"
    assert data.labels[0].text == "v1"


def test_add_node_rejects_department_outside_every_preset(store: GraphStore):
    node_id = store.add_node({"x": 0, "y": 0}, {"department": "Astrology"})

    assert store.get_node(node_id).data.department == ""


def test_update_node_merges_fields(store: GraphStore):
    node_id = store.add_node({"x": 0, "y": 0}, {"title": "Old", "assignee": "Mara"})

    store.update_node(node_id, {"title": "New"})

    data = store.get_node(node_id).data
    assert data.title == "New"
    assert data.assignee == "Mara"


def test_update_unknown_node_is_a_noop(store: GraphStore):
    store.add_node({"x": 0, "y": 0})
    before = store.history_depth

    store.update_node("missing", {"title": "x"})

    assert store.history_depth == before


def test_update_node_rejects_unknown_fields(store: GraphStore):
    node_id = store.add_node({"x": 0, "y": 0})

    with pytest.raises(ValidationError):
        store.update_node(node_id, {"colour": "red"})


def test_update_group_cannot_change_collapse_state(store: GraphStore):
    group_id = store.add_group_node({"x": 0, "y": 0}, "Boss", "#fff")

    store.update_node(group_id, {"title": "Boss fight", "collapsed": True})

    group = store.get_node(group_id)
    assert group.data.title == "Boss fight"
    assert group.data.collapsed is False


def test_set_node_status(store: GraphStore):
    node_id = store.add_node({"x": 0, "y": 0})

    store.set_node_status(node_id, Status.DONE)

    assert store.get_node(node_id).data.status == Status.DONE
    store.undo()
    assert store.get_node(node_id).data.status is None


def test_delete_node_cascades_edges_and_clears_selection(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    b = store.add_node({"x": 100, "y": 0})
    c = store.add_node({"x": 200, "y": 0})
    store.add_edge({"source": a, "target": b})
    store.add_edge({"source": c, "target": a})
    keep = store.add_edge({"source": b, "target": c})
    store.set_selected_node(a)
    store.set_task_panel_open(True)

    store.delete_node(a)

    assert store.get_node(a) is None
    assert [e.id for e in store.edges] == [keep]
    assert store.selected_node_id is None
    assert store.task_panel_open is False


def test_delete_node_is_idempotent(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    store.delete_node(a)
    depth = store.history_depth

    store.delete_node(a)

    assert store.history_depth == depth
    assert store.nodes == ()


def test_delete_keeps_unrelated_selection(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    b = store.add_node({"x": 0, "y": 0})
    store.set_selected_node(b)

    store.delete_node(a)

    assert store.selected_node_id == b


def test_delete_group_detaches_children(store: GraphStore):
    group_id = store.add_group_node({"x": 100, "y": 100}, "Boss", "#fff")
    child_id = store.add_node({"x": 150, "y": 200})
    store.move_node_to_group(child_id, group_id)
    store.toggle_group_collapse(group_id)

    store.delete_node(group_id)

    child = store.get_node(child_id)
    assert child.parent_id is None
    assert child.hidden is False
    assert child.position == Position(x=150, y=200)


# =============================================================================
# Groups
# =============================================================================


def test_toggle_group_collapse_hides_children(store: GraphStore, collapsed_board):
    g = collapsed_board["G"]

    store.toggle_group_collapse(g)

    assert store.get_node(g).data.collapsed is True
    assert store.collapsed_group_ids == {g}
    assert store.get_node(collapsed_board["C1"]).hidden is True
    assert store.get_node(collapsed_board["X"]).hidden is False

    store.toggle_group_collapse(g)

    assert store.collapsed_group_ids == frozenset()
    assert store.get_node(collapsed_board["C1"]).hidden is False


def test_undo_of_collapse_restores_collapsed_set(store: GraphStore, collapsed_board):
    store.toggle_group_collapse(collapsed_board["G"])

    store.undo()

    assert store.collapsed_group_ids == frozenset()
    assert store.get_node(collapsed_board["C2"]).hidden is False


def test_toggle_unknown_or_task_node_is_a_noop(store: GraphStore):
    task_id = store.add_node({"x": 0, "y": 0})
    depth = store.history_depth

    store.toggle_group_collapse(task_id)
    store.toggle_group_collapse("missing")

    assert store.history_depth == depth


def test_move_into_group_uses_relative_clamped_position(store: GraphStore):
    group_id = store.add_group_node({"x": 100, "y": 100}, "Boss", "#fff")
    inside = store.add_node({"x": 150, "y": 130})
    outside = store.add_node({"x": 50, "y": 50})

    store.move_node_to_group(inside, group_id)
    store.move_node_to_group(outside, group_id)

    assert store.get_node(inside).position == Position(x=50, y=40)
    assert store.get_node(inside).parent_id == group_id
    assert store.get_node(outside).position == Position(x=10, y=40)


def test_move_out_of_group_restores_absolute_position(store: GraphStore):
    group_id = store.add_group_node({"x": 100, "y": 100}, "Boss", "#fff")
    node_id = store.add_node({"x": 150, "y": 200})
    store.move_node_to_group(node_id, group_id)

    store.move_node_to_group(node_id, None)

    node = store.get_node(node_id)
    assert node.parent_id is None
    assert node.position == Position(x=150, y=200)


def test_move_between_groups_goes_through_absolute_position(store: GraphStore):
    first = store.add_group_node({"x": 100, "y": 100}, "A", "#fff")
    second = store.add_group_node({"x": 500, "y": 100}, "B", "#fff")
    node_id = store.add_node({"x": 150, "y": 200})
    store.move_node_to_group(node_id, first)

    store.move_node_to_group(node_id, second)

    assert store.get_node(node_id).position == Position(x=10, y=100)


def test_move_into_collapsed_group_hides_node(store: GraphStore):
    group_id = store.add_group_node({"x": 0, "y": 0}, "Boss", "#fff")
    store.toggle_group_collapse(group_id)
    node_id = store.add_node({"x": 50, "y": 50})

    store.move_node_to_group(node_id, group_id)

    assert store.get_node(node_id).hidden is True


def test_move_node_to_group_noops(store: GraphStore):
    group_id = store.add_group_node({"x": 0, "y": 0}, "A", "#fff")
    other_group = store.add_group_node({"x": 0, "y": 0}, "B", "#fff")
    node_id = store.add_node({"x": 50, "y": 50})
    depth = store.history_depth

    store.move_node_to_group(other_group, group_id)
    store.move_node_to_group(node_id, "missing")
    store.move_node_to_group(node_id, None)
    store.move_node_to_group("missing", group_id)

    assert store.history_depth == depth
    assert isinstance(store.get_node(other_group), GroupNode)


# =============================================================================
# Edges
# =============================================================================


def test_add_edge_defaults_to_blocks(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    b = store.add_node({"x": 0, "y": 0})

    edge_id = store.add_edge({"source": a, "target": b, "source_handle": "out"})

    edge = store.get_edge(edge_id)
    assert edge.edge_type == EdgeType.BLOCKS
    assert (edge.source, edge.target, edge.source_handle, edge.target_handle) == (a, b, "out", None)


def test_self_loops_are_ignored(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    depth = store.history_depth

    assert store.add_edge({"source": a, "target": a}) is None
    assert store.edges == ()
    assert store.history_depth == depth


def test_duplicate_edges_are_ignored(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    b = store.add_node({"x": 0, "y": 0})
    store.add_edge({"source": a, "target": b, "source_handle": "out", "target_handle": "in"})

    assert store.add_edge({"source": a, "target": b, "source_handle": "out", "target_handle": "in"}) is None
    assert len(store.edges) == 1


def test_same_nodes_different_handles_are_distinct(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    b = store.add_node({"x": 0, "y": 0})
    store.add_edge({"source": a, "target": b, "source_handle": "out"})

    assert store.add_edge({"source": a, "target": b, "source_handle": "side"}) is not None
    assert store.add_edge({"source": b, "target": a}) is not None
    assert len(store.edges) == 3


def test_edges_to_unknown_nodes_are_ignored(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})

    assert store.add_edge({"source": a, "target": "ghost"}) is None


def test_remove_edge(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    b = store.add_node({"x": 0, "y": 0})
    edge_id = store.add_edge({"source": a, "target": b})

    store.remove_edge(edge_id)

    assert store.edges == ()


def test_apply_edge_changes_removes_as_one_step(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    b = store.add_node({"x": 0, "y": 0})
    first = store.add_edge({"source": a, "target": b})
    second = store.add_edge({"source": b, "target": a})
    depth = store.history_depth[0]

    store.apply_edge_changes(
        [EdgeRemoveChange(id=first), EdgeRemoveChange(id=second), EdgeRemoveChange(id="missing")]
    )

    assert store.edges == ()
    assert store.history_depth[0] == depth + 1
    store.undo()
    assert {e.id for e in store.edges} == {first, second}


def test_cycle_edge_type(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    b = store.add_node({"x": 0, "y": 0})
    edge_id = store.add_edge({"source": a, "target": b})

    store.cycle_edge_type(edge_id)
    assert store.get_edge(edge_id).edge_type == EdgeType.RELATES

    store.cycle_edge_type(edge_id)
    store.cycle_edge_type(edge_id)
    assert store.get_edge(edge_id).edge_type == EdgeType.BLOCKS


def test_set_edge_type(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    b = store.add_node({"x": 0, "y": 0})
    edge_id = store.add_edge({"source": a, "target": b})

    store.set_edge_type(edge_id, EdgeType.TRIGGERS)

    assert store.get_edge(edge_id).edge_type == EdgeType.TRIGGERS


def test_operations_on_synthetic_edges_are_noops(store: GraphStore, collapsed_board):
    store.toggle_group_collapse(collapsed_board["G"])
    synthetic_id = store.derived_edges()[0].id
    edges = store.edges
    depth = store.history_depth

    store.remove_edge(synthetic_id)
    store.cycle_edge_type(synthetic_id)
    store.set_edge_type(synthetic_id, EdgeType.RELATES)

    assert store.edges == edges
    assert store.history_depth == depth


def test_add_node_connected_wires_from_source(store: GraphStore):
    source = store.add_node({"x": 0, "y": 0})

    new_id = store.add_node_connected({"x": 200, "y": 0}, {"title": "Next"}, source, "out")

    edge = store.edges[0]
    assert (edge.source, edge.target, edge.source_handle, edge.target_handle) == (
        source,
        new_id,
        "out",
        "in",
    )


# =============================================================================
# Derived views through the store
# =============================================================================


def test_collapsed_group_aggregates_edges(store: GraphStore, collapsed_board):
    ids = collapsed_board
    store.toggle_group_collapse(ids["G"])

    derived = store.derived_edges()

    assert len(derived) == 1
    assert (derived[0].source, derived[0].target) == (ids["X"], ids["G"])
    assert derived[0].count == 2
    assert derived[0].edge_type == EdgeType.BLOCKS
    assert derived[0].synthetic


def test_expanding_restores_original_edges(store: GraphStore, collapsed_board):
    ids = collapsed_board
    before = store.edges
    store.toggle_group_collapse(ids["G"])

    store.toggle_group_collapse(ids["G"])

    derived = store.derived_edges()
    assert store.edges == before
    assert [(d.id, d.source, d.target, d.edge_type, d.synthetic) for d in derived] == [
        (ids["e1"], ids["X"], ids["C1"], EdgeType.BLOCKS, False),
        (ids["e2"], ids["X"], ids["C2"], EdgeType.RELATES, False),
    ]


def test_visible_ids_follow_filters(store: GraphStore):
    art = store.add_node({"x": 0, "y": 0}, {"department": "Art"})
    store.add_node({"x": 0, "y": 0}, {"department": "QA"})
    group = store.add_group_node({"x": 0, "y": 0}, "G", "#fff")

    store.set_filters(departments={"Art"})

    assert store.visible_ids() == {art, group}


# =============================================================================
# Filters, presets, selection (no history)
# =============================================================================


def test_filters_do_not_touch_history(store: GraphStore):
    store.add_node({"x": 0, "y": 0})
    depth = store.history_depth

    store.set_filters({"search": "boss"}, priority=Priority.HIGH)
    assert store.filters.search == "boss"
    assert store.filters.priority == Priority.HIGH

    store.set_filters(assignee="mara")
    assert store.filters.search == "boss"

    store.clear_filters()
    assert store.filters.is_default()
    assert store.history_depth == depth


def test_set_preset_reconciles_departments(store: GraphStore):
    art = store.add_node({"x": 0, "y": 0}, {"department": "Art"})
    design = store.add_node({"x": 0, "y": 0}, {"department": "Design"})
    loose = store.add_node({"x": 0, "y": 0})
    store.set_filters(departments={"Art", "Design"})
    depth = store.history_depth

    store.set_preset("startup")

    assert store.active_preset_id == "startup"
    assert store.active_preset().label == "Startup / Product"
    assert store.get_node(art).data.department == ""
    assert store.get_node(design).data.department == "Design"
    assert store.get_node(loose).data.department == ""
    assert store.filters.departments == frozenset()
    assert store.history_depth == depth


def test_unknown_preset_is_ignored(store: GraphStore):
    store.set_preset("nope")

    assert store.active_preset_id == "gamedev"


def test_default_preset_comes_from_config():
    store = GraphStore(config=GraphConfig(default_preset="personal"))

    assert store.active_preset().id == "personal"


def test_selection(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})

    store.set_selected_node(a)
    assert store.selected_node_id == a

    store.set_selected_node("missing")
    assert store.selected_node_id == a

    store.set_selected_node(None)
    assert store.selected_node_id is None


def test_active_view(store: GraphStore):
    store.set_active_view(ActiveView.KANBAN)

    assert store.active_view == ActiveView.KANBAN


def test_task_panel(store: GraphStore):
    store.set_task_panel_open(True)
    assert store.task_panel_open is True

    store.set_task_panel_open(False)
    assert store.task_panel_open is False
    assert not store.can_undo


# =============================================================================
# Drag intake
# =============================================================================


def test_drag_records_one_undo_step(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    depth = store.history_depth[0]

    for x in (10, 20, 30):
        store.apply_node_changes([PositionChange(id=a, position=Position(x=x, y=0), dragging=True)])
    assert store.history_depth[0] == depth

    store.apply_node_changes([PositionChange(id=a, position=Position(x=40, y=5), dragging=False)])

    assert store.get_node(a).position == Position(x=40, y=5)
    assert store.history_depth[0] == depth + 1

    store.undo()
    assert store.get_node(a).position == Position(x=0, y=0)


def test_set_node_position_skips_history(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    depth = store.history_depth

    store.set_node_position(a, {"x": 5, "y": 5})

    assert store.get_node(a).position == Position(x=5, y=5)
    assert store.history_depth == depth


def test_select_changes_update_selection(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})

    store.apply_node_changes([SelectChange(id=a, selected=True)])
    assert store.selected_node_id == a

    store.apply_node_changes([SelectChange(id=a, selected=False)])
    assert store.selected_node_id is None


# =============================================================================
# Undo / redo
# =============================================================================


def test_n_mutations_then_n_undos_restore_state(store: GraphStore):
    base = store.add_node({"x": 0, "y": 0}, {"title": "Base"})
    start = store.snapshot()

    group = store.add_group_node({"x": 300, "y": 0}, "G", "#fff")
    a = store.add_node({"x": 320, "y": 80})
    store.move_node_to_group(a, group)
    edge = store.add_edge({"source": base, "target": a})
    store.cycle_edge_type(edge)
    store.update_node(base, {"title": "Renamed"})
    store.toggle_group_collapse(group)
    store.delete_node(base)
    mutations = 8

    for _ in range(mutations):
        store.undo()

    assert store.snapshot() == start


def test_redo_after_undo_restores(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    store.update_node(a, {"title": "After"})
    after = store.snapshot()

    store.undo()
    assert store.get_node(a).data.title == "Untitled"

    store.redo()
    assert store.snapshot() == after


def test_new_mutation_after_undo_clears_redo(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    store.update_node(a, {"title": "One"})
    store.undo()
    assert store.can_redo

    store.update_node(a, {"title": "Two"})

    assert not store.can_redo
    store.redo()
    assert store.get_node(a).data.title == "Two"


def test_undo_and_redo_on_empty_history_are_noops(store: GraphStore):
    events = []
    store.subscribe(events.append)

    store.undo()
    store.redo()

    assert events == []
    assert store.nodes == ()


def test_history_is_bounded(store: GraphStore):
    for i in range(MAX_HISTORY + 5):
        store.add_node({"x": i, "y": 0})

    assert store.history_depth == (MAX_HISTORY, 0)


def test_undo_clears_selection_of_vanished_node(store: GraphStore):
    a = store.add_node({"x": 0, "y": 0})
    store.set_selected_node(a)

    store.undo()

    assert store.selected_node_id is None


# =============================================================================
# Subscription
# =============================================================================


def test_subscribers_receive_events(store: GraphStore):
    events = []
    unsubscribe = store.subscribe(events.append)

    a = store.add_node({"x": 0, "y": 0})
    b = store.add_node({"x": 0, "y": 0})
    store.add_edge({"source": a, "target": b})
    store.add_edge({"source": a, "target": a})

    assert [type(e) for e in events] == [NodeAdded, NodeAdded, EdgeAdded]
    assert events[0].node_id == a

    unsubscribe()
    store.add_node({"x": 0, "y": 0})
    assert len(events) == 3


def test_mutations_from_many_threads_are_serialized(store: GraphStore):
    anchor = store.add_node({"x": 0, "y": 0})

    def grow(i: int) -> str:
        node_id = store.add_node_connected({"x": i, "y": 100}, {"title": f"T{i}"}, anchor)
        store.update_node(node_id, {"assignee": "mara"})
        return node_id

    interval = sys.getswitchinterval()
    sys.setswitchinterval(1e-6)
    try:
        with ThreadPoolExecutor(max_workers=8) as pool:
            ids = list(pool.map(grow, range(200)))
    finally:
        sys.setswitchinterval(interval)

    assert len(store.nodes) == 201
    assert len(store.edges) == 200
    assert {e.target for e in store.edges} == set(ids)
    assert all(store.get_node(i).data.assignee == "mara" for i in ids)
