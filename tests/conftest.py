"""Shared fixtures for the PMGraph test suite."""

import pytest

from pmgraph.application import GraphStore
from pmgraph.domain.graph import EdgeType


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config reads and writes out of the real home directory."""
    home = tmp_path / "pmgraph-home"
    monkeypatch.setenv("PMGRAPH_HOME", str(home))
    return home


@pytest.fixture
def store() -> GraphStore:
    return GraphStore()


@pytest.fixture
def collapsed_board(store: GraphStore) -> dict[str, str]:
    """X outside group G; children C1 and C2 inside; X->C1 blocks, X->C2 relates.

    Returns the ids by name. G is left expanded.
    """
    ids = {
        "X": store.add_node({"x": 0, "y": 0}, {"title": "Concept art"}),
        "G": store.add_group_node({"x": 300, "y": 0}, "Boss fight", "#ec4899"),
        "C1": store.add_node({"x": 320, "y": 60}, {"title": "Rig boss"}),
        "C2": store.add_node({"x": 320, "y": 160}, {"title": "Animate boss"}),
    }
    store.move_node_to_group(ids["C1"], ids["G"])
    store.move_node_to_group(ids["C2"], ids["G"])
    ids["e1"] = store.add_edge({"source": ids["X"], "target": ids["C1"]})
    ids["e2"] = store.add_edge({"source": ids["X"], "target": ids["C2"]})
    store.set_edge_type(ids["e2"], EdgeType.RELATES)
    return ids
