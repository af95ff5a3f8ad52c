"""Application layer for PMGraph.

GraphStore owns the board state and its mutation API; the view service
turns that state into render-ready payloads.

Example usage:
    >>> from pmgraph.application import GraphStore, build_view
    >>>
    >>> store = GraphStore()
    >>> node_id = store.add_node({"x": 0, "y": 0}, {"title": "Rig boss"})
    >>> view = build_view(store)
    >>> len(view.nodes)
    1
"""

from pmgraph.application.graph_store import GraphState, GraphStore, Listener
from pmgraph.application.replay import ReplayStep, parse_script, replay
from pmgraph.application.view_service import (
    BoardColumn,
    GraphView,
    NodeView,
    build_view,
)

__all__ = [
    "GraphStore",
    "GraphState",
    "Listener",
    "GraphView",
    "NodeView",
    "BoardColumn",
    "build_view",
    "ReplayStep",
    "parse_script",
    "replay",
]
