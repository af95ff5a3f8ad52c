"""HTTP API for PMGraph.

Exports the FastAPI router and app factory.
"""

from pmgraph.interfaces.api.routes import create_app, router

__all__ = ["router", "create_app"]
