"""FastAPI routes for PMGraph.

Each route forwards to one GraphStore operation and answers with the
resulting state. Operations the store ignores (unknown ids, duplicate
edges, synthetic edge ids) still answer 200 with the unchanged state.
"""

import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from pmgraph import __version__
from pmgraph.application import GraphState, GraphStore, GraphView, build_view
from pmgraph.config import GraphConfig, get_config
from pmgraph.interfaces.api.schemas import (
    AddEdgeRequest,
    AddGroupRequest,
    AddNodeRequest,
    CreatedResponse,
    FiltersPatch,
    MoveToGroupRequest,
    NodeChangesRequest,
    PresetList,
    SelectionRequest,
    SetEdgeTypeRequest,
    SetPresetRequest,
    SetStatusRequest,
    UpdateNodeRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_store(request: Request) -> GraphStore:
    """Resolve the store owned by the running app."""
    return request.app.state.store


# =============================================================================
# Read-only selectors
# =============================================================================


@router.get("/state", response_model=GraphState)
def read_state(store: GraphStore = Depends(get_store)):
    """Raw store state (nodes, edges, filters, preset, selection)."""
    return store.state()


@router.get("/view", response_model=GraphView)
def read_view(store: GraphStore = Depends(get_store)):
    """Render view: node opacity, derived edges, board columns."""
    with store.lock:
        return build_view(store)


@router.get("/presets", response_model=PresetList)
def list_presets(store: GraphStore = Depends(get_store)):
    return PresetList(active=store.active_preset_id, presets=list(store.presets))


# =============================================================================
# Nodes and groups
# =============================================================================


@router.post("/nodes", response_model=CreatedResponse)
def add_node(req: AddNodeRequest, store: GraphStore = Depends(get_store)):
    """Create a task node (wired from connect_from when given)."""
    try:
        if req.connect_from is not None:
            node_id = store.add_node_connected(
                req.position, req.data, req.connect_from, source_handle=req.source_handle
            )
        else:
            node_id = store.add_node(req.position, req.data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid node data: {e.errors()[0]['msg']}")
    return CreatedResponse(id=node_id)


@router.patch("/nodes/{node_id}", response_model=GraphState)
def update_node(node_id: str, req: UpdateNodeRequest, store: GraphStore = Depends(get_store)):
    try:
        store.update_node(node_id, req.data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid node data: {e.errors()[0]['msg']}")
    return store.state()


@router.put("/nodes/{node_id}/status", response_model=GraphState)
def set_node_status(node_id: str, req: SetStatusRequest, store: GraphStore = Depends(get_store)):
    store.set_node_status(node_id, req.status)
    return store.state()


@router.delete("/nodes/{node_id}", response_model=GraphState)
def delete_node(node_id: str, store: GraphStore = Depends(get_store)):
    store.delete_node(node_id)
    return store.state()


@router.post("/nodes/{node_id}/group", response_model=GraphState)
def move_node_to_group(node_id: str, req: MoveToGroupRequest, store: GraphStore = Depends(get_store)):
    """Move a task into a group, or out of its group when group_id is null."""
    store.move_node_to_group(node_id, req.group_id)
    return store.state()


@router.post("/groups", response_model=CreatedResponse)
def add_group(req: AddGroupRequest, store: GraphStore = Depends(get_store)):
    return CreatedResponse(id=store.add_group_node(req.position, req.title, req.color))


@router.post("/groups/{group_id}/toggle", response_model=GraphState)
def toggle_group(group_id: str, store: GraphStore = Depends(get_store)):
    store.toggle_group_collapse(group_id)
    return store.state()


@router.post("/changes/nodes", response_model=GraphState)
def apply_node_changes(req: NodeChangesRequest, store: GraphStore = Depends(get_store)):
    """Position, size and selection reports from the canvas."""
    store.apply_node_changes(req.changes)
    return store.state()


# =============================================================================
# Edges
# =============================================================================


@router.post("/edges", response_model=CreatedResponse)
def add_edge(req: AddEdgeRequest, store: GraphStore = Depends(get_store)):
    """Connect two nodes; id is null when the connection was ignored."""
    return CreatedResponse(id=store.add_edge(req))


@router.delete("/edges/{edge_id}", response_model=GraphState)
def remove_edge(edge_id: str, store: GraphStore = Depends(get_store)):
    store.remove_edge(edge_id)
    return store.state()


@router.post("/edges/{edge_id}/cycle", response_model=GraphState)
def cycle_edge_type(edge_id: str, store: GraphStore = Depends(get_store)):
    store.cycle_edge_type(edge_id)
    return store.state()


@router.put("/edges/{edge_id}/type", response_model=GraphState)
def set_edge_type(edge_id: str, req: SetEdgeTypeRequest, store: GraphStore = Depends(get_store)):
    store.set_edge_type(edge_id, req.edge_type)
    return store.state()


# =============================================================================
# View state
# =============================================================================


@router.patch("/filters", response_model=GraphState)
def set_filters(req: FiltersPatch, store: GraphStore = Depends(get_store)):
    """Merge criteria into the filters; null leaves a criterion unchanged.

    priority is the exception: null clears it back to match-all.
    """
    patch = {
        key: value
        for key, value in req.model_dump(exclude_unset=True).items()
        if value is not None or key == "priority"
    }
    try:
        store.set_filters(patch)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid filters: {e.errors()[0]['msg']}")
    return store.state()


@router.delete("/filters", response_model=GraphState)
def clear_filters(store: GraphStore = Depends(get_store)):
    store.clear_filters()
    return store.state()


@router.put("/preset", response_model=GraphState)
def set_preset(req: SetPresetRequest, store: GraphStore = Depends(get_store)):
    if req.preset_id not in store.presets:
        raise HTTPException(status_code=404, detail=f"Preset not found: {req.preset_id}")
    store.set_preset(req.preset_id)
    return store.state()


@router.put("/selection", response_model=GraphState)
def set_selection(req: SelectionRequest, store: GraphStore = Depends(get_store)):
    store.set_selected_node(req.node_id)
    return store.state()


# =============================================================================
# History
# =============================================================================


@router.post("/undo", response_model=GraphState)
def undo(store: GraphStore = Depends(get_store)):
    store.undo()
    return store.state()


@router.post("/redo", response_model=GraphState)
def redo(store: GraphStore = Depends(get_store)):
    store.redo()
    return store.state()


# =============================================================================
# App factory
# =============================================================================


def create_app(store: GraphStore | None = None, config: GraphConfig | None = None) -> FastAPI:
    """Create the FastAPI application around a store.

    Args:
        store: Store to serve. A fresh one is built when omitted.
        config: Config for the fresh store; read from disk when omitted.
    """
    app = FastAPI(
        title="PMGraph",
        description="Node-graph task board state engine",
        version=__version__,
    )

    # CORS for the canvas frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.store = store or GraphStore(config=config or get_config())
    app.include_router(router)

    @app.get("/")
    def root():
        return {"name": "PMGraph", "version": __version__}

    logger.debug(f"API ready with preset '{app.state.store.active_preset_id}'")
    return app
