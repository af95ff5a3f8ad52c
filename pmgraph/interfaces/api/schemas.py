"""Request/Response schemas for the PMGraph API.

These Pydantic models define the HTTP contract. They are separate from
the domain models in pmgraph.domain.graph.
"""

from typing import Any

from pydantic import BaseModel, Field

from pmgraph.domain.graph import (
    Connection,
    EdgeType,
    NodeChange,
    Position,
    Preset,
    Priority,
    Status,
)


# =============================================================================
# Node Schemas
# =============================================================================


class AddNodeRequest(BaseModel):
    """Create a task node, optionally wired from an existing node."""

    position: Position
    data: dict[str, Any] = Field(default_factory=dict)
    connect_from: str | None = None
    source_handle: str | None = None


class UpdateNodeRequest(BaseModel):
    data: dict[str, Any]


class SetStatusRequest(BaseModel):
    status: Status


class MoveToGroupRequest(BaseModel):
    group_id: str | None = None


class AddGroupRequest(BaseModel):
    position: Position
    title: str = "New Group"
    color: str = "#6b7280"


class NodeChangesRequest(BaseModel):
    changes: list[NodeChange]


class CreatedResponse(BaseModel):
    id: str | None


# =============================================================================
# Edge Schemas
# =============================================================================


class AddEdgeRequest(Connection):
    pass


class SetEdgeTypeRequest(BaseModel):
    edge_type: EdgeType


# =============================================================================
# View State Schemas
# =============================================================================


class FiltersPatch(BaseModel):
    """Partial filter update; omitted fields keep their value."""

    departments: list[str] | None = None
    priority: Priority | None = None
    assignee: str | None = None
    search: str | None = None
    statuses: list[Status] | None = None

    model_config = {"extra": "forbid"}


class SetPresetRequest(BaseModel):
    preset_id: str


class SelectionRequest(BaseModel):
    node_id: str | None = None


class PresetList(BaseModel):
    active: str
    presets: list[Preset]
