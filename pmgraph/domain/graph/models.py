"""Graph domain models.

Pure data shapes for the task board graph. Stored entities (nodes,
edges) are frozen: the store replaces an entity instead of mutating
it, so a history snapshot holding the old collection stays a true
point-in-time copy.
"""

from datetime import date
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class Priority(str, Enum):
    """Priority of a task card."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Status(str, Enum):
    """Board column a task card sits in."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class EdgeType(str, Enum):
    """Relationship carried by an edge."""

    BLOCKS = "blocks"
    RELATES = "relates"
    TRIGGERS = "triggers"


class ActiveView(str, Enum):
    """Which surface the user is looking at."""

    GRAPH = "graph"
    KANBAN = "kanban"


class Position(BaseModel):
    """Canvas coordinates (absolute, or relative to the parent group)."""

    x: float = 0.0
    y: float = 0.0

    model_config = {"frozen": True, "extra": "forbid"}

    def offset(self, other: "Position") -> "Position":
        return Position(x=self.x + other.x, y=self.y + other.y)

    def relative_to(self, origin: "Position") -> "Position":
        return Position(x=self.x - origin.x, y=self.y - origin.y)


class Dimensions(BaseModel):
    width: float = 400.0
    height: float = 300.0

    model_config = {"frozen": True, "extra": "forbid"}


class Label(BaseModel):
    """A colored tag shown on a task card."""

    text: str
    color: str = "#6b7280"

    model_config = {"frozen": True, "extra": "forbid"}


class TaskNodeData(BaseModel):
    """Editable fields of a task card.

    department is "" for uncategorized, otherwise a category name of
    some preset. status is only meaningful to board-style views; a task
    without one is treated as todo.
    """

    title: str = "Untitled"
    description: str = ""
    priority: Priority = Priority.MEDIUM
    department: str = ""
    labels: list[Label] = Field(default_factory=list)
    assignee: str = ""
    due_date: date | None = None
    status: Status | None = None

    model_config = {"frozen": True, "extra": "forbid"}


class GroupNodeData(BaseModel):
    """Editable fields of a group container."""

    title: str = "Group"
    color: str = "#6b7280"
    collapsed: bool = False

    model_config = {"frozen": True, "extra": "forbid"}


class TaskNode(BaseModel):
    """A task card on the canvas.

    When parent_id is set, position is relative to the parent group and
    hidden mirrors the parent's collapsed flag.
    """

    id: str
    type: Literal["task"] = "task"
    position: Position = Field(default_factory=Position)
    data: TaskNodeData = Field(default_factory=TaskNodeData)
    parent_id: str | None = None
    hidden: bool = False

    model_config = {"frozen": True, "extra": "forbid"}


class GroupNode(BaseModel):
    """A collapsible container that task cards can be moved into."""

    id: str
    type: Literal["group"] = "group"
    position: Position = Field(default_factory=Position)
    data: GroupNodeData = Field(default_factory=GroupNodeData)
    dimensions: Dimensions = Field(default_factory=Dimensions)

    model_config = {"frozen": True, "extra": "forbid"}


# Using Union here so the discriminator annotation resolves at runtime
Node = Annotated[Union[TaskNode, GroupNode], Field(discriminator="type")]  # noqa: UP007


class Connection(BaseModel):
    """A connect request coming from the rendering surface."""

    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None

    model_config = {"frozen": True, "extra": "forbid"}


class Edge(BaseModel):
    """A stored, user-created relationship between two nodes."""

    id: str
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None
    edge_type: EdgeType = EdgeType.BLOCKS

    model_config = {"frozen": True, "extra": "forbid"}

    def same_endpoints(self, connection: Connection) -> bool:
        """Check whether this edge already covers the given connection."""
        return (
            self.source == connection.source
            and self.target == connection.target
            and self.source_handle == connection.source_handle
            and self.target_handle == connection.target_handle
        )

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id


class DerivedEdge(BaseModel):
    """An edge as the renderer should draw it.

    Built fresh on every render from the stored edges. Synthetic edges
    stand in for one or more real edges hidden inside collapsed groups;
    they are never stored and their ids address nothing.
    """

    id: str
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None
    edge_type: EdgeType = EdgeType.BLOCKS
    synthetic: bool = False
    count: int = Field(default=1, ge=1)
    opacity: float = 1.0

    model_config = {"frozen": True}

    @property
    def show_badge(self) -> bool:
        """Synthetic edges aggregating several real edges get a count badge."""
        return self.synthetic and self.count > 1


class Filters(BaseModel):
    """View filter criteria, combined with logical AND.

    Every criterion has a match-all value: an empty set, None, or "".
    """

    departments: frozenset[str] = frozenset()
    priority: Priority | None = None
    assignee: str = ""
    search: str = ""
    statuses: frozenset[Status] = frozenset()

    model_config = {"frozen": True, "extra": "forbid"}

    def is_default(self) -> bool:
        return (
            not self.departments
            and self.priority is None
            and self.assignee == ""
            and self.search == ""
            and not self.statuses
        )


class Category(BaseModel):
    """A department a task can belong to under a preset."""

    name: str
    color: str

    model_config = {"frozen": True}


class Preset(BaseModel):
    """A named, ordered set of categories."""

    id: str
    label: str
    categories: list[Category] = Field(default_factory=list)

    model_config = {"frozen": True}

    def category_names(self) -> set[str]:
        return {c.name for c in self.categories}
