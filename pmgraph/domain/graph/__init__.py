"""Graph domain - the task board's nodes, edges and derived views.

All exports are pure (no I/O, no side effects).

Key Types:
    TaskNode / GroupNode - Canvas entities
    Edge / DerivedEdge - Stored and rendered relationships
    Filters - View filter criteria
    Preset / Category - Department reference data
    History / HistorySlice - Bounded undo/redo stacks

Derived Views:
    visible_ids - Filter engine
    derive_edges - Group collapse engine with synthetic edges
    group_dependency_counts - Edges crossing a group boundary
    tasks_by_status - Board columns

Edge Type Machine:
    next_edge_type - One step along blocks -> relates -> triggers
    stronger - Aggregation ranking
"""

from .board import BOARD_COLUMNS, status_of, tasks_by_status
from .changes import (
    DimensionsChange,
    EdgeRemoveChange,
    NodeChange,
    PositionChange,
    SelectChange,
)
from .collapse import (
    SYNTHETIC_PREFIX,
    collapsed_child_map,
    derive_edges,
    group_dependency_counts,
    is_synthetic_id,
    synthetic_edge_id,
)
from .edge_types import (
    EDGE_STRENGTH,
    EDGE_TYPE_CYCLE,
    INITIAL_EDGE_TYPE,
    next_edge_type,
    stronger,
)
from .events import (
    EdgeAdded,
    EdgeRemoved,
    EdgeTypeChanged,
    FiltersChanged,
    GroupCollapseToggled,
    HistoryRestored,
    NodeAdded,
    NodeDeleted,
    NodeMovedToGroup,
    NodesChanged,
    NodeStatusChanged,
    NodeUpdated,
    PanelToggled,
    PresetChanged,
    SelectionChanged,
    ViewChanged,
)
from .factory import create_group_node, create_task_node, generate_id
from .filtering import (
    EDGE_DIM_OPACITY,
    NODE_DIM_OPACITY,
    edge_opacity,
    filter_predicate,
    matches_filters,
    node_opacity,
    visible_ids,
)
from .history import MAX_HISTORY, History, HistorySlice
from .models import (
    ActiveView,
    Category,
    Connection,
    DerivedEdge,
    Dimensions,
    Edge,
    EdgeType,
    Filters,
    GroupNode,
    GroupNodeData,
    Label,
    Node,
    Position,
    Preset,
    Priority,
    Status,
    TaskNode,
    TaskNodeData,
)
from .presets import (
    DEFAULT_CATEGORY_COLOR,
    PRESETS,
    PresetRegistry,
    get_category_color,
)

__all__ = [
    # Models
    "ActiveView",
    "Category",
    "Connection",
    "DerivedEdge",
    "Dimensions",
    "Edge",
    "EdgeType",
    "Filters",
    "GroupNode",
    "GroupNodeData",
    "Label",
    "Node",
    "Position",
    "Preset",
    "Priority",
    "Status",
    "TaskNode",
    "TaskNodeData",
    # Change intake
    "NodeChange",
    "PositionChange",
    "DimensionsChange",
    "SelectChange",
    "EdgeRemoveChange",
    # Factory
    "generate_id",
    "create_task_node",
    "create_group_node",
    # Presets
    "PRESETS",
    "DEFAULT_CATEGORY_COLOR",
    "PresetRegistry",
    "get_category_color",
    # Edge type machine
    "EDGE_TYPE_CYCLE",
    "EDGE_STRENGTH",
    "INITIAL_EDGE_TYPE",
    "next_edge_type",
    "stronger",
    # Filter engine
    "NODE_DIM_OPACITY",
    "EDGE_DIM_OPACITY",
    "visible_ids",
    "matches_filters",
    "filter_predicate",
    "node_opacity",
    "edge_opacity",
    # Collapse engine
    "SYNTHETIC_PREFIX",
    "collapsed_child_map",
    "derive_edges",
    "group_dependency_counts",
    "is_synthetic_id",
    "synthetic_edge_id",
    # Board
    "BOARD_COLUMNS",
    "status_of",
    "tasks_by_status",
    # History
    "MAX_HISTORY",
    "History",
    "HistorySlice",
    # Events
    "NodeAdded",
    "NodeUpdated",
    "NodeStatusChanged",
    "NodeDeleted",
    "NodeMovedToGroup",
    "NodesChanged",
    "GroupCollapseToggled",
    "EdgeAdded",
    "EdgeRemoved",
    "EdgeTypeChanged",
    "FiltersChanged",
    "PresetChanged",
    "SelectionChanged",
    "PanelToggled",
    "ViewChanged",
    "HistoryRestored",
]
