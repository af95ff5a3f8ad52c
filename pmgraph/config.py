"""Configuration for PMGraph.

User preferences live in ~/.pmgraph/config.json. Set PMGRAPH_HOME to
use a different directory.
"""

import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from pmgraph.domain.graph.filtering import EDGE_DIM_OPACITY, NODE_DIM_OPACITY
from pmgraph.domain.graph.history import MAX_HISTORY
from pmgraph.domain.shared.result import Err, Ok, Result
from pmgraph.infrastructure.storage.json_storage import JsonStorage

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"


class GraphConfig(BaseModel):
    """Tunables for the graph store and its derived views."""

    default_preset: str = "gamedev"
    history_limit: int = Field(default=MAX_HISTORY, ge=1, le=MAX_HISTORY)
    node_dim_opacity: float = Field(default=NODE_DIM_OPACITY, ge=0.0, le=1.0)
    edge_dim_opacity: float = Field(default=EDGE_DIM_OPACITY, ge=0.0, le=1.0)
    # Children entering a group keep clear of its header
    group_inset_x: float = 10.0
    group_inset_y: float = 40.0

    model_config = {"extra": "forbid"}


def get_config_dir() -> Path:
    """Get the PMGraph config directory, creating it if needed."""
    override = os.environ.get("PMGRAPH_HOME")
    config_dir = Path(override) if override else Path.home() / ".pmgraph"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def read_config(path: Path, storage: JsonStorage | None = None) -> Result[GraphConfig, str]:
    """Read and validate a config file."""
    result = (storage or JsonStorage()).load_json(path)
    if isinstance(result, Err):
        return result
    if not isinstance(result.value, dict):
        return Err(f"Config in {path} must be a JSON object")
    try:
        return Ok(GraphConfig(**result.value))
    except ValidationError as e:
        return Err(f"Invalid config in {path}: {e}")


def get_config() -> GraphConfig:
    """Load the user configuration, falling back to defaults."""
    config_file = get_config_dir() / CONFIG_FILE
    if not config_file.exists():
        return GraphConfig()
    result = read_config(config_file)
    if isinstance(result, Err):
        logger.warning(f"{result.error}; using defaults")
        return GraphConfig()
    return result.value


def save_config(config: GraphConfig) -> Result[None, str]:
    """Save the user configuration."""
    config_file = get_config_dir() / CONFIG_FILE
    return JsonStorage().save_json(config_file, config.model_dump())
