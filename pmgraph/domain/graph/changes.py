"""Change records coming from the rendering surface.

The canvas reports drags, resizes and selection as batches of small
change records. The store applies them without touching history,
except that a drag recorded as settled closes one undo step.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from .models import Dimensions, Position


class PositionChange(BaseModel):
    """A node moved.

    dragging is True while a drag is in progress, False on the report
    that ends it, and None for programmatic moves.
    """

    type: Literal["position"] = "position"
    id: str
    position: Position | None = None
    dragging: bool | None = None


class DimensionsChange(BaseModel):
    type: Literal["dimensions"] = "dimensions"
    id: str
    dimensions: Dimensions | None = None
    resizing: bool | None = None


class SelectChange(BaseModel):
    type: Literal["select"] = "select"
    id: str
    selected: bool


class EdgeRemoveChange(BaseModel):
    type: Literal["remove"] = "remove"
    id: str


NodeChange = Annotated[
    Union[PositionChange, DimensionsChange, SelectChange],  # noqa: UP007
    Field(discriminator="type"),
]
