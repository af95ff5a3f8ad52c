"""Base domain event infrastructure.

Domain events are immutable records of something that happened to the
graph, published by the store to its subscribers after each mutation.

Example usage:
    >>> from pmgraph.domain.shared.events import DomainEvent
    >>>
    >>> class NodeRenamed(DomainEvent):
    ...     node_id: str
    ...     title: str
    ...
    >>> event = NodeRenamed(node_id="n-1", title="Rig boss")
    >>> print(f"Event {event.event_id} occurred at {event.timestamp}")
"""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, Field


class DomainEvent(BaseModel):
    """Base class for all domain events.

    Each event has a unique ID and a UTC timestamp taken when it was
    created. Subclasses add the event-specific fields.
    """

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"frozen": True}

    @property
    def name(self) -> str:
        """Event name as shown in logs and API payloads."""
        return type(self).__name__
