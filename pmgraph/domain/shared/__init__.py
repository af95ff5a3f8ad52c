"""Shared domain utilities.

- Result monad for explicit error handling in the outer layers
- Base domain event published by the graph store

Example usage:
    >>> from pmgraph.domain.shared import Ok, Err, Result, flat_map, DomainEvent
"""

from pmgraph.domain.shared.events import DomainEvent
from pmgraph.domain.shared.result import Err, Ok, Result, flat_map

__all__ = [
    # Result monad
    "Ok",
    "Err",
    "Result",
    "flat_map",
    # Domain events
    "DomainEvent",
]
