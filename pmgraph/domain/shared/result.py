"""Result monad for explicit error handling outside the graph core.

The graph core itself never fails (invalid operations are no-ops), but
the layers around it do: reading config files, loading replay scripts,
resolving script aliases. Those return a Result instead of raising so
callers decide how to report the failure.

Example usage:
    >>> def parse_priority(raw: str) -> Result[Priority, str]:
    ...     if raw not in ("low", "medium", "high"):
    ...         return Err(f"Unknown priority: {raw}")
    ...     return Ok(Priority(raw))
    ...
    >>> result = parse_priority("high")
    >>> if isinstance(result, Ok):
    ...     print(result.value.value)
    high
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful result carrying its value."""

    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed result carrying its error."""

    error: E


# Using Union here as TypeVar aliases don't work with | syntax at runtime
Result = Union[Ok[T], Err[E]]  # noqa: UP007


def flat_map(result: Ok[T] | Err[E], fn: Callable[[T], Ok[U] | Err[E]]) -> Ok[U] | Err[E]:
    """Chain a fallible step after a successful result.

    Useful for sequencing load -> parse -> validate, where each step may
    fail and the first failure should short-circuit the rest.

    Args:
        result: The result to chain from.
        fn: Function that takes the Ok value and returns a new Result.

    Returns:
        The Result from fn, or the original Err.
    """
    if isinstance(result, Ok):
        return fn(result.value)
    return result

