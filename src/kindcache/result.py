"""
Outcome envelope returned by every adapter operation.

An adapter call either went through, ``Ok(value)``, or was stopped by an
expected condition, ``Err(error)``, where the error says which one:

    KeyNotFoundError       the key is absent (FieldNotFoundError and
                           IndexOutOfRangeError narrow it to a field or index)
    KindConflictError      the key holds a different structural kind

A single sentinel is still available when a caller does not care why::

    sets.retrieve("tags").unwrap_or(None)         # list or None
    lists.remove("log", "bb").unwrap_or(-1)       # count or -1

Manifesto:
    - **Reasons, not sentinels:** ``False`` never means three different things
    - **Expected outcomes are values:** branch with ``match`` or ``is_ok()``
    - **Failures still raise:** decode and transport errors never land in Err

Examples:
    >>> from kindcache.errors import KeyNotFoundError
    >>> def describe(result):
    ...     match result:
    ...         case Ok(items):
    ...             return f"{len(items)} items"
    ...         case Err(KeyNotFoundError()):
    ...             return "absent"
    >>> describe(Ok([1, 2]))
    '2 items'
    >>> describe(Err(KeyNotFoundError("tags")))
    'absent'

Tags:
    result-pattern, error-handling, kindcache

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from kindcache.errors import CacheError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """The operation went through and produced ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value

    def unwrap_or_else(self, fallback: Callable[[CacheError], T]) -> T:
        return self.value

    def map(self, transform: Callable[[T], U]) -> Result[U]:
        """Apply ``transform`` to the value, e.g. ``retrieve(k).map(set)``."""
        return Ok(transform(self.value))

    def flat_map(self, step: Callable[[T], Result[U]]) -> Result[U]:
        """Continue with another adapter call that returns a Result."""
        return step(self.value)

    def inspect_err(self, observer: Callable[[CacheError], None]) -> Result[T]:
        return self

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """The operation was refused; ``error`` explains why.

    ``map`` and ``flat_map`` return the same error, so a chain of adapter
    calls stops at the first absent or conflicting key.

    Guardrails:
        ❌ DON'T: ``unwrap()`` without checking, it raises ``error``
        ✅ DO: ``unwrap_or()``, ``is_ok()`` or ``match``
    """

    error: CacheError

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        raise self.error

    def unwrap_or(self, default: Any) -> Any:
        return default

    def unwrap_or_else(self, fallback: Callable[[CacheError], T]) -> T:
        """Compute a value from the error, e.g. ``lambda e: e.key``."""
        return fallback(self.error)

    def map(self, transform: Callable[[T], U]) -> Result[U]:
        return Err(self.error)

    def flat_map(self, step: Callable[[T], Result[U]]) -> Result[U]:
        return Err(self.error)

    def inspect_err(self, observer: Callable[[CacheError], None]) -> Result[T]:
        """Hand the error to ``observer`` (typically a logger) and pass it on."""
        observer(self.error)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {"ok": False, "error": self.error.to_dict()}

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


__all__ = ["Ok", "Err", "Result"]
