"""
Structured error types for kindcache.

Provides a small hierarchy of typed errors carrying the metadata needed to
log, route, and branch on failures of the typed Redis adaptation layer.

Two families live here and they travel differently:

- **Expected outcomes** (``KeyNotFoundError`` and its ``FieldNotFoundError``
  and ``IndexOutOfRangeError`` variants, ``KindConflictError``) are
  *returned* inside ``Err`` by collection adapters. They are never raised
  by an adapter and no mutation happens when one is produced.
- **Unexpected failures** (``DecodeError``, ``UnsupportedValueError``,
  ``InvalidExpiryError``, ``CacheConnectionError``, ``CacheTimeoutError``)
  are *raised* and propagate to the caller.

Manifesto:
    - **Typed over ad-hoc:** Each failure mode has its own class
    - **Errors as values:** Absence and kind conflicts are data, not control flow
    - **Rich context:** Errors carry the key, kinds, field, and wire payload
    - **Error chaining:** Transport failures keep the redis-py exception as cause

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        CacheError                             │
        │          (category, context, cause, to_dict())               │
        ├──────────────────────────────────────────────────────────────┤
        │  Returned in Err             │  Raised                        │
        │  ───────────────             │  ──────                        │
        │  KeyNotFoundError            │  DecodeError (ValueError)      │
        │    FieldNotFoundError        │  UnsupportedValueError         │
        │    IndexOutOfRangeError      │    (TypeError)                 │
        │  KindConflictError           │                                │
        │                              │  InvalidExpiryError            │
        │                              │    (ValueError)                │
        │                              │  CacheConnectionError          │
        │                              │    CacheTimeoutError           │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> error = KindConflictError("orders", expected="set", actual="list")
    >>> error.category
    <ErrorCategory.CONFLICT: 'CONFLICT'>
    >>> error.to_dict()["key"]
    'orders'

Tags:
    error-handling, exception-hierarchy, redis, type-tags, kindcache

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Error categories for classification and routing.

    Attributes:
        NOT_FOUND: Key or hash field does not exist
        CONFLICT: Key exists with a different structural kind
        PARSE: Wire data could not be decoded into the requested type
        VALIDATION: Caller passed an unsupported value or expiry
        NETWORK: Connection lost, refused, or timed out
        CONFIG: Invalid connection configuration
        INTERNAL: Bugs, unexpected state
    """

    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    PARSE = "PARSE"
    VALIDATION = "VALIDATION"
    NETWORK = "NETWORK"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a ``CacheError``.

    Only fields that are set end up in ``to_dict()``; anything that does not
    have a dedicated slot goes into ``metadata``.

    Examples:
        >>> ErrorContext(key="orders", expected_kind="set").to_dict()
        {'key': 'orders', 'expected_kind': 'set'}
    """

    key: str | None = None
    expected_kind: str | None = None
    actual_kind: str | None = None
    field: str | None = None
    endpoint: str | None = None

    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for name in ["key", "expected_kind", "actual_kind", "field", "endpoint"]:
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CacheError(Exception):
    """
    Base exception for all kindcache errors.

    Every instance carries a category for routing, an ``ErrorContext`` with
    the key-level details, and an optional chained cause. Subclasses set
    ``default_category`` so callers rarely pass one explicitly.

    Examples:
        >>> error = CacheError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> error = CacheError("bad").with_context(key="k", attempt=2)
        >>> error.context.to_dict()
        {'key': 'k', 'attempt': 2}

    Guardrails:
        ❌ DON'T: Raise KindConflictError or KeyNotFoundError from adapters
        ✅ DO: Return them inside Err so callers branch without try/except

        ❌ DON'T: Swallow the redis-py exception when translating it
        ✅ DO: Pass it as cause= for error chaining
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CacheError:
        """Add context to this error (fluent API)."""
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for structured logging."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result.update(context_dict)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# EXPECTED OUTCOMES (returned inside Err)
# =============================================================================


class KeyNotFoundError(CacheError):
    """The key does not exist in the store."""

    default_category = ErrorCategory.NOT_FOUND

    def __init__(self, key: str, message: str | None = None, **kwargs: Any):
        self.key = key
        super().__init__(message or f"Key not found: {key!r}", **kwargs)
        self.context.key = key


class FieldNotFoundError(KeyNotFoundError):
    """The hash exists but does not hold the requested field."""

    def __init__(self, key: str, field: str, **kwargs: Any):
        self.field = field
        super().__init__(key, f"Field {field!r} not found in {key!r}", **kwargs)
        self.context.field = field


class IndexOutOfRangeError(KeyNotFoundError):
    """The list exists but has no element at the requested index."""

    def __init__(self, key: str, index: int, **kwargs: Any):
        self.index = index
        super().__init__(key, f"Index {index} out of range for {key!r}", **kwargs)
        self.context.metadata["index"] = index


class KindConflictError(CacheError):
    """The key exists with a structural kind other than the requested one."""

    default_category = ErrorCategory.CONFLICT

    def __init__(self, key: str, *, expected: str, actual: str, **kwargs: Any):
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Key {key!r} holds a {actual} value, not a {expected}",
            **kwargs,
        )
        self.context.key = key
        self.context.expected_kind = expected
        self.context.actual_kind = actual


# =============================================================================
# UNEXPECTED FAILURES (raised)
# =============================================================================


class DecodeError(CacheError, ValueError):
    """
    Wire data cannot be parsed into the requested scalar type.

    This means the round-trip law was broken by something outside this
    layer (an out-of-band write, a different encoder). It always propagates.
    """

    default_category = ErrorCategory.PARSE

    def __init__(self, wire: str | bytes, target: type, message: str | None = None, **kwargs: Any):
        self.wire = wire
        self.target = target
        super().__init__(
            message or f"Cannot decode {wire!r} as {target.__name__}",
            **kwargs,
        )
        self.context.metadata["target"] = target.__name__

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["wire"] = repr(self.wire)
        return result


class UnsupportedValueError(CacheError, TypeError):
    """A value or type that the codec cannot represent."""

    default_category = ErrorCategory.VALIDATION


class InvalidExpiryError(CacheError, ValueError):
    """An expiry that is zero, negative, or not a duration."""

    default_category = ErrorCategory.VALIDATION


class CacheConnectionError(CacheError):
    """The store could not be reached. Never retried by this layer."""

    default_category = ErrorCategory.NETWORK


class CacheTimeoutError(CacheConnectionError):
    """The store did not answer within the configured timeout."""


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "CacheError",
    "KeyNotFoundError",
    "FieldNotFoundError",
    "IndexOutOfRangeError",
    "KindConflictError",
    "DecodeError",
    "UnsupportedValueError",
    "InvalidExpiryError",
    "CacheConnectionError",
    "CacheTimeoutError",
]
