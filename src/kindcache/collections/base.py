"""
Shared machinery for the per-kind adapters.

Every adapter is bound to one structural kind and one codec strategy. The
operation skeleton is always the same:

1. normalize the expiry and encode the values (so bad input raises before
   anything touches the store);
2. ask the type-tag guard about the key;
3. issue the native command(s);
4. if the key was just created, apply the expiry.

Tags:
    adapters, redis, type-tags, kindcache

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Callable, ClassVar, Generic, Iterable, TypeVar

from kindcache.codec import ValueCodec
from kindcache.connection import CacheConnection, translate_store_errors
from kindcache.enums import Compatibility, KeyKind
from kindcache.expiry import to_milliseconds
from kindcache.guard import KindCheck, TypeTagGuard
from kindcache.result import Err, Ok, Result

T = TypeVar("T")


class KindAdapter(Generic[T]):
    """Base class for adapters bound to one :class:`KeyKind`.

    Args:
        connection: Shared connection owned by the engine.
        codec: Encode/decode strategy for element values.
        guard: Type-tag guard; one is created over ``connection`` if omitted.
    """

    kind: ClassVar[KeyKind]

    def __init__(
        self,
        connection: CacheConnection,
        codec: ValueCodec[T],
        *,
        guard: TypeTagGuard | None = None,
    ) -> None:
        self._connection = connection
        self._codec = codec
        self._guard = guard or TypeTagGuard(connection)

    @property
    def codec(self) -> ValueCodec[T]:
        return self._codec

    @property
    def _client(self) -> Any:
        return self._connection.client

    @property
    def _logger(self) -> Any:
        return self._connection.logger

    def __repr__(self) -> str:
        return f"{type(self).__name__}(codec={self._codec!r})"

    # ── Key-level operations ─────────────────────────────────────

    @translate_store_errors
    def exists(self, key: str) -> Result[bool]:
        """Whether ``key`` exists as this adapter's kind."""
        check = self._guard.check(key, self.kind)
        if not check.allowed:
            return self._refuse(key, check)
        return Ok(check.exists)

    @translate_store_errors
    def delete(self, key: str) -> Result[bool]:
        """Delete ``key`` if it holds this adapter's kind; ``Ok(False)`` if absent."""
        check = self._guard.check(key, self.kind)
        if not check.allowed:
            return self._refuse(key, check)
        if not check.exists:
            return Ok(False)
        return Ok(bool(self._client.delete(key)))

    # ── Helpers for subclasses ───────────────────────────────────

    def _refuse(self, key: str, check: KindCheck) -> Err[Any]:
        return Err(check.to_error(key, self.kind))

    def _require(self, key: str) -> Err[Any] | None:
        """``Err`` unless ``key`` already holds this adapter's kind."""
        check = self._guard.check(key, self.kind)
        if check.compatibility is not Compatibility.COMPATIBLE:
            return self._refuse(key, check)
        return None

    def _encode_all(self, items: Iterable[T]) -> list[bytes]:
        return [self._codec.encode(item) for item in items]

    def _write(
        self,
        key: str,
        ttl: timedelta | None,
        payload: Any,
        command: Callable[[Any], Any],
    ) -> Result[bool]:
        """Guarded write that may create the key.

        Returns ``Ok(False)`` when ``payload`` is empty and the key does not
        exist: Redis holds no empty collections, so nothing is created.
        """
        check = self._guard.check(key, self.kind)
        if not check.allowed:
            return self._refuse(key, check)
        if not payload:
            return Ok(check.exists)
        command(payload)
        self._expire_if_created(key, ttl, check)
        return Ok(True)

    def _expire_if_created(self, key: str, ttl: timedelta | None, check: KindCheck) -> None:
        if check.exists or ttl is None:
            return
        self._client.pexpire(key, to_milliseconds(ttl))
        self._logger.debug("expiry_applied", key=key, ttl_ms=to_milliseconds(ttl))


__all__ = ["KindAdapter"]
