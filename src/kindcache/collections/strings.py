"""Plain string keys: one value per key, written with ``SET`` and read with ``GET``.

Unlike the collection kinds, a string write replaces the stored value and
its expiry every time, matching ``SET key value PX ttl``.
"""

from __future__ import annotations

from typing import TypeVar

from kindcache.connection import translate_store_errors
from kindcache.enums import KeyKind
from kindcache.errors import KeyNotFoundError
from kindcache.expiry import Expiry, resolve_expiry, to_milliseconds
from kindcache.result import Err, Ok, Result

from .base import KindAdapter

T = TypeVar("T")


class StringAdapter(KindAdapter[T]):
    """Single values stored under their own key."""

    kind = KeyKind.STRING

    @translate_store_errors
    def cache(self, key: str, value: T, expiry: Expiry = None) -> Result[bool]:
        """Create or overwrite ``key`` with ``value``."""
        ttl = resolve_expiry(expiry)
        encoded = self._codec.encode(value)

        check = self._guard.check(key, self.kind)
        if not check.allowed:
            return self._refuse(key, check)

        if ttl is None:
            self._client.set(key, encoded)
        else:
            self._client.set(key, encoded, px=to_milliseconds(ttl))
        return Ok(True)

    @translate_store_errors
    def retrieve(self, key: str) -> Result[T]:
        if (refused := self._require(key)) is not None:
            return refused
        raw = self._client.get(key)
        if raw is None:
            # expired between the check and the read
            return Err(KeyNotFoundError(key))
        return Ok(self._codec.decode(raw))

    def remove(self, key: str) -> Result[bool]:
        """Delete the key; ``Ok(False)`` when it did not exist."""
        return self.delete(key)


__all__ = ["StringAdapter"]
