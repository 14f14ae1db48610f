"""Unordered unique members stored in a Redis set."""

from __future__ import annotations

from typing import Iterable, TypeVar

from kindcache.connection import translate_store_errors
from kindcache.enums import KeyKind
from kindcache.errors import KeyNotFoundError
from kindcache.expiry import Expiry, resolve_expiry
from kindcache.result import Err, Ok, Result

from .base import KindAdapter

T = TypeVar("T")


class SetAdapter(KindAdapter[T]):
    """Typed view over Redis sets.

    Example:
        tags = engine.sets(str)
        tags.create("post:1:tags", ["redis", "python"], expiry=3600)
        tags.add("post:1:tags", "redis")        # Ok(False), already a member
        tags.retrieve("post:1:tags")            # Ok(['python', 'redis'])
    """

    kind = KeyKind.SET

    @translate_store_errors
    def create(self, key: str, items: Iterable[T], expiry: Expiry = None) -> Result[bool]:
        """Add ``items`` to the set, creating it (with ``expiry``) if absent.

        Creation over an existing set is a union; its expiry is left alone.
        """
        ttl = resolve_expiry(expiry)
        encoded = self._encode_all(items)
        return self._write(key, ttl, encoded, lambda members: self._client.sadd(key, *members))

    @translate_store_errors
    def retrieve(self, key: str) -> Result[list[T]]:
        """All members, decoded and sorted (insertion order is not kept).

        Members that cannot be compared with each other, such as naive and
        aware datetimes in one set, come back in wire-byte order instead.
        """
        if (refused := self._require(key)) is not None:
            return refused
        # SSCAN may repeat members while the set is being rehashed
        raw = sorted(set(self._client.sscan_iter(key)))
        if not raw:
            return Err(KeyNotFoundError(key))
        members = [self._codec.decode(member) for member in raw]
        try:
            return Ok(sorted(members))
        except TypeError:
            return Ok(members)

    @translate_store_errors
    def add(self, key: str, value: T, expiry: Expiry = None) -> Result[bool]:
        """Add one member. ``Ok(False)`` if it was already present.

        ``expiry`` is only applied when this call creates the set.
        """
        ttl = resolve_expiry(expiry)
        encoded = self._codec.encode(value)

        check = self._guard.check(key, self.kind)
        if not check.allowed:
            return self._refuse(key, check)
        added = self._client.sadd(key, encoded) == 1
        self._expire_if_created(key, ttl, check)
        return Ok(added)

    @translate_store_errors
    def remove(self, key: str, value: T) -> Result[bool]:
        encoded = self._codec.encode(value)
        if (refused := self._require(key)) is not None:
            return refused
        return Ok(self._client.srem(key, encoded) == 1)

    @translate_store_errors
    def length(self, key: str) -> Result[int]:
        if (refused := self._require(key)) is not None:
            return refused
        return Ok(int(self._client.scard(key)))

    @translate_store_errors
    def contains(self, key: str, value: T) -> Result[bool]:
        """Whether ``value`` is currently a member."""
        encoded = self._codec.encode(value)
        if (refused := self._require(key)) is not None:
            return refused
        return Ok(bool(self._client.sismember(key, encoded)))


__all__ = ["SetAdapter"]
