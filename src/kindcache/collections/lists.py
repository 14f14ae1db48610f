"""Ordered sequences with duplicates, stored in a Redis list.

Indices are zero-based; negative indices count from the end, as in Python
and in Redis itself.
"""

from __future__ import annotations

import uuid
from typing import Iterable, TypeVar

from kindcache.connection import translate_store_errors
from kindcache.enums import KeyKind
from kindcache.errors import IndexOutOfRangeError
from kindcache.expiry import Expiry, resolve_expiry
from kindcache.result import Err, Ok, Result

from .base import KindAdapter

T = TypeVar("T")

_MARKER_PREFIX = b"kindcache:inject:"


class ListAdapter(KindAdapter[T]):
    """Typed view over Redis lists.

    Example:
        log = engine.lists(str)
        log.create("log", ["bb", "aa", "bb", "bb", "c", "bb", "d"])
        log.remove("log", "bb")     # Ok(4)
        log.retrieve("log")         # Ok(['aa', 'c', 'd'])
    """

    kind = KeyKind.LIST

    @translate_store_errors
    def create(self, key: str, items: Iterable[T], expiry: Expiry = None) -> Result[bool]:
        """Append ``items`` in order, creating the list (with ``expiry``) if absent."""
        ttl = resolve_expiry(expiry)
        encoded = self._encode_all(items)
        return self._write(key, ttl, encoded, lambda values: self._client.rpush(key, *values))

    @translate_store_errors
    def retrieve(self, key: str) -> Result[list[T]]:
        if (refused := self._require(key)) is not None:
            return refused
        return Ok([self._codec.decode(raw) for raw in self._client.lrange(key, 0, -1)])

    @translate_store_errors
    def item(self, key: str, index: int) -> Result[T]:
        """Element at ``index``; ``Err(IndexOutOfRangeError)`` past either end."""
        if (refused := self._require(key)) is not None:
            return refused
        raw = self._client.lindex(key, index)
        if raw is None:
            return Err(IndexOutOfRangeError(key, index))
        return Ok(self._codec.decode(raw))

    @translate_store_errors
    def append(self, key: str, value: T, expiry: Expiry = None) -> Result[bool]:
        """Push ``value`` at the tail; ``expiry`` applies only if this creates the list."""
        ttl = resolve_expiry(expiry)
        encoded = self._codec.encode(value)
        return self._write(key, ttl, [encoded], lambda values: self._client.rpush(key, *values))

    @translate_store_errors
    def inject(self, key: str, index: int, value: T) -> Result[bool]:
        """Insert ``value`` so that it ends up at position ``index``.

        ``index == length`` appends. An index outside ``-length..length``
        gives ``Ok(False)`` and leaves the list untouched.
        """
        encoded = self._codec.encode(value)
        if (refused := self._require(key)) is not None:
            return refused

        length = self._client.llen(key)
        position = index + length if index < 0 else index
        if not 0 <= position <= length:
            return Ok(False)

        if position == length:
            self._client.rpush(key, encoded)
        elif position == 0:
            self._client.lpush(key, encoded)
        else:
            self._insert_at(key, position, encoded)
        return Ok(True)

    def _insert_at(self, key: str, position: int, encoded: bytes) -> None:
        # LINSERT works on values, not positions: swap in a unique marker so
        # the pivot is unambiguous even when the list holds duplicates.
        pivot = self._client.lindex(key, position)
        marker = _MARKER_PREFIX + uuid.uuid4().hex.encode("ascii")
        pipe = self._client.pipeline(transaction=True)
        pipe.lset(key, position, marker)
        pipe.linsert(key, "BEFORE", marker, encoded)
        pipe.lset(key, position + 1, pivot)
        pipe.execute()

    @translate_store_errors
    def remove(self, key: str, value: T) -> Result[int]:
        """Remove every occurrence of ``value``; ``Ok(count)`` of removed elements."""
        encoded = self._codec.encode(value)
        if (refused := self._require(key)) is not None:
            return refused
        removed = int(self._client.lrem(key, 0, encoded))
        self._logger.debug("list_elements_removed", key=key, count=removed)
        return Ok(removed)

    @translate_store_errors
    def shrink(self, key: str, start: int, stop: int) -> Result[bool]:
        """Keep only elements ``start..stop`` (both inclusive, ``LTRIM`` semantics)."""
        if (refused := self._require(key)) is not None:
            return refused
        self._client.ltrim(key, start, stop)
        return Ok(True)

    @translate_store_errors
    def clear(self, key: str) -> Result[bool]:
        """Remove all elements, which deletes the key."""
        if (refused := self._require(key)) is not None:
            return refused
        self._client.delete(key)
        return Ok(True)

    @translate_store_errors
    def length(self, key: str) -> Result[int]:
        if (refused := self._require(key)) is not None:
            return refused
        return Ok(int(self._client.llen(key)))


__all__ = ["ListAdapter"]
