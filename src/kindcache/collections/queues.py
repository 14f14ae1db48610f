"""FIFO queues over Redis lists: push at the tail, pop at the head.

A queue key is an ordinary list key, so the list adapter can inspect it.
Redis deletes a list when its last element is popped; a drained queue is
therefore absent, and ``push`` recreates it.
"""

from __future__ import annotations

from typing import Iterable, TypeVar

from kindcache.connection import translate_store_errors
from kindcache.enums import KeyKind
from kindcache.errors import KeyNotFoundError
from kindcache.expiry import Expiry, resolve_expiry
from kindcache.result import Err, Ok, Result

from .base import KindAdapter

T = TypeVar("T")


class QueueAdapter(KindAdapter[T]):
    """Typed FIFO queue.

    Example:
        jobs = engine.queues(int)
        jobs.create("jobs", [56, 899, 1040])
        jobs.pop("jobs")            # Ok(56)
    """

    kind = KeyKind.LIST

    @translate_store_errors
    def create(self, key: str, items: Iterable[T], expiry: Expiry = None) -> Result[bool]:
        """Enqueue ``items`` in order, creating the queue (with ``expiry``) if absent."""
        ttl = resolve_expiry(expiry)
        encoded = self._encode_all(items)
        return self._write(key, ttl, encoded, lambda values: self._client.rpush(key, *values))

    @translate_store_errors
    def push(self, key: str, value: T, expiry: Expiry = None) -> Result[bool]:
        ttl = resolve_expiry(expiry)
        encoded = self._codec.encode(value)
        return self._write(key, ttl, [encoded], lambda values: self._client.rpush(key, *values))

    @translate_store_errors
    def pop(self, key: str) -> Result[T]:
        """Dequeue the head element; ``Err(KeyNotFoundError)`` once drained."""
        if (refused := self._require(key)) is not None:
            return refused
        raw = self._client.lpop(key)
        if raw is None:
            return Err(KeyNotFoundError(key))
        return Ok(self._codec.decode(raw))

    @translate_store_errors
    def length(self, key: str) -> Result[int]:
        if (refused := self._require(key)) is not None:
            return refused
        return Ok(int(self._client.llen(key)))


__all__ = ["QueueAdapter"]
