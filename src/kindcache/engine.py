"""
Cache engine facade: one owned connection, typed adapters on demand.

Manifesto:
    Callers should not juggle connections, guards, and codecs. The engine
    owns the connection and hands out adapters bound to a structural kind
    and an element type.

    - **Explicit lifecycle:** ``initialise()`` reconfigures, ``close()`` releases
    - **Typed access:** ``engine.sets(int)``, ``engine.lists(bytes)``, ...
    - **Raw-bytes shortcuts:** ``cache`` / ``retrieve`` / ``remove`` for blobs

Architecture:
    ::

        CacheEngine
        ├── CacheConnection   (lazy redis-py client)
        ├── TypeTagGuard      (TYPE before every structural operation)
        └── adapters, cached per (kind, codec)
            strings(T) · sets(T) · lists(T) · dictionaries(T) · queues(T)

Examples:
    >>> from datetime import timedelta
    >>> from kindcache import CacheEngine
    >>> engine = CacheEngine()
    >>> engine.cache("blob", b"\\x01\\x02", timedelta(seconds=5))  # doctest: +SKIP
    Ok(True)
    >>> engine.queues(int).create("jobs", [56, 899])  # doctest: +SKIP
    Ok(True)

Tags:
    engine, facade, redis, kindcache

Doc-Types:
    - API Reference
    - Getting Started
"""

from __future__ import annotations

from typing import Any

import redis

from kindcache.codec import BytesCodec, ValueCodec, codec_for
from kindcache.collections import (
    DictionaryAdapter,
    KindAdapter,
    ListAdapter,
    QueueAdapter,
    SetAdapter,
    StringAdapter,
)
from kindcache.connection import CacheConnection, ClientFactory, translate_store_errors
from kindcache.enums import KeyKind
from kindcache.expiry import Expiry
from kindcache.guard import TypeTagGuard
from kindcache.result import Result
from kindcache.settings import CacheSettings


class CacheEngine:
    """Entry point owning the connection and the typed adapters.

    Args:
        settings: Connection settings; ``None`` reads ``KINDCACHE_*`` from the
            environment when the connection is first configured.
        logger: Optional structured logger receiving store trace events.
        client_factory: Builds the redis-py client (tests pass a fake).
    """

    def __init__(
        self,
        settings: CacheSettings | None = None,
        *,
        logger: Any | None = None,
        client_factory: ClientFactory = redis.Redis,
    ) -> None:
        self._connection = CacheConnection(settings, logger=logger, client_factory=client_factory)
        self._guard = TypeTagGuard(self._connection)
        self._adapters: dict[tuple[type, Any], KindAdapter[Any]] = {}
        self._blobs = StringAdapter(self._connection, BytesCodec(), guard=self._guard)

    @property
    def connection(self) -> CacheConnection:
        return self._connection

    def initialise(self, settings: CacheSettings | None = None) -> None:
        """Close any open connection and connect lazily with ``settings``."""
        self._connection.configure(settings)

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> CacheEngine:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # ── Raw byte values ──────────────────────────────────────────

    def cache(self, key: str, value: bytes, expiry: Expiry = None) -> Result[bool]:
        """Store ``value`` under ``key``, replacing any string value there."""
        return self._blobs.cache(key, value, expiry)

    def retrieve(self, key: str) -> Result[bytes]:
        return self._blobs.retrieve(key)

    def remove(self, key: str) -> Result[bool]:
        """Delete a string key; ``Ok(False)`` if it did not exist."""
        return self._blobs.remove(key)

    # ── Key introspection ────────────────────────────────────────

    @translate_store_errors
    def exists(self, key: str) -> bool:
        """Whether ``key`` exists, whatever its kind."""
        return bool(self._connection.client.exists(key))

    def kind_of(self, key: str) -> KeyKind:
        return self._guard.kind_of(key)

    # ── Typed adapters ───────────────────────────────────────────

    def strings(self, value_type: type | ValueCodec[Any]) -> StringAdapter[Any]:
        return self._adapter(StringAdapter, value_type)

    def sets(self, value_type: type | ValueCodec[Any]) -> SetAdapter[Any]:
        return self._adapter(SetAdapter, value_type)

    def lists(self, value_type: type | ValueCodec[Any]) -> ListAdapter[Any]:
        return self._adapter(ListAdapter, value_type)

    def dictionaries(self, value_type: type | ValueCodec[Any]) -> DictionaryAdapter[Any]:
        return self._adapter(DictionaryAdapter, value_type)

    def queues(self, value_type: type | ValueCodec[Any]) -> QueueAdapter[Any]:
        return self._adapter(QueueAdapter, value_type)

    def _adapter(self, adapter_type: type[Any], value_type: type | ValueCodec[Any]) -> Any:
        codec = codec_for(value_type)
        cache_key = (adapter_type, codec)
        adapter = self._adapters.get(cache_key)
        if adapter is None:
            adapter = adapter_type(self._connection, codec, guard=self._guard)
            self._adapters[cache_key] = adapter
        return adapter


__all__ = ["CacheEngine"]
