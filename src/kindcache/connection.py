"""Connection lifecycle: one lazily materialized Redis client per configuration.

``CacheConnection`` is an explicitly owned object: the engine creates it and
hands it to every adapter. Nothing talks to Redis until the first command,
and ``configure()`` swaps settings by closing any materialized client first.

Materialization rules
---------------------
==============================  ============================================
Situation                       Behavior
==============================  ============================================
one endpoint                    client built, no round trip until first use
one endpoint, abort_connect     ``PING`` once; failure raises
several endpoints               ``PING`` each in order, first answer wins
none answers, abort_connect     ``CacheConnectionError``
none answers                    primary client kept, reconnects lazily
==============================  ============================================

Usage
-----
::

    from kindcache.connection import CacheConnection
    from kindcache.settings import CacheSettings

    connection = CacheConnection(CacheSettings(server="cache.internal"))
    connection.client.ping()        # materializes here
    connection.configure(CacheSettings(server="cache-2.internal"))
    connection.close()

Transport failures from redis-py are translated into
:class:`~kindcache.errors.CacheConnectionError` /
:class:`~kindcache.errors.CacheTimeoutError` by :func:`translate_store_errors`
and are never retried here.
"""

from __future__ import annotations

import functools
import threading
from typing import Any, Callable, TypeVar

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from kindcache.errors import CacheConnectionError, CacheTimeoutError
from kindcache.logging import get_logger
from kindcache.settings import CacheSettings, get_settings

F = TypeVar("F", bound=Callable[..., Any])

ClientFactory = Callable[..., Any]


def client_options(settings: CacheSettings) -> dict[str, Any]:
    """Keyword arguments for the redis-py client, minus host and port.

    Additional options are applied last so they can override the derived
    ones; ``decode_responses`` is always off since the codecs work on bytes.
    """
    options: dict[str, Any] = {"db": settings.db}
    if settings.connect_timeout_ms is not None:
        options["socket_connect_timeout"] = settings.connect_timeout_ms / 1000
    if settings.response_timeout_ms is not None:
        options["socket_timeout"] = settings.response_timeout_ms / 1000
    options.update(settings.additional_options)
    options["decode_responses"] = False
    return options


def translate_store_errors(func: F) -> F:
    """Re-raise redis-py transport failures as kindcache errors."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except RedisTimeoutError as exc:
            raise CacheTimeoutError(f"Store timed out during {func.__name__}", cause=exc) from exc
        except RedisConnectionError as exc:
            raise CacheConnectionError(f"Store unreachable during {func.__name__}", cause=exc) from exc

    return wrapper  # type: ignore[return-value]


class CacheConnection:
    """Lazy, closable, reconfigurable handle to the store.

    Safe to share between threads: materialization happens once under a
    lock, and the redis-py client multiplexes commands over its pool.

    Args:
        settings: Connection settings; ``None`` reads them from the environment.
        logger: Structured logger receiving connection and store trace events.
        client_factory: Callable building a client from ``host``, ``port``
            and client options. Defaults to :class:`redis.Redis`.
    """

    def __init__(
        self,
        settings: CacheSettings | None = None,
        *,
        logger: Any | None = None,
        client_factory: ClientFactory = redis.Redis,
    ) -> None:
        self._settings = settings or get_settings()
        self._logger = logger or get_logger(__name__)
        self._client_factory = client_factory
        self._client: Any | None = None
        self._lock = threading.Lock()

    @property
    def settings(self) -> CacheSettings:
        return self._settings

    @property
    def logger(self) -> Any:
        return self._logger

    @property
    def is_materialized(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> Any:
        """The redis-py client, built on first access."""
        client = self._client
        if client is None:
            with self._lock:
                if self._client is None:
                    self._client = self._materialize()
                client = self._client
        return client

    def configure(self, settings: CacheSettings | None = None) -> None:
        """Close any materialized client and install new settings.

        The next access to :attr:`client` builds a client from ``settings``.
        """
        with self._lock:
            self._close_client()
            self._settings = settings or get_settings()
        self._logger.info(
            "connection_configured",
            server=self._settings.server,
            port=self._settings.port,
            alternatives=len(self._settings.alternative_servers),
        )

    def close(self) -> None:
        """Close the client if one was materialized. Safe to call twice."""
        with self._lock:
            self._close_client()

    def __enter__(self) -> CacheConnection:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # ── Internals ────────────────────────────────────────────────

    def _close_client(self) -> None:
        if self._client is None:
            return
        client, self._client = self._client, None
        client.close()
        self._logger.info("connection_closed")

    def _build(self, host: str, port: int) -> Any:
        return self._client_factory(host=host, port=port, **client_options(self._settings))

    def _materialize(self) -> Any:
        settings = self._settings
        endpoints = settings.endpoints

        if len(endpoints) == 1 and not settings.abort_connect:
            host, port = endpoints[0]
            self._logger.debug("connection_materialized", host=host, port=port, probed=False)
            return self._build(host, port)

        last_error: Exception | None = None
        for host, port in endpoints:
            client = self._build(host, port)
            try:
                client.ping()
            except (RedisConnectionError, RedisTimeoutError) as exc:
                self._logger.warning("endpoint_unreachable", host=host, port=port, error=str(exc))
                client.close()
                last_error = exc
                continue
            self._logger.debug("connection_materialized", host=host, port=port, probed=True)
            return client

        described = ", ".join(f"{host}:{port}" for host, port in endpoints)
        if settings.abort_connect:
            error = CacheConnectionError(
                f"No Redis endpoint answered ({described})",
                cause=last_error,
            ).with_context(endpoint=described)
            self._logger.error("connection_failed", error=error)
            raise error

        host, port = endpoints[0]
        self._logger.warning("no_endpoint_answered", endpoints=described, fallback=f"{host}:{port}")
        return self._build(host, port)


__all__ = [
    "ClientFactory",
    "CacheConnection",
    "client_options",
    "translate_store_errors",
]
