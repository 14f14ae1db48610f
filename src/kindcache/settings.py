"""
Connection settings for kindcache.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.
    A bad value in a deployment file should degrade to a sensible default,
    not stop a long-lived worker from talking to its cache.

    - **Pydantic validation:** Normalized once, at construction
    - **Environment-driven:** ``KINDCACHE_*`` variables and ``.env`` files
    - **Forgiving defaults:** Blank server, bad ports, and out-of-range
      timeouts fall back instead of failing

Features:
    - **CacheSettings:** server, port, alternative servers, timeouts,
      extra client options, abort-on-connect-failure, database index
    - **get_settings():** cached accessor, ``clear_settings_cache()`` for tests

Examples:
    >>> from kindcache.settings import CacheSettings
    >>> CacheSettings(server="  ", port=70000).endpoint
    ('localhost', 6379)
    >>> CacheSettings(connect_timeout_ms=25000).connect_timeout_ms is None
    True

Tags:
    settings, configuration, pydantic, environment, redis, kindcache

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SERVER = "localhost"
DEFAULT_PORT = 6379
MAX_TIMEOUT_MS = 20_000


def _valid_port(port: int) -> int:
    return port if 0 < port <= 65535 else DEFAULT_PORT


class CacheSettings(BaseSettings):
    """Connection configuration for the Redis store.

    All fields can be set via ``KINDCACHE_*`` environment variables (e.g.
    ``KINDCACHE_SERVER=cache.internal``). Dict fields take JSON
    (``KINDCACHE_ALTERNATIVE_SERVERS='{"replica-1": 6380}'``).

    Fields
    ──────
    server               : Primary host (blank → localhost)
    port                 : Primary port (outside 1..65535 → 6379)
    alternative_servers  : Fallback hosts tried in order, host → port
    connect_timeout_ms   : Socket connect timeout, kept only in (0, 20000]
    response_timeout_ms  : Socket read/write timeout, kept only in (0, 20000]
    additional_options   : Extra keyword arguments for the redis-py client
    abort_connect        : Fail materialization when no endpoint answers
    db                   : Database index
    log_level            : structlog level for kindcache.logging
    """

    model_config = SettingsConfigDict(
        env_prefix="KINDCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Endpoints ────────────────────────────────────────────────
    server: str = Field(default=DEFAULT_SERVER)
    port: int = Field(default=DEFAULT_PORT)
    alternative_servers: dict[str, int] = Field(default_factory=dict)

    # ── Timeouts ─────────────────────────────────────────────────
    connect_timeout_ms: int | None = Field(default=None)
    response_timeout_ms: int | None = Field(default=None)

    # ── Client ───────────────────────────────────────────────────
    additional_options: dict[str, Any] = Field(default_factory=dict)
    abort_connect: bool = Field(default=False)
    db: int = Field(default=0, ge=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")

    @field_validator("server", mode="before")
    @classmethod
    def _default_server(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_SERVER
        return value.strip() if isinstance(value, str) else value

    @field_validator("port")
    @classmethod
    def _default_port(cls, value: int) -> int:
        return _valid_port(value)

    @field_validator("alternative_servers")
    @classmethod
    def _clean_alternatives(cls, value: dict[str, int]) -> dict[str, int]:
        return {
            host.strip(): _valid_port(port)
            for host, port in value.items()
            if host and host.strip()
        }

    @field_validator("connect_timeout_ms", "response_timeout_ms")
    @classmethod
    def _bounded_timeout(cls, value: int | None) -> int | None:
        if value is None or not 0 < value <= MAX_TIMEOUT_MS:
            return None
        return value

    @field_validator("abort_connect", mode="before")
    @classmethod
    def _default_abort(cls, value: Any) -> Any:
        return False if value is None else value

    # ── Derived properties ───────────────────────────────────────

    @property
    def endpoint(self) -> tuple[str, int]:
        return (self.server, self.port)

    @property
    def endpoints(self) -> list[tuple[str, int]]:
        """Primary endpoint first, then alternatives in declaration order."""
        result = [self.endpoint]
        for host, port in self.alternative_servers.items():
            if (host, port) not in result:
                result.append((host, port))
        return result


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, CacheSettings] = {}


def get_settings(*, _force_reload: bool = False) -> CacheSettings:
    """Load, validate, and cache a :class:`CacheSettings` from the environment."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = CacheSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "DEFAULT_SERVER",
    "DEFAULT_PORT",
    "MAX_TIMEOUT_MS",
    "CacheSettings",
    "get_settings",
    "clear_settings_cache",
]
