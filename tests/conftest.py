"""
Shared pytest fixtures for kindcache tests.

This module provides:
- Environment isolation for ``KINDCACHE_*`` settings
- An in-memory Redis (fakeredis) shared by the engine and the assertions
- A ready ``CacheEngine`` wired to that in-memory Redis

Usage:
    def test_something(engine, store):
        engine.sets(int).create("k", [1, 2])
        assert store.scard("k") == 2
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Generator

import fakeredis
import pytest

from kindcache import CacheEngine, CacheSettings
from kindcache.settings import clear_settings_cache


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "collections" in test_path.parts or test_path.name == "test_cache_engine.py":
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Settings Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep host environment variables and cached settings out of tests."""
    for name in list(os.environ):
        if name.startswith("KINDCACHE_"):
            monkeypatch.delenv(name)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# In-memory Redis
# =============================================================================


@pytest.fixture
def redis_server() -> fakeredis.FakeServer:
    return fakeredis.FakeServer()


@pytest.fixture
def client_factory(redis_server: fakeredis.FakeServer) -> Any:
    """Drop-in for ``redis.Redis`` that records the options it was given."""
    calls: list[dict[str, Any]] = []

    def factory(**kwargs: Any) -> fakeredis.FakeRedis:
        calls.append(kwargs)
        return fakeredis.FakeRedis(server=redis_server)

    factory.calls = calls  # type: ignore[attr-defined]
    return factory


@pytest.fixture
def store(redis_server: fakeredis.FakeServer) -> fakeredis.FakeRedis:
    """Direct handle on the same in-memory Redis, for assertions."""
    return fakeredis.FakeRedis(server=redis_server)


@pytest.fixture
def engine(client_factory: Any) -> Generator[CacheEngine, None, None]:
    engine = CacheEngine(CacheSettings(), client_factory=client_factory)
    yield engine
    engine.close()
