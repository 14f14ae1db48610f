"""Integration tests for StringAdapter and the engine's raw-bytes shortcuts."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from kindcache.errors import DecodeError, InvalidExpiryError, KeyNotFoundError, KindConflictError
from kindcache.result import Err, Ok


class TestBlobCache:
    """Raw byte payloads through CacheEngine.cache / retrieve / remove."""

    def test_cached_bytes_come_back_equal_but_not_identical(self, engine):
        payload = bytes([59, 58, 57])
        assert engine.cache("blob", payload, timedelta(minutes=5)) == Ok(True)

        retrieved = engine.retrieve("blob").unwrap()
        assert retrieved == payload
        assert retrieved is not payload

    def test_remove_existing(self, engine):
        engine.cache("blob", b"\x00\x01")
        assert engine.remove("blob") == Ok(True)
        assert engine.retrieve("blob").is_err()

    def test_remove_missing(self, engine):
        assert engine.remove("never-cached") == Ok(False)

    def test_retrieve_missing(self, engine):
        result = engine.retrieve("never-cached")
        assert isinstance(result, Err)
        assert isinstance(result.error, KeyNotFoundError)
        assert result.unwrap_or(None) is None

    def test_bytes_are_stored_verbatim(self, engine, store):
        engine.cache("blob", b"\xff\x00raw")
        assert store.get("blob") == b"\xff\x00raw"


class TestStringCache:
    def test_typed_round_trip(self, engine):
        strings = engine.strings(Decimal)
        strings.cache("price", Decimal("0.000000000046"))
        assert strings.retrieve("price") == Ok(Decimal("0.000000000046"))

    def test_wire_text(self, engine, store):
        engine.strings(datetime).cache("at", datetime(2024, 3, 1, 13, 45, 10, 123456))
        assert store.get("at") == b"2024-03-01T13:45:10.1234560"

    def test_overwrite_replaces_value(self, engine):
        strings = engine.strings(int)
        strings.cache("n", 1)
        strings.cache("n", 2)
        assert strings.retrieve("n") == Ok(2)

    def test_expiry_is_set(self, engine, store):
        engine.strings(str).cache("k", "v", expiry=60)
        assert 0 < store.pttl("k") <= 60_000

    def test_overwrite_resets_expiry(self, engine, store):
        strings = engine.strings(str)
        strings.cache("k", "v", expiry=60)
        strings.cache("k", "w")
        assert store.pttl("k") == -1

    def test_unexpiring_threshold(self, engine, store):
        engine.strings(str).cache("k", "v", expiry=timedelta(days=3650))
        assert store.pttl("k") == -1

    def test_invalid_expiry_writes_nothing(self, engine, store):
        with pytest.raises(InvalidExpiryError):
            engine.strings(str).cache("k", "v", expiry=-5)
        assert not store.exists("k")

    def test_exists(self, engine):
        strings = engine.strings(str)
        assert strings.exists("k") == Ok(False)
        strings.cache("k", "v")
        assert strings.exists("k") == Ok(True)


class TestStringKindGuard:
    def test_cache_over_list_is_refused(self, engine, store):
        store.rpush("k", b"a", b"b")

        result = engine.strings(str).cache("k", "v")

        assert isinstance(result.error, KindConflictError)
        assert store.lrange("k", 0, -1) == [b"a", b"b"]

    def test_remove_of_set_is_refused(self, engine, store):
        store.sadd("k", b"a")
        assert isinstance(engine.remove("k").error, KindConflictError)
        assert store.exists("k")

    def test_retrieve_of_hash_is_refused(self, engine, store):
        store.hset("k", "f", b"v")
        result = engine.strings(str).retrieve("k")
        assert result.error.to_dict()["actual_kind"] == "hash"


class TestStringDecode:
    def test_out_of_band_value_raises(self, engine, store):
        store.set("n", b"not-a-number")
        with pytest.raises(DecodeError):
            engine.strings(int).retrieve("n")
