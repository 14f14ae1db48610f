"""Field → value mappings stored in a Redis hash.

Field names are plain ``str`` (UTF-8 on the wire); values go through the
adapter's codec.
"""

from __future__ import annotations

from typing import Mapping, TypeVar

from kindcache.connection import translate_store_errors
from kindcache.enums import KeyKind
from kindcache.errors import FieldNotFoundError, UnsupportedValueError
from kindcache.expiry import Expiry, resolve_expiry
from kindcache.result import Err, Ok, Result

from .base import KindAdapter

T = TypeVar("T")


def _field(name: str) -> str:
    if not isinstance(name, str):
        raise UnsupportedValueError(f"Dictionary field names must be str, got {type(name).__name__}")
    return name


class DictionaryAdapter(KindAdapter[T]):
    """Typed view over Redis hashes.

    ``add`` only writes a missing field and ``update`` only writes an existing
    one; each answers ``Ok(False)`` when its precondition does not hold.
    """

    kind = KeyKind.HASH

    @translate_store_errors
    def create(self, key: str, mapping: Mapping[str, T], expiry: Expiry = None) -> Result[bool]:
        """Merge ``mapping`` into the hash, creating it (with ``expiry``) if absent."""
        ttl = resolve_expiry(expiry)
        encoded = {_field(name): self._codec.encode(value) for name, value in mapping.items()}
        return self._write(key, ttl, encoded, lambda fields: self._client.hset(key, mapping=fields))

    @translate_store_errors
    def retrieve(self, key: str) -> Result[dict[str, T]]:
        if (refused := self._require(key)) is not None:
            return refused
        return Ok({
            name.decode("utf-8"): self._codec.decode(raw)
            for name, raw in self._client.hscan_iter(key)
        })

    @translate_store_errors
    def add(self, key: str, field: str, value: T, expiry: Expiry = None) -> Result[bool]:
        """Set ``field`` only if it is missing; ``Ok(False)`` leaves the old value."""
        ttl = resolve_expiry(expiry)
        name = _field(field)
        encoded = self._codec.encode(value)

        check = self._guard.check(key, self.kind)
        if not check.allowed:
            return self._refuse(key, check)
        added = bool(self._client.hsetnx(key, name, encoded))
        self._expire_if_created(key, ttl, check)
        return Ok(added)

    @translate_store_errors
    def update(self, key: str, field: str, value: T) -> Result[bool]:
        """Overwrite ``field`` only if it exists; ``Ok(False)`` never creates it."""
        name = _field(field)
        encoded = self._codec.encode(value)
        if (refused := self._require(key)) is not None:
            return refused
        if not self._client.hexists(key, name):
            return Ok(False)
        self._client.hset(key, name, encoded)
        return Ok(True)

    @translate_store_errors
    def remove(self, key: str, field: str) -> Result[bool]:
        name = _field(field)
        if (refused := self._require(key)) is not None:
            return refused
        return Ok(self._client.hdel(key, name) == 1)

    @translate_store_errors
    def get(self, key: str, field: str) -> Result[T]:
        """Value of ``field``; ``Err(FieldNotFoundError)`` when the hash lacks it."""
        name = _field(field)
        if (refused := self._require(key)) is not None:
            return refused
        raw = self._client.hget(key, name)
        if raw is None:
            return Err(FieldNotFoundError(key, name))
        return Ok(self._codec.decode(raw))

    @translate_store_errors
    def length(self, key: str) -> Result[int]:
        if (refused := self._require(key)) is not None:
            return refused
        return Ok(int(self._client.hlen(key)))

    @translate_store_errors
    def contains(self, key: str, field: str) -> Result[bool]:
        name = _field(field)
        if (refused := self._require(key)) is not None:
            return refused
        return Ok(bool(self._client.hexists(key, name)))


__all__ = ["DictionaryAdapter"]
