"""
Shared enums for structural kinds and kind compatibility.

``KeyKind`` mirrors the values Redis reports from ``TYPE``; the four kinds
this layer manages plus ``NONE`` for a missing key and ``OTHER`` for kinds
it does not manage (zset, stream, ...), which never match any request.

Tags:
    enums, redis, type-tags, kindcache

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from enum import Enum


class KeyKind(str, Enum):
    """Structural kind of a key as reported by the store."""

    NONE = "none"
    STRING = "string"
    SET = "set"
    LIST = "list"
    HASH = "hash"
    OTHER = "other"

    @classmethod
    def from_redis(cls, reply: str | bytes) -> KeyKind:
        """Map a raw ``TYPE`` reply to a kind."""
        if isinstance(reply, bytes):
            reply = reply.decode("ascii")
        try:
            return cls(reply)
        except ValueError:
            return cls.OTHER


class Compatibility(str, Enum):
    """Outcome of comparing a key's current kind with an intended kind."""

    ABSENT = "absent"            # key missing, may be created as the intended kind
    COMPATIBLE = "compatible"    # key holds the intended kind
    CONFLICTING = "conflicting"  # key holds another kind, must not be touched


__all__ = ["KeyKind", "Compatibility"]
