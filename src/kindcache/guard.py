"""
Type-tag guard: keeps every key bound to the structural kind it was created with.

A key that holds a list must never be silently read as a set or overwritten
by a hash. Before any structural operation, adapters ask the guard how the
key's current kind relates to the kind they intend to use:

- ``ABSENT``: the key does not exist; it may be created as the kind
- ``COMPATIBLE``: the key already holds that kind; it may be changed
- ``CONFLICTING``: the key holds another kind; nothing may be touched

Manifesto:
    - **Reject, never reinterpret:** A conflicting key is reported, not converted
    - **One round trip:** ``TYPE`` answers existence and kind together
    - **Honest about races:** The check and the mutation are separate commands

Architecture:
    ::

        adapter ──check(key, SET)──> TYPE key
                                        │
                 ┌──────────────────────┼────────────────────────┐
                 ▼                      ▼                        ▼
            "none"                 "set"                "list" / "hash" / ...
            ABSENT                 COMPATIBLE            CONFLICTING
            create + expire        mutate                Err(KindConflictError)

Guardrails:
    The guard is not linearizable with the command that follows it. Another
    client can create or delete the key between ``TYPE`` and the mutation.
    Redis will then reject a wrong-kind command (``WRONGTYPE``) on its own,
    and a key deleted in between is simply recreated. This trade-off is
    accepted; callers needing check-and-set semantics across clients must
    coordinate outside this layer.

Tags:
    type-tags, redis, invariants, kindcache

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from kindcache.connection import translate_store_errors
from kindcache.enums import Compatibility, KeyKind
from kindcache.errors import CacheError, KeyNotFoundError, KindConflictError

if TYPE_CHECKING:
    from kindcache.connection import CacheConnection


@dataclass(frozen=True, slots=True)
class KindCheck:
    """Result of a guard check: how the key relates to the intended kind."""

    compatibility: Compatibility
    actual: KeyKind

    @property
    def exists(self) -> bool:
        return self.compatibility is not Compatibility.ABSENT

    @property
    def allowed(self) -> bool:
        """True unless the key holds a different kind."""
        return self.compatibility is not Compatibility.CONFLICTING

    def to_error(self, key: str, intended: KeyKind) -> CacheError:
        """The error an adapter returns when it cannot proceed."""
        if self.compatibility is Compatibility.CONFLICTING:
            return KindConflictError(key, expected=intended.value, actual=self.actual.value)
        return KeyNotFoundError(key)


def compare(actual: KeyKind, intended: KeyKind) -> Compatibility:
    """Pure comparison of an observed kind against an intended kind."""
    if actual is KeyKind.NONE:
        return Compatibility.ABSENT
    if actual is intended:
        return Compatibility.COMPATIBLE
    return Compatibility.CONFLICTING


class TypeTagGuard:
    """Asks the store for a key's kind and compares it with the intended one."""

    def __init__(self, connection: CacheConnection) -> None:
        self._connection = connection

    @translate_store_errors
    def kind_of(self, key: str) -> KeyKind:
        """Current structural kind of ``key`` (``KeyKind.NONE`` if missing)."""
        return KeyKind.from_redis(self._connection.client.type(key))

    def check(self, key: str, intended: KeyKind) -> KindCheck:
        """Compare ``key``'s current kind with ``intended``."""
        actual = self.kind_of(key)
        compatibility = compare(actual, intended)
        if compatibility is Compatibility.CONFLICTING:
            self._connection.logger.debug(
                "kind_conflict",
                key=key,
                expected=intended.value,
                actual=actual.value,
            )
        return KindCheck(compatibility, actual)


__all__ = ["KindCheck", "TypeTagGuard", "compare"]
