"""TTL normalization for keys created by the adapters.

A TTL is attached to a key when the key is created and never again. Very
long TTLs (``UNEXPIRING_AFTER`` and beyond) are treated as "keep forever"
so that long-lived queues are not given a pointless ten-year expiry.
"""

from __future__ import annotations

import math
from datetime import timedelta

from kindcache.errors import InvalidExpiryError

UNEXPIRING_AFTER = timedelta(days=3650)

Expiry = timedelta | int | float | None


def resolve_expiry(expiry: Expiry) -> timedelta | None:
    """Return the TTL to apply, or ``None`` when no expiry should be set.

    Args:
        expiry: A ``timedelta``, a number of seconds, or ``None``.

    Raises:
        InvalidExpiryError: For zero, negative, or non-duration values.
    """
    if expiry is None:
        return None
    if isinstance(expiry, bool) or not isinstance(expiry, (timedelta, int, float)):
        raise InvalidExpiryError(f"Expiry must be a timedelta or seconds, got {expiry!r}")

    if isinstance(expiry, float) and not math.isfinite(expiry):
        if expiry > 0:
            return None
        raise InvalidExpiryError(f"Expiry must be a finite duration, got {expiry!r}")

    try:
        ttl = expiry if isinstance(expiry, timedelta) else timedelta(seconds=expiry)
    except OverflowError:
        # beyond timedelta.max, so far past the unexpiring threshold
        if expiry > 0:
            return None
        raise InvalidExpiryError(f"Expiry must be positive, got {expiry!r}") from None
    if ttl <= timedelta(0):
        raise InvalidExpiryError(f"Expiry must be positive, got {ttl}")
    if ttl >= UNEXPIRING_AFTER:
        return None
    return ttl


def to_milliseconds(ttl: timedelta) -> int:
    """Whole milliseconds for ``PEXPIRE``, never less than one."""
    return max(1, ttl // timedelta(milliseconds=1))


__all__ = ["UNEXPIRING_AFTER", "Expiry", "resolve_expiry", "to_milliseconds"]
