"""kindcache -- typed values and collections over Redis, one kind per key.

Manifesto:
    Redis stores bytes. Applications store ints, decimals, timestamps, and
    collections of them. ``kindcache`` is the thin layer in between: it
    encodes scalars losslessly, and it refuses to let a key that was created
    as one structure (string, set, list, hash) be read or written as another.

Architecture::

    codec.py         Value codec (ScalarCodec / BytesCodec strategies)
    guard.py         Type-tag guard (TYPE → ABSENT / COMPATIBLE / CONFLICTING)
    collections/     String, Set, List, Dictionary, Queue adapters
    connection.py    Lazy, closable, reconfigurable redis-py client
    engine.py        CacheEngine facade
    errors.py        CacheError hierarchy
    result.py        Ok / Err envelope for expected outcomes
    expiry.py        TTL normalization
    settings.py      pydantic-settings configuration (KINDCACHE_*)
    logging.py       structlog configuration

Quick start::

    from kindcache import CacheEngine, CacheSettings

    engine = CacheEngine(CacheSettings(server="localhost"))
    engine.lists(str).create("log", ["a", "b", "a"], expiry=3600)
    engine.lists(str).remove("log", "a")      # Ok(2)
    engine.sets(int).create("log", [1])       # Err(KindConflictError(...))
"""

from kindcache.codec import BytesCodec, ScalarCodec, codec_for, decode, encode
from kindcache.connection import CacheConnection
from kindcache.engine import CacheEngine
from kindcache.enums import Compatibility, KeyKind
from kindcache.errors import (
    CacheConnectionError,
    CacheError,
    CacheTimeoutError,
    DecodeError,
    FieldNotFoundError,
    IndexOutOfRangeError,
    InvalidExpiryError,
    KeyNotFoundError,
    KindConflictError,
    UnsupportedValueError,
)
from kindcache.guard import TypeTagGuard
from kindcache.result import Err, Ok, Result
from kindcache.settings import CacheSettings

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Engine and connection
    "CacheEngine",
    "CacheConnection",
    "CacheSettings",
    # Codec
    "encode",
    "decode",
    "codec_for",
    "ScalarCodec",
    "BytesCodec",
    # Guard
    "TypeTagGuard",
    "KeyKind",
    "Compatibility",
    # Results and errors
    "Ok",
    "Err",
    "Result",
    "CacheError",
    "KeyNotFoundError",
    "FieldNotFoundError",
    "IndexOutOfRangeError",
    "KindConflictError",
    "DecodeError",
    "UnsupportedValueError",
    "InvalidExpiryError",
    "CacheConnectionError",
    "CacheTimeoutError",
]
