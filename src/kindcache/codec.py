"""
Value codec: lossless, locale-invariant wire representation of scalars.

Redis stores every set member, list element, and hash value as an opaque
byte string. This module decides how a Python scalar becomes that string
and how it comes back, so that ``decode(encode(v), type(v)) == v`` holds for
every supported value on every host, whatever its locale.

Manifesto:
    - **Round-trip or fail:** Either the exact value comes back or DecodeError
    - **Invariant text:** No locale, no thousands separators, no exponents
      for decimals
    - **Bytes bypass:** Raw byte sequences are stored as-is, never encoded
    - **Strategy objects:** Adapters take a ScalarCodec or BytesCodec, one
      adapter implementation serves both

Architecture:
    ::

        ┌──────────────┬─────────────────────────────────────────────────┐
        │ Python type  │ Wire text                                        │
        ├──────────────┼─────────────────────────────────────────────────┤
        │ bool         │ True / False                                     │
        │ int          │ -9223372036854775808 (any width, base 10)        │
        │ float        │ shortest round-trip repr, NaN / ±Infinity        │
        │ Decimal      │ 0.000000000046 (fixed point, exact)              │
        │ datetime     │ 2024-03-01              (naive, midnight)        │
        │              │ 2024-03-01T13:45:10.1234560[+02:00]              │
        │ date         │ 2024-03-01                                       │
        │ str          │ as-is (UTF-8)                                    │
        │ bytes        │ not encoded: BytesCodec passes them through      │
        └──────────────┴─────────────────────────────────────────────────┘

        ScalarCodec(int) ──encode──> b"42" ──decode──> 42
        BytesCodec()     ──encode──> b"\\x00\\x01" ──decode──> b"\\x00\\x01"

Examples:
    >>> from decimal import Decimal
    >>> encode(78366020 / 6)
    '13061003.333333334'
    >>> decode("13061003.333333334", float) == 78366020 / 6
    True
    >>> encode(Decimal("0.000000000046"))
    '0.000000000046'
    >>> from datetime import datetime
    >>> encode(datetime(2024, 3, 1))
    '2024-03-01'
    >>> encode(datetime(2024, 3, 1, 13, 45, 10, 123456))
    '2024-03-01T13:45:10.1234560'

Guardrails:
    ❌ DON'T: Catch DecodeError to fall back to a default
    ✅ DO: Treat it as data corruption; something wrote the key out of band

    ❌ DON'T: Send bytes through encode()
    ✅ DO: Use BytesCodec (or codec_for(bytes)) for raw payloads

Tags:
    codec, serialization, round-trip, redis, kindcache

Doc-Types:
    - API Reference
    - Wire Format Reference
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Generic, Protocol, TypeVar

from kindcache.errors import DecodeError, UnsupportedValueError

T = TypeVar("T")

_INT = re.compile(r"[+-]?[0-9]+", re.ASCII)
_DATE = re.compile(r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})", re.ASCII)
_DATETIME = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d{1,7}))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2}(?::\d{2})?)?",
    re.ASCII,
)

_FLOAT_SPECIALS = {"NaN": math.nan, "Infinity": math.inf, "-Infinity": -math.inf}
_BYTES_LIKE = (bytes, bytearray, memoryview)


# =============================================================================
# ENCODING
# =============================================================================


def encode(value: Any) -> str:
    """Encode a scalar value to its wire text.

    Raises:
        UnsupportedValueError: For raw bytes or a type with no wire form.
    """
    if isinstance(value, _BYTES_LIKE):
        raise UnsupportedValueError("Raw bytes bypass the value codec; use BytesCodec")
    # bool before int, datetime before date: both are subclasses
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, int):
        try:
            return format(value, "d")
        except ValueError as exc:
            # past sys.get_int_max_str_digits()
            raise UnsupportedValueError("Integer has too many digits to encode", cause=exc) from exc
    if isinstance(value, float):
        return _encode_float(value)
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, datetime):
        return _encode_datetime(value)
    if isinstance(value, date):
        return _encode_date(value)
    if isinstance(value, str):
        return str(value)
    raise UnsupportedValueError(f"Cannot encode value of type {type(value).__name__}")


def _encode_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return float.__repr__(value)


def _encode_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def _encode_datetime(value: datetime) -> str:
    offset = value.utcoffset()
    if offset is None and not (value.hour or value.minute or value.second or value.microsecond):
        return _encode_date(value)

    # seven fractional digits (100 ns ticks); Python stops at microseconds
    text = (
        f"{_encode_date(value)}T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f".{value.microsecond:06d}0"
    )
    if offset is not None:
        text += _encode_offset(offset)
    return text


def _encode_offset(offset: timedelta) -> str:
    sign = "-" if offset < timedelta(0) else "+"
    seconds = abs(int(offset.total_seconds()))
    hours, rest = divmod(seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}"
    if seconds:
        text += f":{seconds:02d}"
    return text


# =============================================================================
# DECODING
# =============================================================================


def decode(wire: str | bytes, target: type[T]) -> T:
    """Decode wire text (or its UTF-8 bytes) into ``target``.

    Raises:
        DecodeError: If the wire data is not a valid encoding of ``target``.
        UnsupportedValueError: If ``target`` is not a scalar type.
    """
    decoder = _DECODERS.get(target)
    if decoder is None:
        raise UnsupportedValueError(f"No wire decoding for type {getattr(target, '__name__', target)!r}")

    if isinstance(wire, _BYTES_LIKE):
        try:
            text = bytes(wire).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(bytes(wire), target, cause=exc) from exc
    else:
        text = wire

    try:
        return decoder(text)
    except DecodeError:
        raise
    except (ValueError, InvalidOperation, OverflowError) as exc:
        raise DecodeError(text, target, cause=exc) from exc


def _decode_bool(text: str) -> bool:
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise DecodeError(text, bool)


def _decode_int(text: str) -> int:
    if not _INT.fullmatch(text):
        raise DecodeError(text, int)
    return int(text)


def _decode_float(text: str) -> float:
    if text in _FLOAT_SPECIALS:
        return _FLOAT_SPECIALS[text]
    if not text or text != text.strip() or "_" in text:
        raise DecodeError(text, float)
    return float(text)


def _decode_decimal(text: str) -> Decimal:
    if not text or text != text.strip() or "_" in text:
        raise DecodeError(text, Decimal)
    return Decimal(text)


def _decode_date(text: str) -> date:
    match = _DATE.fullmatch(text)
    if match is None:
        raise DecodeError(text, date)
    return date(int(match["year"]), int(match["month"]), int(match["day"]))


def _decode_datetime(text: str) -> datetime:
    match = _DATE.fullmatch(text)
    if match is not None:
        return datetime(int(match["year"]), int(match["month"]), int(match["day"]))

    match = _DATETIME.fullmatch(text)
    if match is None:
        raise DecodeError(text, datetime)

    fraction = (match["fraction"] or "").ljust(7, "0")
    if fraction[6] != "0":
        raise DecodeError(text, datetime, f"Sub-microsecond precision in {text!r} cannot be represented")

    return datetime(
        int(match["year"]),
        int(match["month"]),
        int(match["day"]),
        int(match["hour"]),
        int(match["minute"]),
        int(match["second"]),
        int(fraction[:6]),
        tzinfo=_decode_offset(match["offset"]),
    )


def _decode_offset(text: str | None) -> timezone | None:
    if text is None:
        return None
    if text == "Z":
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    parts = [int(p) for p in text[1:].split(":")]
    hours, minutes = parts[0], parts[1]
    seconds = parts[2] if len(parts) > 2 else 0
    return timezone(sign * timedelta(hours=hours, minutes=minutes, seconds=seconds))


_DECODERS: dict[type, Callable[[str], Any]] = {
    bool: _decode_bool,
    int: _decode_int,
    float: _decode_float,
    Decimal: _decode_decimal,
    datetime: _decode_datetime,
    date: _decode_date,
    str: str,
}

SCALAR_TYPES: tuple[type, ...] = tuple(_DECODERS)


# =============================================================================
# CODEC STRATEGIES
# =============================================================================


class ValueCodec(Protocol[T]):
    """Encode/decode strategy handed to every collection adapter."""

    @property
    def target(self) -> type[T]: ...

    def encode(self, value: T) -> bytes: ...

    def decode(self, raw: bytes) -> T: ...


@dataclass(frozen=True)
class ScalarCodec(Generic[T]):
    """Strategy for one scalar type, going through :func:`encode`/:func:`decode`.

    Values must be instances of ``target``; ``float`` and ``Decimal`` also
    accept plain ints, converted to ``target`` first so that ``1`` and
    ``1.0`` share one wire form.
    """

    target: type[T]

    def __post_init__(self) -> None:
        if self.target not in _DECODERS:
            raise UnsupportedValueError(
                f"ScalarCodec does not support {getattr(self.target, '__name__', self.target)!r}"
            )

    def encode(self, value: T) -> bytes:
        if not self._accepts(value):
            raise UnsupportedValueError(
                f"Expected {self.target.__name__}, got {type(value).__name__}"
            )
        try:
            if isinstance(value, int) and self.target is not int:
                value = self.target(value)
            return encode(value).encode("utf-8")
        except UnicodeEncodeError as exc:
            raise UnsupportedValueError(f"Value {value!r} is not valid UTF-8 text", cause=exc) from exc
        except OverflowError as exc:
            # float() of an int beyond the double range
            raise UnsupportedValueError(
                f"{type(value).__name__} value is out of range for {self.target.__name__}", cause=exc
            ) from exc

    def decode(self, raw: bytes) -> T:
        return decode(raw, self.target)

    def _accepts(self, value: Any) -> bool:
        if isinstance(value, bool):
            return self.target is bool
        if self.target in (float, Decimal) and isinstance(value, int):
            return True
        if self.target is date:
            return isinstance(value, date) and not isinstance(value, datetime)
        return isinstance(value, self.target)


class BytesCodec:
    """Passthrough strategy for raw byte payloads."""

    target = bytes

    def encode(self, value: bytes) -> bytes:
        if not isinstance(value, _BYTES_LIKE):
            raise UnsupportedValueError(f"Expected bytes, got {type(value).__name__}")
        return bytes(value)

    def decode(self, raw: bytes) -> bytes:
        return bytes(raw)

    def __repr__(self) -> str:
        return "BytesCodec()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, BytesCodec)

    def __hash__(self) -> int:
        return hash(BytesCodec)


def codec_for(value_type: type | ValueCodec[Any]) -> ValueCodec[Any]:
    """Return the codec strategy for a Python type.

    ``bytes`` (and ``bytearray``) get :class:`BytesCodec`; scalar types get a
    :class:`ScalarCodec`. A codec instance is returned unchanged.

    Raises:
        UnsupportedValueError: For any other type.
    """
    if isinstance(value_type, (ScalarCodec, BytesCodec)):
        return value_type
    if value_type in (bytes, bytearray):
        return BytesCodec()
    return ScalarCodec(value_type)


__all__ = [
    "SCALAR_TYPES",
    "encode",
    "decode",
    "ValueCodec",
    "ScalarCodec",
    "BytesCodec",
    "codec_for",
]
