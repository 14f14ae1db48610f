"""Tests for kindcache.codec: wire encoding of scalar values.

Covers:
- Round-trip law for every scalar type, including width boundaries
- Exact wire text for dates, datetimes, decimals, and booleans
- Decode failures surface as DecodeError (a ValueError)
- ScalarCodec / BytesCodec strategies and codec_for()
"""

from __future__ import annotations

import math
import sys
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from kindcache.codec import SCALAR_TYPES, BytesCodec, ScalarCodec, codec_for, decode, encode
from kindcache.errors import DecodeError, UnsupportedValueError

INTEGER_BOUNDARIES = [
    -(2**7), 2**7 - 1, 2**8 - 1,
    -(2**15), 2**15 - 1, 2**16 - 1,
    -(2**31), 2**31 - 1, 2**32 - 1,
    -(2**63), 2**63 - 1, 2**64 - 1,
    0,
]


class TestRoundTrip:
    @pytest.mark.parametrize("value", INTEGER_BOUNDARIES)
    def test_integer_boundaries(self, value):
        assert decode(encode(value), int) == value

    @pytest.mark.parametrize(
        "value",
        [78366020 / 6, 0.1, 1 / 3, 5e-324, 1.7976931348623157e308, -2.5e-10, 123456789.12345679],
    )
    def test_float_is_bit_exact(self, value):
        decoded = decode(encode(value), float)
        assert decoded == value
        assert decoded.hex() == value.hex()

    def test_negative_zero_keeps_sign(self):
        decoded = decode(encode(-0.0), float)
        assert math.copysign(1.0, decoded) == -1.0

    def test_non_finite_floats(self):
        assert encode(math.inf) == "Infinity"
        assert encode(-math.inf) == "-Infinity"
        assert encode(math.nan) == "NaN"
        assert decode("Infinity", float) == math.inf
        assert decode("-Infinity", float) == -math.inf
        assert math.isnan(decode("NaN", float))

    @pytest.mark.parametrize(
        "value",
        ["0.000000000046", "-12345.678900", "79228162514264337593543950335", "1E+3", "0"],
    )
    def test_decimal_is_exact(self, value):
        original = Decimal(value)
        assert decode(encode(original), Decimal) == original

    @pytest.mark.parametrize(
        "value",
        [
            datetime(2024, 3, 1),
            datetime(2024, 3, 1, 13, 45, 10),
            datetime(2024, 3, 1, 13, 45, 10, 123456),
            datetime(1, 1, 1, 0, 0, 0, 1),
            datetime(9999, 12, 31, 23, 59, 59, 999999),
            datetime(2024, 3, 1, 0, 0, tzinfo=timezone.utc),
            datetime(2024, 3, 1, 8, 30, 0, 250000, tzinfo=timezone(timedelta(hours=-5, minutes=-30))),
        ],
    )
    def test_datetime(self, value):
        decoded = decode(encode(value), datetime)
        assert decoded == value
        assert decoded.utcoffset() == value.utcoffset()

    @pytest.mark.parametrize("value", [True, False, "", "héllo wörld", "line\nbreak", date(2000, 2, 29)])
    def test_other_scalars(self, value):
        assert decode(encode(value), type(value)) == value


class TestWireText:
    def test_midnight_datetime_is_bare_date(self):
        assert encode(datetime(2024, 3, 1)) == "2024-03-01"

    def test_datetime_with_time_uses_seven_fraction_digits(self):
        assert encode(datetime(2024, 3, 1, 13, 45, 10, 123456)) == "2024-03-01T13:45:10.1234560"

    def test_aware_datetime_carries_offset(self):
        value = datetime(2024, 3, 1, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert encode(value) == "2024-03-01T00:00:00.0000000+02:00"

    def test_early_years_are_zero_padded(self):
        assert encode(date(33, 4, 5)) == "0033-04-05"

    def test_decimal_never_uses_exponent(self):
        assert encode(Decimal("0.000000000046")) == "0.000000000046"
        assert encode(Decimal("4.6E-11")) == "0.000000000046"

    def test_booleans(self):
        assert encode(True) == "True"
        assert encode(False) == "False"

    def test_integers(self):
        assert encode(-(2**63)) == "-9223372036854775808"

    def test_float_full_precision(self):
        assert float(encode(78366020 / 6)) == 78366020 / 6


class TestDecodeAcceptance:
    def test_datetime_accepts_short_fraction(self):
        assert decode("2024-03-01T13:45:10.5", datetime) == datetime(2024, 3, 1, 13, 45, 10, 500000)

    def test_datetime_accepts_zulu(self):
        assert decode("2024-03-01T13:45:10Z", datetime) == datetime(2024, 3, 1, 13, 45, 10, tzinfo=timezone.utc)

    def test_datetime_from_bare_date(self):
        assert decode("2024-03-01", datetime) == datetime(2024, 3, 1)

    def test_bool_is_case_insensitive(self):
        assert decode("true", bool) is True
        assert decode("FALSE", bool) is False

    def test_int_with_plus_sign(self):
        assert decode("+5", int) == 5

    def test_bytes_input_is_utf8(self):
        assert decode("héllo".encode("utf-8"), str) == "héllo"


class TestDecodeFailures:
    @pytest.mark.parametrize(
        ("wire", "target"),
        [
            ("abc", int),
            (" 12", int),
            ("1_000", int),
            ("12.5", int),
            ("", float),
            ("1_0.5", float),
            ("one", Decimal),
            ("yes", bool),
            ("2024-13-01", date),
            ("2024-03-01T25:00:00", datetime),
            ("01/03/2024", datetime),
            ("2024-03-01T13:45:10.1234567", datetime),
            ("2024-03-01T13:45:10+25:00", datetime),
            ("2024-03-01T13:45:10", date),
        ],
    )
    def test_malformed_wire_raises(self, wire, target):
        with pytest.raises(DecodeError) as excinfo:
            decode(wire, target)
        assert excinfo.value.target is target

    def test_decode_error_is_value_error(self):
        with pytest.raises(ValueError):
            decode("not-a-number", int)

    def test_invalid_utf8(self):
        with pytest.raises(DecodeError):
            decode(b"\xff\xfe", str)

    def test_decode_error_keeps_cause(self):
        with pytest.raises(DecodeError) as excinfo:
            decode("nope", Decimal)
        assert excinfo.value.cause is not None
        assert excinfo.value.to_dict()["category"] == "PARSE"


class TestEncodeFailures:
    @pytest.mark.parametrize("value", [b"raw", bytearray(b"raw"), [1, 2], {"a": 1}, None, object()])
    def test_unsupported_values(self, value):
        with pytest.raises(UnsupportedValueError):
            encode(value)

    def test_unsupported_value_is_type_error(self):
        with pytest.raises(TypeError):
            encode(b"raw")

    def test_unsupported_target(self):
        with pytest.raises(UnsupportedValueError):
            decode("1", list)


class TestScalarCodec:
    def test_encodes_to_utf8_bytes(self):
        assert ScalarCodec(str).encode("ü") == "ü".encode("utf-8")
        assert ScalarCodec(int).decode(b"42") == 42

    def test_rejects_wrong_type(self):
        with pytest.raises(UnsupportedValueError):
            ScalarCodec(int).encode("42")

    def test_bool_is_not_an_int(self):
        with pytest.raises(UnsupportedValueError):
            ScalarCodec(int).encode(True)

    def test_float_accepts_int(self):
        codec = ScalarCodec(float)
        assert codec.decode(codec.encode(3)) == 3.0

    def test_int_shares_wire_form_with_equal_float(self):
        codec = ScalarCodec(float)
        assert codec.encode(1) == codec.encode(1.0) == b"1.0"
        assert codec.encode(-7) == codec.encode(-7.0)

    def test_int_shares_wire_form_with_equal_decimal(self):
        codec = ScalarCodec(Decimal)
        assert codec.encode(1) == codec.encode(Decimal(1)) == b"1"
        assert codec.encode(10**30) == codec.encode(Decimal(10**30))

    def test_int_beyond_float_range(self):
        with pytest.raises(UnsupportedValueError) as excinfo:
            ScalarCodec(float).encode(10**400)
        assert isinstance(excinfo.value.cause, OverflowError)

    @pytest.mark.skipif(
        not getattr(sys, "get_int_max_str_digits", lambda: 0)(),
        reason="interpreter has no int digit limit",
    )
    def test_int_past_digit_limit(self):
        huge = 10 ** (sys.get_int_max_str_digits() + 10)
        with pytest.raises(UnsupportedValueError) as excinfo:
            ScalarCodec(int).encode(huge)
        assert isinstance(excinfo.value.cause, ValueError)
        with pytest.raises(UnsupportedValueError):
            encode(huge)

    def test_date_rejects_datetime(self):
        with pytest.raises(UnsupportedValueError):
            ScalarCodec(date).encode(datetime(2024, 1, 1, 12))

    def test_unsupported_target(self):
        with pytest.raises(UnsupportedValueError):
            ScalarCodec(list)

    def test_rejects_lone_surrogate(self):
        with pytest.raises(UnsupportedValueError):
            ScalarCodec(str).encode("\ud800")

    def test_codecs_are_hashable_and_comparable(self):
        assert ScalarCodec(int) == ScalarCodec(int)
        assert len({ScalarCodec(int), ScalarCodec(int), BytesCodec(), BytesCodec()}) == 2


class TestBytesCodec:
    def test_passthrough(self):
        codec = BytesCodec()
        payload = bytes([59, 58, 57, 0, 255])
        assert codec.encode(payload) == payload
        assert codec.decode(payload) == payload

    def test_accepts_bytes_like(self):
        assert BytesCodec().encode(bytearray(b"ab")) == b"ab"
        assert BytesCodec().encode(memoryview(b"ab")) == b"ab"

    def test_rejects_text(self):
        with pytest.raises(UnsupportedValueError):
            BytesCodec().encode("text")


class TestCodecFor:
    def test_bytes_gets_passthrough(self):
        assert isinstance(codec_for(bytes), BytesCodec)

    @pytest.mark.parametrize("value_type", SCALAR_TYPES)
    def test_scalars_get_scalar_codec(self, value_type):
        codec = codec_for(value_type)
        assert isinstance(codec, ScalarCodec)
        assert codec.target is value_type

    def test_codec_instance_is_returned_unchanged(self):
        codec = ScalarCodec(Decimal)
        assert codec_for(codec) is codec

    def test_unknown_type(self):
        with pytest.raises(UnsupportedValueError):
            codec_for(dict)
