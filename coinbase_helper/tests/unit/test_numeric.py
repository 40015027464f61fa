"""Tests for increment parsing and quantization."""

import math
from decimal import Decimal

import pytest

from coinbase_helper.exceptions import InvalidIncrementError, InvalidValueError
from coinbase_helper.utils.numeric import Increment, parse_increment, quantize


class TestParseIncrement:
    """Strict increment grammar."""

    @pytest.mark.parametrize("increment,expected", [
        ("1", Increment(0, 1)),
        ("0.1", Increment(1, 1)),
        ("0.01", Increment(2, 1)),
        ("0.00000001", Increment(8, 1)),
        ("0.0100", Increment(2, 1)),
        ("0.10", Increment(1, 1)),
    ])
    def test_valid_increments(self, increment, expected):
        assert parse_increment(increment) == expected

    @pytest.mark.parametrize("increment", [
        "", "  ", " 0.01", "0.01 ", "-0.01", "+1", "10", "2", "0", "01",
        "00.010", "0.", ".1", "0.05", "2.5", "0.00120", "1.0", "0.000", "abc",
    ])
    def test_invalid_increments(self, increment):
        with pytest.raises(InvalidIncrementError):
            parse_increment(increment)

    def test_non_string_increment(self):
        with pytest.raises(InvalidIncrementError):
            parse_increment(0.01)

    def test_error_carries_increment(self):
        with pytest.raises(InvalidIncrementError) as exc_info:
            parse_increment("0.05")
        assert exc_info.value.increment == "0.05"


class TestQuantize:
    """Floor-to-increment behavior."""

    @pytest.mark.parametrize("increment,value,expected", [
        ("0.01", 123.47, "123.47"),
        ("0.01", 123.47999, "123.47"),
        ("1", 3.7, "3"),
        ("0.00000001", 0.1234, "0.12340000"),
        ("0.0100", 1.237, "1.23"),
        ("0.01", 0.3, "0.30"),
        ("0.01", 1.229999999999, "1.22"),
        ("0.01", 0, "0.00"),
        ("1", 0, "0"),
        ("0.1", 1.15, "1.1"),
        ("0.01", 1.005, "1.00"),
        ("0.01", 4.35, "4.35"),
        ("0.01", 100, "100.00"),
    ])
    def test_documented_examples(self, increment, value, expected):
        assert quantize(increment, value) == expected

    def test_accepts_decimal(self):
        assert quantize("0.01", Decimal("100.505")) == "100.50"

    def test_never_exceeds_input(self):
        for raw in ("0.07", "12.3456", "99999.999999", "0.00000001", "7"):
            value = Decimal(raw)
            for increment in ("1", "0.1", "0.01", "0.00000001"):
                result = Decimal(quantize(increment, value))
                assert result <= value
                assert value - result < Decimal(increment)

    def test_exact_decimal_places(self):
        assert quantize("0.00000001", 5) == "5.00000000"
        assert quantize("0.001", 2.5) == "2.500"

    def test_idempotent(self):
        once = quantize("0.01", 123.4567)
        assert quantize("0.01", Decimal(once)) == once
        assert quantize("0.01", float(once)) == once

    def test_large_value(self):
        assert quantize("0.01", Decimal("123456789012345678901.239")) == "123456789012345678901.23"

    @pytest.mark.parametrize("value", [-0.01, -1, Decimal("-5")])
    def test_rejects_negative(self, value):
        with pytest.raises(InvalidValueError):
            quantize("0.01", value)

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan, Decimal("NaN"), Decimal("Infinity")])
    def test_rejects_non_finite(self, value):
        with pytest.raises(InvalidValueError):
            quantize("0.01", value)

    @pytest.mark.parametrize("value", ["1.5", None, True, [1]])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(InvalidValueError):
            quantize("0.01", value)

    def test_invalid_increment_propagates(self):
        with pytest.raises(InvalidIncrementError):
            quantize("0.05", 1.0)
