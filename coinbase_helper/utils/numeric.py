"""
Increment quantization with Decimal precision.

Exchange sizes and prices must be multiples of a product's increment
("base_increment", "price_increment"). Values are floored, never rounded up,
so an order can never exceed what the exchange accepts.
"""

import math
import re
from decimal import Decimal, ROUND_FLOOR, localcontext
from typing import Any, NamedTuple, Union
import logging

from ..exceptions import InvalidIncrementError, InvalidValueError

logger = logging.getLogger(__name__)

Number = Union[int, float, Decimal]

_WHOLE_INCREMENT = "1"
_INTEGER_RE = re.compile(r"[1-9][0-9]*")
_DECIMAL_RE = re.compile(r"0\.([0-9]+)")
_POWER_OF_TEN_RE = re.compile(r"0*1")


class Increment(NamedTuple):
    """Parsed increment: digits after the point and units per step."""
    decimal_places: int
    step_units: int


def parse_increment(increment: str) -> Increment:
    """
    Parse an increment string with strict rules suitable for crypto ticks.

    Allowed forms are the literal "1" and power-of-ten decimals such as
    "0.1", "0.01" or "0.00000001". Trailing zeros are ignored ("0.0100" is
    "0.01").

    Args:
        increment: Increment string as returned by the products endpoint

    Returns:
        Increment with decimal places and step units

    Raises:
        InvalidIncrementError: For any other form ("10", "2.5", "0.05",
            "00.010", negatives, padding, empty)

    Examples:
        >>> parse_increment("0.01")
        Increment(decimal_places=2, step_units=1)
        >>> parse_increment("1")
        Increment(decimal_places=0, step_units=1)
    """
    if not isinstance(increment, str) or increment.strip() == "":
        raise InvalidIncrementError(
            "Invalid increment: expected non-empty string.", increment=increment
        )

    if increment == _WHOLE_INCREMENT:
        return Increment(decimal_places=0, step_units=1)

    if _INTEGER_RE.fullmatch(increment):
        raise InvalidIncrementError(
            'Invalid increment: integer increment must be "1" or a power-of-ten decimal.',
            increment=increment
        )

    match = _DECIMAL_RE.fullmatch(increment)
    if not match:
        raise InvalidIncrementError(
            "Invalid increment: must be integer or power-of-ten decimal.",
            increment=increment
        )

    fraction = match.group(1).rstrip("0")
    if not _POWER_OF_TEN_RE.fullmatch(fraction):
        raise InvalidIncrementError(
            "Invalid increment: only power-of-ten decimals are allowed.",
            increment=increment
        )

    return Increment(decimal_places=len(fraction), step_units=1)


def _to_quantizable(value: Any) -> Decimal:
    """Convert value to a finite, non-negative Decimal."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise InvalidValueError(
            f"Invalid value: expected a number, got {type(value).__name__}.", value=value
        )

    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidValueError("Invalid value: expected a finite number.", value=value)
    if isinstance(value, Decimal) and not value.is_finite():
        raise InvalidValueError("Invalid value: expected a finite number.", value=value)

    if value < 0:
        raise InvalidValueError(
            "Invalid value: negative values are not supported for order increments.",
            value=value
        )

    # Shortest repr of a float, so 1.23 is 1.23 and not 1.229999...
    return value if isinstance(value, Decimal) else Decimal(str(value))


def quantize(increment: str, value: Number) -> str:
    """
    Floor a value DOWN to the nearest valid multiple of `increment`.

    Args:
        increment: "1" or a power-of-ten decimal string
        value: Non-negative finite number

    Returns:
        Fixed-point string with exactly the increment's decimal places

    Raises:
        InvalidIncrementError: If increment is malformed
        InvalidValueError: If value is negative, non-finite or not a number

    Examples:
        >>> quantize("0.01", 123.47999)
        '123.47'
        >>> quantize("1", 3.7)
        '3'
        >>> quantize("0.00000001", 0.1234)
        '0.12340000'
    """
    amount = _to_quantizable(value)
    decimal_places, step_units = parse_increment(increment)

    _, digits, exponent = amount.as_tuple()
    with localcontext() as ctx:
        # Wide enough that scaling never rounds
        ctx.prec = max(ctx.prec, len(digits) + abs(exponent) + decimal_places + 2)

        scaled = amount.scaleb(decimal_places)
        units = int(scaled.to_integral_value(rounding=ROUND_FLOOR))
        units = (units // step_units) * step_units

        floored = Decimal(units).scaleb(-decimal_places)
        return f"{floored:.{decimal_places}f}"
