"""
Human-readable order dumps for CLI and debugging output.
"""

from enum import Enum
from typing import Any, List
import logging

logger = logging.getLogger(__name__)

ORDER_CONFIGURATION_KEY = {
    "BRACKET": "trigger_bracket_gtc",
    "LIMIT": "limit_limit_gtc",
    "MARKET": "market_market_ioc",
    "STOP_LIMIT": "stop_limit_stop_limit_gtc",
}

ORDER_FIELDS = (
    "order_id",
    "product_id",
    "side",
    "status",
    "completion_percentage",
    "filled_size",
    "average_filled_price",
    "filled_value",
    "total_fees",
    "total_value_after_fees",
    "product_type",
    "last_fill_time",
    "order_type",
)

ORDER_CONFIGURATION_FIELDS = {
    "BRACKET": ("base_size", "limit_price", "stop_trigger_price"),
    "LIMIT": ("base_size", "limit_price", "post_only"),
    "MARKET": ("base_size",),
    "STOP_LIMIT": ("base_size", "limit_price", "stop_direction", "stop_price"),
}

ATTACHED_ORDER_CONFIGURATION_FIELDS = ("limit_price", "stop_trigger_price")


def _field_line(key: str, value: Any, indent: int) -> List[str]:
    if value is None:
        return []
    if isinstance(value, Enum):
        value = value.value
    elif isinstance(value, bool):
        value = str(value).lower()
    return [f"{' ' * indent}{key}: {value}"]


def format_order(order) -> List[str]:
    """
    Render an order as indented lines.

    Args:
        order: Historical order model

    Returns:
        Lines: top-level fields, then the type-specific configuration and,
        for limit orders, the attached take-profit/stop-loss bracket
    """
    lines = ["Order:"]
    for field in ORDER_FIELDS:
        lines += _field_line(field, getattr(order, field, None), 2)

    order_type = order.order_type
    configuration_key = ORDER_CONFIGURATION_KEY[order_type]
    configuration = getattr(order.order_configuration, configuration_key, None)

    lines.append("  order_configuration:")
    lines.append(f"    {configuration_key}:")

    if configuration is None:
        return lines

    for field in ORDER_CONFIGURATION_FIELDS[order_type]:
        lines += _field_line(field, getattr(configuration, field, None), 6)

    if order_type != "LIMIT":
        return lines

    attached = getattr(order, "attached_order_configuration", None)
    if attached is None:
        return lines

    lines.append("  attached_order_configuration:")
    lines.append("    trigger_bracket_gtc:")
    for field in ATTACHED_ORDER_CONFIGURATION_FIELDS:
        lines += _field_line(field, getattr(attached.trigger_bracket_gtc, field, None), 6)

    return lines


def log_order(order, log: logging.Logger = logger) -> None:
    """Log an order at INFO, one line per field."""
    for line in format_order(order):
        log.info(line)
