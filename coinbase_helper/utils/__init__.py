"""Utility modules for Coinbase helper client."""

from .numeric import Increment, parse_increment, quantize
from .retry import RetryDecision, RetryState, RetryStrategy
from .cache import DiskCache, TTLCache
from .order_log import format_order, log_order

__all__ = [
    "Increment",
    "parse_increment",
    "quantize",
    "RetryDecision",
    "RetryState",
    "RetryStrategy",
    "DiskCache",
    "TTLCache",
    "format_order",
    "log_order",
]
