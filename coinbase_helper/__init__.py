"""
Coinbase Helper Client Library

Typed, thread-safe client for the Coinbase Advanced Trade brokerage API:
signed requests, schema-validated responses with retry, disk-cached product
metadata and increment-exact order sizing.
"""

from .client import CoinbaseHelperClient
from .config import HelperSettings, load_settings
from .models import (
    Side,
    OrderType,
    OrderStatus,
    OrderPlacementSource,
    StopDirection,
    ProductType,
    OrderRequest,
    OrderResponse,
    Order,
    Account,
    Product,
    PriceBook,
    TransactionSummary,
    CurrencyBalance,
)
from .exceptions import (
    HelperError,
    ValidationError,
    InvalidIncrementError,
    InvalidValueError,
    SchemaValidationError,
    APIError,
    TimeoutError,
    ExhaustedRetriesError,
    ConfigurationError,
    MissingCredentialsError,
    MissingSigningKeysError,
    CacheError,
    CacheMissError,
    CacheCorruptError,
    TradingError,
    OrderRejectedError,
    OrderNotFoundError,
    AccountNotFoundError,
    MarketDataError,
    PriceUnavailableError,
)
from .logging_config import setup_logging
from .utils.numeric import parse_increment, quantize

__version__ = "1.0.0"

__all__ = [
    # Main client
    "CoinbaseHelperClient",
    "HelperSettings",
    "load_settings",
    "setup_logging",

    # Quantization
    "parse_increment",
    "quantize",

    # Types
    "Side",
    "OrderType",
    "OrderStatus",
    "OrderPlacementSource",
    "StopDirection",
    "ProductType",
    "OrderRequest",
    "OrderResponse",
    "Order",
    "Account",
    "Product",
    "PriceBook",
    "TransactionSummary",
    "CurrencyBalance",

    # Exceptions
    "HelperError",
    "ValidationError",
    "InvalidIncrementError",
    "InvalidValueError",
    "SchemaValidationError",
    "APIError",
    "TimeoutError",
    "ExhaustedRetriesError",
    "ConfigurationError",
    "MissingCredentialsError",
    "MissingSigningKeysError",
    "CacheError",
    "CacheMissError",
    "CacheCorruptError",
    "TradingError",
    "OrderRejectedError",
    "OrderNotFoundError",
    "AccountNotFoundError",
    "MarketDataError",
    "PriceUnavailableError",
]
