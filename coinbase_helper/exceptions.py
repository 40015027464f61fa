"""
Custom exceptions for the Coinbase helper client.

Provides typed exceptions so callers can tell permanent failures
(validation, configuration) apart from transient transport failures.
"""

from typing import Optional, Any


class HelperError(Exception):
    """Base exception for all helper errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Validation exceptions
class ValidationError(HelperError):
    """Input or response validation failed."""
    pass


class InvalidIncrementError(ValidationError):
    """Increment string is not "1" or a power-of-ten decimal."""

    def __init__(self, message: str, increment: Optional[str] = None):
        super().__init__(message, {"increment": increment})
        self.increment = increment


class InvalidValueError(ValidationError):
    """Value cannot be quantized (negative, non-finite or not a number)."""

    def __init__(self, message: str, value: Any = None):
        super().__init__(message, {"value": value})
        self.value = value


class SchemaValidationError(ValidationError):
    """Response body does not match the expected shape."""

    def __init__(self, message: str, target: Optional[str] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, {"target": target})
        self.target = target
        self.cause = cause


# Transport exceptions
class APIError(HelperError):
    """API request failed (network or server side)."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 response: Any = None):
        super().__init__(message, {"status_code": status_code, "response": response})
        self.status_code = status_code
        self.response = response


class TimeoutError(APIError):
    """Request timed out."""
    pass


class ExhaustedRetriesError(APIError):
    """All retry attempts failed."""

    def __init__(self, message: str, target: str, attempts: int,
                 last_error: Optional[Exception] = None):
        status_code = getattr(last_error, "status_code", None)
        response = getattr(last_error, "response", None)
        super().__init__(message, status_code=status_code, response=response)
        self.details.update({"target": target, "attempts": attempts})
        self.target = target
        self.attempts = attempts
        self.last_error = last_error


# Configuration exceptions
class ConfigurationError(HelperError):
    """Environment or settings are invalid."""
    pass


class MissingCredentialsError(ConfigurationError):
    """Credentials file is missing, unreadable or malformed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, {"path": path})
        self.path = path


class MissingSigningKeysError(ConfigurationError):
    """Signing keys are not loaded."""
    pass


# Cache exceptions
class CacheError(HelperError):
    """Disk cache entry unusable."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, {"path": path})
        self.path = path


class CacheMissError(CacheError):
    """Cache entry does not exist."""
    pass


class CacheCorruptError(CacheError):
    """Cache entry exists but cannot be parsed."""
    pass


# Trading-specific exceptions
class TradingError(HelperError):
    """Base exception for trading operations."""
    pass


class OrderRejectedError(TradingError):
    """Order was rejected by exchange."""

    def __init__(self, message: str, order_id: Optional[str] = None,
                 reason: Optional[str] = None):
        super().__init__(message, {"order_id": order_id, "reason": reason})
        self.order_id = order_id
        self.reason = reason


class OrderNotFoundError(TradingError):
    """Order ID not found."""

    def __init__(self, message: str, order_id: Optional[str] = None):
        super().__init__(message, {"order_id": order_id})
        self.order_id = order_id


class AccountNotFoundError(TradingError):
    """No account for the requested currency."""

    def __init__(self, message: str, currency: Optional[str] = None):
        super().__init__(message, {"currency": currency})
        self.currency = currency


# Market data exceptions
class MarketDataError(HelperError):
    """Market data unavailable or invalid."""
    pass


class PriceUnavailableError(MarketDataError):
    """Price data not available."""

    def __init__(self, message: str, product_id: Optional[str] = None):
        super().__init__(message, {"product_id": product_id})
        self.product_id = product_id
