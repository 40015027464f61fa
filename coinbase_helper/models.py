"""
Type definitions for the Coinbase helper client.

Uses Pydantic for runtime validation of every API response. Numeric fields
stay as the exchange's numeric strings so cached payloads round-trip exactly;
use utils.numeric to turn them into Decimals or quantized values.
"""

import re
import uuid
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from decimal import Decimal
from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    model_validator,
)


# Primitives

# Only plain numeric strings like "123", "-0.5", "3.14"
NumericString = Annotated[str, StringConstraints(pattern=r"^-?[0-9]+(\.[0-9]+)?$")]

PositiveNumericString = Annotated[
    str,
    StringConstraints(pattern=r"^(?:[1-9][0-9]*(?:\.[0-9]+)?|0\.[0-9]*[1-9][0-9]*)$")
]


def _check_percent(value: str) -> str:
    if not Decimal(0) <= Decimal(value) <= Decimal(100):
        raise ValueError("Must be a numeric string between 0 and 100")
    return value


Percent = Annotated[NumericString, AfterValidator(_check_percent)]

PRODUCT_ID_PATTERN = re.compile(r"^[A-Z]+-USD$")

ProductId = Annotated[str, StringConstraints(pattern=PRODUCT_ID_PATTERN.pattern)]


def _check_uuid(value: str) -> str:
    try:
        uuid.UUID(value)
    except ValueError as e:
        raise ValueError(f"Invalid UUID: {value}") from e
    return value


Uuid = Annotated[str, AfterValidator(_check_uuid)]

OrderId = Uuid


# Enums

class AccountType(str, Enum):
    """Account type."""
    CRYPTO = "ACCOUNT_TYPE_CRYPTO"
    FIAT = "ACCOUNT_TYPE_FIAT"


class Side(str, Enum):
    """Order side."""
    BUY = "BUY"
    SELL = "SELL"


class OrderStatus(str, Enum):
    """Order status values from the historical orders endpoint."""
    PENDING = "PENDING"
    OPEN = "OPEN"
    FILLED = "FILLED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    FAILED = "FAILED"
    UNKNOWN_ORDER_STATUS = "UNKNOWN_ORDER_STATUS"
    QUEUED = "QUEUED"
    CANCEL_QUEUED = "CANCEL_QUEUED"


TERMINAL_ORDER_STATUSES = frozenset({
    OrderStatus.FILLED,
    OrderStatus.CANCELLED,
    OrderStatus.EXPIRED,
    OrderStatus.FAILED,
})


class OrderType(str, Enum):
    """Order type."""
    UNKNOWN_ORDER_TYPE = "UNKNOWN_ORDER_TYPE"
    MARKET = "MARKET"
    LIMIT = "LIMIT"
    STOP = "STOP"
    STOP_LIMIT = "STOP_LIMIT"
    BRACKET = "BRACKET"


class OrderPlacementSource(str, Enum):
    """Where an order was placed from."""
    UNKNOWN = "UNKNOWN_PLACEMENT_SOURCE"
    SIMPLE = "RETAIL_SIMPLE"
    ADVANCED = "RETAIL_ADVANCED"


class StopDirection(str, Enum):
    """Stop trigger direction."""
    STOP_UP = "STOP_DIRECTION_STOP_UP"
    STOP_DOWN = "STOP_DIRECTION_STOP_DOWN"


class ProductType(str, Enum):
    """Product type."""
    SPOT = "SPOT"


class _Loose(BaseModel):
    """Validates known fields, keeps unknown ones."""
    model_config = ConfigDict(extra="allow")


# Credentials

class Credentials(BaseModel):
    """Coinbase CDP API key file contents."""
    name: str
    private_key: str = Field(..., alias="privateKey", repr=False)

    model_config = ConfigDict(populate_by_name=True)


# Order configurations

class LimitLimitGtc(BaseModel):
    base_size: NumericString
    limit_price: NumericString
    post_only: bool = True


class LimitOrderConfiguration(_Loose):
    """Good-til-cancelled limit order."""
    limit_limit_gtc: LimitLimitGtc


class MarketMarketIoc(BaseModel):
    base_size: Optional[NumericString] = None
    quote_size: Optional[NumericString] = None

    @model_validator(mode="after")
    def require_size(self) -> "MarketMarketIoc":
        """Market orders need a base or quote size."""
        if self.base_size is None and self.quote_size is None:
            raise ValueError("Market order requires base_size or quote_size")
        return self


class MarketOrderConfiguration(_Loose):
    """Immediate-or-cancel market order."""
    market_market_ioc: MarketMarketIoc


class TriggerBracketGtc(BaseModel):
    base_size: NumericString
    limit_price: NumericString
    stop_trigger_price: NumericString


class BracketOrderConfiguration(_Loose):
    """Good-til-cancelled bracket order."""
    trigger_bracket_gtc: TriggerBracketGtc


class AttachedTriggerBracketGtc(BaseModel):
    limit_price: NumericString
    stop_trigger_price: NumericString


class TpSlAttachedOrderConfiguration(_Loose):
    """Take-profit / stop-loss attached to a limit order."""
    trigger_bracket_gtc: AttachedTriggerBracketGtc


class StopLimitStopLimitGtc(BaseModel):
    base_size: NumericString
    limit_price: NumericString
    stop_direction: str
    stop_price: NumericString


class StopLimitOrderConfiguration(_Loose):
    """Good-til-cancelled stop-limit order."""
    stop_limit_stop_limit_gtc: StopLimitStopLimitGtc


OrderConfiguration = Union[
    LimitOrderConfiguration,
    MarketOrderConfiguration,
    BracketOrderConfiguration,
    StopLimitOrderConfiguration,
]


# Orders (discriminated by order_type)

class OrderBase(_Loose):
    """Fields shared by every historical order."""
    order_id: OrderId
    product_id: str
    side: Side
    status: str
    completion_percentage: str
    filled_size: str
    average_filled_price: str
    filled_value: str
    total_fees: str
    total_value_after_fees: str
    product_type: str
    last_fill_time: Optional[str]


class BracketOrder(OrderBase):
    order_type: Literal["BRACKET"]
    order_configuration: BracketOrderConfiguration


class LimitOrder(OrderBase):
    order_type: Literal["LIMIT"]
    order_configuration: LimitOrderConfiguration
    attached_order_configuration: Optional[TpSlAttachedOrderConfiguration] = None


class StopLimitOrder(OrderBase):
    order_type: Literal["STOP_LIMIT"]
    order_configuration: StopLimitOrderConfiguration


class MarketOrder(OrderBase):
    order_type: Literal["MARKET"]
    order_configuration: MarketOrderConfiguration


Order = Annotated[
    Union[BracketOrder, LimitOrder, StopLimitOrder, MarketOrder],
    Field(discriminator="order_type"),
]


# Request Models

class OrderRequest(BaseModel):
    """Order placement request body."""
    model_config = ConfigDict(extra="forbid")

    client_order_id: OrderId
    product_id: str
    side: Side
    order_configuration: OrderConfiguration
    attached_order_configuration: Optional[TpSlAttachedOrderConfiguration] = None

    def to_payload(self) -> dict[str, Any]:
        """JSON body for POST /orders."""
        return self.model_dump(mode="json", exclude_none=True)


# Response Models

class Money(_Loose):
    value: NumericString


class Account(_Loose):
    """Brokerage account (one per currency)."""
    currency: str
    hold: Money
    available_balance: Money
    type: AccountType
    uuid: Uuid


class PriceLevel(_Loose):
    price: NumericString


class PriceBook(_Loose):
    """Best bid/ask for one product."""
    asks: list[PriceLevel]
    bids: list[PriceLevel]


class FeeTier(_Loose):
    pricing_tier: str
    taker_fee_rate: NumericString
    maker_fee_rate: NumericString


class BatchCancelResult(_Loose):
    success: bool
    failure_reason: str
    order_id: OrderId


class Product(_Loose):
    """Trading pair metadata (increments, last price)."""
    product_id: str
    price: NumericString
    base_increment: NumericString
    price_increment: NumericString
    product_type: ProductType


class SuccessResponse(_Loose):
    order_id: OrderId


class ErrorResponse(_Loose):
    preview_failure_reason: str


class AccountsResponse(_Loose):
    accounts: list[Account]


class BestBidAskResponse(_Loose):
    pricebooks: list[PriceBook]


class OrderResponse(_Loose):
    """Order placement response."""
    success: bool
    success_response: Optional[SuccessResponse] = None
    error_response: Optional[ErrorResponse] = None


class OrderHistoricalResponse(_Loose):
    order: Order


class OrdersHistoricalBatchResponse(_Loose):
    """One page of historical orders."""
    orders: list[Order]
    cursor: Optional[str] = None
    has_next: bool = False


class OrdersBatchCancelResponse(BaseModel):
    results: list[BatchCancelResult]


class TickerResponse(_Loose):
    """Recent market trades with best bid/ask."""
    trades: list[PriceLevel]
    best_bid: NumericString
    best_ask: NumericString


class TransactionSummary(_Loose):
    """Fee tier and 30-day volume summary."""
    fee_tier: FeeTier
    total_balance: NumericString
    total_fees: float
    total_volume: float


class CurrencyBalance(BaseModel):
    """Available, held and quantized total balance of one currency."""
    available: str
    hold: str
    total: str
