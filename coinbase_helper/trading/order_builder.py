"""
Order request builders.

Each builder returns a validated OrderRequest with a fresh client_order_id.
Sizes and prices are exchange numeric strings; quantize them to the
product's increments first (see utils.numeric.quantize).
"""

import uuid
from typing import Callable, Optional
import logging

from ..models import (
    AttachedTriggerBracketGtc,
    BracketOrderConfiguration,
    LimitLimitGtc,
    LimitOrderConfiguration,
    MarketMarketIoc,
    MarketOrderConfiguration,
    OrderRequest,
    Side,
    StopDirection,
    StopLimitOrderConfiguration,
    StopLimitStopLimitGtc,
    TpSlAttachedOrderConfiguration,
    TriggerBracketGtc,
)

logger = logging.getLogger(__name__)


def stop_direction_for(side: Side) -> StopDirection:
    """Buy stops trigger on the way up, sell stops on the way down."""
    return StopDirection.STOP_UP if Side(side) is Side.BUY else StopDirection.STOP_DOWN


class OrderBuilder:
    """
    Builds order placement requests.

    Handles:
    - Client order ID generation
    - Order configuration per order type
    - Side-dependent stop direction
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None):
        """
        Initialize order builder.

        Args:
            id_factory: Client order ID generator (uuid4 if None)
        """
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))

    def market(
        self,
        product_id: str,
        side: Side,
        base_size: Optional[str] = None,
        quote_size: Optional[str] = None
    ) -> OrderRequest:
        """Immediate-or-cancel market order sized in base or quote currency."""
        logger.info(f"market order => {Side(side).value} {base_size or quote_size} {product_id}")
        return OrderRequest(
            client_order_id=self.id_factory(),
            product_id=product_id,
            side=side,
            order_configuration=MarketOrderConfiguration(
                market_market_ioc=MarketMarketIoc(base_size=base_size, quote_size=quote_size)
            )
        )

    def limit(
        self,
        product_id: str,
        side: Side,
        base_size: str,
        limit_price: str,
        post_only: bool = True
    ) -> OrderRequest:
        """Good-til-cancelled limit order (maker-only by default)."""
        logger.info(f"limit order => {Side(side).value} {base_size} {product_id} @ {limit_price}")
        return OrderRequest(
            client_order_id=self.id_factory(),
            product_id=product_id,
            side=side,
            order_configuration=LimitOrderConfiguration(
                limit_limit_gtc=LimitLimitGtc(
                    base_size=base_size,
                    limit_price=limit_price,
                    post_only=post_only
                )
            )
        )

    def limit_tp_sl(
        self,
        product_id: str,
        base_size: str,
        limit_price: str,
        stop_price: str,
        take_profit_price: str
    ) -> OrderRequest:
        """
        Limit buy with an attached take-profit / stop-loss bracket.

        Args:
            product_id: Product to buy
            base_size: Size in base currency
            limit_price: Entry price
            stop_price: Stop-loss trigger price
            take_profit_price: Take-profit limit price

        Returns:
            Order request
        """
        logger.info(
            f"limit tp/sl order => BUY {base_size} {product_id} @ {limit_price} "
            f"=> {take_profit_price}/{stop_price}"
        )
        return OrderRequest(
            client_order_id=self.id_factory(),
            product_id=product_id,
            side=Side.BUY,
            order_configuration=LimitOrderConfiguration(
                limit_limit_gtc=LimitLimitGtc(base_size=base_size, limit_price=limit_price)
            ),
            attached_order_configuration=TpSlAttachedOrderConfiguration(
                trigger_bracket_gtc=AttachedTriggerBracketGtc(
                    limit_price=take_profit_price,
                    stop_trigger_price=stop_price
                )
            )
        )

    def bracket(
        self,
        product_id: str,
        side: Side,
        base_size: str,
        limit_price: str,
        stop_price: str
    ) -> OrderRequest:
        """Good-til-cancelled bracket (limit exit plus stop trigger)."""
        logger.info(f"bracket order => {base_size} {product_id} @ {stop_price}/{limit_price}")
        return OrderRequest(
            client_order_id=self.id_factory(),
            product_id=product_id,
            side=side,
            order_configuration=BracketOrderConfiguration(
                trigger_bracket_gtc=TriggerBracketGtc(
                    base_size=base_size,
                    limit_price=limit_price,
                    stop_trigger_price=stop_price
                )
            )
        )

    def stop_limit(
        self,
        product_id: str,
        side: Side,
        base_size: str,
        limit_price: str,
        stop_price: str
    ) -> OrderRequest:
        """Good-til-cancelled stop-limit order."""
        logger.info(f"stop-limit order => {base_size} {product_id} @ {stop_price}/{limit_price}")
        return OrderRequest(
            client_order_id=self.id_factory(),
            product_id=product_id,
            side=side,
            order_configuration=StopLimitOrderConfiguration(
                stop_limit_stop_limit_gtc=StopLimitStopLimitGtc(
                    base_size=base_size,
                    limit_price=limit_price,
                    stop_direction=stop_direction_for(side).value,
                    stop_price=stop_price
                )
            )
        )
