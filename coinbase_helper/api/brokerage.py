"""
Brokerage REST API client.

Accounts, orders, products and market data. Every call is a
RequestDescriptor run through BaseAPIClient.execute().
"""

from decimal import Decimal
from typing import Optional, List
from urllib.parse import urlencode
import logging

from .base import BaseAPIClient, RequestDescriptor
from ..models import (
    Account,
    AccountsResponse,
    BestBidAskResponse,
    CurrencyBalance,
    Order,
    OrderHistoricalResponse,
    OrderPlacementSource,
    OrderRequest,
    OrderResponse,
    OrdersBatchCancelResponse,
    OrdersHistoricalBatchResponse,
    OrderStatus,
    PriceBook,
    Product,
    ProductType,
    TickerResponse,
    TransactionSummary,
)
from ..exceptions import (
    AccountNotFoundError,
    OrderNotFoundError,
    OrderRejectedError,
    PriceUnavailableError,
)
from ..utils.numeric import quantize

logger = logging.getLogger(__name__)

ACCOUNTS_PAGE_LIMIT = 250


def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


class BrokerageAPI(BaseAPIClient):
    """
    Coinbase Advanced Trade brokerage API.

    Paths are relative to settings.api_prefix (/api/v3/brokerage).
    """

    # Accounts

    def get_accounts(self) -> List[Account]:
        """
        Get all brokerage accounts (single page of up to 250).

        Returns:
            List of accounts
        """
        query = urlencode({"limit": str(ACCOUNTS_PAGE_LIMIT)})
        response = self.execute(RequestDescriptor(
            "GET", "/accounts", AccountsResponse, query=query, name="get_accounts"
        ))
        return response.accounts

    def get_currency_account(
        self,
        currency: str = "USD",
        increment: str = "0.01"
    ) -> CurrencyBalance:
        """
        Get balance of one currency.

        Args:
            currency: Currency code
            increment: Increment the total is floored to

        Returns:
            Available and held amounts (as reported) and their quantized total

        Raises:
            AccountNotFoundError: If there is no account for the currency
        """
        account = next(
            (a for a in self.get_accounts() if a.currency == currency),
            None
        )
        if account is None:
            raise AccountNotFoundError(f"Could not find {currency} account", currency=currency)

        available = account.available_balance.value
        hold = account.hold.value
        total = quantize(increment, Decimal(available) + Decimal(hold))

        return CurrencyBalance(available=available, hold=hold, total=total)

    # Orders

    def create_order(self, order: OrderRequest) -> str:
        """
        Place an order.

        Args:
            order: Order request (see trading.order_builder)

        Returns:
            Exchange order ID

        Raises:
            OrderRejectedError: If the exchange rejects the order
        """
        order_type = next(iter(order.order_configuration.model_dump(exclude_none=True)), "unknown")
        side = _enum_value(order.side)

        response = self.execute(RequestDescriptor(
            "POST", "/orders", OrderResponse, body=order.to_payload(), name="create_order"
        ))

        if response.success:
            if response.success_response is None:
                self._track_order(side, order_type, "malformed")
                raise OrderRejectedError("Missing order ID in success response.")
            order_id = response.success_response.order_id
            self._track_order(side, order_type, "success")
            logger.info(f"Order placed: {order_id} ({order.product_id} {side})")
            return order_id

        self._track_order(side, order_type, "rejected")
        if response.error_response is None:
            raise OrderRejectedError("Missing error response")

        reason = response.error_response.preview_failure_reason
        logger.warning(f"Order rejected for {order.product_id}: {reason}")
        raise OrderRejectedError(reason, reason=reason)

    def _track_order(self, side: str, order_type: str, status: str) -> None:
        if self.metrics:
            self.metrics.track_order(side, order_type, status)

    def cancel_order(self, order_id: str) -> bool:
        """
        Cancel one order.

        Returns:
            True if cancelled

        Raises:
            OrderNotFoundError: If the order is missing from the response
            OrderRejectedError: If the exchange refused to cancel it
        """
        response = self.execute(RequestDescriptor(
            "POST",
            "/orders/batch_cancel",
            OrdersBatchCancelResponse,
            body={"order_ids": [order_id]},
            name="cancel_order"
        ))

        result = next((r for r in response.results if r.order_id == order_id), None)
        if result is None:
            raise OrderNotFoundError(f"Order ID {order_id} not found in response", order_id=order_id)

        if result.success:
            logger.info(f"Order {order_id} canceled successfully.")
            return True

        reason = result.failure_reason or "Unknown reason"
        raise OrderRejectedError(f"Cancel failed: {reason}", order_id=order_id, reason=reason)

    def get_open_orders(self, product_id: Optional[str] = None) -> List[Order]:
        """Open orders placed through advanced trade."""
        return self.get_orders(
            OrderStatus.OPEN,
            OrderPlacementSource.ADVANCED,
            product_id=product_id
        )

    def get_orders(
        self,
        order_status,
        order_placement_source=OrderPlacementSource.ADVANCED,
        product_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None
    ) -> List[Order]:
        """
        Get historical orders, following cursors until the last page.

        Query parameters are appended in a fixed order and not re-encoded;
        the cursor is passed back exactly as received.

        Args:
            order_status: OrderStatus (or its string value)
            order_placement_source: Placement source filter (None to omit)
            product_id: Restrict to one product
            start_date: RFC 3339 lower bound
            end_date: RFC 3339 upper bound

        Returns:
            Orders of all pages in server order
        """
        base_query = f"order_status={_enum_value(order_status)}"
        if order_placement_source:
            base_query += f"&order_placement_source={_enum_value(order_placement_source)}"
        if product_id:
            base_query += f"&product_ids={product_id}"
        if start_date:
            base_query += f"&start_date={start_date}"
        if end_date:
            base_query += f"&end_date={end_date}"

        orders: List[Order] = []
        cursor: Optional[str] = None
        page = 0

        while True:
            query = base_query
            if cursor:
                query += f"&cursor={cursor}"

            response = self.execute(RequestDescriptor(
                "GET",
                "/orders/historical/batch",
                OrdersHistoricalBatchResponse,
                query=query,
                name="get_orders"
            ))
            page += 1
            orders.extend(response.orders)
            logger.debug(f"Orders page {page}: {len(response.orders)} orders, has_next={response.has_next}")

            if not response.has_next:
                break
            cursor = response.cursor

        logger.info(f"Fetched {len(orders)} orders in {page} page(s)")
        return orders

    def get_order(self, order_id: str) -> Order:
        """Get one historical order."""
        response = self.execute(RequestDescriptor(
            "GET",
            f"/orders/historical/{order_id}",
            OrderHistoricalResponse,
            name="get_order"
        ))
        return response.order

    # Products and market data

    def get_product(self, product_id: str) -> Product:
        """Get product metadata (increments, price)."""
        return self.execute(RequestDescriptor(
            "GET", f"/products/{product_id}", Product, name="get_product"
        ))

    def get_best_bid_ask(self, product_id: str) -> PriceBook:
        """
        Get best bid/ask for a product.

        Raises:
            PriceUnavailableError: If no price book is returned
        """
        response = self.execute(RequestDescriptor(
            "GET",
            "/best_bid_ask",
            BestBidAskResponse,
            query=f"product_ids={product_id}",
            name="get_best_bid_ask"
        ))
        if not response.pricebooks:
            raise PriceUnavailableError(
                f"No pricebooks found for product_id={product_id}",
                product_id=product_id
            )
        return response.pricebooks[0]

    def get_market_trades(self, product_id: str, limit: int = 1) -> TickerResponse:
        """Get the most recent trades with best bid/ask."""
        query = urlencode({"limit": f"{limit:.0f}"})
        return self.execute(RequestDescriptor(
            "GET",
            f"/products/{product_id}/ticker",
            TickerResponse,
            query=query,
            name="get_market_trades"
        ))

    def get_transaction_summary(self, product_type=ProductType.SPOT) -> TransactionSummary:
        """Get fee tier and volume summary."""
        query = urlencode({"product_type": _enum_value(product_type)})
        return self.execute(RequestDescriptor(
            "GET",
            "/transaction_summary",
            TransactionSummary,
            query=query,
            name="get_transaction_summary"
        ))
