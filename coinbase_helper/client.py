"""
Main Coinbase helper client.

Unified interface over the brokerage API with disk caching of product
metadata, finished orders and the transaction summary.
"""

import time
from typing import Callable, List, Optional
import logging

import requests
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from .api.brokerage import BrokerageAPI
from .auth.authenticator import Authenticator
from .auth.key_manager import KeyManager
from .config import HelperSettings, load_settings
from .exceptions import CacheCorruptError, CacheError
from .metrics import Metrics
from .models import (
    Account,
    CurrencyBalance,
    Order,
    OrderPlacementSource,
    OrderRequest,
    PriceBook,
    Product as ProductInfo,
    Side,
    TERMINAL_ORDER_STATUSES,
    TickerResponse,
    TransactionSummary,
)
from .trading.order_builder import OrderBuilder
from .trading.product import Product, ensure_product
from .utils.cache import DiskCache, TTLCache, FRESHNESS_WINDOW

logger = logging.getLogger(__name__)

TRANSACTION_SUMMARY = "transaction_summary"

_ORDER_ADAPTER = TypeAdapter(Order)


class CoinbaseHelperClient:
    """
    Main client for Coinbase brokerage operations.

    Features:
    - Signed, schema-validated requests with retry
    - Disk cache for semi-static data
    - Order builders for every supported order type

    Usage:
        with CoinbaseHelperClient() as client:
            balance = client.get_currency_account("USD")
            product = client.get_product_instance("btc")
            order_id = client.place_limit_order(
                product.product_id, Side.BUY, "0.001", "50000.00"
            )
    """

    def __init__(
        self,
        settings: Optional[HelperSettings] = None,
        key_manager: Optional[KeyManager] = None,
        metrics: Optional[Metrics] = None,
        disk_cache: Optional[DiskCache] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize Coinbase helper client.

        Args:
            settings: Optional settings (loads from env if not provided)
            key_manager: Signing key holder (reads settings' credentials path if None)
            metrics: Optional metrics collector
            disk_cache: Disk cache (rooted at settings.cache_dir if None)
            session: HTTP session override
            sleep: Backoff sleep function
        """
        self.settings = settings or load_settings()

        self.key_manager = key_manager or KeyManager(self.settings.coinbase_credentials_path)
        self.authenticator = Authenticator(self.key_manager, host=self.settings.api_host)

        if metrics is None and self.settings.enable_metrics:
            metrics = Metrics(enabled=True, port=self.settings.metrics_port, start_server=True)
        self.metrics = metrics

        self.disk_cache = disk_cache or DiskCache(self.settings.cache_dir)
        self.memory_cache = TTLCache(default_ttl=FRESHNESS_WINDOW, max_size=16)
        self.order_builder = OrderBuilder()

        self.api = BrokerageAPI(
            settings=self.settings,
            authenticator=self.authenticator,
            metrics=self.metrics,
            session=session,
            sleep=sleep
        )

        logger.info(f"Coinbase helper client initialized ({self.settings.api_host})")

    # Accounts

    def get_accounts(self) -> List[Account]:
        return self.api.get_accounts()

    def get_currency_account(self, currency: str = "USD", increment: str = "0.01") -> CurrencyBalance:
        return self.api.get_currency_account(currency, increment)

    # Orders

    def create_order(self, order: OrderRequest) -> str:
        return self.api.create_order(order)

    def place_market_order(
        self,
        product_id: str,
        side: Side,
        base_size: Optional[str] = None,
        quote_size: Optional[str] = None
    ) -> str:
        """Place a market order; returns the order ID."""
        return self.create_order(self.order_builder.market(product_id, side, base_size, quote_size))

    def place_limit_order(
        self,
        product_id: str,
        side: Side,
        base_size: str,
        limit_price: str,
        post_only: bool = True
    ) -> str:
        """Place a GTC limit order; returns the order ID."""
        return self.create_order(
            self.order_builder.limit(product_id, side, base_size, limit_price, post_only)
        )

    def place_limit_tp_sl_order(
        self,
        product_id: str,
        base_size: str,
        limit_price: str,
        stop_price: str,
        take_profit_price: str
    ) -> str:
        """Place a limit buy with attached take-profit/stop-loss; returns the order ID."""
        return self.create_order(
            self.order_builder.limit_tp_sl(
                product_id, base_size, limit_price, stop_price, take_profit_price
            )
        )

    def place_bracket_order(
        self,
        product_id: str,
        side: Side,
        base_size: str,
        limit_price: str,
        stop_price: str
    ) -> str:
        """Place a bracket order; returns the order ID."""
        return self.create_order(
            self.order_builder.bracket(product_id, side, base_size, limit_price, stop_price)
        )

    def place_stop_limit_order(
        self,
        product_id: str,
        side: Side,
        base_size: str,
        limit_price: str,
        stop_price: str
    ) -> str:
        """Place a stop-limit order; returns the order ID."""
        return self.create_order(
            self.order_builder.stop_limit(product_id, side, base_size, limit_price, stop_price)
        )

    def cancel_order(self, order_id: str) -> bool:
        return self.api.cancel_order(order_id)

    def get_open_orders(self, product_id: Optional[str] = None) -> List[Order]:
        return self.api.get_open_orders(product_id)

    def get_orders(
        self,
        order_status,
        order_placement_source=OrderPlacementSource.ADVANCED,
        product_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None
    ) -> List[Order]:
        """Historical orders across all pages (see BrokerageAPI.get_orders)."""
        return self.api.get_orders(
            order_status, order_placement_source, product_id, start_date, end_date
        )

    def get_order_info(self, order_id: str, force_update: bool = False) -> Order:
        """
        Get an order, from disk when it has already finished.

        Orders in a terminal status (filled, cancelled, expired, failed) never
        change again, so only those are written to the cache.

        Args:
            order_id: Exchange order ID
            force_update: Skip the disk cache

        Returns:
            Order
        """
        if not force_update:
            try:
                order = _ORDER_ADAPTER.validate_python(self.disk_cache.load_order(order_id))
                self._track_cache("order", True)
                logger.debug(f"get_order_info => Cache hit for {order_id}")
                return order
            except PydanticValidationError as e:
                logger.warning(f"get_order_info => Cached order {order_id} is invalid: {e}")
            except CacheError as e:
                logger.debug(f"get_order_info => {e}")
            self._track_cache("order", False)
            logger.info(f"get_order_info => Cache miss for {order_id}, fetching from Coinbase...")
        else:
            logger.info(f"get_order_info => Force update for {order_id}")

        order = self.api.get_order(order_id)
        if order.status in {s.value for s in TERMINAL_ORDER_STATUSES}:
            self.disk_cache.save_order(order_id, order.model_dump(mode="json"))
        return order

    # Products and market data

    def get_product_info(self, product_id: str, force_update: bool = False) -> ProductInfo:
        """
        Get product metadata, from disk when cached.

        Args:
            product_id: Product ID (e.g. BTC-USD)
            force_update: Always fetch and rewrite the cache

        Returns:
            Product metadata
        """
        if force_update:
            logger.info(f"get_product_info => Force update for {product_id}")
        else:
            try:
                product = self._load_product(product_id)
                self._track_cache("product", True)
                logger.debug(f"get_product_info => Cache hit for {product_id}")
                return product
            except CacheError as e:
                self._track_cache("product", False)
                logger.warning(
                    f"get_product_info => {e}; fetching {product_id} from Coinbase..."
                )

        product = self.api.get_product(product_id)
        self.disk_cache.save_product(product_id, product.model_dump(mode="json"))
        return product

    def _load_product(self, product_id: str) -> ProductInfo:
        data = self.disk_cache.load_product(product_id)
        try:
            return ProductInfo.model_validate(data)
        except PydanticValidationError as e:
            raise CacheCorruptError(
                f"Cached product {product_id} is invalid: {e}",
                path=str(self.disk_cache.product_path(product_id))
            ) from e

    def get_product_instance(self, product: Optional[str] = None) -> Product:
        """Product helper for a name like 'btc' (defaults to btc)."""
        return Product.load(ensure_product(product), self)

    def get_best_bid_ask(self, product_id: str) -> PriceBook:
        return self.api.get_best_bid_ask(product_id)

    def get_market_trades(self, product_id: str, limit: int = 1) -> TickerResponse:
        return self.api.get_market_trades(product_id, limit)

    def get_transaction_summary(self) -> TransactionSummary:
        """
        Get the transaction summary: memory, then disk, then the API.

        A fetched summary is written to disk only if the file is missing,
        older than 24 hours or unreadable.
        """
        return self.memory_cache.get_or_fetch(TRANSACTION_SUMMARY, self._load_transaction_summary)

    def _load_transaction_summary(self) -> TransactionSummary:
        rewrite = False
        try:
            summary = TransactionSummary.model_validate(
                self.disk_cache.load_coinbase(TRANSACTION_SUMMARY)
            )
            self._track_cache(TRANSACTION_SUMMARY, True)
            logger.debug("get_transaction_summary => cached on disk")
            return summary
        except PydanticValidationError as e:
            rewrite = True
            logger.warning("get_transaction_summary => cached data invalid, refreshing")
            logger.debug(f"{e}")
        except CacheCorruptError as e:
            rewrite = True
            logger.warning(f"get_transaction_summary => {e}, refreshing")
        except CacheError:
            logger.info("get_transaction_summary => not found on disk")

        self._track_cache(TRANSACTION_SUMMARY, False)
        summary = self.api.get_transaction_summary()
        self.disk_cache.save_coinbase(
            TRANSACTION_SUMMARY,
            summary.model_dump(mode="json"),
            check_expiration=not rewrite
        )
        return summary

    def _track_cache(self, kind: str, hit: bool) -> None:
        if self.metrics:
            self.metrics.track_cache(kind, hit)

    def close(self) -> None:
        """Close HTTP session."""
        self.api.close()

    def __enter__(self) -> "CoinbaseHelperClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
