"""
Integration tests for CoinbaseHelperClient disk and memory caching.
"""

import os
import time

import orjson
import pytest

from coinbase_helper.client import TRANSACTION_SUMMARY, CoinbaseHelperClient
from coinbase_helper.metrics import Metrics
from coinbase_helper.models import Side

ORDER_ID = "11111111-1111-4111-8111-111111111111"


@pytest.fixture
def metrics():
    return Metrics()


@pytest.fixture
def client(settings, key_manager, disk_cache, session, sleeps, metrics):
    helper = CoinbaseHelperClient(
        settings=settings,
        key_manager=key_manager,
        metrics=metrics,
        disk_cache=disk_cache,
        session=session,
        sleep=sleeps.append
    )
    yield helper
    helper.close()


class TestProductCache:
    """Product metadata: disk first, then the API."""

    def test_cache_hit(self, client, disk_cache, session, metrics, product_payload):
        disk_cache.save_product("BTC-USD", product_payload())

        product = client.get_product_info("BTC-USD")

        assert product.price_increment == "0.01"
        session.request.assert_not_called()
        assert metrics.sample("helper_cache_lookups_total", {"kind": "product", "result": "hit"}) == 1.0

    def test_cache_miss_fetches_and_saves(self, client, disk_cache, session, make_response,
                                          product_payload):
        session.request.return_value = make_response(product_payload())

        client.get_product_info("BTC-USD")
        client.get_product_info("BTC-USD")

        assert session.request.call_count == 1
        assert disk_cache.load_product("BTC-USD")["base_increment"] == "0.00000001"

    @pytest.mark.parametrize("content", [b"{not json", b'{"product_id": "BTC-USD"}'])
    def test_corrupt_entry_is_replaced(self, client, disk_cache, session, make_response,
                                       product_payload, content):
        disk_cache.product_path("BTC-USD").write_bytes(content)
        session.request.return_value = make_response(product_payload())

        assert client.get_product_info("BTC-USD").price == "50123.45"
        assert disk_cache.load_product("BTC-USD")["price"] == "50123.45"

    def test_force_update(self, client, disk_cache, session, make_response, product_payload):
        disk_cache.save_product("BTC-USD", product_payload(price="1.00"))
        session.request.return_value = make_response(product_payload())

        assert client.get_product_info("BTC-USD", force_update=True).price == "50123.45"
        assert disk_cache.load_product("BTC-USD")["price"] == "50123.45"

    def test_product_instance(self, client, disk_cache, product_payload):
        disk_cache.save_product("ETH-USD", product_payload("ETH-USD", base_increment="0.0001"))

        product = client.get_product_instance("eth")

        assert product.product_id == "ETH-USD"
        assert product.base_increment == "0.0001"


class TestTransactionSummary:
    """Memory, then disk, then the API."""

    def test_memoized(self, client, disk_cache, session, make_response, summary_payload):
        session.request.return_value = make_response(summary_payload)

        first = client.get_transaction_summary()
        second = client.get_transaction_summary()

        assert first is second
        assert session.request.call_count == 1
        assert disk_cache.load_coinbase(TRANSACTION_SUMMARY)["total_balance"] == "1000.00"

    def test_disk_hit(self, client, disk_cache, session, summary_payload):
        disk_cache.save_coinbase(TRANSACTION_SUMMARY, summary_payload)

        assert client.get_transaction_summary().fee_tier.pricing_tier == "Advanced 1"
        session.request.assert_not_called()

    @pytest.mark.parametrize("content", [b"garbage", b'{"total_balance": "1"}'])
    def test_unreadable_entry_is_rewritten(self, client, disk_cache, session, make_response,
                                           summary_payload, content):
        disk_cache.coinbase_path(TRANSACTION_SUMMARY).write_bytes(content)
        session.request.return_value = make_response(summary_payload)

        client.get_transaction_summary()

        assert session.request.call_count == 1
        assert disk_cache.load_coinbase(TRANSACTION_SUMMARY)["total_balance"] == "1000.00"

    def test_stale_entry_is_served_then_kept(self, client, disk_cache, session, summary_payload):
        path = disk_cache.coinbase_path(TRANSACTION_SUMMARY)
        disk_cache.save_coinbase(TRANSACTION_SUMMARY, summary_payload)
        two_days_ago = time.time() - 2 * 86400
        os.utime(path, (two_days_ago, two_days_ago))

        assert client.get_transaction_summary().total_balance == "1000.00"
        session.request.assert_not_called()


class TestOrderCache:
    """Only orders in a terminal status are cached."""

    @pytest.mark.parametrize("status", ["FILLED", "CANCELLED", "EXPIRED", "FAILED"])
    def test_terminal_orders_are_cached(self, client, disk_cache, session, make_response,
                                        order_payload, status):
        session.request.return_value = make_response({"order": order_payload(ORDER_ID, status)})

        client.get_order_info(ORDER_ID)
        order = client.get_order_info(ORDER_ID)

        assert order.status == status
        assert session.request.call_count == 1
        assert disk_cache.order_path(ORDER_ID).exists()

    def test_open_orders_are_not_cached(self, client, disk_cache, session, make_response,
                                        order_payload):
        session.request.return_value = make_response({"order": order_payload(ORDER_ID, "OPEN")})

        client.get_order_info(ORDER_ID)
        client.get_order_info(ORDER_ID)

        assert session.request.call_count == 2
        assert not disk_cache.order_path(ORDER_ID).exists()

    def test_cached_order_round_trip(self, client, disk_cache, session, make_response,
                                     order_payload):
        payload = order_payload(ORDER_ID, order_type="STOP_LIMIT")
        session.request.return_value = make_response({"order": payload})

        fetched = client.get_order_info(ORDER_ID)
        cached = client.get_order_info(ORDER_ID)

        assert cached == fetched
        assert orjson.loads(disk_cache.order_path(ORDER_ID).read_bytes())["order_type"] == "STOP_LIMIT"

    def test_force_update(self, client, disk_cache, session, make_response, order_payload):
        disk_cache.save_order(ORDER_ID, order_payload(ORDER_ID))
        session.request.return_value = make_response({"order": order_payload(ORDER_ID)})

        client.get_order_info(ORDER_ID, force_update=True)

        assert session.request.call_count == 1


class TestPlacement:
    """Order helpers go through the builder and the API."""

    def test_place_stop_limit_order(self, client, session, make_response):
        session.request.return_value = make_response(
            {"success": True, "success_response": {"order_id": ORDER_ID}}
        )

        assert client.place_stop_limit_order("BTC-USD", Side.SELL, "0.01", "44000.00", "44500.00") == ORDER_ID

        body = orjson.loads(session.request.call_args.kwargs["data"])
        assert body["side"] == "SELL"
        assert body["order_configuration"]["stop_limit_stop_limit_gtc"] == {
            "base_size": "0.01",
            "limit_price": "44000.00",
            "stop_direction": "STOP_DIRECTION_STOP_DOWN",
            "stop_price": "44500.00",
        }
