"""
Shared fixtures.

Network access is disabled for every test; HTTP goes through a mocked
requests session and backoff sleeps are recorded instead of slept.
"""

import logging
import os
import socket
from unittest.mock import MagicMock, Mock

import orjson
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from coinbase_helper.api.brokerage import BrokerageAPI
from coinbase_helper.auth.authenticator import Authenticator
from coinbase_helper.auth.key_manager import KeyManager
from coinbase_helper.config import HelperSettings
from coinbase_helper.models import Credentials
from coinbase_helper.utils.cache import DiskCache

KEY_NAME = "organizations/org-id/apiKeys/key-id"


@pytest.fixture(autouse=True)
def no_network(monkeypatch):
    """Fail loudly on any real socket connection."""
    def guard(*args, **kwargs):
        raise RuntimeError("Network access is disabled in tests")

    monkeypatch.setattr(socket.socket, "connect", guard)
    monkeypatch.setattr(socket, "create_connection", guard)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path):
    """Keep HELPER_* variables and XDG dirs from leaking between tests."""
    saved = dict(os.environ)
    for name in list(os.environ):
        if name.startswith("HELPER_"):
            del os.environ[name]
    os.environ["XDG_CONFIG_HOME"] = str(tmp_path / "xdg-config")
    os.environ["XDG_CACHE_HOME"] = str(tmp_path / "xdg-cache")

    yield

    os.environ.clear()
    os.environ.update(saved)


@pytest.fixture
def restore_logging():
    """Undo dictConfig changes to the package logger."""
    package_logger = logging.getLogger("coinbase_helper")
    yield
    for handler in package_logger.handlers:
        handler.close()
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


@pytest.fixture(scope="session")
def ec_key():
    """Fresh P-256 key for signing tests."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def private_key_pem(ec_key):
    return ec_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption()
    ).decode()


@pytest.fixture
def credentials_file(tmp_path, private_key_pem):
    path = tmp_path / "cdp_api_key.json"
    path.write_bytes(orjson.dumps({"name": KEY_NAME, "privateKey": private_key_pem}))
    return path


@pytest.fixture
def key_manager(private_key_pem):
    return KeyManager(credentials=Credentials(name=KEY_NAME, private_key=private_key_pem))


@pytest.fixture
def settings(tmp_path, credentials_file):
    return HelperSettings(
        coinbase_credentials_path=str(credentials_file),
        cache_dir=tmp_path / "cache",
        max_retries=5,
        retry_base_delay=1.0
    )


@pytest.fixture
def session():
    """Mocked requests session; set session.request.side_effect/return_value."""
    mock_session = MagicMock()
    mock_session.headers = {}
    return mock_session


@pytest.fixture
def sleeps():
    """Backoff delays requested by the executor."""
    return []


@pytest.fixture
def api(settings, key_manager, session, sleeps):
    return BrokerageAPI(
        settings=settings,
        authenticator=Authenticator(key_manager),
        session=session,
        sleep=sleeps.append
    )


@pytest.fixture
def disk_cache(tmp_path):
    return DiskCache(tmp_path / "cache")


@pytest.fixture
def make_response():
    """Build a fake requests.Response."""
    def _make(payload=None, status=200, content=None):
        response = Mock()
        response.status_code = status
        response.content = content if content is not None else orjson.dumps(payload)
        response.text = response.content.decode("utf-8", errors="replace")
        return response
    return _make


@pytest.fixture
def product_payload():
    def _make(product_id="BTC-USD", **overrides):
        data = {
            "product_id": product_id,
            "price": "50123.45",
            "base_increment": "0.00000001",
            "price_increment": "0.01",
            "product_type": "SPOT",
            "status": "online",
        }
        data.update(overrides)
        return data
    return _make


@pytest.fixture
def account_payload():
    def _make(currency="USD", available="100.005", hold="0.5",
              uuid="0f1b6c5e-3a3c-4a4e-9d84-1c2c3d4e5f60"):
        return {
            "uuid": uuid,
            "name": f"{currency} Wallet",
            "currency": currency,
            "available_balance": {"value": available, "currency": currency},
            "hold": {"value": hold, "currency": currency},
            "type": "ACCOUNT_TYPE_FIAT" if currency == "USD" else "ACCOUNT_TYPE_CRYPTO",
        }
    return _make


@pytest.fixture
def order_payload():
    def _make(order_id="11111111-1111-4111-8111-111111111111", status="FILLED",
              order_type="LIMIT", **overrides):
        configurations = {
            "LIMIT": {"limit_limit_gtc": {
                "base_size": "0.001", "limit_price": "50000.00", "post_only": True
            }},
            "MARKET": {"market_market_ioc": {"base_size": "0.001"}},
            "BRACKET": {"trigger_bracket_gtc": {
                "base_size": "0.001", "limit_price": "55000.00", "stop_trigger_price": "45000.00"
            }},
            "STOP_LIMIT": {"stop_limit_stop_limit_gtc": {
                "base_size": "0.001",
                "limit_price": "51000.00",
                "stop_direction": "STOP_DIRECTION_STOP_UP",
                "stop_price": "50500.00",
            }},
        }
        data = {
            "order_id": order_id,
            "product_id": "BTC-USD",
            "side": "BUY",
            "status": status,
            "completion_percentage": "100",
            "filled_size": "0.001",
            "average_filled_price": "50000.00",
            "filled_value": "50.00",
            "total_fees": "0.30",
            "total_value_after_fees": "50.30",
            "product_type": "SPOT",
            "last_fill_time": "2024-05-01T12:00:00Z",
            "order_type": order_type,
            "order_configuration": configurations[order_type],
        }
        data.update(overrides)
        return data
    return _make


@pytest.fixture
def summary_payload():
    return {
        "fee_tier": {
            "pricing_tier": "Advanced 1",
            "taker_fee_rate": "0.006",
            "maker_fee_rate": "0.004",
        },
        "total_balance": "1000.00",
        "total_fees": 12.5,
        "total_volume": 3000,
    }
