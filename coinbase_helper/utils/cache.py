"""
Caching for semi-static exchange data.

TTLCache keeps validated models in memory for the client's lifetime.
DiskCache persists raw payloads as pretty-printed JSON files so product
metadata, finished orders and the transaction summary survive restarts.
"""

import time
import threading
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Any, Callable, Union
import logging

import orjson

from ..exceptions import CacheCorruptError, CacheMissError

logger = logging.getLogger(__name__)

COINBASE = "coinbase"
PRODUCTS = "products"
ORDERS = "orders"

FRESHNESS_WINDOW = 24 * 60 * 60  # seconds


@dataclass
class CacheEntry:
    """Cache entry with expiry."""
    value: Any
    expires_at: float


class TTLCache:
    """
    Thread-safe in-memory cache with time-to-live and LRU eviction.

    get_or_fetch() populates a key at most once even when several threads
    miss at the same time.
    """

    def __init__(self, default_ttl: float = 300.0, max_size: int = 1000):
        """
        Initialize cache.

        Args:
            default_ttl: Default TTL in seconds
            max_size: Entries kept before evicting the least recently used
        """
        self.default_ttl = default_ttl
        self.max_size = max_size
        self._cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[Any]:
        """Cached value, or None if expired/missing."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if time.time() > entry.expires_at:
                del self._cache[key]
                logger.debug(f"Cache expired: {key}")
                return None

            self._cache.move_to_end(key)
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store value, evicting the oldest entry when full."""
        ttl = ttl if ttl is not None else self.default_ttl

        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
            elif len(self._cache) >= self.max_size:
                lru_key, _ = self._cache.popitem(last=False)
                logger.debug(f"Cache LRU eviction: {lru_key}")

            self._cache[key] = CacheEntry(value=value, expires_at=time.time() + ttl)

    def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Any],
        ttl: Optional[float] = None
    ) -> Any:
        """
        Get from cache or fetch if missing/expired.

        Args:
            key: Cache key
            fetch_fn: Function to fetch value on cache miss
            ttl: TTL in seconds

        Returns:
            Cached or fetched value
        """
        value = self.get(key)
        if value is not None:
            return value

        with self._lock:
            # Double-check after acquiring lock
            value = self.get(key)
            if value is not None:
                return value

            logger.debug(f"Cache miss, fetching: {key}")
            value = fetch_fn()
            self.set(key, value, ttl)
            return value

    def delete(self, key: str) -> None:
        """Delete key from cache."""
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()


class DiskCache:
    """
    JSON file cache rooted at a per-application directory.

    Layout:
        <root>/coinbase/<name>.json
        <root>/coinbase/products/<product_id>.json
        <root>/coinbase/orders/<order_id>.json
    """

    def __init__(self, root: Union[str, Path]):
        """
        Initialize disk cache and create its directories.

        Args:
            root: Cache root directory
        """
        self.root = Path(root)
        self.coinbase_dir = self.root / COINBASE
        self.products_dir = self.coinbase_dir / PRODUCTS
        self.orders_dir = self.coinbase_dir / ORDERS

        for directory in (self.coinbase_dir, self.products_dir, self.orders_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def load_json(self, path: Path) -> Any:
        """
        Read one cached JSON document.

        Raises:
            CacheMissError: If the file does not exist
            CacheCorruptError: If it cannot be read or parsed
        """
        if not path.exists():
            logger.debug(f"Cache miss for {path}")
            raise CacheMissError(f"Cache miss for {path}", path=str(path))

        try:
            data = orjson.loads(path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            raise CacheCorruptError(f"Cannot parse cache file {path}: {e}", path=str(path)) from e

        logger.debug(f"Cache hit for {path}")
        return data

    def save_json(self, path: Path, data: Any) -> None:
        """Write one document, pretty-printed."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(orjson.dumps(data, option=orjson.OPT_INDENT_2))
        logger.debug(f"Cache saved for {path}")

    def is_fresh(self, path: Path, max_age: float = FRESHNESS_WINDOW) -> bool:
        """True if the file exists and was written within max_age seconds."""
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return False
        return time.time() - mtime <= max_age

    # Named coinbase documents (e.g. transaction_summary)

    def coinbase_path(self, name: str) -> Path:
        return self.coinbase_dir / f"{name}.json"

    def load_coinbase(self, name: str) -> Any:
        return self.load_json(self.coinbase_path(name))

    def save_coinbase(self, name: str, data: Any, check_expiration: bool = True) -> bool:
        """
        Save a named document.

        With check_expiration, a file younger than 24 hours is left alone.

        Returns:
            True if the file was written
        """
        path = self.coinbase_path(name)

        if check_expiration and path.exists():
            if self.is_fresh(path):
                logger.debug(f"save_coinbase => {name} cache is fresh; skipping write")
                return False
            logger.warning(f"save_coinbase => {name} cache is stale; refreshing")

        self.save_json(path, data)
        return True

    # Products

    def product_path(self, product_id: str) -> Path:
        return self.products_dir / f"{product_id}.json"

    def load_product(self, product_id: str) -> Any:
        return self.load_json(self.product_path(product_id))

    def save_product(self, product_id: str, data: Any) -> None:
        self.save_json(self.product_path(product_id), data)

    # Orders

    def order_path(self, order_id: str) -> Path:
        return self.orders_dir / f"{order_id}.json"

    def load_order(self, order_id: str) -> Any:
        return self.load_json(self.order_path(order_id))

    def save_order(self, order_id: str, data: Any) -> None:
        self.save_json(self.order_path(order_id), data)
