"""
Prometheus metrics for monitoring.

Each Metrics instance owns its own CollectorRegistry, so several clients
(and tests) can coexist in one process.
"""

from typing import Optional
import logging

from prometheus_client import CollectorRegistry, Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)


class Metrics:
    """
    Prometheus metrics collector.

    Tracks:
    - API request outcomes and latency
    - Retries per endpoint
    - Order placement success/failure
    - Disk cache hits and misses
    """

    def __init__(
        self,
        enabled: bool = True,
        port: int = 9090,
        start_server: bool = False,
        registry: Optional[CollectorRegistry] = None
    ):
        """
        Initialize metrics.

        Args:
            enabled: Enable metrics collection
            port: Metrics HTTP server port
            start_server: Expose the registry over HTTP on `port`
            registry: Registry to register into (a fresh one if None)
        """
        self.enabled = enabled
        self.registry = registry or CollectorRegistry()

        if not self.enabled:
            return

        # API metrics
        self.api_requests = Counter(
            'helper_api_requests_total',
            'Total API request attempts',
            ['method', 'endpoint', 'status'],
            registry=self.registry
        )

        self.api_latency = Histogram(
            'helper_api_latency_seconds',
            'API request latency',
            ['method', 'endpoint'],
            registry=self.registry
        )

        self.api_retries = Counter(
            'helper_api_retries_total',
            'Retried API attempts',
            ['endpoint'],
            registry=self.registry
        )

        # Trading metrics
        self.orders_placed = Counter(
            'helper_orders_placed_total',
            'Total orders placed',
            ['side', 'order_type', 'status'],
            registry=self.registry
        )

        # Cache metrics
        self.cache_lookups = Counter(
            'helper_cache_lookups_total',
            'Disk cache lookups',
            ['kind', 'result'],
            registry=self.registry
        )

        if start_server:
            try:
                start_http_server(port, registry=self.registry)
                logger.info(f"Metrics server started on port {port}")
            except OSError as e:
                logger.error(f"Failed to start metrics server: {e}")

    def track_api_request(self, method: str, endpoint: str, status: str) -> None:
        """Record API request."""
        if self.enabled:
            self.api_requests.labels(method=method, endpoint=endpoint, status=status).inc()

    def track_api_latency(self, method: str, endpoint: str, duration: float) -> None:
        """Record API latency."""
        if self.enabled:
            self.api_latency.labels(method=method, endpoint=endpoint).observe(duration)

    def track_retry(self, endpoint: str) -> None:
        if self.enabled:
            self.api_retries.labels(endpoint=endpoint).inc()

    def track_order(self, side: str, order_type: str, status: str) -> None:
        """Record order placement."""
        if self.enabled:
            self.orders_placed.labels(side=side, order_type=order_type, status=status).inc()

    def track_cache(self, kind: str, hit: bool) -> None:
        """Record a disk cache lookup."""
        if self.enabled:
            self.cache_lookups.labels(kind=kind, result="hit" if hit else "miss").inc()

    def sample(self, name: str, labels: dict[str, str]) -> Optional[float]:
        """Current value of one sample (None if absent or disabled)."""
        if not self.enabled:
            return None
        return self.registry.get_sample_value(name, labels)

