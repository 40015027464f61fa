"""
Base HTTP client with schema-validated responses.

Every brokerage call is described by a RequestDescriptor and run through
BaseAPIClient.execute(): sign, send, validate, retry transient failures with
linear backoff. orjson handles (de)serialization.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Type, TypeVar
import logging

import orjson
import requests
from requests.adapters import HTTPAdapter
from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..auth.authenticator import Authenticator
from ..config import HelperSettings
from ..exceptions import APIError, SchemaValidationError, TimeoutError
from ..metrics import Metrics
from ..utils.retry import RetryStrategy

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Longest response body echoed into logs and error messages
MAX_LOGGED_BODY = 500


@dataclass(frozen=True)
class RequestDescriptor:
    """
    One API call: method, path (relative to the brokerage prefix), an
    optional pre-built query string, optional JSON body and the model the
    response must match.
    """
    method: str
    path: str
    schema: Type[BaseModel]
    query: Optional[str] = None
    body: Optional[Dict[str, Any]] = None
    name: Optional[str] = None

    @property
    def endpoint(self) -> str:
        """Low-cardinality label for logs and metrics."""
        return self.name or self.path


class BaseAPIClient:
    """
    Base HTTP client for the brokerage API.

    Attempts for one descriptor run strictly one after another. Separate
    calls from separate threads are independent.
    """

    def __init__(
        self,
        settings: HelperSettings,
        authenticator: Authenticator,
        metrics: Optional[Metrics] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize base API client.

        Args:
            settings: Client settings
            authenticator: Signs each attempt
            metrics: Optional metrics collector
            session: HTTP session (a pooled one is created if None)
            sleep: Backoff sleep function (injectable for tests)
        """
        self.settings = settings
        self.authenticator = authenticator
        self.metrics = metrics
        self.sleep = sleep

        self.prefix_url = f"{settings.base_url}{settings.api_prefix}"
        self.timeout = (settings.connect_timeout, settings.request_timeout)

        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=10,
                pool_maxsize=20,
                max_retries=0,  # Retries handled by RetryStrategy
            )
            session.mount("https://", adapter)
            session.mount("http://", adapter)

        self.session = session
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def _retry_strategy(self, max_retries: Optional[int], endpoint: str) -> RetryStrategy:
        def on_retry(attempt: int, error: Exception) -> None:
            if self.metrics:
                self.metrics.track_retry(endpoint)

        return RetryStrategy(
            max_retries=max_retries if max_retries is not None else self.settings.max_retries,
            base_delay=self.settings.retry_base_delay,
            sleep=self.sleep,
            on_retry=on_retry
        )

    def url_for(self, descriptor: RequestDescriptor) -> str:
        """Absolute URL including the query string."""
        url = f"{self.prefix_url}{descriptor.path}"
        if descriptor.query:
            url += f"?{descriptor.query}"
        return url

    def _send(self, descriptor: RequestDescriptor) -> Any:
        """
        Perform one attempt.

        Returns:
            Validated response model

        Raises:
            APIError: On HTTP status >= 400 or any transport failure
            TimeoutError: On timeout
            SchemaValidationError: If a 2xx body is not JSON or has the wrong shape
        """
        method = descriptor.method.upper()
        url = self.url_for(descriptor)

        # Fresh token per attempt so backoff cannot outlive it
        headers = self.authenticator.headers(method, f"{self.settings.api_prefix}{descriptor.path}")

        data = orjson.dumps(descriptor.body) if descriptor.body is not None else None

        if self.settings.log_requests:
            logger.debug(f"[HTTP] {method} {url}")

        start = time.time()
        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=headers,
                data=data,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"[HTTP] {method} {url} -> ERR {e}")
            self._track(method, descriptor.endpoint, "timeout", start)
            raise TimeoutError(f"{method} {url} timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"[HTTP] {method} {url} -> ERR {e}")
            self._track(method, descriptor.endpoint, "error", start)
            raise APIError(f"{method} {url} failed: {e}") from e

        self._track(method, descriptor.endpoint, str(response.status_code), start)

        if response.status_code >= 400:
            try:
                error_data = orjson.loads(response.content)
            except orjson.JSONDecodeError:
                error_data = response.text[:MAX_LOGGED_BODY]

            logger.error(f"[HTTP] {method} {url} -> {response.status_code} {error_data}")
            raise APIError(
                f"{method} {url} failed with {response.status_code}: {error_data}",
                status_code=response.status_code,
                response=error_data
            )

        try:
            payload = orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            logger.error(f"Invalid JSON response from {method} {url}: {response.text[:MAX_LOGGED_BODY]}")
            raise SchemaValidationError(
                f"{method} {url} returned invalid JSON: {e}",
                target=url,
                cause=e
            ) from e

        try:
            return descriptor.schema.model_validate(payload)
        except PydanticValidationError as e:
            logger.error(f"{method} {url} response does not match {descriptor.schema.__name__}")
            raise SchemaValidationError(
                f"{method} {url} response does not match {descriptor.schema.__name__}: {e}",
                target=url,
                cause=e
            ) from e

    def _track(self, method: str, endpoint: str, status: str, start: float) -> None:
        if self.metrics:
            self.metrics.track_api_request(method, endpoint, status)
            self.metrics.track_api_latency(method, endpoint, time.time() - start)

    def execute(self, descriptor: RequestDescriptor, max_retries: Optional[int] = None) -> Any:
        """
        Run a descriptor to completion.

        Args:
            descriptor: Call to perform
            max_retries: Attempt limit (settings.max_retries if None)

        Returns:
            Response validated against descriptor.schema

        Raises:
            SchemaValidationError: Immediately, on the first malformed response
            ExhaustedRetriesError: When every attempt failed transiently
            ConfigurationError: If the request cannot be signed
        """
        strategy = self._retry_strategy(max_retries, descriptor.endpoint)
        target = f"{descriptor.method.upper()} {self.url_for(descriptor)}"
        return strategy.execute(lambda: self._send(descriptor), target=target)

    def close(self) -> None:
        """Close session and cleanup resources."""
        self.session.close()
        logger.info("API client session closed")

    def __enter__(self) -> "BaseAPIClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
