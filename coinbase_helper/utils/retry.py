"""
Retry logic with linear backoff.

Transient transport failures are retried with a delay proportional to the
attempt number. Anything else (schema mismatches, configuration problems)
fails on the spot: retrying cannot fix a broken contract.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, TypeVar, Optional
import logging

from ..exceptions import APIError, ExhaustedRetriesError

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RetryState(str, Enum):
    """Executor states."""
    ATTEMPTING = "ATTEMPTING"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass(frozen=True)
class RetryDecision:
    """Outcome of one failed attempt."""
    state: RetryState
    attempt: int
    delay: float = 0.0


class RetryStrategy:
    """
    Bounded retry with linear backoff.

    Attempt n (1-based) that fails transiently sleeps base_delay * n before
    attempt n + 1. After max_retries attempts the last error is wrapped in
    ExhaustedRetriesError.
    """

    def __init__(
        self,
        max_retries: int = 5,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        on_retry: Optional[Callable[[int, Exception], None]] = None
    ):
        """
        Initialize retry strategy.

        Args:
            max_retries: Maximum number of attempts (>= 1)
            base_delay: Backoff step in seconds
            sleep: Sleep function (injectable for tests)
            on_retry: Optional callback(attempt, error) before each backoff
        """
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")

        self.max_retries = max_retries
        self.base_delay = base_delay
        self.sleep = sleep
        self.on_retry = on_retry

    @staticmethod
    def is_retryable(exception: BaseException) -> bool:
        """Transport and server-side failures are transient."""
        return isinstance(exception, (APIError, ConnectionError))

    def calculate_delay(self, attempt: int) -> float:
        """Delay after failed attempt `attempt`."""
        return self.base_delay * attempt

    def decide(self, attempt: int, exception: BaseException) -> RetryDecision:
        """
        Decide what follows a failed attempt.

        Args:
            attempt: 1-based number of the attempt that failed
            exception: Error raised by that attempt

        Returns:
            ATTEMPTING with the next attempt number and delay, or FAILED
        """
        if not self.is_retryable(exception):
            return RetryDecision(RetryState.FAILED, attempt)

        if attempt >= self.max_retries:
            return RetryDecision(RetryState.FAILED, attempt)

        return RetryDecision(
            RetryState.ATTEMPTING,
            attempt + 1,
            self.calculate_delay(attempt)
        )

    def execute(self, func: Callable[[], T], target: str = "request") -> T:
        """
        Execute function with retry logic.

        Args:
            func: Zero-argument callable performing one attempt
            target: Description used in logs and the final error

        Returns:
            Function result

        Raises:
            ExhaustedRetriesError: If every attempt failed transiently
            Exception: Any non-retryable error, unchanged and immediately
        """
        attempt = 1

        while True:
            try:
                return func()
            except Exception as e:
                decision = self.decide(attempt, e)

                if decision.state is RetryState.FAILED:
                    if not self.is_retryable(e):
                        logger.debug(
                            f"Not retrying {target} after attempt {attempt}: "
                            f"{type(e).__name__}"
                        )
                        raise

                    logger.error(f"All {self.max_retries} attempts exhausted for {target}")
                    raise ExhaustedRetriesError(
                        f"{target} failed after {attempt} attempts: {e}",
                        target=target,
                        attempts=attempt,
                        last_error=e
                    ) from e

                logger.warning(
                    f"Retry {attempt}/{self.max_retries} for {target} "
                    f"after {type(e).__name__}: {e}. "
                    f"Waiting {decision.delay:.2f}s"
                )
                if self.on_retry:
                    self.on_retry(attempt, e)

                self.sleep(decision.delay)
                attempt = decision.attempt
