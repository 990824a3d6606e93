"""Retry controller for DocuSeal API operations.

Only throttling (HTTP 429) is retried, with exponential backoff plus
jitter. Every other failure is final and is converted, at most once, into
the error the calling layer classifies:

- 401/403: the breaker counts a failure, an :class:`AuthError` is raised
- 429: retried while attempts remain, then :class:`RateLimitError`
- 5xx: the breaker counts a failure, the :class:`APIError` is re-raised
- other 4xx: the :class:`APIError` is re-raised untouched

Transport errors and task cancellation are not API errors and propagate
as they are. Backoff sleeps go through ``asyncio.sleep``, so cancelling
the task (or an outer ``asyncio.wait_for``) interrupts them.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from functools import wraps
from typing import Awaitable, Callable, TypeVar

from ...exceptions import APIError, AuthError, CircuitBreakerError, RateLimitError
from .circuit_breaker import CircuitBreaker

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0

AUTH_FAILURE_STATUSES = (401, 403)
RATE_LIMITED_STATUS = 429


@dataclass(frozen=True)
class RetryPolicy:
    """How many times, and how patiently, throttled requests are retried.

    :param max_retries: Retries after the initial attempt
    :param base_delay: Delay in seconds before the first retry
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay <= 0:
            raise ValueError(f"base_delay must be > 0, got {self.base_delay}")

    def backoff_delay(self, attempt: int) -> float:
        """Exponential delay before retrying after ``attempt`` (0-based)."""
        return self.base_delay * (2**attempt)

    def jittered_delay(self, attempt: int) -> float:
        """Backoff delay plus a random jitter in ``[0, delay / 2)``."""
        delay = self.backoff_delay(attempt)
        return delay + random.random() * (delay / 2)

    @property
    def retry_after(self) -> float:
        """Wait reported to the caller once retries are exhausted."""
        return self.backoff_delay(self.max_retries)

    @property
    def worst_case_delay(self) -> float:
        """Longest total time spent sleeping for one operation.

        Outer timeouts shorter than this starve the retry budget.
        """
        return sum(
            self.backoff_delay(attempt) * 1.5 for attempt in range(self.max_retries)
        )


class RetryController:
    """Runs one logical operation under the retry policy and the breaker.

    Usable directly through :meth:`run` or as a decorator for a
    zero-argument coroutine function that performs a single attempt.

    :param policy: Retry policy
    :type policy: RetryPolicy
    :param breaker: Circuit breaker gating every attempt
    :type breaker: CircuitBreaker
    """

    def __init__(self, policy: RetryPolicy, breaker: CircuitBreaker):
        self.policy = policy
        self.breaker = breaker

    def __call__(self, func: Callable[[], Awaitable[T]]) -> Callable[[], Awaitable[T]]:
        @wraps(func)
        async def wrapper() -> T:
            return await self.run(func)

        return wrapper

    async def run(self, attempt_once: Callable[[], Awaitable[T]]) -> T:
        """Perform attempts until success or a final failure.

        :param attempt_once: Coroutine function making exactly one request
        :return: The result of the first successful attempt
        :raises CircuitBreakerError: If the breaker is open before an attempt
        :raises AuthError: On a 401 or 403 response
        :raises RateLimitError: When 429 responses exhaust the policy
        :raises APIError: On any other error status
        """
        for attempt in range(self.policy.max_retries + 1):
            if self.breaker.is_open():
                logger.warning("Circuit breaker open, refusing request")
                raise CircuitBreakerError()

            try:
                result = await attempt_once()
            except APIError as e:
                if e.status_code in AUTH_FAILURE_STATUSES:
                    self.breaker.record_failure()
                    raise AuthError() from None

                if e.status_code == RATE_LIMITED_STATUS:
                    if attempt < self.policy.max_retries:
                        delay = self.policy.jittered_delay(attempt)
                        logger.info(
                            f"Rate limited, retry {attempt + 1}/"
                            f"{self.policy.max_retries} in {delay:.2f}s"
                        )
                        await asyncio.sleep(delay)
                        continue
                    logger.warning(
                        f"Rate limited after {attempt + 1} attempts, giving up"
                    )
                    raise RateLimitError(retry_after=self.policy.retry_after) from None

                if e.status_code >= 500:
                    self.breaker.record_failure()
                raise

            self.breaker.record_success()
            if attempt > 0:
                logger.info(f"Request succeeded after {attempt + 1} attempts")
            return result

        # The final loop iteration always returns or raises
        raise AssertionError("retry loop exited without a result")
