"""Circuit breaker for DocuSeal API requests.

The breaker counts failures that indicate the upstream service (or the
credential) is unhealthy: auth rejections and server errors. Once the
count reaches the threshold, every request attempt is refused until the
cooldown since the last failure has elapsed. The next check after the
cooldown performs a full reset rather than a half-open probe.

One breaker is owned by each client; there is no process-wide registry,
so independent clients (and tests) never share state.
"""

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

FAILURE_THRESHOLD = 5
RESET_TIMEOUT = 30.0


class CircuitBreakerState:
    """Constants representing the possible states of a circuit breaker.

    - CLOSED: Normal operation, requests are allowed
    - OPEN: Threshold reached and cooldown pending, requests are blocked
    """

    CLOSED = "closed"
    OPEN = "open"


class CircuitBreaker:
    """Lock-guarded failure counter with a threshold and a cooldown.

    All reads and writes of the counter and the last-failure timestamp
    happen under one lock, so a single client may be shared by concurrent
    tasks or threads.

    :param failure_threshold: Failures needed to open the circuit
    :type failure_threshold: int
    :param reset_timeout: Seconds after the last failure before the
                          circuit closes again
    :type reset_timeout: float
    :param clock: Monotonic time source, replaceable in tests
    :type clock: Callable[[], float]
    """

    def __init__(
        self,
        failure_threshold: int = FAILURE_THRESHOLD,
        reset_timeout: float = RESET_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._failure_count = 0
        self._last_failure_time: Optional[float] = None

    @property
    def failure_count(self) -> int:
        with self._lock:
            return self._failure_count

    @property
    def last_failure_time(self) -> Optional[float]:
        with self._lock:
            return self._last_failure_time

    @property
    def state(self) -> str:
        """Current state, evaluated without resetting the counter."""
        with self._lock:
            if self._tripped() and not self._cooled_down():
                return CircuitBreakerState.OPEN
            return CircuitBreakerState.CLOSED

    def is_open(self) -> bool:
        """Check whether requests must be refused.

        If the threshold was reached but the cooldown has elapsed, the
        counter is reset and the circuit reports closed.

        :return: True if the circuit is open
        :rtype: bool
        """
        with self._lock:
            if not self._tripped():
                return False
            if self._cooled_down():
                self._reset()
                logger.info("Circuit breaker CLOSED after cooldown")
                return False
            return True

    def record_success(self) -> None:
        """Reset the failure counter, whatever the current state."""
        with self._lock:
            self._reset()

    def record_failure(self) -> None:
        """Count one failure and remember when it happened."""
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = self._clock()
            if self._failure_count == self.failure_threshold:
                logger.warning(
                    f"Circuit breaker OPEN after {self._failure_count} failures, "
                    f"blocking requests for {self.reset_timeout:g}s"
                )

    def _tripped(self) -> bool:
        return self._failure_count >= self.failure_threshold

    def _cooled_down(self) -> bool:
        return (
            self._last_failure_time is not None
            and self._clock() - self._last_failure_time > self.reset_timeout
        )

    def _reset(self) -> None:
        # Caller holds the lock
        self._failure_count = 0
