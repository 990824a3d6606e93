"""HTTP resilience public API (barrel module).

This package provides:
- Single-attempt request execution and envelope-tolerant decoding
- Retry controller with exponential backoff and jitter
- Circuit breaker

Recommended import pattern for consumers:
    from docuseal_cli.utils.http import RetryController, RetryPolicy, CircuitBreaker
"""

from .circuit_breaker import (
    FAILURE_THRESHOLD,
    RESET_TIMEOUT,
    CircuitBreaker,
    CircuitBreakerState,
)
from .request import decode_response, encode_body, send_once
from .retry import RetryController, RetryPolicy

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerState",
    "FAILURE_THRESHOLD",
    "RESET_TIMEOUT",
    "RetryController",
    "RetryPolicy",
    "decode_response",
    "encode_body",
    "send_once",
]
