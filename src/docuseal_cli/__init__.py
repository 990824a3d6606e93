"""DocuSeal API client package.

This package provides the resilient HTTP client used by the DocuSeal
command-line tool: request execution, retry with exponential backoff,
a circuit breaker, a stable error taxonomy and error-body sanitization.

:var __version__: Current package version
:type __version__: str
"""

__version__ = "0.3.0"

from .client import DocusealClient, call_with_timeout, normalize_base_url
from .exceptions import (
    APIError,
    AuthError,
    CircuitBreakerError,
    DocusealError,
    NotConfiguredError,
    RateLimitError,
    ResponseDecodeError,
    ValidationError,
)

__all__ = [
    "__version__",
    "DocusealClient",
    "call_with_timeout",
    "normalize_base_url",
    "DocusealError",
    "APIError",
    "AuthError",
    "RateLimitError",
    "ValidationError",
    "CircuitBreakerError",
    "NotConfiguredError",
    "ResponseDecodeError",
]
