"""Structured exception classes for the DocuSeal client."""

import json
from typing import Any, Dict, Optional

from .utils.security import sanitize_error_body

AUTH_FAILURE_REASON = "invalid API key or insufficient permissions"


class DocusealError(Exception):
    """Base exception for all DocuSeal client errors.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string."""
        return json.dumps(self.to_dict())


class APIError(DocusealError):
    """Raised when the API answers with a status code of 400 or above.

    The raw response body may echo secrets back (API keys, tokens), so it
    is kept on :attr:`body` only. The message, ``str()`` and ``details``
    always carry the sanitized rendering.

    :param status_code: HTTP status code from the API response
    :param body: Raw response body of the failed request
    """

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        sanitized = sanitize_error_body(body)
        super().__init__(
            message=f"API error (status {status_code}): {sanitized}",
            code="API_ERROR",
            details={"status_code": status_code, "response_body": sanitized},
        )

    def __repr__(self) -> str:
        return f"APIError(status_code={self.status_code})"


class AuthError(DocusealError):
    """Raised on 401/403 responses.

    The reason is fixed and never includes what the server said.
    """

    def __init__(self, reason: str = AUTH_FAILURE_REASON):
        self.reason = reason
        super().__init__(
            message=f"authentication failed: {reason}", code="AUTH_ERROR"
        )


class RateLimitError(DocusealError):
    """Raised when 429 responses outlast the retry policy.

    :param retry_after: Seconds the caller should wait before re-invoking,
                        computed from the retry policy
    """

    def __init__(self, retry_after: float):
        # whole seconds stay integers in rendered payloads
        if float(retry_after).is_integer():
            retry_after = int(retry_after)
        self.retry_after = retry_after
        super().__init__(
            message=f"rate limit exceeded, retry after {retry_after:g} seconds",
            code="RATE_LIMIT_ERROR",
            details={"retry_after": retry_after},
        )


class ValidationError(DocusealError):
    """Raised when input is rejected locally, before any network call.

    :param field: Name of the field that failed validation
    :param message: Description of the problem
    """

    def __init__(self, field: str, message: str):
        self.field = field
        self.reason = message
        super().__init__(
            message=f"validation error on field '{field}': {message}",
            code="VALIDATION_ERROR",
            details={"field": field},
        )


class CircuitBreakerError(DocusealError):
    """Raised when the circuit breaker is open. Carries no payload."""

    def __init__(self):
        super().__init__(
            message=(
                "circuit breaker open: too many consecutive failures, "
                "requests temporarily blocked"
            ),
            code="CIRCUIT_BREAKER_OPEN",
        )


class NotConfiguredError(DocusealError):
    """Raised when no URL or API key is configured.

    :param setting: Optional name of the missing setting
    """

    def __init__(self, setting: Optional[str] = None):
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(
            message=(
                "docuseal not configured - run 'docuseal auth login' "
                "or set DOCUSEAL_URL and DOCUSEAL_API_KEY"
            ),
            code="NOT_CONFIGURED",
            details=details,
        )


class ResponseDecodeError(DocusealError):
    """Raised when a successful response matches neither the expected shape
    nor the ``{"data": ...}`` envelope.

    :param preview: Truncated start of the raw body, for diagnostics
    """

    def __init__(self, preview: str):
        self.preview = preview
        super().__init__(
            message=f"unexpected API response format (got: {preview})",
            code="DECODE_ERROR",
        )
