"""Error classification at the boundary between the client and the CLI.

Classification happens once, here, by inspecting the concrete exception
type. The result drives a stable exit code that automated callers branch
on, and a rendering that is either a plain ``Error: ...`` line or one
JSON object (for ``json``/``ndjson`` output modes).
"""

import asyncio
import os
from enum import Enum
from typing import IO, Optional, Sequence, Union

import httpx
from pydantic import BaseModel, Field

from ..exceptions import (
    AuthError,
    CircuitBreakerError,
    NotConfiguredError,
    RateLimitError,
    ValidationError,
)

OUTPUT_MODES = ("text", "json", "ndjson")
OUTPUT_ENV = "DOCUSEAL_OUTPUT"


class ErrorCategory(str, Enum):
    """Closed set of failure kinds exposed to the calling layer."""

    VALIDATION = "validation"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    NOT_CONFIGURED = "not_configured"
    CIRCUIT_BREAKER = "circuit_breaker"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


EXIT_CODES = {
    ErrorCategory.VALIDATION: 2,
    ErrorCategory.AUTH: 3,
    ErrorCategory.RATE_LIMIT: 4,
    ErrorCategory.NOT_CONFIGURED: 5,
    ErrorCategory.CIRCUIT_BREAKER: 6,
    ErrorCategory.TIMEOUT: 7,
    ErrorCategory.UNKNOWN: 1,
}

_CATEGORY_BY_TYPE = (
    (NotConfiguredError, ErrorCategory.NOT_CONFIGURED),
    (AuthError, ErrorCategory.AUTH),
    (RateLimitError, ErrorCategory.RATE_LIMIT),
    (ValidationError, ErrorCategory.VALIDATION),
    (CircuitBreakerError, ErrorCategory.CIRCUIT_BREAKER),
    ((httpx.TimeoutException, asyncio.TimeoutError, TimeoutError), ErrorCategory.TIMEOUT),
)


class ErrorResponse(BaseModel):
    """Machine-readable error payload for JSON output modes."""

    error: str = Field(..., description="Sanitized error message")
    type: ErrorCategory = Field(..., description="Error category")
    exit_code: int = Field(..., description="Process exit code")
    retry_after_seconds: Optional[Union[int, float]] = Field(
        None, description="Suggested wait before re-invoking (rate limits only)"
    )


def classify_error(exc: BaseException) -> ErrorCategory:
    """Map an exception to its :class:`ErrorCategory`."""
    for types, category in _CATEGORY_BY_TYPE:
        if isinstance(exc, types):
            return category
    return ErrorCategory.UNKNOWN


def exit_code_for(exc: BaseException) -> int:
    """Stable process exit code for an exception."""
    return EXIT_CODES[classify_error(exc)]


def error_message(exc: BaseException) -> str:
    message = str(exc)
    if not message and isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return "operation timed out"
    return message or type(exc).__name__


def build_error_response(exc: BaseException) -> ErrorResponse:
    category = classify_error(exc)
    return ErrorResponse(
        error=error_message(exc),
        type=category,
        exit_code=EXIT_CODES[category],
        retry_after_seconds=exc.retry_after if isinstance(exc, RateLimitError) else None,
    )


def detect_output_mode(args: Sequence[str], default: Optional[str] = None) -> str:
    """Find the requested output mode in raw CLI arguments.

    Recognizes ``--output X``, ``-o X`` and ``--output=X``; otherwise uses
    ``default``, then ``DOCUSEAL_OUTPUT``, then ``text``. Unknown modes
    fall back to ``text`` so the error stays visible.
    """
    mode = None
    for i, arg in enumerate(args):
        if arg in ("--output", "-o"):
            mode = args[i + 1] if i + 1 < len(args) else "text"
            break
        if arg.startswith("--output="):
            mode = arg[len("--output="):]
            break
    if mode is None:
        mode = default or os.getenv(OUTPUT_ENV) or "text"
    mode = mode.strip().lower()
    return mode if mode in OUTPUT_MODES else "text"


def render_error(exc: BaseException, output_mode: str = "text") -> str:
    """Render an error for stderr, without trailing newline."""
    if output_mode in ("json", "ndjson"):
        return build_error_response(exc).model_dump_json(exclude_none=True)
    return f"Error: {error_message(exc)}"


def write_error(stream: IO[str], exc: BaseException, output_mode: str = "text") -> int:
    """Write the rendered error to ``stream`` and return the exit code."""
    stream.write(render_error(exc, output_mode) + "\n")
    return exit_code_for(exc)
