"""Security utilities for sanitization and secure logging.

This module consolidates the redaction rules used across the client:
- Error-body sanitization (truncation plus key/value redaction)
- Header sanitization for debug logging
- A logging formatter that redacts secrets from every record
"""

import copy
import logging
import re
import sys
from typing import Any, Dict

MAX_ERROR_BODY_LENGTH = 500
TRUNCATION_MARKER = "... (truncated)"
REDACTED = '"[REDACTED]"'

# JSON string value, tolerating escaped quotes and a value cut off by truncation
_JSON_VALUE = r'"(?:[^"\\]|\\.)*(?:"|\\?$)'

# Keys whose values are redacted in error bodies. The key name is preserved.
SENSITIVE_BODY_KEYS = (
    r"api[_-]?key",
    r"[\w-]*token",
    r"[\w-]*password",
    r"[\w-]*secret",
    r"authorization",
    r"auth",
)

SENSITIVE_BODY_PATTERNS = [
    re.compile(rf'("{key}")\s*:\s*{_JSON_VALUE}', re.IGNORECASE)
    for key in SENSITIVE_BODY_KEYS
]

BEARER_VALUE_PATTERN = re.compile(
    r'"bearer\s+[A-Za-z0-9\-._~+/]+=*(?:"|$)', re.IGNORECASE
)

# Patterns for sensitive data detection in free text (log lines)
SENSITIVE_PATTERNS = {
    "jwt_token": re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"),
    "bearer_token": re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE),
}

# Headers that should never be logged
SENSITIVE_HEADERS = {
    "authorization",
    "x-auth-token",
    "x-api-key",
    "cookie",
    "set-cookie",
}


def redact_sensitive_values(text: str) -> str:
    """Replace the values of sensitive JSON keys and bearer tokens.

    :param text: Raw text, usually a JSON document
    :type text: str
    :return: Text with sensitive values replaced by ``"[REDACTED]"``
    :rtype: str
    """
    for pattern in SENSITIVE_BODY_PATTERNS:
        text = pattern.sub(rf"\1: {REDACTED}", text)
    return BEARER_VALUE_PATTERN.sub(REDACTED, text)


def sanitize_error_body(body: str) -> str:
    """Truncate and redact an API error body for display.

    The body is cut to :data:`MAX_ERROR_BODY_LENGTH` characters first,
    then redacted; the truncation marker is appended last so a value cut
    in half is still recognised and replaced.

    :param body: Raw response body
    :type body: str
    :return: Body safe to show to a user
    :rtype: str
    """
    if not body:
        return body
    truncated = len(body) > MAX_ERROR_BODY_LENGTH
    if truncated:
        body = body[:MAX_ERROR_BODY_LENGTH]
    body = redact_sensitive_values(body)
    if truncated:
        body += TRUNCATION_MARKER
    return body


def sanitize_string(value: str) -> str:
    """Redact JWTs, bearer tokens and sensitive JSON values from free text."""
    if not value:
        return value
    value = SENSITIVE_PATTERNS["jwt_token"].sub("<jwt_token:REDACTED>", value)
    value = SENSITIVE_PATTERNS["bearer_token"].sub(r"\1<REDACTED>", value)
    return redact_sensitive_values(value)


def sanitize_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    """Sanitize HTTP headers for logging.

    :param headers: Dictionary of HTTP headers
    :type headers: Dict[str, Any]
    :return: Copy of the headers with credentials replaced
    :rtype: Dict[str, Any]
    """
    if not headers:
        return headers
    sanitized = copy.deepcopy(dict(headers))
    for key, value in sanitized.items():
        if key.lower() in SENSITIVE_HEADERS:
            if isinstance(value, str) and value:
                sanitized[key] = f"<REDACTED:length={len(value)}>"
            else:
                sanitized[key] = "<REDACTED>"
        elif isinstance(value, str):
            sanitized[key] = sanitize_string(value)
    return sanitized


class SanitizingFormatter(logging.Formatter):
    """Formatter that redacts secrets from the rendered message."""

    def format(self, record: logging.LogRecord) -> str:
        if record.args:
            try:
                record.msg = sanitize_string(record.msg % record.args)
                record.args = None
            except (TypeError, ValueError):
                record.msg = sanitize_string(str(record.msg))
        else:
            record.msg = sanitize_string(str(record.msg))
        return super().format(record)


_LOGGING_CONFIGURED = False


def setup_secure_logging(level: str = "INFO") -> None:
    """Set up logging with automatic sanitization.

    Logs go to stderr so stdout stays machine-readable. Calling this more
    than once is a no-op.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :type level: str
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        logging.getLogger(__name__).debug(
            "Logging already configured, skipping duplicate setup"
        )
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        SanitizingFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,
    )
    # httpx logs full request lines at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _LOGGING_CONFIGURED = True
