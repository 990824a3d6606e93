"""Local input validation.

Everything here raises :class:`~docuseal_cli.exceptions.ValidationError`
before a request is ever built, so invalid input costs no network call
and never touches the circuit breaker.
"""

import ipaddress
import os
from email.utils import parseaddr
from typing import Iterable, List
from urllib.parse import urlparse

from .exceptions import ValidationError

MAX_FILE_SIZE = 50 * 1024 * 1024
MAX_HTML_SIZE = 10 * 1024 * 1024

VALID_WEBHOOK_EVENTS = frozenset(
    {
        "submission.created",
        "submission.completed",
        "submission.archived",
        "form.viewed",
        "form.started",
        "form.completed",
        "template.created",
        "template.updated",
    }
)

_BLOCKED_HOSTNAMES = {"localhost", "127.0.0.1", "::1"}


def validate_webhook_url(url: str) -> None:
    """Reject webhook URLs that are malformed or point at internal hosts."""
    try:
        parsed = urlparse(url)
        host = parsed.hostname or ""
    except ValueError:
        raise ValidationError("url", "invalid URL format") from None

    if parsed.scheme not in ("http", "https"):
        raise ValidationError("url", "URL must use http or https scheme")
    if not host:
        raise ValidationError("url", "invalid URL format")

    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        ip = None
    if ip is not None and (ip.is_loopback or ip.is_private or ip.is_link_local):
        raise ValidationError("url", "private/loopback IP addresses not allowed")

    if host.lower() in _BLOCKED_HOSTNAMES:
        raise ValidationError("url", "localhost not allowed")


def validate_webhook_events(events: Iterable[str]) -> None:
    events = list(events)
    if not events:
        raise ValidationError("events", "at least one event type required")
    for event in events:
        if event not in VALID_WEBHOOK_EVENTS:
            raise ValidationError("events", f"unsupported event type: {event}")


def validate_email(email: str, field: str = "email") -> str:
    """Validate a single address and return it stripped.

    :param email: Address, optionally with a display name
    :param field: Field name reported in the error
    :return: The bare address
    :raises ValidationError: If the address is malformed
    """
    email = (email or "").strip()
    if not email:
        raise ValidationError(field, "email cannot be empty")

    _, address = parseaddr(email)
    if not address or address.count("@") != 1:
        raise ValidationError(field, f"invalid email format: {email!r}")

    local, domain = address.split("@")
    if not local:
        raise ValidationError(field, "email local part (before @) cannot be empty")
    if not domain:
        raise ValidationError(field, "email domain part (after @) cannot be empty")
    if "." not in domain:
        raise ValidationError(field, "email domain must contain at least one dot")
    if domain.startswith(".") or domain.endswith("."):
        raise ValidationError(field, "email domain cannot start or end with a dot")
    if ".." in domain:
        raise ValidationError(field, "email domain cannot contain consecutive dots")
    return address


def validate_email_list(email_list: str, field: str = "emails") -> List[str]:
    """Validate a comma-separated list of addresses; blanks are skipped."""
    if not email_list:
        raise ValidationError(field, "email list cannot be empty")
    emails = [
        validate_email(part, field) for part in email_list.split(",") if part.strip()
    ]
    if not emails:
        raise ValidationError(field, "no valid emails found in list")
    return emails


def validate_file_size(path: str, field: str = "file") -> None:
    try:
        size = os.path.getsize(path)
    except OSError as e:
        raise ValidationError(field, f"cannot read file: {e.strerror}") from None
    if size > MAX_FILE_SIZE:
        raise ValidationError(
            field,
            f"file size {size} bytes exceeds maximum allowed size of "
            f"{MAX_FILE_SIZE} bytes (50MB)",
        )


def validate_html_content(html: str, field: str = "html") -> None:
    if not html:
        raise ValidationError(field, "HTML content cannot be empty")
    if len(html) > MAX_HTML_SIZE:
        raise ValidationError(
            field,
            f"HTML content size {len(html)} bytes exceeds maximum allowed size "
            f"of {MAX_HTML_SIZE} bytes (10MB)",
        )
    if "<" not in html or ">" not in html:
        raise ValidationError(
            field, "HTML content does not appear to contain valid HTML tags"
        )
