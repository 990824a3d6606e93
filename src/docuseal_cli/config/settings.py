"""Configuration settings for the DocuSeal client.

Settings are loaded from environment variables and ``.env`` files. Time
values accept plain seconds (``30``, ``1.5``) or Go-style durations
(``30s``, ``500ms``, ``2m``, ``1m30s``) as accepted by the CLI flags.
"""

import re
from typing import Literal, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import NotConfiguredError

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value) -> float:
    """Parse seconds or a Go-style duration string into seconds.

    :param value: Number of seconds, or a string like ``"1m30s"``
    :return: Duration in seconds
    :rtype: float
    :raises ValueError: If the value cannot be parsed
    """
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().lower()
    try:
        return float(text)
    except ValueError:
        pass
    parts = _DURATION_PART.findall(text)
    if not parts or "".join(n + u for n, u in parts) != text:
        raise ValueError(f"invalid duration {value!r}")
    return sum(float(number) * _UNIT_SECONDS[unit] for number, unit in parts)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    :param docuseal_url: DocuSeal instance URL
    :type docuseal_url: Optional[str]
    :param docuseal_api_key: API key sent with every request
    :type docuseal_api_key: Optional[str]
    :param docuseal_timeout: Per-request HTTP timeout in seconds
    :type docuseal_timeout: float
    :param docuseal_retries: Max retries for rate-limited requests
    :type docuseal_retries: int
    :param docuseal_retry_base_delay: Base backoff delay in seconds
    :type docuseal_retry_base_delay: float
    :param docuseal_insecure_skip_verify: Disable TLS verification
    :type docuseal_insecure_skip_verify: bool
    :param docuseal_output: Output mode used when rendering errors
    :type docuseal_output: Literal["text", "json", "ndjson"]
    :param log_level: Logging level for the application
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    docuseal_url: Optional[str] = Field(None, description="DocuSeal instance URL")
    docuseal_api_key: Optional[str] = Field(None, description="DocuSeal API key")

    docuseal_timeout: float = Field(30.0, gt=0, description="HTTP request timeout")
    docuseal_retries: int = Field(
        3, ge=0, description="Max retries for rate-limited requests (HTTP 429)"
    )
    docuseal_retry_base_delay: float = Field(
        1.0, gt=0, description="Base delay for exponential backoff"
    )
    docuseal_insecure_skip_verify: bool = Field(
        False, description="Skip TLS certificate verification"
    )

    docuseal_output: Literal["text", "json", "ndjson"] = Field(
        "text", description="Output mode"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "WARNING", description="Logging level"
    )

    @field_validator("docuseal_timeout", "docuseal_retry_base_delay", mode="before")
    @classmethod
    def parse_durations(cls, v):
        """Accept Go-style duration strings for time settings."""
        return parse_duration(v)

    @field_validator("docuseal_output", mode="before")
    @classmethod
    def lower_output(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    def require_credentials(self) -> Tuple[str, str]:
        """Return the configured URL and API key.

        :return: Tuple of (url, api_key)
        :raises NotConfiguredError: If either value is missing
        """
        if not self.docuseal_url:
            raise NotConfiguredError("DOCUSEAL_URL")
        if not self.docuseal_api_key:
            raise NotConfiguredError("DOCUSEAL_API_KEY")
        return self.docuseal_url, self.docuseal_api_key
