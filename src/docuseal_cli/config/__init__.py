"""Configuration for the DocuSeal client.

:class:`Settings` is built by the caller at the CLI boundary, so a bad
``DOCUSEAL_*`` value surfaces there instead of at import time.
"""

from .settings import Settings, parse_duration

__all__ = ["Settings", "parse_duration"]
