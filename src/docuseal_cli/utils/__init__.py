"""Shared utilities: HTTP resilience, sanitization and error reporting."""
