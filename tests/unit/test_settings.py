"""Tests for environment-driven configuration."""

import os
import subprocess
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from docuseal_cli.config.settings import Settings, parse_duration
from docuseal_cli.exceptions import NotConfiguredError


class TestParseDuration:
    @pytest.mark.parametrize(
        "value, seconds",
        [
            (30, 30.0),
            ("1.5", 1.5),
            ("30s", 30.0),
            ("500ms", 0.5),
            ("2m", 120.0),
            ("1m30s", 90.0),
            ("1h", 3600.0),
        ],
    )
    def test_valid(self, value, seconds):
        assert parse_duration(value) == pytest.approx(seconds)

    @pytest.mark.parametrize("value", ["", "fast", "10x", "s10"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.docuseal_url is None
        assert settings.docuseal_timeout == 30.0
        assert settings.docuseal_retries == 3
        assert settings.docuseal_retry_base_delay == 1.0
        assert settings.docuseal_insecure_skip_verify is False
        assert settings.docuseal_output == "text"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("DOCUSEAL_URL", "https://docs.example.org")
        monkeypatch.setenv("DOCUSEAL_API_KEY", "key-1")
        monkeypatch.setenv("DOCUSEAL_TIMEOUT", "45s")
        monkeypatch.setenv("DOCUSEAL_RETRIES", "5")
        monkeypatch.setenv("DOCUSEAL_RETRY_BASE_DELAY", "200ms")
        monkeypatch.setenv("DOCUSEAL_INSECURE_SKIP_VERIFY", "true")
        monkeypatch.setenv("DOCUSEAL_OUTPUT", "JSON")

        settings = Settings()

        assert settings.require_credentials() == ("https://docs.example.org", "key-1")
        assert settings.docuseal_timeout == 45.0
        assert settings.docuseal_retries == 5
        assert settings.docuseal_retry_base_delay == pytest.approx(0.2)
        assert settings.docuseal_insecure_skip_verify is True
        assert settings.docuseal_output == "json"

    def test_empty_env_uses_default(self, monkeypatch):
        monkeypatch.setenv("DOCUSEAL_TIMEOUT", "")
        assert Settings().docuseal_timeout == 30.0

    @pytest.mark.parametrize(
        "name, value",
        [
            ("DOCUSEAL_TIMEOUT", "0s"),
            ("DOCUSEAL_RETRIES", "-1"),
            ("DOCUSEAL_RETRY_BASE_DELAY", "soon"),
            ("DOCUSEAL_OUTPUT", "yaml"),
        ],
    )
    def test_rejects_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(PydanticValidationError):
            Settings()

    def test_missing_credentials(self):
        with pytest.raises(NotConfiguredError) as exc_info:
            Settings(docuseal_url="https://h").require_credentials()
        assert exc_info.value.details == {"setting": "DOCUSEAL_API_KEY"}


class TestImportTime:
    """Environment problems surface where Settings is built, not on import."""

    @pytest.mark.parametrize(
        "name, value",
        [("DOCUSEAL_OUTPUT", "yaml"), ("DOCUSEAL_TIMEOUT", "forever")],
    )
    def test_package_imports_with_invalid_env(self, name, value):
        src = Path(__file__).resolve().parents[2] / "src"
        env = dict(os.environ)
        env[name] = value
        env["PYTHONPATH"] = os.pathsep.join(
            filter(None, [str(src), env.get("PYTHONPATH")])
        )

        result = subprocess.run(
            [sys.executable, "-c", "from docuseal_cli import DocusealClient"],
            env=env,
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert result.returncode == 0, result.stderr
