import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from docuseal_cli.client import DocusealClient  # noqa: E402
from docuseal_cli.utils.http.circuit_breaker import CircuitBreaker  # noqa: E402
from docuseal_cli.utils.http.retry import RetryPolicy  # noqa: E402

TEST_URL = "https://docuseal.example.com"
TEST_API_KEY = "test-api-key"


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test to run in an asyncio event loop"
    )
    config.addinivalue_line("markers", "unit: mark test as a unit test")


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Pin the environment so local DOCUSEAL_* variables never leak in."""
    for name in (
        "DOCUSEAL_URL",
        "DOCUSEAL_API_KEY",
        "DOCUSEAL_TIMEOUT",
        "DOCUSEAL_RETRIES",
        "DOCUSEAL_RETRY_BASE_DELAY",
        "DOCUSEAL_INSECURE_SKIP_VERIFY",
        "DOCUSEAL_OUTPUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    yield


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingHandler:
    """MockTransport handler replaying a scripted list of responses.

    Each entry is a status code, an ``(status, json_body)`` tuple or an
    ``httpx.Response``. The last entry repeats once the script runs out.
    """

    def __init__(self, *script):
        self.script = list(script) or [200]
        self.requests = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        entry = self.script[min(len(self.requests), len(self.script)) - 1]
        if isinstance(entry, httpx.Response):
            return entry
        if isinstance(entry, tuple):
            status, body = entry
            if isinstance(body, (bytes, str)):
                return httpx.Response(status, content=body)
            return httpx.Response(status, content=json.dumps(body).encode())
        return httpx.Response(entry)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def sleeps(monkeypatch):
    """Replace backoff sleeps with instant ones and record the delays."""
    delays = []
    original_sleep = asyncio.sleep

    async def fake_sleep(delay, *args, **kwargs):
        delays.append(delay)
        await original_sleep(0)

    monkeypatch.setattr("docuseal_cli.utils.http.retry.asyncio.sleep", fake_sleep)
    return delays


@pytest.fixture
def make_client(fake_clock):
    """Build clients wired to a RecordingHandler and the fake clock."""
    def _make(handler, max_retries=3, base_delay=1.0, **kwargs):
        kwargs.setdefault("circuit_breaker", CircuitBreaker(clock=fake_clock))
        client = DocusealClient(
            TEST_URL,
            TEST_API_KEY,
            retry_policy=RetryPolicy(max_retries=max_retries, base_delay=base_delay),
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
        return client

    return _make


@pytest.fixture
def recording_handler():
    """The RecordingHandler class, for building scripted transports."""
    return RecordingHandler
