"""DocuSeal API client facade.

:class:`DocusealClient` owns the connection configuration (base URL, API
key, timeout, TLS verification), the retry policy and one circuit
breaker. Each verb runs a single logical operation through the retry
controller, which in turn performs single attempts via
:func:`~docuseal_cli.utils.http.request.send_once`.

Example::

    async with DocusealClient("https://docuseal.example.com", api_key) as client:
        template = await client.get("/templates/1", result_type=Template)
"""

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Dict, Optional, TypeVar

import httpx

from .config.settings import Settings
from .utils.http.circuit_breaker import CircuitBreaker
from .utils.http.request import send_once
from .utils.http.retry import RetryController, RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

API_PATH = "/api"
DEFAULT_TIMEOUT = 30.0

AUTH_HEADER = "X-Auth-Token"
IDEMPOTENCY_HEADER = "Idempotency-Key"


def normalize_base_url(base_url: str) -> str:
    """Strip one trailing slash and make the URL end in ``/api`` once.

    Normalizing an already normalized URL returns it unchanged.

    :param base_url: URL of the DocuSeal instance as entered by the user
    :type base_url: str
    :return: Base URL every request path is appended to
    :rtype: str
    """
    if base_url.endswith("/"):
        base_url = base_url[:-1]
    if not base_url.endswith(API_PATH):
        base_url += API_PATH
    return base_url


def new_idempotency_key() -> str:
    return str(uuid.uuid4())


async def call_with_timeout(awaitable: Awaitable[T], timeout: Optional[float]) -> T:
    """Bound one logical operation, retries included, by wall-clock time.

    The timeout should exceed ``RetryPolicy.worst_case_delay`` or retries
    are cut short. Expiry raises ``asyncio.TimeoutError`` unchanged.
    """
    if timeout is None:
        return await awaitable
    return await asyncio.wait_for(awaitable, timeout)


class DocusealClient:
    """Resilient client for the DocuSeal REST API.

    :param base_url: DocuSeal instance URL, normalized to end in ``/api``
    :type base_url: str
    :param api_key: API key sent in the ``X-Auth-Token`` header
    :type api_key: str
    :param timeout: Per-request HTTP timeout in seconds
    :type timeout: float
    :param verify: Whether to verify TLS certificates
    :type verify: bool
    :param retry_policy: Retry policy for rate-limited requests
    :type retry_policy: Optional[RetryPolicy]
    :param circuit_breaker: Breaker to use instead of a fresh one
    :type circuit_breaker: Optional[CircuitBreaker]
    :param transport: Optional httpx transport, e.g. ``httpx.MockTransport``
    :type transport: Optional[httpx.AsyncBaseTransport]
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = True,
        retry_policy: Optional[RetryPolicy] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = normalize_base_url(base_url)
        self.api_key = api_key
        self.verify = verify
        self.retry_policy = retry_policy or RetryPolicy()
        self.circuit_breaker = circuit_breaker or CircuitBreaker()
        self._retry = RetryController(self.retry_policy, self.circuit_breaker)
        self._http = httpx.AsyncClient(
            timeout=timeout, verify=verify, transport=transport
        )

        if not verify:
            logger.warning("TLS certificate verification disabled")
        if self.base_url.startswith("http://"):
            logger.warning(
                "Using non-HTTPS URL. Credentials will be transmitted insecurely."
            )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "DocusealClient":
        """Build a client from configuration.

        :raises NotConfiguredError: If URL or API key is missing
        """
        url, api_key = settings.require_credentials()
        return cls(
            url,
            api_key,
            timeout=settings.docuseal_timeout,
            verify=not settings.docuseal_insecure_skip_verify,
            retry_policy=RetryPolicy(
                max_retries=settings.docuseal_retries,
                base_delay=settings.docuseal_retry_base_delay,
            ),
            **kwargs,
        )

    async def __aenter__(self) -> "DocusealClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self, idempotency_key: Optional[str] = None) -> Dict[str, str]:
        headers = {
            AUTH_HEADER: self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if idempotency_key:
            headers[IDEMPOTENCY_HEADER] = idempotency_key
        return headers

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        result_type: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        idempotency_key: Optional[str] = None,
    ) -> Any:
        """Run one logical operation, retrying throttled attempts.

        POST requests carry an idempotency key, generated once here and
        reused by every retry of the operation.
        """
        method = method.upper()
        if method == "POST" and not idempotency_key:
            idempotency_key = new_idempotency_key()
        url = self.base_url + path
        headers = self._headers(idempotency_key)

        async def attempt_once():
            return await send_once(
                self._http,
                method,
                url,
                headers,
                body=body,
                result_type=result_type,
                params=params,
            )

        return await self._retry.run(attempt_once)

    async def get(
        self,
        path: str,
        result_type: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        return await self.request("GET", path, result_type=result_type, params=params)

    async def post(
        self,
        path: str,
        body: Any = None,
        result_type: Optional[Any] = None,
        idempotency_key: Optional[str] = None,
    ) -> Any:
        return await self.request(
            "POST",
            path,
            body=body,
            result_type=result_type,
            idempotency_key=idempotency_key,
        )

    async def put(
        self, path: str, body: Any = None, result_type: Optional[Any] = None
    ) -> Any:
        return await self.request("PUT", path, body=body, result_type=result_type)

    async def delete(self, path: str, result_type: Optional[Any] = None) -> Any:
        return await self.request("DELETE", path, result_type=result_type)
