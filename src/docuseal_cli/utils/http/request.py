"""Single-attempt request execution and response decoding.

:func:`send_once` performs exactly one HTTP exchange. Error statuses
become :class:`APIError` without any decoding; successful bodies are
decoded by :func:`decode_response`, which accepts both the bare payload
and the ``{"data": ...}`` envelope some DocuSeal versions return.
"""

import json
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ...exceptions import APIError, ResponseDecodeError
from ..security import sanitize_headers

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100
ENVELOPE_KEY = "data"
ADAPTER_CACHE_SIZE = 128


@lru_cache(maxsize=ADAPTER_CACHE_SIZE)
def _cached_adapter(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


def _adapter_for(result_type: Any) -> TypeAdapter:
    try:
        hash(result_type)
    except TypeError:
        # e.g. Annotated[...] carrying unhashable metadata
        return TypeAdapter(result_type)
    return _cached_adapter(result_type)


def encode_body(body: Any) -> Any:
    """Turn a request body into JSON-compatible data.

    Models are dumped without unset optional fields, at the top level and
    when nested in dicts or lists; datetimes, enums and the like become
    their JSON forms.
    """
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", exclude_none=True)
    return _adapter_for(Any).dump_python(body, mode="json", exclude_none=True)


def body_preview(raw: bytes) -> str:
    """First :data:`PREVIEW_LENGTH` characters of a body, for diagnostics."""
    text = raw.decode("utf-8", errors="replace")
    if len(text) > PREVIEW_LENGTH:
        text = text[:PREVIEW_LENGTH] + "..."
    return text


def decode_response(raw: bytes, result_type: Optional[Any] = None) -> Any:
    """Decode a successful response body into ``result_type``.

    :param raw: Response body
    :type raw: bytes
    :param result_type: Any type a pydantic ``TypeAdapter`` accepts, or
                        None to ignore the body
    :return: The decoded value, or None for an empty body or no type
    :raises ResponseDecodeError: If neither the body nor its ``data``
                                 member matches ``result_type``
    """
    if result_type is None or not raw:
        return None

    adapter = _adapter_for(result_type)
    try:
        return adapter.validate_json(raw)
    except PydanticValidationError as direct_error:
        try:
            envelope = json.loads(raw)
        except ValueError:
            envelope = None
        if isinstance(envelope, dict) and ENVELOPE_KEY in envelope:
            try:
                return adapter.validate_python(envelope[ENVELOPE_KEY])
            except PydanticValidationError:
                pass
        raise ResponseDecodeError(body_preview(raw)) from direct_error


async def send_once(
    http_client: httpx.AsyncClient,
    method: str,
    url: str,
    headers: Dict[str, str],
    body: Any = None,
    result_type: Optional[Any] = None,
    params: Optional[Dict[str, Any]] = None,
) -> Any:
    """Perform one HTTP attempt and map it to a value or an error.

    :param http_client: Client carrying timeout and TLS configuration
    :type http_client: httpx.AsyncClient
    :param method: HTTP method
    :type method: str
    :param url: Absolute request URL
    :type url: str
    :param headers: Complete request headers
    :type headers: Dict[str, str]
    :param body: Optional request body, JSON-encoded when present
    :param result_type: Optional type to decode a successful body into
    :param params: Optional query parameters
    :return: The decoded body, or None
    :raises APIError: If the status code is 400 or above
    :raises httpx.RequestError: On transport failures, unwrapped
    """
    request_kwargs: Dict[str, Any] = {"headers": headers}
    if body is not None:
        request_kwargs["content"] = json.dumps(encode_body(body))
    if params:
        request_kwargs["params"] = params

    logger.debug(f"{method} {url} headers={sanitize_headers(headers)}")
    response = await http_client.request(method, url, **request_kwargs)
    raw = response.content
    logger.debug(f"{method} {url} -> {response.status_code} ({len(raw)} bytes)")

    if response.status_code >= 400:
        raise APIError(response.status_code, response.text)

    return decode_response(raw, result_type)
