"""Webhook operations.

URLs and event types are validated locally before any request is sent.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .client import DocusealClient
from .validation import validate_webhook_events, validate_webhook_url


class Webhook(BaseModel):
    """Webhook configuration as returned by the API."""

    id: int
    url: str
    events: List[str] = Field(default_factory=list)
    secret: Optional[str] = None
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def _page_params(limit: int, after: int, before: int) -> Dict[str, Any]:
    params = {"limit": limit, "after": after, "before": before}
    return {key: value for key, value in params.items() if value > 0}


async def list_webhooks(
    client: DocusealClient, limit: int = 0, after: int = 0, before: int = 0
) -> List[Webhook]:
    result = await client.get(
        "/webhooks",
        result_type=List[Webhook],
        params=_page_params(limit, after, before),
    )
    return result or []


async def get_webhook(client: DocusealClient, webhook_id: int) -> Optional[Webhook]:
    return await client.get(f"/webhooks/{webhook_id}", result_type=Webhook)


async def create_webhook(
    client: DocusealClient, url: str, events: List[str]
) -> Optional[Webhook]:
    """Create a webhook.

    :raises ValidationError: If the URL or an event type is rejected
    """
    validate_webhook_url(url)
    validate_webhook_events(events)
    return await client.post(
        "/webhooks", body={"url": url, "events": list(events)}, result_type=Webhook
    )


async def update_webhook(
    client: DocusealClient,
    webhook_id: int,
    url: Optional[str] = None,
    events: Optional[List[str]] = None,
    active: Optional[bool] = None,
) -> Optional[Webhook]:
    """Update the given fields of a webhook; omitted fields are unchanged."""
    body: Dict[str, Any] = {}
    if url:
        validate_webhook_url(url)
        body["url"] = url
    if events:
        validate_webhook_events(events)
        body["events"] = list(events)
    if active is not None:
        body["active"] = active
    return await client.put(f"/webhooks/{webhook_id}", body=body, result_type=Webhook)


async def delete_webhook(client: DocusealClient, webhook_id: int) -> None:
    await client.delete(f"/webhooks/{webhook_id}")
