from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from relay.types import (
    DeliveryAttempt,
    DeliveryChannel,
    DeliveryFailure,
    DeliveryOutcome,
    MessageKind,
    OutboundMessage,
)
from server.config import Settings

logger = logging.getLogger(__name__)


def _classify_status(status_code: int) -> DeliveryOutcome:
    if 200 <= status_code < 300:
        return DeliveryOutcome.SUCCESS
    if status_code == 429 or status_code >= 500:
        return DeliveryOutcome.TRANSIENT_FAILURE
    return DeliveryOutcome.PERMANENT_FAILURE


class WebhookChannel(DeliveryChannel):
    """Discord-style webhook adapter implementing the DeliveryChannel protocol.

    Text messages are posted as JSON `{"content": ...}`; attachments as a
    multipart body with a `content` caption part and a `file` part. Network
    errors, 429 and 5xx answers are retried with exponential backoff up to
    `delivery_max_attempts`. Any other non-2xx answer is permanent and ends
    the delivery at once.
    """

    def __init__(self, settings: Settings) -> None:
        self.url = settings.webhook_url or ""
        self.max_attempts = max(1, settings.delivery_max_attempts)
        self.backoff_seconds = settings.delivery_backoff_seconds
        self.timeout = settings.http_timeout_seconds

    def send_endpoint(self) -> str:  # type: ignore[override]
        return self.url

    def _build_request(self, message: OutboundMessage) -> Dict[str, Any]:
        """Unpack an OutboundMessage into keyword arguments for `client.post`."""
        if message.kind == MessageKind.TEXT:
            return {"json": {"content": message.text}}
        attachment = message.attachment
        return {
            "data": {"content": message.caption},
            "files": {"file": (attachment.filename, attachment.content, attachment.mime_type)},
        }

    async def _post_once(self, client: httpx.AsyncClient, message: OutboundMessage) -> httpx.Response:
        # Rebuilt per attempt; multipart streams are consumed on send
        return await client.post(self.url, **self._build_request(message))

    async def deliver(  # type: ignore[override]
        self, message: OutboundMessage, *, retry: bool = True
    ) -> DeliveryAttempt:
        """Post a message to the channel.

        With `retry=False` exactly one attempt is made; failure reports use
        this so a broken channel never amplifies into more traffic.

        Raises:
            DeliveryFailure: every attempt failed. The last attempt record is
                attached as `attempt`.
        """
        if not self.url:
            raise RuntimeError("Missing RELAY_WEBHOOK_URL")

        max_attempts = self.max_attempts if retry else 1
        attempts = 0
        status_code: Optional[int] = None
        error: Optional[str] = None
        outcome = DeliveryOutcome.TRANSIENT_FAILURE

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for attempt in range(max_attempts):
                attempts = attempt + 1
                try:
                    response = await self._post_once(client, message)
                    status_code = response.status_code
                    outcome = _classify_status(status_code)
                    if outcome == DeliveryOutcome.SUCCESS:
                        return DeliveryAttempt(
                            target=self.url,
                            message_kind=message.kind,
                            outcome=outcome,
                            attempts=attempts,
                            status_code=status_code,
                        )
                    error = f"HTTP {status_code}: {response.text[:500]}"
                    if outcome == DeliveryOutcome.PERMANENT_FAILURE:
                        break
                except httpx.RequestError as e:
                    status_code = None
                    outcome = DeliveryOutcome.TRANSIENT_FAILURE
                    error = f"{type(e).__name__}: {e}"

                if attempt < max_attempts - 1:
                    wait = self.backoff_seconds * (2 ** attempt)
                    logger.warning(
                        "Delivery attempt %d/%d failed (%s), retrying in %.2fs",
                        attempt + 1,
                        max_attempts,
                        error,
                        wait,
                    )
                    await asyncio.sleep(wait)

        record = DeliveryAttempt(
            target=self.url,
            message_kind=message.kind,
            outcome=outcome,
            attempts=attempts,
            status_code=status_code,
            error=error,
        )
        raise DeliveryFailure(
            f"Delivery failed after {attempts} attempt(s): {error}", attempt=record
        )
