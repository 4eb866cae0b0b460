from __future__ import annotations

import json

import httpx
import pytest
import respx

from relay.adapters.webhook import WebhookChannel
from relay.types import Attachment, DeliveryFailure, DeliveryOutcome, MessageKind, OutboundMessage
from server.config import Settings
from tests.conftest import WEBHOOK_URL


@pytest.fixture()
def channel(settings: Settings) -> WebhookChannel:
    return WebhookChannel(settings)


@pytest.mark.asyncio
@respx.mock
async def test_send_text_posts_json_content(channel: WebhookChannel) -> None:
    route = respx.post(channel.send_endpoint()).mock(return_value=httpx.Response(204))

    attempt = await channel.deliver(OutboundMessage.text_message("Hello!"))

    assert route.called
    sent = json.loads(route.calls.last.request.content.decode())
    assert sent == {"content": "Hello!"}
    assert attempt.ok
    assert attempt.attempts == 1
    assert attempt.status_code == 204
    assert attempt.message_kind == MessageKind.TEXT


@pytest.mark.asyncio
@respx.mock
async def test_send_attachment_posts_content_and_file_parts(channel: WebhookChannel) -> None:
    route = respx.post(WEBHOOK_URL).mock(return_value=httpx.Response(200, json={"id": "m1"}))
    message = OutboundMessage.attachment_message(
        Attachment(content=b"<svg/>", filename="image.svg", mime_type="image/svg+xml"),
        caption="@everyone\nUS CA Mountain View",
    )

    attempt = await channel.deliver(message)

    request = route.calls.last.request
    assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
    body = request.content
    assert b'Content-Disposition: form-data; name="content"\r\n\r\n@everyone\nUS CA Mountain View\r\n' in body
    assert b'Content-Disposition: form-data; name="file"; filename="image.svg"' in body
    assert b"Content-Type: image/svg+xml" in body
    assert b"<svg/>" in body
    assert attempt.message_kind == MessageKind.ATTACHMENT


@pytest.mark.asyncio
@respx.mock
async def test_retries_then_succeeds(channel: WebhookChannel) -> None:
    route = respx.post(WEBHOOK_URL).mock(
        side_effect=[httpx.Response(429), httpx.Response(502), httpx.Response(204)]
    )

    attempt = await channel.deliver(OutboundMessage.text_message("x"))

    assert route.call_count == 3
    assert attempt.attempts == 3
    assert attempt.outcome == DeliveryOutcome.SUCCESS


@pytest.mark.asyncio
@respx.mock
async def test_attachment_retry_resends_full_body(channel: WebhookChannel) -> None:
    route = respx.post(WEBHOOK_URL).mock(side_effect=[httpx.Response(500), httpx.Response(204)])
    message = OutboundMessage.attachment_message(
        Attachment(content=b"\x89PNG-data", filename="image.png", mime_type="image/png")
    )

    await channel.deliver(message)

    assert route.call_count == 2
    assert all(b"\x89PNG-data" in call.request.content for call in route.calls)


@pytest.mark.asyncio
@respx.mock
async def test_rejected_message_is_not_retried(channel: WebhookChannel) -> None:
    route = respx.post(WEBHOOK_URL).mock(return_value=httpx.Response(400, text="bad embed"))

    with pytest.raises(DeliveryFailure) as excinfo:
        await channel.deliver(OutboundMessage.text_message("x"))

    assert route.call_count == 1
    assert excinfo.value.attempt is not None
    assert excinfo.value.attempt.attempts == 1
    assert excinfo.value.attempt.outcome == DeliveryOutcome.PERMANENT_FAILURE
    assert excinfo.value.attempt.status_code == 400
    assert "bad embed" in excinfo.value.detail


@pytest.mark.asyncio
@respx.mock
async def test_exhausted_retries_raise_delivery_failure(channel: WebhookChannel) -> None:
    route = respx.post(WEBHOOK_URL).mock(return_value=httpx.Response(503, text="overloaded"))

    with pytest.raises(DeliveryFailure) as excinfo:
        await channel.deliver(OutboundMessage.text_message("x"))

    assert route.call_count == 3
    assert excinfo.value.attempt.attempts == 3
    assert excinfo.value.attempt.outcome == DeliveryOutcome.TRANSIENT_FAILURE
    assert excinfo.value.detail == "Delivery failed after 3 attempt(s): HTTP 503: overloaded"


@pytest.mark.asyncio
@respx.mock
async def test_network_error_is_transient(channel: WebhookChannel) -> None:
    respx.post(WEBHOOK_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))

    with pytest.raises(DeliveryFailure) as excinfo:
        await channel.deliver(OutboundMessage.text_message("x"))

    assert excinfo.value.attempt.outcome == DeliveryOutcome.TRANSIENT_FAILURE
    assert excinfo.value.attempt.status_code is None
    assert "ConnectTimeout" in excinfo.value.detail


@pytest.mark.asyncio
@respx.mock
async def test_retry_disabled_makes_a_single_attempt(channel: WebhookChannel) -> None:
    route = respx.post(WEBHOOK_URL).mock(return_value=httpx.Response(500))

    with pytest.raises(DeliveryFailure):
        await channel.deliver(OutboundMessage.text_message("x"), retry=False)

    assert route.call_count == 1


@pytest.mark.asyncio
async def test_missing_url_is_a_configuration_error(settings: Settings) -> None:
    channel = WebhookChannel(settings.model_copy(update={"webhook_url": None}))
    with pytest.raises(RuntimeError):
        await channel.deliver(OutboundMessage.text_message("x"))


def test_message_requires_exactly_one_body() -> None:
    with pytest.raises(ValueError):
        OutboundMessage(kind=MessageKind.TEXT)
    with pytest.raises(ValueError):
        OutboundMessage(
            kind=MessageKind.TEXT,
            text="x",
            attachment=Attachment(content=b"x", filename="a", mime_type="b"),
        )
    with pytest.raises(ValueError):
        OutboundMessage(kind=MessageKind.ATTACHMENT, text="x")


def test_message_rejects_over_ceiling_content() -> None:
    with pytest.raises(ValueError):
        OutboundMessage.text_message("x" * 2001)
    with pytest.raises(ValueError):
        Attachment(content=b"x" * (8 * 1024 * 1024 + 1), filename="a.svg", mime_type="image/svg+xml")
