from __future__ import annotations

from pathlib import PurePosixPath
from typing import Optional

from relay.types import (
    MAX_ATTACHMENT_BYTES,
    MAX_TEXT_LENGTH,
    Attachment,
    ContentKind,
    GeoContext,
    InboundPayload,
    OutboundMessage,
    OversizePayload,
)

from .classifier import format_form_fields

SVG_FILENAME = "image.svg"
PNG_FILENAME = "image.png"
SVG_MIME_TYPE = "image/svg+xml"
PNG_MIME_TYPE = "image/png"


def truncate(text: str, limit: int = MAX_TEXT_LENGTH) -> str:
    """Cut at a character position. May split a word."""
    return text[:limit]


def png_filename(source_filename: Optional[str]) -> str:
    """`notes.tex` renders to `notes.png`; anonymous sources to `image.png`."""
    if not source_filename:
        return PNG_FILENAME
    stem = PurePosixPath(source_filename.replace("\\", "/")).stem
    return f"{stem}.png" if stem else PNG_FILENAME


class ContentFormatter:
    """Builds outbound messages within the channel's ceilings.

    Every text is composed as `"<mention>\\n<geo>\\n<body>"` and truncated
    to `MAX_TEXT_LENGTH` characters; attachments above `MAX_ATTACHMENT_BYTES`
    are never wrapped into a message.
    """

    def __init__(self, mention: str) -> None:
        self.mention = mention

    def compose(self, geo: GeoContext, body: str) -> str:
        return f"{self.mention}\n{geo.summary()}\n{body}"

    def text_message(self, geo: GeoContext, body: str) -> OutboundMessage:
        return OutboundMessage.text_message(truncate(self.compose(geo, body)))

    def payload_text(self, payload: InboundPayload) -> str:
        if payload.kind == ContentKind.MULTIPART:
            return format_form_fields(payload.fields)
        return payload.text()

    def caption(self, geo: GeoContext) -> str:
        return truncate(f"{self.mention}\n{geo.summary()}")

    def attachment_message(
        self, geo: GeoContext, content: bytes, filename: str, mime_type: str
    ) -> OutboundMessage:
        """Wrap an asset for delivery.

        Raises:
            OversizePayload: `content` is larger than `MAX_ATTACHMENT_BYTES`.
        """
        if len(content) > MAX_ATTACHMENT_BYTES:
            raise OversizePayload(f"{filename} is {len(content)} bytes, limit is {MAX_ATTACHMENT_BYTES}")
        return OutboundMessage.attachment_message(
            Attachment(content=content, filename=filename, mime_type=mime_type),
            caption=self.caption(geo),
        )

    def size_exceeded_message(self, geo: GeoContext, filename: str, size: int) -> OutboundMessage:
        body = f"File size exceeds the 8 MiB limit: {filename} is {size} bytes."
        return self.text_message(geo, body)

    def failure_message(self, route: str, detail: str) -> OutboundMessage:
        return OutboundMessage.text_message(
            truncate(f"{self.mention}\nFailed to relay {route} request: {detail}")
        )
