"""The relay pipeline: render, format, deliver, report.

Admission control and classification happen in the HTTP layer before a
pipeline run starts. A run then either completes inside the request
(`run_sync`) or as a detached background task (`run_detached`).
"""

from __future__ import annotations

import logging

from relay.types import (
    MAX_ATTACHMENT_BYTES,
    ContentKind,
    DeliveryAttempt,
    DeliveryChannel,
    ExecutionMode,
    GeoContext,
    InboundPayload,
    OutboundMessage,
    OversizePayload,
    RelayError,
    Renderer,
)

from .formatter import PNG_MIME_TYPE, SVG_FILENAME, SVG_MIME_TYPE, ContentFormatter, png_filename
from .reporter import FailureReporter

logger = logging.getLogger(__name__)


class RelayPipeline:
    def __init__(
        self,
        channel: DeliveryChannel,
        renderer: Renderer,
        formatter: ContentFormatter,
        reporter: FailureReporter,
        mode: ExecutionMode = ExecutionMode.ASYNC,
    ) -> None:
        self.channel = channel
        self.renderer = renderer
        self.formatter = formatter
        self.reporter = reporter
        self.mode = mode

    def _asset_message(
        self, geo: GeoContext, content: bytes, filename: str, mime_type: str
    ) -> OutboundMessage:
        """Apply the oversize policy before wrapping an asset.

        Synchronous runs reject the request; detached runs substitute a
        size-exceeded notification for the attachment.
        """
        if len(content) > MAX_ATTACHMENT_BYTES:
            if self.mode == ExecutionMode.SYNC:
                raise OversizePayload(f"{filename} is {len(content)} bytes, limit is {MAX_ATTACHMENT_BYTES}")
            logger.info("Asset %s over size ceiling (%d bytes), sending notice", filename, len(content))
            return self.formatter.size_exceeded_message(geo, filename, len(content))
        return self.formatter.attachment_message(geo, content, filename, mime_type)

    async def build_message(self, payload: InboundPayload, geo: GeoContext) -> OutboundMessage:
        if payload.kind in (ContentKind.TEXT, ContentKind.MULTIPART):
            return self.formatter.text_message(geo, self.formatter.payload_text(payload))
        if payload.kind == ContentKind.SVG:
            return self._asset_message(geo, payload.body, payload.filename or SVG_FILENAME, SVG_MIME_TYPE)
        if payload.kind == ContentKind.LATEX:
            image = await self.renderer.render(payload.body)
            return self._asset_message(geo, image, png_filename(payload.filename), PNG_MIME_TYPE)
        raise ValueError(f"Cannot relay payload of kind {payload.kind}")

    async def process(self, payload: InboundPayload, geo: GeoContext) -> DeliveryAttempt:
        message = await self.build_message(payload, geo)
        return await self.channel.deliver(message)

    async def run_sync(self, route: str, payload: InboundPayload, geo: GeoContext) -> DeliveryAttempt:
        """Run the pipeline inside the request.

        Render and delivery failures are reported once through the channel
        and re-raised for the HTTP layer to answer. Oversize rejections are
        client errors and are not reported. Any other exception propagates
        to the application's outermost handler, which reports it.
        """
        try:
            return await self.process(payload, geo)
        except OversizePayload:
            raise
        except RelayError as e:
            logger.warning("Relay of %s failed: %s", route, e.detail)
            await self.reporter.report(route, e)
            raise

    async def run_detached(self, route: str, payload: InboundPayload, geo: GeoContext) -> None:
        """Run the pipeline as a background task; nothing escapes."""
        try:
            attempt = await self.process(payload, geo)
        except Exception as e:
            logger.warning("Relay of %s failed: %s", route, e, exc_info=not isinstance(e, RelayError))
            await self.reporter.report(route, e)
            return
        logger.info(
            "Relayed %s request",
            route,
            extra={"kind": attempt.message_kind.value, "attempts": attempt.attempts},
        )
