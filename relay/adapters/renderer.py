from __future__ import annotations

import logging

import httpx

from relay.types import Renderer, RenderFailure
from server.config import Settings

logger = logging.getLogger(__name__)

TEX_CONTENT_TYPE = "application/x-tex"
PNG_CONTENT_TYPE = "image/png"


class RendererClient(Renderer):
    """Client for the external LaTeX → PNG rendering service.

    The service is opaque: source bytes go in as the request body, a PNG
    comes back. Anything else (non-2xx, a non-PNG content type, or an
    unreachable host) is a `RenderFailure` carrying the upstream body as
    diagnostic text. Renders are never retried.
    """

    def __init__(self, settings: Settings) -> None:
        self.url = settings.renderer_url or ""
        self.timeout = settings.http_timeout_seconds

    def render_endpoint(self) -> str:
        return self.url

    async def render(self, source: bytes) -> bytes:  # type: ignore[override]
        if not self.url:
            raise RuntimeError("Missing RELAY_RENDERER_URL")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.url,
                    content=source,
                    headers={"Content-Type": TEX_CONTENT_TYPE},
                )
        except httpx.RequestError as e:
            raise RenderFailure(f"Rendering service unreachable: {type(e).__name__}: {e}") from e

        content_type = response.headers.get("content-type", "").split(";", 1)[0].strip().lower()
        if not response.is_success or content_type != PNG_CONTENT_TYPE:
            logger.info(
                "Rendering service rejected source",
                extra={"status": response.status_code, "content_type": content_type},
            )
            raise RenderFailure(
                f"Rendering service answered HTTP {response.status_code} "
                f"({content_type or 'no content type'}): {response.text[:1000]}"
            )
        return response.content
