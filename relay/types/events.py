from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from .enums import ContentKind


class GeoContext(BaseModel):
    """Best-effort origin of an inbound request.

    All fields are optional; an empty context is a valid, non-error state.

    Example:
        >>> GeoContext(country="US", region="CA", city="Mountain View").summary()
        'US CA Mountain View'
        >>> GeoContext(country="US").summary()
        'US  '
    """

    model_config = ConfigDict(frozen=True)

    country: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None

    def summary(self) -> str:
        """Render as `"<country> <region> <city>"`, absent fields left empty."""
        return f"{self.country or ''} {self.region or ''} {self.city or ''}"


class InboundPayload(BaseModel):
    """Inbound request body captured once the classifier accepted it.

    Attributes:
        kind: Classification derived from the content-type header.
        content_type: The raw header value as received.
        body: Raw body bytes (text, SVG or LaTeX source).
        filename: Name of the uploaded file when the body came from a
            multipart file field.
        fields: Form field/value pairs in submitted order (multipart text).

    The model is frozen so a background task can own it after the handler
    returns without sharing anything mutable with the request.
    """

    model_config = ConfigDict(frozen=True)

    kind: ContentKind
    content_type: str = ""
    body: bytes = b""
    filename: Optional[str] = None
    fields: tuple[tuple[str, str], ...] = ()

    def text(self) -> str:
        """Decode the body as UTF-8, replacing undecodable bytes."""
        return self.body.decode("utf-8", errors="replace")
