from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from .enums import MessageKind

# Outbound channel ceilings
MAX_TEXT_LENGTH = 2000
MAX_ATTACHMENT_BYTES = 8 * 1024 * 1024


class Attachment(BaseModel):
    """Binary file sent alongside a short caption.

    Fields:
        content: raw file bytes, at most `MAX_ATTACHMENT_BYTES`
        filename: name presented by the channel (e.g. "image.png")
        mime_type: content type of the `file` multipart part
    """

    model_config = ConfigDict(frozen=True)

    content: bytes
    filename: str
    mime_type: str

    @model_validator(mode="after")
    def _enforce_size_ceiling(self) -> "Attachment":
        if len(self.content) > MAX_ATTACHMENT_BYTES:
            raise ValueError(
                f"attachment exceeds {MAX_ATTACHMENT_BYTES} bytes ({len(self.content)})"
            )
        return self


class OutboundMessage(BaseModel):
    """Message ready to be posted to the delivery channel.

    Exactly one of `text` or `attachment` is populated. Truncation and the
    oversize policy are applied by the formatter before construction, so an
    instance is always deliverable as-is.

    Examples:
        >>> OutboundMessage.text_message("hello")
        >>> OutboundMessage.attachment_message(
        ...     Attachment(content=b"<svg/>", filename="image.svg", mime_type="image/svg+xml"),
        ...     caption="@everyone",
        ... )
    """

    model_config = ConfigDict(frozen=True)

    kind: MessageKind
    text: Optional[str] = None
    attachment: Optional[Attachment] = None
    caption: str = ""

    @model_validator(mode="after")
    def _enforce_single_body(self) -> "OutboundMessage":
        """Enforce the channel's message rules.

        - text messages carry text and no attachment, at most 2000 chars
        - attachment messages carry an attachment and no text body
        - captions obey the same 2000 char ceiling
        """
        if self.kind == MessageKind.TEXT:
            if self.text is None or self.attachment is not None:
                raise ValueError("text message requires text and no attachment")
            if len(self.text) > MAX_TEXT_LENGTH:
                raise ValueError(f"text exceeds {MAX_TEXT_LENGTH} characters")
        else:
            if self.attachment is None or self.text is not None:
                raise ValueError("attachment message requires an attachment and no text")
        if len(self.caption) > MAX_TEXT_LENGTH:
            raise ValueError(f"caption exceeds {MAX_TEXT_LENGTH} characters")
        return self

    @classmethod
    def text_message(cls, text: str) -> "OutboundMessage":
        return cls(kind=MessageKind.TEXT, text=text)

    @classmethod
    def attachment_message(cls, attachment: Attachment, caption: str = "") -> "OutboundMessage":
        return cls(kind=MessageKind.ATTACHMENT, attachment=attachment, caption=caption)
