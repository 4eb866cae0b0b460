"""Inbound payload classification.

`classify` is a closed function over the content-type header: it never looks
at the body and never guesses. `read_payload` applies it to a request and
captures the body into an immutable `InboundPayload`.
"""

from __future__ import annotations

from typing import AbstractSet, List, Optional, Tuple

from fastapi import Request
from starlette.datastructures import UploadFile

from relay.types import ContentKind, InboundPayload, InvalidContentType

_EXACT_TYPES = {
    "text/plain": ContentKind.TEXT,
    "image/svg+xml": ContentKind.SVG,
    "application/x-tex": ContentKind.LATEX,
}

TEXT_ROUTE_KINDS = frozenset({ContentKind.TEXT, ContentKind.MULTIPART})
SVG_ROUTE_KINDS = frozenset({ContentKind.SVG})
TEX_ROUTE_KINDS = frozenset({ContentKind.LATEX, ContentKind.MULTIPART})


def classify(content_type: Optional[str]) -> ContentKind:
    """Map a content-type header to a `ContentKind`.

    Parameters such as `; charset=utf-8` or `; boundary=...` are ignored and
    matching is case-insensitive. A missing header is `INVALID`.
    """
    if not content_type:
        return ContentKind.INVALID
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == "multipart/form-data":
        return ContentKind.MULTIPART
    return _EXACT_TYPES.get(media_type, ContentKind.INVALID)


def format_form_fields(fields: Tuple[Tuple[str, str], ...]) -> str:
    """Concatenate form fields as `"key: value\\n"` lines in submitted order."""
    return "".join(f"{key}: {value}\n" for key, value in fields)


def _is_tex_upload(value: object) -> bool:
    return isinstance(value, UploadFile) and (value.filename or "").lower().endswith(".tex")


async def read_payload(request: Request, accepted: AbstractSet[ContentKind]) -> InboundPayload:
    """Classify a request and capture its body.

    Multipart submissions are read as text fields, except on routes that
    accept LaTeX, where the first `.tex`-named file field becomes the source.

    Raises:
        InvalidContentType: the header is missing, unknown, or names a kind
            this route does not accept.
    """
    content_type = request.headers.get("content-type", "")
    kind = classify(content_type)
    if kind not in accepted:
        raise InvalidContentType(f"Unsupported content type {content_type!r} for {request.url.path}")

    if kind != ContentKind.MULTIPART:
        return InboundPayload(kind=kind, content_type=content_type, body=await request.body())

    form = await request.form()
    try:
        if ContentKind.LATEX in accepted:
            for _, value in form.multi_items():
                if _is_tex_upload(value):
                    return InboundPayload(
                        kind=ContentKind.LATEX,
                        content_type=content_type,
                        body=await value.read(),
                        filename=value.filename,
                    )
            raise InvalidContentType("Multipart submission carries no .tex file field")

        fields: List[Tuple[str, str]] = []
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                fields.append((key, value.filename or ""))
            else:
                fields.append((key, value))
        return InboundPayload(kind=ContentKind.MULTIPART, content_type=content_type, fields=tuple(fields))
    finally:
        await form.close()
