from __future__ import annotations

import pytest

from relay.services.classifier import classify, format_form_fields
from relay.types import ContentKind


@pytest.mark.parametrize(
    "content_type, expected",
    [
        ("text/plain", ContentKind.TEXT),
        ("text/plain; charset=utf-8", ContentKind.TEXT),
        ("TEXT/PLAIN", ContentKind.TEXT),
        ("multipart/form-data; boundary=abc123", ContentKind.MULTIPART),
        ("image/svg+xml", ContentKind.SVG),
        ("application/x-tex", ContentKind.LATEX),
        ("application/json", ContentKind.INVALID),
        ("image/png", ContentKind.INVALID),
        ("text/plainish", ContentKind.INVALID),
        ("", ContentKind.INVALID),
        (None, ContentKind.INVALID),
    ],
)
def test_classify(content_type, expected) -> None:
    assert classify(content_type) == expected


def test_form_fields_keep_submitted_order() -> None:
    fields = (("b", "2"), ("a", "1"), ("b", "3"))
    assert format_form_fields(fields) == "b: 2\na: 1\nb: 3\n"


def test_no_form_fields_is_empty() -> None:
    assert format_form_fields(()) == ""
