from __future__ import annotations

from typing import Dict, Optional

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 32
TEX_SOURCE = b"\\documentclass{article}\\begin{document}$e^{i\\pi}+1=0$\\end{document}"


def svg_of_size(size: int) -> bytes:
    """An SVG document padded with a comment to exactly `size` bytes."""
    head = b'<svg xmlns="http://www.w3.org/2000/svg"><!--'
    tail = b"--></svg>"
    return head + b"x" * (size - len(head) - len(tail)) + tail


def headers(content_type: str, geo: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    result = {"content-type": content_type}
    if geo:
        result.update(geo)
    return result
