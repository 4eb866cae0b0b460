"""Relay error taxonomy.

Every error carries the HTTP status used when it is surfaced to a caller and
a terse public message. Diagnostic detail stays in `detail` and only reaches
the operational log and the failure-report channel.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from fastapi import status

if TYPE_CHECKING:
    from .results import DeliveryAttempt


class RelayError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "An unexpected error occurred."

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail or self.public_message
        super().__init__(self.detail)


class ConfigurationError(RuntimeError):
    """Required settings are missing or malformed at startup."""


class InvalidContentType(RelayError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid content type."


class RateLimited(RelayError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    public_message = "Too many requests, please try again later."


class OversizePayload(RelayError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "File size exceeds the 8 MiB limit."


class RenderFailure(RelayError):
    """The rendering service answered non-2xx, non-PNG, or was unreachable."""

    status_code = status.HTTP_502_BAD_GATEWAY
    public_message = "Rendering failed."


UpstreamRenderFailure = RenderFailure


class DeliveryFailure(RelayError):
    """The channel could not be reached after exhausting retries."""

    status_code = status.HTTP_502_BAD_GATEWAY
    public_message = "Delivery failed."

    def __init__(self, detail: Optional[str] = None, attempt: Optional["DeliveryAttempt"] = None) -> None:
        super().__init__(detail)
        self.attempt = attempt


class SecondaryDeliveryFailure(RelayError):
    """The failure report itself could not be delivered. Logged, never re-reported."""

    status_code = status.HTTP_502_BAD_GATEWAY
    public_message = "Delivery failed."
