from __future__ import annotations

from typing import Mapping, Protocol

from .events import GeoContext
from .messages import OutboundMessage
from .results import DeliveryAttempt, RateDecision


class DeliveryChannel(Protocol):
    """Protocol for the outbound notification channel.

    Concrete implementations encapsulate the channel's HTTP wire format so
    the pipeline stays channel-agnostic.

    Responsibilities:
        - Convert `OutboundMessage` to the channel payload and post it
        - Retry failed posts according to the configured policy
        - Skip retries when asked (failure reports)

    Minimal example:
        >>> import httpx
        >>> from relay.types import DeliveryAttempt, DeliveryChannel, DeliveryOutcome
        >>> class ExampleChannel(DeliveryChannel):
        ...     url = "https://example.com/hook"
        ...     def send_endpoint(self) -> str:  # type: ignore[override]
        ...         return self.url
        ...     async def deliver(self, message, *, retry=True):  # type: ignore[override]
        ...         async with httpx.AsyncClient(timeout=10) as client:
        ...             r = await client.post(self.url, json={"content": message.text})
        ...         return DeliveryAttempt(
        ...             target=self.url,
        ...             message_kind=message.kind,
        ...             outcome=DeliveryOutcome.SUCCESS if r.is_success else DeliveryOutcome.PERMANENT_FAILURE,
        ...         )
    """

    def send_endpoint(self) -> str:
        """Return the URL messages are posted to."""
        ...

    async def deliver(self, message: OutboundMessage, *, retry: bool = True) -> DeliveryAttempt:
        """Post a message; raise `DeliveryFailure` when every attempt failed."""
        ...


class Renderer(Protocol):
    """Protocol for the external LaTeX rendering service."""

    async def render(self, source: bytes) -> bytes:
        """Return PNG bytes or raise `RenderFailure`."""
        ...


class RateLimiter(Protocol):
    """Protocol for the admission control decision service.

    The counter store is owned by the implementation; callers only ever see
    a `RateDecision`.
    """

    async def check(self, key: str) -> RateDecision:
        ...


class GeoLookup(Protocol):
    """Protocol for request geolocation. Implementations must never raise."""

    def lookup(self, headers: Mapping[str, str]) -> GeoContext:
        ...
