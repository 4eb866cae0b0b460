"""Core types for the relay pipeline.

This package centralizes enums, inbound/outbound models, results, errors and
collaborator protocols in one place. Most modules should import types from
here rather than directly from submodules.

Usage:
    from relay.types import OutboundMessage, DeliveryChannel, ContentKind
"""

from .enums import ContentKind, DeliveryOutcome, ExecutionMode, MessageKind
from .errors import (
    ConfigurationError,
    DeliveryFailure,
    InvalidContentType,
    OversizePayload,
    RateLimited,
    RelayError,
    RenderFailure,
    SecondaryDeliveryFailure,
    UpstreamRenderFailure,
)
from .events import GeoContext, InboundPayload
from .messages import MAX_ATTACHMENT_BYTES, MAX_TEXT_LENGTH, Attachment, OutboundMessage
from .protocols import DeliveryChannel, GeoLookup, RateLimiter, Renderer
from .results import DeliveryAttempt, RateDecision
from .api import GeoResponse, JsonMessageRequest

__all__ = [
    "ContentKind",
    "DeliveryOutcome",
    "ExecutionMode",
    "MessageKind",
    "ConfigurationError",
    "DeliveryFailure",
    "InvalidContentType",
    "OversizePayload",
    "RateLimited",
    "RelayError",
    "RenderFailure",
    "SecondaryDeliveryFailure",
    "UpstreamRenderFailure",
    "GeoContext",
    "InboundPayload",
    "MAX_ATTACHMENT_BYTES",
    "MAX_TEXT_LENGTH",
    "Attachment",
    "OutboundMessage",
    "DeliveryChannel",
    "GeoLookup",
    "RateLimiter",
    "Renderer",
    "DeliveryAttempt",
    "RateDecision",
    "GeoResponse",
    "JsonMessageRequest",
]
