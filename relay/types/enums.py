from __future__ import annotations

from enum import Enum


class ContentKind(str, Enum):
    """Closed classification of an inbound payload.

    Derived solely from the request's content-type header. `INVALID` covers
    a missing header as well as any type the relay does not understand; it
    is never guessed from the body.

    Example:
        >>> from relay.services.classifier import classify
        >>> classify("text/plain; charset=utf-8")
        <ContentKind.TEXT: 'text'>
    """

    TEXT = "text"
    MULTIPART = "multipart"
    SVG = "svg"
    LATEX = "latex"
    INVALID = "invalid"


class MessageKind(str, Enum):
    """Shape of an outbound channel message."""

    TEXT = "text"
    ATTACHMENT = "attachment"


class DeliveryOutcome(str, Enum):
    """Terminal outcome of a single delivery call.

    - SUCCESS: the channel answered 2xx
    - TRANSIENT_FAILURE: network error or 5xx/429, worth retrying
    - PERMANENT_FAILURE: any other non-2xx answer
    """

    SUCCESS = "success"
    TRANSIENT_FAILURE = "transient_failure"
    PERMANENT_FAILURE = "permanent_failure"


class ExecutionMode(str, Enum):
    """How the relay pipeline is run relative to the HTTP response.

    - SYNC: the handler awaits the whole pipeline and answers with its
      terminal outcome
    - ASYNC: the handler answers "ok" after admission and classification,
      the rest runs as a detached background task
    """

    SYNC = "sync"
    ASYNC = "async"
