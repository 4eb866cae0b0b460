from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from .enums import DeliveryOutcome, MessageKind


class RateDecision(BaseModel):
    """Admission control verdict for one request.

    Attributes:
        allowed: Whether the request may proceed.
        key: Partition identifier the decision was taken for.

    Example:
        >>> RateDecision(allowed=False, key="")
    """

    allowed: bool
    key: str = ""


class DeliveryAttempt(BaseModel):
    """Record of one `deliver()` call against the channel.

    Attributes:
        target: Channel URL the message was posted to.
        message_kind: Text or attachment.
        outcome: Terminal outcome after the last attempt.
        attempts: Number of HTTP attempts made (1 when retry is disabled).
        status_code: Status of the last response, if any was received.
        error: Diagnostic text of the last failure.
    """

    target: str
    message_kind: MessageKind
    outcome: DeliveryOutcome
    attempts: int = 1
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == DeliveryOutcome.SUCCESS
