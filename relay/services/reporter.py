from __future__ import annotations

import logging

from relay.types import DeliveryChannel, RelayError, SecondaryDeliveryFailure

from .formatter import ContentFormatter

logger = logging.getLogger(__name__)


def describe(error: BaseException) -> str:
    if isinstance(error, RelayError):
        return error.detail
    return f"{type(error).__name__}: {error}"


class FailureReporter:
    """Reports pipeline failures to the delivery channel.

    Each call makes exactly one delivery attempt with retries disabled. If
    that attempt fails too, the failure is logged and dropped: it is never
    handed back to the reporter, so a broken channel cannot cause recursive
    self-reporting.
    """

    def __init__(self, channel: DeliveryChannel, formatter: ContentFormatter) -> None:
        self.channel = channel
        self.formatter = formatter

    async def report(self, route: str, error: BaseException) -> bool:
        """Send one diagnostic message for `error`. Returns True if it was delivered."""
        message = self.formatter.failure_message(route, describe(error))
        try:
            await self.channel.deliver(message, retry=False)
        except Exception as e:
            secondary = SecondaryDeliveryFailure(f"Failure report for {route} not delivered: {describe(e)}")
            secondary.__cause__ = e
            logger.error("%s (original error: %s)", secondary.detail, describe(error), exc_info=secondary)
            return False
        logger.info("Failure report delivered", extra={"route": route})
        return True
