"""Logging configuration for the relay."""

from __future__ import annotations

import logging
import os
from typing import Optional

logger = logging.getLogger("relay.server")

# Requests are logged by the app's own middleware and delivery attempts by
# the webhook channel.
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging once and quiet the noisy third-party loggers.

    `level` falls back to `LOG_LEVEL`. An already-configured root logger
    (uvicorn's, pytest's) is left alone.
    """
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if logging.getLogger().handlers:
        return

    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
