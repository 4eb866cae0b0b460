"""ASGI entrypoint: `uvicorn main:app`."""

from __future__ import annotations

import uvicorn

from server.app import create_app
from server.config import get_settings

app = create_app()


if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(
        "main:app",
        host=_settings.server_host,
        port=_settings.server_port,
        log_level=_settings.log_level.lower(),
    )
