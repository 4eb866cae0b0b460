"""Configuration management for the relay."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from relay.types import ConfigurationError, ExecutionMode


def _load_env_file() -> None:
    """Load .env from root directory if present."""
    env_path = Path(__file__).parent.parent / ".env"
    if not env_path.is_file():
        return
    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#") and "=" in stripped:
            key, value = stripped.split("=", 1)
            key, value = key.strip(), value.strip().strip("'\"")
            if key and value and key not in os.environ:
                os.environ[key] = value


_load_env_file()


DEFAULT_APP_NAME = "Webhook Relay"
DEFAULT_APP_VERSION = "0.1.0"


def _env(name: str, fallback: Optional[str] = None):
    return lambda: os.getenv(name, fallback)


def _env_int(name: str, fallback: int):
    def _read() -> int:
        try:
            return int(os.getenv(name, str(fallback)))
        except (TypeError, ValueError):
            return fallback

    return _read


def _env_float(name: str, fallback: float):
    def _read() -> float:
        try:
            return float(os.getenv(name, str(fallback)))
        except (TypeError, ValueError):
            return fallback

    return _read


def parse_rate_limit(raw: str) -> Tuple[int, float]:
    """Parse `"<limit>/<seconds>"` into `(limit, period_seconds)`.

    >>> parse_rate_limit("10/60")
    (10, 60.0)
    """
    try:
        limit_raw, period_raw = raw.split("/", 1)
        limit, period = int(limit_raw), float(period_raw)
    except (AttributeError, ValueError):
        raise ConfigurationError(
            f"RELAY_RATE_LIMIT must look like '<limit>/<seconds>', got {raw!r}"
        ) from None
    if limit < 1 or period <= 0:
        raise ConfigurationError("RELAY_RATE_LIMIT limit and period must be positive")
    return limit, period


class Settings(BaseModel):
    """Relay settings, read from the environment when instantiated."""

    # App metadata
    app_name: str = Field(default=DEFAULT_APP_NAME)
    app_version: str = Field(default=DEFAULT_APP_VERSION)

    # Server runtime
    server_host: str = Field(default_factory=_env("RELAY_HOST", "0.0.0.0"))
    server_port: int = Field(default_factory=_env_int("RELAY_PORT", 8000))

    # Environment
    env: str = Field(default_factory=_env("ENV", "dev"))
    log_level: str = Field(default_factory=_env("LOG_LEVEL", "INFO"))

    # HTTP behaviour
    cors_allow_origins_raw: str = Field(default_factory=_env("CORS_ORIGINS", "*"))
    enable_docs: bool = Field(default_factory=lambda: os.getenv("RELAY_ENABLE_DOCS", "1") != "0")
    docs_url: Optional[str] = Field(default_factory=_env("DOCS_URL", "/docs"))

    # Delivery channel (required)
    webhook_url: Optional[str] = Field(default_factory=_env("RELAY_WEBHOOK_URL"))
    mention: str = Field(default_factory=_env("RELAY_MENTION", "@everyone"))
    delivery_max_attempts: int = Field(default_factory=_env_int("RELAY_DELIVERY_MAX_ATTEMPTS", 3))
    delivery_backoff_seconds: float = Field(
        default_factory=_env_float("RELAY_DELIVERY_BACKOFF_SECONDS", 0.5)
    )
    http_timeout_seconds: float = Field(default_factory=_env_float("RELAY_HTTP_TIMEOUT_SECONDS", 15.0))

    # Rendering service (required)
    renderer_url: Optional[str] = Field(default_factory=_env("RELAY_RENDERER_URL"))

    # Admission control (required). The key is constant, so every caller
    # shares one service-wide bucket.
    rate_limit_raw: Optional[str] = Field(default_factory=_env("RELAY_RATE_LIMIT"))
    rate_limit_key: str = Field(default_factory=_env("RELAY_RATE_LIMIT_KEY", ""))

    # Execution mode: "sync" also surfaces failures to the caller, "async"
    # only reports them through the channel.
    mode: ExecutionMode = Field(
        default_factory=lambda: os.getenv("RELAY_MODE", ExecutionMode.ASYNC.value).strip().lower(),
        validate_default=True,
    )

    # Geolocation headers set by the edge proxy
    geo_country_header: str = Field(default_factory=_env("RELAY_GEO_COUNTRY_HEADER", "CF-IPCountry"))
    geo_region_header: str = Field(default_factory=_env("RELAY_GEO_REGION_HEADER", "CF-Region"))
    geo_city_header: str = Field(default_factory=_env("RELAY_GEO_CITY_HEADER", "CF-IPCity"))

    @property
    def cors_allow_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_allow_origins_raw.strip() in {"", "*"}:
            return ["*"]
        return [origin.strip() for origin in self.cors_allow_origins_raw.split(",") if origin.strip()]

    @property
    def resolved_docs_url(self) -> Optional[str]:
        """Return documentation URL when docs are enabled."""
        return (self.docs_url or "/docs") if self.enable_docs else None

    @property
    def rate_limit(self) -> Tuple[int, float]:
        """Return `(limit, period_seconds)` for the fixed-window limiter."""
        return parse_rate_limit(self.rate_limit_raw or "")

    def validate_required(self) -> None:
        """Raise `ConfigurationError` when a required setting is missing.

        Called once when the application is created so a misconfigured
        deployment fails at startup instead of on the first request.
        """
        missing = [
            name
            for name, value in (
                ("RELAY_WEBHOOK_URL", self.webhook_url),
                ("RELAY_RENDERER_URL", self.renderer_url),
                ("RELAY_RATE_LIMIT", self.rate_limit_raw),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")
        parse_rate_limit(self.rate_limit_raw)
        if self.delivery_max_attempts < 1:
            raise ConfigurationError("RELAY_DELIVERY_MAX_ATTEMPTS must be at least 1")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
