from typing import Callable, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from relay.types import RateDecision, RateLimiter
from server.app import create_app
from server.config import Settings, get_settings

WEBHOOK_URL = "https://discord.test/api/webhooks/123/token"
RENDERER_URL = "https://render.test/tex"

GEO_HEADERS = {
    "CF-IPCountry": "US",
    "CF-Region": "CA",
    "CF-IPCity": "Mountain View",
}


@pytest.fixture(autouse=True)
def test_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("RELAY_WEBHOOK_URL", WEBHOOK_URL)
    monkeypatch.setenv("RELAY_RENDERER_URL", RENDERER_URL)
    monkeypatch.setenv("RELAY_RATE_LIMIT", "1000/60")
    monkeypatch.setenv("RELAY_DELIVERY_BACKOFF_SECONDS", "0")
    monkeypatch.delenv("RELAY_MODE", raising=False)
    monkeypatch.delenv("RELAY_MENTION", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def settings() -> Settings:
    return Settings()


@pytest.fixture()
def make_app(settings: Settings) -> Callable[..., FastAPI]:
    """Build an app from the test settings, with per-test overrides.

    Keyword arguments that name a Settings field update the settings; the
    rest are passed to `create_app` (e.g. `rate_limiter=`).
    """

    def _make(**overrides) -> FastAPI:
        fields = {k: v for k, v in overrides.items() if k in Settings.model_fields}
        collaborators = {k: v for k, v in overrides.items() if k not in fields}
        return create_app(settings.model_copy(update=fields), **collaborators)

    return _make


@pytest.fixture()
def client(make_app: Callable[..., FastAPI]) -> Generator[TestClient, None, None]:
    with TestClient(make_app()) as c:
        yield c


class DenyAllRateLimiter(RateLimiter):
    def __init__(self) -> None:
        self.checked: list[str] = []

    async def check(self, key: str) -> RateDecision:  # type: ignore[override]
        self.checked.append(key)
        return RateDecision(allowed=False, key=key)
