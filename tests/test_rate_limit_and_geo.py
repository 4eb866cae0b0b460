from __future__ import annotations

import pytest

from relay.adapters.geo import HeaderGeoLookup
from relay.adapters.ratelimit import FixedWindowRateLimiter
from relay.types import GeoContext
from server.config import Settings


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
async def test_fixed_window_allows_up_to_limit() -> None:
    limiter = FixedWindowRateLimiter(2, 60, clock=FakeClock(5.0))

    decisions = [await limiter.check("") for _ in range(3)]

    assert [d.allowed for d in decisions] == [True, True, False]
    assert all(d.key == "" for d in decisions)


@pytest.mark.asyncio
async def test_fixed_window_resets_on_next_window() -> None:
    clock = FakeClock(59.0)
    limiter = FixedWindowRateLimiter(1, 60, clock=clock)

    assert (await limiter.check("")).allowed
    assert not (await limiter.check("")).allowed
    clock.now = 60.0
    assert (await limiter.check("")).allowed


@pytest.mark.asyncio
async def test_keys_have_separate_buckets() -> None:
    limiter = FixedWindowRateLimiter(1, 60, clock=FakeClock())

    assert (await limiter.check("a")).allowed
    assert (await limiter.check("b")).allowed
    assert not (await limiter.check("a")).allowed


def test_geo_lookup_reads_edge_headers(settings: Settings) -> None:
    lookup = HeaderGeoLookup(settings)
    geo = lookup.lookup({"CF-IPCountry": "US", "CF-Region": "CA", "CF-IPCity": "Mountain View"})
    assert geo == GeoContext(country="US", region="CA", city="Mountain View")


def test_geo_lookup_missing_headers_are_empty(settings: Settings) -> None:
    lookup = HeaderGeoLookup(settings)
    assert lookup.lookup({}) == GeoContext()
    assert lookup.lookup({"CF-IPCountry": "  "}) == GeoContext()
    assert lookup.lookup(None) == GeoContext()  # type: ignore[arg-type]


def test_geo_lookup_header_names_are_configurable(settings: Settings) -> None:
    lookup = HeaderGeoLookup(settings.model_copy(update={"geo_country_header": "X-Country"}))
    assert lookup.lookup({"X-Country": "FR"}).country == "FR"


def test_geo_summary_keeps_gaps() -> None:
    assert GeoContext().summary() == "  "
    assert GeoContext(region="CA").summary() == " CA "
