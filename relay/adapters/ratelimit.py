from __future__ import annotations

import time
from typing import Callable, Dict, Tuple

from relay.types import RateDecision, RateLimiter


class FixedWindowRateLimiter(RateLimiter):
    """In-process fixed-window counter implementing the RateLimiter protocol.

    Allows `limit` requests per `period_seconds` for each key. Windows are
    aligned to multiples of the period, like the edge rate-limiting bindings
    this stands in for. State lives in this instance only; run one worker
    process or swap in a limiter backed by a shared store.
    """

    def __init__(
        self,
        limit: int,
        period_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.period_seconds = period_seconds
        self._clock = clock
        self._windows: Dict[str, Tuple[int, int]] = {}

    def _cleanup_old_windows(self, current: int) -> None:
        expired = [key for key, (window, _) in self._windows.items() if window < current]
        for key in expired:
            del self._windows[key]

    async def check(self, key: str) -> RateDecision:  # type: ignore[override]
        # No await between read and write, so concurrent requests on one
        # event loop cannot interleave here.
        current = int(self._clock() // self.period_seconds)
        self._cleanup_old_windows(current)
        _, count = self._windows.get(key, (current, 0))
        if count >= self.limit:
            return RateDecision(allowed=False, key=key)
        self._windows[key] = (current, count + 1)
        return RateDecision(allowed=True, key=key)
