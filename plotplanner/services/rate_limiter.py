"""In-process rate limiting keyed by an arbitrary string (e.g. plan id)."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    allowed: bool
    retry_after: Optional[int] = None  # seconds until the next accepted attempt


class InMemoryRateLimiter:
    """Track the last accepted attempt per key within a fixed window.

    State is process-local. Read-check-then-write is not atomic; two
    near-simultaneous callers for the same key may both pass.
    """

    def __init__(
        self,
        window_seconds: float,
        cleanup_interval_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_seconds = window_seconds
        self.cleanup_interval_seconds = cleanup_interval_seconds
        self._clock = clock
        self._attempts: dict[str, float] = {}
        self._last_cleanup = clock()

    def status(self, key: str) -> RateLimitResult:
        """Report whether ``key`` may proceed without recording an attempt."""

        now = self._clock()
        self._maybe_purge(now)
        last = self._attempts.get(key)
        if last is not None:
            elapsed = now - last
            if elapsed < self.window_seconds:
                return RateLimitResult(allowed=False, retry_after=math.ceil(self.window_seconds - elapsed))
        return RateLimitResult(allowed=True)

    def record(self, key: str) -> None:
        self._attempts[key] = self._clock()

    def check(self, key: str) -> RateLimitResult:
        """Status plus record: an allowed check consumes the window."""

        result = self.status(key)
        if result.allowed:
            self.record(key)
        return result

    def reset(self, key: str) -> None:
        self._attempts.pop(key, None)

    def purge_older_than(self, now: Optional[float] = None) -> int:
        now = self._clock() if now is None else now
        expired = [key for key, ts in self._attempts.items() if now - ts > self.window_seconds]
        for key in expired:
            del self._attempts[key]
        self._last_cleanup = now
        if expired:
            logger.debug("Purged %d expired rate-limit entries", len(expired))
        return len(expired)

    def _maybe_purge(self, now: float) -> None:
        if now - self._last_cleanup >= self.cleanup_interval_seconds:
            self.purge_older_than(now)

    def __len__(self) -> int:
        return len(self._attempts)


__all__ = ["InMemoryRateLimiter", "RateLimitResult"]
