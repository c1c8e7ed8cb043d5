"""
In-memory sliding-window rate limiter, keyed by client identifier (IP).
"""

import logging
import threading
import time
from collections import deque
from datetime import datetime, timezone

from app.core.config import RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """
    Allow at most `limit` hits per `window` seconds for each identifier.
    Identifiers with no hit inside the window are evicted, at most once per window.
    """

    def __init__(self, limit: int = RATE_LIMIT_REQUESTS, window: float = RATE_LIMIT_WINDOW) -> None:
        self.limit = limit
        self.window = window
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep: float | None = None
        self._lock = threading.Lock()

    def __len__(self) -> int:
        """Number of identifiers currently tracked."""
        with self._lock:
            return len(self._hits)

    def _evict_expired(self, now: float) -> None:
        # Caller holds the lock.
        if self._last_sweep is not None and now - self._last_sweep < self.window:
            return
        cutoff = now - self.window
        expired = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in expired:
            del self._hits[key]
        self._last_sweep = now
        if expired:
            logger.debug("[rate_limit] evicted %d expired identifiers", len(expired))

    def check(self, identifier: str, now: float | None = None) -> tuple[bool, dict[str, str]]:
        """
        Record a hit for identifier and return (allowed, headers).
        Rejected hits are not recorded.
        """
        now = time.time() if now is None else now
        key = identifier or "anonymous"
        with self._lock:
            self._evict_expired(now)
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= now - self.window:
                hits.popleft()
            allowed = len(hits) < self.limit
            if allowed:
                hits.append(now)
            remaining = max(0, self.limit - len(hits))
            reset_at = (hits[0] if hits else now) + self.window
            if not hits:
                del self._hits[key]
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": datetime.fromtimestamp(reset_at, tz=timezone.utc).isoformat(),
        }
        if not allowed:
            logger.info("[rate_limit] rejected identifier=%s", key)
        return allowed, headers

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
            self._last_sweep = None


rate_limiter = SlidingWindowRateLimiter()


def check_rate_limit(identifier: str) -> tuple[bool, dict[str, str]]:
    return rate_limiter.check(identifier)
