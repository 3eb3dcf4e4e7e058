"""
auth/throttle.py -- Failed-login counter that decides when Lockout fires.

Built on `limits` (the library slowapi uses underneath): a fixed window of
decay_seconds per key, max_attempts hits allowed inside it. Once the counter
reaches max_attempts the key is locked until the window closes. A successful
login clears the key.

Counters live in a limits MemoryStorage, which expires stale windows on its
own. Multi-process deployments get one counter per worker, which makes the
limit per-worker rather than global.

Use get_login_throttle() for the process-wide instance. Guards are created
per session, so a throttle built per guard would never see a second attempt.
"""

from __future__ import annotations

import math
import time
from functools import lru_cache

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from core.config import get_settings


class LoginThrottle:
    def __init__(self, max_attempts: int = 5, decay_seconds: int = 60) -> None:
        self.max_attempts = max_attempts
        self.decay_seconds = decay_seconds
        self._item = RateLimitItemPerSecond(max_attempts, decay_seconds, namespace="login")
        self._limiter = FixedWindowRateLimiter(MemoryStorage())

    def hit(self, key: str) -> int:
        """Record one failed attempt and return the count inside the window."""
        self._limiter.hit(self._item, key)
        return self.attempts(key)

    def attempts(self, key: str) -> int:
        stats = self._limiter.get_window_stats(self._item, key)
        return self.max_attempts - stats.remaining

    def too_many_attempts(self, key: str) -> bool:
        return not self._limiter.test(self._item, key)

    def available_in(self, key: str) -> int:
        """Seconds until key is unlocked (0 when it is not locked)."""
        if not self.too_many_attempts(key):
            return 0
        stats = self._limiter.get_window_stats(self._item, key)
        return max(0, math.ceil(stats.reset_time - time.time()))

    def clear(self, key: str) -> None:
        self._limiter.clear(self._item, key)


@lru_cache
def get_login_throttle() -> LoginThrottle:
    """Return the shared LoginThrottle configured from LOGIN_MAX_ATTEMPTS / LOGIN_DECAY_SECONDS.

    In tests: call get_login_throttle.cache_clear() (after
    get_settings.cache_clear()) to pick up different environment variables.
    """
    settings = get_settings()
    return LoginThrottle(settings.login_max_attempts, settings.login_decay_seconds)
