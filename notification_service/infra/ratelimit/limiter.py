"""In-process sliding-window rate limiting for outbound channels."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

HOUR = 3600
DAY = 86400


@dataclass(frozen=True)
class RateLimit:
    """Maximum number of sends allowed inside ``window`` seconds."""

    limit: int
    window: int

    def __post_init__(self) -> None:
        if self.limit < 1 or self.window < 1:
            msg = f"RateLimit needs a positive limit and window, got {self.limit}/{self.window}s"
            raise ValueError(msg)


class ChannelRateLimiter:
    """Sliding-window limiter keyed by an arbitrary string (usually a channel).

    Every key can carry several windows, e.g. an hourly and a daily budget.
    A request is allowed only when all windows have room; allowed requests
    are recorded in every window at once.

    Example:
        limiter = ChannelRateLimiter({"sms": [RateLimit(50, HOUR), RateLimit(200, DAY)]})
        allowed, meta = limiter.check_limit("sms")
        if not allowed:
            print(f"Rate limited. Retry after {meta['retry_after']} seconds")
    """

    def __init__(
        self,
        limits: dict[str, list[RateLimit]] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._limits: dict[str, tuple[RateLimit, ...]] = {
            key: tuple(windows) for key, windows in (limits or {}).items()
        }
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def limits_for(self, key: str) -> tuple[RateLimit, ...]:
        return self._limits.get(key, ())

    def _prune(self, hits: deque[float], now: float, horizon: int) -> None:
        while hits and hits[0] <= now - horizon:
            hits.popleft()

    def check_limit(self, key: str, cost: int = 1) -> tuple[bool, dict[str, int]]:
        """Consume ``cost`` units for ``key`` if every window allows it.

        Returns:
            Tuple of (is_allowed, metadata) where metadata contains:
                - limit: The tightest limit checked
                - remaining: Units left in the tightest window
                - retry_after: Seconds until the blocking window frees a slot
        """
        windows = self.limits_for(key)
        if not windows:
            return True, {"limit": 0, "remaining": -1, "retry_after": 0}

        with self._lock:
            now = self._clock()
            hits = self._hits.setdefault(key, deque())
            self._prune(hits, now, max(w.window for w in windows))

            tightest: dict[str, int] | None = None
            for window in windows:
                used = sum(1 for ts in hits if ts > now - window.window)
                remaining = window.limit - used
                if remaining < cost:
                    oldest = next((ts for ts in hits if ts > now - window.window), now)
                    retry_after = max(1, int(oldest + window.window - now))
                    logger.warning(
                        "Rate limit exceeded",
                        extra={
                            "rate_limit_key": key,
                            "limit": window.limit,
                            "window": window.window,
                            "retry_after": retry_after,
                        },
                    )
                    return False, {"limit": window.limit, "remaining": 0, "retry_after": retry_after}
                if tightest is None or remaining < tightest["remaining"]:
                    tightest = {"limit": window.limit, "remaining": remaining - cost, "retry_after": 0}

            hits.extend([now] * cost)
            return True, tightest or {"limit": 0, "remaining": -1, "retry_after": 0}

    def get_remaining(self, key: str) -> int | None:
        """Units left in the tightest window, or None when ``key`` is unlimited."""
        windows = self.limits_for(key)
        if not windows:
            return None
        with self._lock:
            now = self._clock()
            hits = self._hits.get(key, deque())
            return min(
                w.limit - sum(1 for ts in hits if ts > now - w.window) for w in windows
            )

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)
