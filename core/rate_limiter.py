"""Rolling-window rate limiter for GitHub API and raw-content requests."""

import logging
import threading
import time
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional

from core.config import Settings

logger = logging.getLogger(__name__)

MINUTE = 60.0
HOUR = 60.0 * 60.0


class RateLimiter:
    """Blocks callers until a request slot is free; never drops a request.

    Two independent ceilings are enforced over rolling one-minute and one-hour
    windows, plus a minimum spacing between consecutive grants. Callers are
    served strictly in arrival order: each takes a ticket and waits for its
    turn, so a burst from one tool call cannot starve another.
    """

    def __init__(
        self,
        requests_per_minute: int = 8,
        requests_per_hour: int = 50,
        min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if requests_per_minute < 1 or requests_per_hour < 1:
            raise ValueError("rate limit ceilings must be positive")
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep

        self._condition = threading.Condition()
        self._next_ticket = 0
        self._now_serving = 0
        self._grants: Deque[float] = deque()
        self._last_grant: Optional[float] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "RateLimiter":
        return cls(
            requests_per_minute=settings.effective_requests_per_minute,
            requests_per_hour=settings.effective_requests_per_hour,
            min_interval=settings.min_interval,
            **kwargs,
        )

    def acquire(self) -> float:
        """Wait for a permit; returns the clock time at which it was granted."""
        with self._condition:
            ticket = self._next_ticket
            self._next_ticket += 1
            while self._now_serving != ticket:
                self._condition.wait()

        try:
            while True:
                with self._condition:
                    now = self._clock()
                    wait = self._required_wait(now)
                    if wait <= 0:
                        self._grants.append(now)
                        self._last_grant = now
                        return now
                logger.info(f"Rate limit reached. Waiting {wait:.1f}s before next request")
                self._sleep(wait)
        finally:
            with self._condition:
                self._now_serving += 1
                self._condition.notify_all()

    def _prune(self, now: float) -> None:
        while self._grants and self._grants[0] <= now - HOUR:
            self._grants.popleft()

    def _minute_grants(self, now: float):
        return [t for t in self._grants if t > now - MINUTE]

    def _required_wait(self, now: float) -> float:
        self._prune(now)
        waits = [0.0]

        if len(self._grants) >= self.requests_per_hour:
            oldest = self._grants[len(self._grants) - self.requests_per_hour]
            waits.append(oldest + HOUR - now)

        in_minute = self._minute_grants(now)
        if len(in_minute) >= self.requests_per_minute:
            oldest = in_minute[len(in_minute) - self.requests_per_minute]
            waits.append(oldest + MINUTE - now)

        if self._last_grant is not None:
            waits.append(self._last_grant + self.min_interval - now)

        return max(waits)

    def can_make_request(self) -> bool:
        """True when a permit would be granted right now without waiting."""
        with self._condition:
            if self._next_ticket != self._now_serving:
                return False
            return self._required_wait(self._clock()) <= 0

    def get_rate_limit_info(self) -> Dict[str, Any]:
        with self._condition:
            now = self._clock()
            self._prune(now)
            in_minute = self._minute_grants(now)
            granted = len(self._grants)
            hour_reset = (self._grants[0] + HOUR) if self._grants else now
            queued = self._next_ticket - self._now_serving
        minute_reset = (in_minute[0] + MINUTE) if in_minute else now
        return {
            "remaining": max(
                0,
                min(
                    self.requests_per_hour - granted,
                    self.requests_per_minute - len(in_minute),
                ),
            ),
            "reset_in_seconds": max(0.0, min(minute_reset, hour_reset) - now),
            "limit": self.requests_per_hour,
            "per_minute_limit": self.requests_per_minute,
            "queued": queued,
        }

    def reset(self) -> None:
        with self._condition:
            self._grants.clear()
            self._last_grant = None
