"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Session budgets use a trailing one-hour window, like the hourly client cap.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable

from insight_engine.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitDecision,
    RateLimitReason,
)

HOUR_SECONDS = 3600
DAY_SECONDS = 86400


@dataclass
class _ClientWindow:
    timestamps: deque[float] = field(default_factory=deque)
    last_request_at: float | None = None


@dataclass
class _SessionWindow:
    timestamps: deque[float] = field(default_factory=deque)


def _prune(timestamps: deque[float], cutoff: float) -> None:
    # Timestamps are appended in order, so expired ones sit at the left.
    while timestamps and timestamps[0] <= cutoff:
        timestamps.popleft()


def _count_since(timestamps: deque[float], cutoff: float) -> int:
    return sum(1 for ts in timestamps if ts > cutoff)


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter combining a cooldown with hourly, daily and session caps.

    Rules are evaluated in order and the first match wins:
    cooldown, hourly cap, daily cap, session cap.

    Important:
        This limiter is per-process only. If the API runs with multiple workers,
        each worker enforces its own independent limits.
    """

    def __init__(
        self,
        *,
        cooldown_seconds: int = 5,
        hourly_max: int = 50,
        daily_max: int = 200,
        session_max: int = 25,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            cooldown_seconds: Minimum gap between two requests of one client.
            hourly_max: Requests allowed per client over a trailing hour.
            daily_max: Requests allowed per client over a trailing 24 hours.
            session_max: Requests allowed per session over a trailing hour.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If any budget is invalid.
        """
        if cooldown_seconds < 0:
            raise ValueError("cooldown_seconds must be >= 0")
        for name, value in (
            ("hourly_max", hourly_max),
            ("daily_max", daily_max),
            ("session_max", session_max),
        ):
            if value < 1:
                raise ValueError(f"{name} must be >= 1")

        self._cooldown = cooldown_seconds
        self._hourly_max = hourly_max
        self._daily_max = daily_max
        self._session_max = session_max
        self._clock = clock
        self._lock = threading.RLock()
        self._clients: dict[str, _ClientWindow] = {}
        self._sessions: dict[str, _SessionWindow] = {}

    def check(self, client_key: str, session_key: str) -> RateLimitDecision:
        now = self._clock()

        with self._lock:
            client = self._clients.get(client_key)
            session = self._sessions.get(session_key)

            if client is not None:
                _prune(client.timestamps, now - DAY_SECONDS)

                if (
                    client.last_request_at is not None
                    and now - client.last_request_at < self._cooldown
                ):
                    return RateLimitDecision(
                        allowed=False,
                        reason=RateLimitReason.COOLDOWN,
                        retry_after_seconds=self._cooldown,
                    )

                hourly = _count_since(client.timestamps, now - HOUR_SECONDS)
                if hourly >= self._hourly_max:
                    return RateLimitDecision(
                        allowed=False,
                        reason=RateLimitReason.HOURLY_LIMIT,
                        retry_after_seconds=HOUR_SECONDS,
                        limit=self._hourly_max,
                        used=hourly,
                    )

                daily = len(client.timestamps)
                if daily >= self._daily_max:
                    return RateLimitDecision(
                        allowed=False,
                        reason=RateLimitReason.DAILY_LIMIT,
                        retry_after_seconds=DAY_SECONDS,
                        limit=self._daily_max,
                        used=daily,
                    )

            if session is not None:
                _prune(session.timestamps, now - HOUR_SECONDS)
                used = len(session.timestamps)
                if used >= self._session_max:
                    return RateLimitDecision(
                        allowed=False,
                        reason=RateLimitReason.SESSION_LIMIT,
                        retry_after_seconds=HOUR_SECONDS,
                        limit=self._session_max,
                        used=used,
                    )

        return RateLimitDecision(allowed=True)

    def record(self, client_key: str, session_key: str) -> None:
        now = self._clock()

        with self._lock:
            client = self._clients.setdefault(client_key, _ClientWindow())
            client.timestamps.append(now)
            client.last_request_at = now

            session = self._sessions.setdefault(session_key, _SessionWindow())
            session.timestamps.append(now)

    def sweep(self) -> int:
        now = self._clock()
        removed = 0

        with self._lock:
            for key in list(self._clients):
                window = self._clients[key]
                _prune(window.timestamps, now - DAY_SECONDS)
                if not window.timestamps:
                    del self._clients[key]
                    removed += 1

            for key in list(self._sessions):
                window = self._sessions[key]
                _prune(window.timestamps, now - HOUR_SECONDS)
                if not window.timestamps:
                    del self._sessions[key]
                    removed += 1

        return removed

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "clients": len(self._clients),
                "sessions": len(self._sessions),
            }
