"""Rate limiter interfaces.

The service depends on this abstraction (not the concrete implementation)
so the in-process store can later be replaced by a shared one (e.g., Redis)
for multi-instance deployments.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class RateLimitReason(str, Enum):
    """Which policy rule rejected a request."""

    COOLDOWN = "cooldown"
    HOURLY_LIMIT = "hourly_limit"
    DAILY_LIMIT = "daily_limit"
    SESSION_LIMIT = "session_limit"


@dataclass(frozen=True)
class RateLimitDecision:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request may proceed.
        reason: Rule that rejected the request (None when allowed).
        retry_after_seconds: Suggested wait time when blocked.
        limit: Budget of the rule that rejected the request.
        used: Usage counted against that rule at check time.
    """

    allowed: bool
    reason: RateLimitReason | None = None
    retry_after_seconds: int | None = None
    limit: int | None = None
    used: int | None = None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters keyed by client and session."""

    @abstractmethod
    def check(self, client_key: str, session_key: str) -> RateLimitDecision:
        """Evaluate the policy for a request without consuming budget.

        Never raises; unknown keys count as zero usage.
        """
        raise NotImplementedError

    @abstractmethod
    def record(self, client_key: str, session_key: str) -> None:
        """Consume one unit of budget for an admitted request."""
        raise NotImplementedError

    @abstractmethod
    def sweep(self) -> int:
        """Drop state that no longer affects any decision.

        Returns:
            Number of keys removed.
        """
        raise NotImplementedError

    def stats(self) -> dict[str, int]:
        """Return lightweight counters for observability."""
        return {}
