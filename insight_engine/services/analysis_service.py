"""Analysis service orchestrating validation, rate limiting, caching and dispatch.

This service is the core request pipeline behind ``POST /api/analyze``:
- Validating: text presence, length bounds and analysis type
- RateLimiting: cooldown, hourly, daily and session budgets per client
- CacheLookup: identical (text, type) pairs inside the TTL skip the vendors
- Dispatching: concurrent fan-out to the three provider adapters

Validation and rate-limit failures are raised before any vendor is called.
"""

from __future__ import annotations

import logging

from insight_engine.adapters.rate_limit.base import AbstractRateLimiter, RateLimitReason
from insight_engine.core.client_identity import ClientIdentity, hash_key
from insight_engine.core.config import AppSettings
from insight_engine.core.errors import RateLimitAppError, ValidationAppError
from insight_engine.schemas.analysis import (
    DEFAULT_ANALYSIS_TYPE,
    AnalyzeRequest,
    AnalyzeRequestBody,
    MergedResult,
)
from insight_engine.services.dispatcher import AnalysisDispatcher, parse_analysis_type
from insight_engine.utils.simple_cache import SimpleTTLCache, build_cache_key

logger = logging.getLogger(__name__)


_RATE_LIMIT_MESSAGES: dict[RateLimitReason, tuple[str, str]] = {
    RateLimitReason.COOLDOWN: (
        "Too many requests",
        "Please wait a few seconds between two analyses.",
    ),
    RateLimitReason.HOURLY_LIMIT: (
        "Hourly limit reached",
        "You have reached the maximum number of analyses for this hour.",
    ),
    RateLimitReason.DAILY_LIMIT: (
        "Daily limit reached",
        "You have reached the maximum number of analyses for today.",
    ),
    RateLimitReason.SESSION_LIMIT: (
        "Session limit reached",
        "This session has reached its maximum number of analyses.",
    ),
}


class AnalysisService:
    """Service turning a raw analyze request into a merged provider result.

    Attributes:
        dispatcher: Fans the text out to the provider adapters.
        limiter: Per-client rate limiter (None disables rate limiting).
        cache: TTL cache for merged results keyed by text fingerprint.
        app_settings: Text bounds and rate-limit switches.
    """

    def __init__(
        self,
        dispatcher: AnalysisDispatcher,
        limiter: AbstractRateLimiter | None,
        cache: SimpleTTLCache,
        app_settings: AppSettings,
    ) -> None:
        self.dispatcher = dispatcher
        self.limiter = limiter
        self.cache = cache
        self.app_settings = app_settings

    def validate(self, body: AnalyzeRequestBody) -> AnalyzeRequest:
        """Validate the raw body.

        Raises:
            ValidationAppError: Missing, too short or too long text.
            UnsupportedAnalysisTypeError: Analysis type outside the enumeration.
        """
        text = body.text
        if not isinstance(text, str) or not text.strip():
            raise ValidationAppError(
                code="text_missing",
                message="Please insert a text to analyze.",
                details={"description": "The 'text' field must be a non-empty string."},
            )

        text = text.strip()
        min_chars = self.app_settings.min_text_chars
        max_chars = self.app_settings.max_text_chars

        if len(text) < min_chars:
            raise ValidationAppError(
                code="text_too_short",
                message="Text is too short.",
                details={
                    "description": f"Text must contain at least {min_chars} characters.",
                    "current_length": len(text),
                    "min_length": min_chars,
                },
            )

        if len(text) > max_chars:
            raise ValidationAppError(
                code="text_too_long",
                message="Text is too long.",
                details={
                    "description": f"Text must not exceed {max_chars} characters.",
                    "current_length": len(text),
                    "max_length": max_chars,
                },
            )

        # Only an omitted or null type falls back to the default
        raw_type = body.analysis_type if body.analysis_type is not None else DEFAULT_ANALYSIS_TYPE
        analysis_type = parse_analysis_type(raw_type)
        return AnalyzeRequest(text=text, analysis_type=analysis_type)

    def _enforce_rate_limit(self, identity: ClientIdentity) -> None:
        """Check and, when admitted, record the request.

        Check and record run without an ``await`` in between, so concurrent
        requests of one client cannot both slip through a single free slot.

        Raises:
            RateLimitAppError: When any budget is exhausted.
        """
        if self.limiter is None or not self.app_settings.rate_limit_enabled:
            return

        decision = self.limiter.check(identity.client_key, identity.session_key)
        if decision.allowed:
            self.limiter.record(identity.client_key, identity.session_key)
            return

        reason = decision.reason or RateLimitReason.COOLDOWN
        retry_after = decision.retry_after_seconds or 0
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "key_hash": hash_key(identity.client_key),
                "reason": reason.value,
                "limit": decision.limit,
                "used": decision.used,
                "retry_after_s": retry_after,
            },
        )

        error, description = _RATE_LIMIT_MESSAGES[reason]
        raise RateLimitAppError(
            code=reason.value,
            message=error,
            details={
                "description": description,
                "retry_after": retry_after,
                "reason": reason.value,
            },
        )

    async def analyze(self, body: AnalyzeRequestBody, identity: ClientIdentity) -> MergedResult:
        """Run the full pipeline for one request.

        Args:
            body: Raw request body.
            identity: Rate-limit keys of the caller.

        Returns:
            MergedResult, with ``cached=True`` when served from cache.

        Raises:
            ValidationAppError: Invalid input (nothing else is attempted).
            RateLimitAppError: Budget exhausted (nothing else is attempted).
        """
        request = self.validate(body)
        self._enforce_rate_limit(identity)

        cache_key = build_cache_key(request.text, request.analysis_type)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(
                "analysis.completed",
                extra={"analysis_type": request.analysis_type.value, "cached": True},
            )
            return cached.model_copy(update={"cached": True})

        merged = await self.dispatcher.dispatch(request.analysis_type, request.text)
        if len(merged.failed_providers) < len(merged.results):
            self.cache.set(cache_key, merged)

        logger.info(
            "analysis.completed",
            extra={
                "analysis_type": request.analysis_type.value,
                "cached": False,
                "text_length": len(request.text),
                "failed_providers": merged.failed_providers,
            },
        )
        return merged

