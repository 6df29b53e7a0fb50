"""Application factory for the FastAPI app.

Builds the process-wide stores (rate limiter, result cache) and the provider
adapters explicitly and hands them to the service, so tests can inject fakes
and a shared store can replace the in-memory ones later.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from insight_engine.adapters.nlp.base import AbstractNLPProvider
from insight_engine.adapters.nlp.factory import create_nlp_providers
from insight_engine.adapters.rate_limit.base import AbstractRateLimiter
from insight_engine.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from insight_engine.api.routes import analyze_router, health_router
from insight_engine.core.client_identity import SESSION_HEADER
from insight_engine.core.config import Settings, settings as default_settings
from insight_engine.core.exception_handlers import setup_exception_handlers
from insight_engine.core.logging import configure_logging
from insight_engine.core.middleware import request_id_middleware
from insight_engine.services.analysis_service import AnalysisService
from insight_engine.services.dispatcher import AnalysisDispatcher
from insight_engine.services.maintenance import start_sweeper, stop_sweeper
from insight_engine.utils.simple_cache import SimpleTTLCache

logger = logging.getLogger(__name__)


def build_rate_limiter(cfg: Settings) -> AbstractRateLimiter:
    return InMemorySlidingWindowRateLimiter(
        cooldown_seconds=cfg.app.rate_limit_cooldown_seconds,
        hourly_max=cfg.app.rate_limit_hourly_max,
        daily_max=cfg.app.rate_limit_daily_max,
        session_max=cfg.app.rate_limit_session_max,
    )


def create_app(
    *,
    settings: Settings | None = None,
    providers: Sequence[AbstractNLPProvider] | None = None,
    limiter: AbstractRateLimiter | None = None,
    cache: SimpleTTLCache | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        settings: Configuration; the global settings when omitted.
        providers: Provider adapters; built from settings when omitted.
        limiter: Rate limiter; in-memory sliding window when omitted.
        cache: Result cache; in-memory TTL cache when omitted.
        configure_logs: Install the JSON logging handlers.

    Returns:
        Configured app with middleware, handlers, routers and the sweep task.
    """
    cfg = settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(cfg.log)

    limiter = limiter or build_rate_limiter(cfg)
    cache = cache or SimpleTTLCache(
        ttl_seconds=cfg.app.cache_ttl_seconds,
        max_entries=cfg.app.cache_max_entries,
    )
    providers = list(providers) if providers is not None else create_nlp_providers(cfg)
    service = AnalysisService(
        dispatcher=AnalysisDispatcher(providers),
        limiter=limiter,
        cache=cache,
        app_settings=cfg.app,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        start_sweeper(app, cache, limiter, cfg.app.sweep_interval_seconds)
        try:
            yield
        finally:
            await stop_sweeper(app)
            for provider in providers:
                try:
                    await provider.aclose()
                except Exception:
                    logger.warning("provider.close_failed", extra={"provider": provider.name})

    app = FastAPI(
        title="AI Insight Engine API",
        description=(
            "Compare sentiment, key phrases, entities, language detection and "
            "classification from AWS Comprehend, Azure AI Language and Google "
            "Cloud Natural Language side by side. Per-client rate limiting and a "
            "short-lived result cache protect the vendor APIs."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.analysis_service = service

    # Middleware
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in cfg.app.cors_allow_origins.split(",") if o.strip()],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type", SESSION_HEADER, cfg.log.request_id_header],
        expose_headers=["Retry-After", cfg.log.request_id_header],
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(analyze_router, prefix="/api")
    app.include_router(health_router)

    return app
