"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment defaults are set before any import that builds the settings.
"""

import asyncio
import os

# CRITICAL: Set this before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")

from collections.abc import Callable  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from insight_engine.adapters.nlp.base import AbstractNLPProvider  # noqa: E402
from insight_engine.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter  # noqa: E402
from insight_engine.core.app_factory import create_app  # noqa: E402
from insight_engine.core.config import Settings  # noqa: E402
from insight_engine.utils.simple_cache import SimpleTTLCache  # noqa: E402
from insight_engine.schemas.nlp import (  # noqa: E402
    AWSSentiment,
    AWSSentimentScores,
    AzureSentiment,
    AzureSentimentScores,
    ClassificationItem,
    EntityItem,
    GoogleSentiment,
    GoogleSentimentScore,
    LanguageCandidate,
)


class FakeClock:
    """Deterministic clock for limiter and cache expiry tests."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def time(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def _sentiment_for(name: str) -> Any:
    if name == "aws":
        return AWSSentiment(
            sentiment="POSITIVE",
            scores=AWSSentimentScores(Positive=0.97, Negative=0.01, Neutral=0.01, Mixed=0.01),
        )
    if name == "azure":
        return AzureSentiment(
            sentiment="positive",
            scores=AzureSentimentScores(positive=0.99, neutral=0.01, negative=0.0),
        )
    return GoogleSentiment(sentiment=GoogleSentimentScore(score=0.9, magnitude=0.9), language="en")


class FakeProvider(AbstractNLPProvider):
    """In-memory provider recording every call.

    ``fail_with`` makes every vendor call raise; ``delay`` makes it sleep.
    """

    def __init__(
        self,
        name: str,
        *,
        fail_with: BaseException | None = None,
        delay: float = 0.0,
        timeout_seconds: float = 5.0,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds)
        self.name = name
        self.display_name = name.upper() if name == "aws" else name.capitalize()
        self.fail_with = fail_with
        self.delay = delay
        self.calls: list[tuple[str, str]] = []

    async def _vendor(self, operation: str, text: str, payload: Callable[[], Any]) -> Any:
        self.calls.append((operation, text))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        return payload()

    async def _analyze_sentiment(self, text: str) -> Any:
        return await self._vendor("sentiment", text, lambda: _sentiment_for(self.name))

    async def _extract_key_phrases(self, text: str) -> list[str]:
        return await self._vendor("keyPhrases", text, lambda: ["best day", "life"])

    async def _recognize_entities(self, text: str) -> list[EntityItem]:
        return await self._vendor(
            "entities",
            text,
            lambda: [EntityItem(text="Seattle", type="Location", confidence=0.9, offset=0, length=7)],
        )

    async def _detect_language(self, text: str) -> Any:
        return await self._vendor(
            "language",
            text,
            lambda: LanguageCandidate(language="English", code="en", confidence=0.99),
        )

    async def _classify(self, text: str) -> list[ClassificationItem]:
        return await self._vendor(
            "classification",
            text,
            lambda: [ClassificationItem(category="/Arts & Entertainment", confidence=0.8)],
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_providers() -> list[FakeProvider]:
    return [FakeProvider("aws"), FakeProvider("azure"), FakeProvider("google")]


@pytest.fixture
def test_settings() -> Settings:
    return Settings()


@pytest.fixture
def app_factory(test_settings: Settings, clock: FakeClock) -> Callable[..., FastAPI]:
    """Build apps around fake providers, with limiter and cache on the test clock."""

    def _build(providers: list[AbstractNLPProvider], **overrides: Any) -> FastAPI:
        limiter = overrides.pop(
            "limiter",
            InMemorySlidingWindowRateLimiter(
                cooldown_seconds=test_settings.app.rate_limit_cooldown_seconds,
                hourly_max=test_settings.app.rate_limit_hourly_max,
                daily_max=test_settings.app.rate_limit_daily_max,
                session_max=test_settings.app.rate_limit_session_max,
                clock=clock,
            ),
        )
        cache = overrides.pop(
            "cache",
            SimpleTTLCache(
                ttl_seconds=test_settings.app.cache_ttl_seconds,
                max_entries=test_settings.app.cache_max_entries,
                clock=clock,
            ),
        )
        return create_app(
            settings=test_settings,
            providers=providers,
            limiter=limiter,
            cache=cache,
            configure_logs=False,
            **overrides,
        )

    return _build


@pytest.fixture
def client(app_factory: Callable[..., FastAPI], fake_providers: list[FakeProvider]) -> TestClient:
    return TestClient(app_factory(fake_providers))


@pytest.fixture
def make_provider() -> Callable[..., FakeProvider]:
    return FakeProvider


@pytest.fixture
def make_clock() -> Callable[..., FakeClock]:
    return FakeClock
