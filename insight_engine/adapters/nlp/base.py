"""Provider adapter interface.

Every public operation returns a ProviderResult and never raises: vendor
exceptions, per-document errors, missing configuration and timeouts all
become a ProviderFailure in that provider's slot.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable

from insight_engine.core.errors import ProviderAppError
from insight_engine.schemas.analysis import (
    AnalysisType,
    ProviderFailure,
    ProviderResult,
    ProviderSuccess,
)
from insight_engine.schemas.nlp import (
    ClassificationItem,
    EntityItem,
    LanguagePayload,
    ProviderPayload,
    SentimentPayload,
)

logger = logging.getLogger(__name__)

_MAX_DETAILS_CHARS = 200


def _describe(exc: BaseException) -> str:
    message = str(exc) or type(exc).__name__
    return message[:_MAX_DETAILS_CHARS]


class AbstractNLPProvider(ABC):
    """Interface for cloud NLP providers.

    Subclasses implement the ``_``-prefixed vendor calls and return a
    normalized payload; the public methods add the timeout and error
    containment.

    Attributes:
        name: Result key (``aws``, ``azure``, ``google``).
        display_name: Human-readable vendor name used in error markers.
    """

    name: str
    display_name: str

    def __init__(self, *, timeout_seconds: float = 10.0, language_hint: str = "en") -> None:
        self.timeout_seconds = timeout_seconds
        self.language_hint = language_hint

    @property
    def failure_message(self) -> str:
        return f"Failed to get analysis from {self.display_name}"

    async def analyze_sentiment(self, text: str) -> ProviderResult:
        return await self._guarded(AnalysisType.SENTIMENT, self._analyze_sentiment(text))

    async def extract_key_phrases(self, text: str) -> ProviderResult:
        return await self._guarded(AnalysisType.KEY_PHRASES, self._extract_key_phrases(text))

    async def recognize_entities(self, text: str) -> ProviderResult:
        return await self._guarded(AnalysisType.ENTITIES, self._recognize_entities(text))

    async def detect_language(self, text: str) -> ProviderResult:
        return await self._guarded(AnalysisType.LANGUAGE, self._detect_language(text))

    async def classify(self, text: str) -> ProviderResult:
        return await self._guarded(AnalysisType.CLASSIFICATION, self._classify(text))

    async def run(self, analysis_type: AnalysisType, text: str) -> ProviderResult:
        """Run the operation matching ``analysis_type``."""

        operations = {
            AnalysisType.SENTIMENT: self.analyze_sentiment,
            AnalysisType.KEY_PHRASES: self.extract_key_phrases,
            AnalysisType.ENTITIES: self.recognize_entities,
            AnalysisType.LANGUAGE: self.detect_language,
            AnalysisType.CLASSIFICATION: self.classify,
        }
        return await operations[analysis_type](text)

    async def aclose(self) -> None:
        """Release SDK clients. No-op unless the adapter holds connections."""

    def failure(self, details: str | None = None) -> ProviderFailure:
        return ProviderFailure(provider=self.name, error=self.failure_message, details=details)

    async def _guarded(
        self,
        analysis_type: AnalysisType,
        operation: Awaitable[ProviderPayload],
    ) -> ProviderResult:
        try:
            payload = await asyncio.wait_for(operation, timeout=self.timeout_seconds)
            return ProviderSuccess(provider=self.name, data=payload)
        except asyncio.TimeoutError:
            logger.warning(
                "provider.timeout",
                extra={
                    "provider": self.name,
                    "analysis_type": analysis_type.value,
                    "timeout_s": self.timeout_seconds,
                },
            )
            return self.failure(f"{self.display_name} did not answer within {self.timeout_seconds:g}s")
        except ProviderAppError as exc:
            logger.warning(
                "provider.failed",
                extra={
                    "provider": self.name,
                    "analysis_type": analysis_type.value,
                    "error_code": exc.code,
                    "error_message": exc.message,
                },
            )
            return self.failure(exc.message[:_MAX_DETAILS_CHARS])
        except Exception as exc:
            logger.warning(
                "provider.failed",
                extra={
                    "provider": self.name,
                    "analysis_type": analysis_type.value,
                    "error_type": type(exc).__name__,
                    "error_message": _describe(exc),
                },
            )
            return self.failure(_describe(exc))

    @abstractmethod
    async def _analyze_sentiment(self, text: str) -> SentimentPayload:
        ...

    @abstractmethod
    async def _extract_key_phrases(self, text: str) -> list[str]:
        ...

    @abstractmethod
    async def _recognize_entities(self, text: str) -> list[EntityItem]:
        ...

    @abstractmethod
    async def _detect_language(self, text: str) -> LanguagePayload:
        ...

    @abstractmethod
    async def _classify(self, text: str) -> list[ClassificationItem]:
        ...
