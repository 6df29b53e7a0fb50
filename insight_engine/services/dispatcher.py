"""Concurrent fan-out of one analysis to every provider adapter."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Sequence

from insight_engine.adapters.nlp.base import AbstractNLPProvider
from insight_engine.core.errors import UnsupportedAnalysisTypeError
from insight_engine.schemas.analysis import (
    AnalysisType,
    MergedResult,
    ProviderResult,
)

logger = logging.getLogger(__name__)


def parse_analysis_type(value: AnalysisType | str) -> AnalysisType:
    """Map a wire value onto AnalysisType.

    Raises:
        UnsupportedAnalysisTypeError: If the value is not in the enumeration.
    """
    try:
        return AnalysisType(value)
    except ValueError:
        raise UnsupportedAnalysisTypeError(
            code="unsupported_analysis_type",
            message=f"Unsupported analysis type: {value}",
            details={
                "description": f"analysisType must be one of: {', '.join(AnalysisType.values())}",
                "supported_types": AnalysisType.values(),
            },
        ) from None


class AnalysisDispatcher:
    """Runs one analysis on all providers and merges the outcomes.

    The merged result is built only after every provider has settled; a
    failing provider never prevents the others from reporting.
    """

    def __init__(self, providers: Sequence[AbstractNLPProvider]) -> None:
        names = [provider.name for provider in providers]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate provider names: {names}")
        self.providers = list(providers)

    async def dispatch(self, analysis_type: AnalysisType | str, text: str) -> MergedResult:
        """Fan out ``text`` to every provider for ``analysis_type``.

        Raises:
            UnsupportedAnalysisTypeError: Before any provider is invoked.
        """
        analysis = parse_analysis_type(analysis_type)
        start = time.perf_counter()

        outcomes = await asyncio.gather(
            *(provider.run(analysis, text) for provider in self.providers),
            return_exceptions=True,
        )

        results: dict[str, ProviderResult] = {}
        for provider, outcome in zip(self.providers, outcomes):
            if isinstance(outcome, BaseException):
                # Adapters contain their own errors; this only catches bugs in them.
                logger.error(
                    "provider.unexpected_exception",
                    extra={
                        "provider": provider.name,
                        "analysis_type": analysis.value,
                        "error_type": type(outcome).__name__,
                    },
                )
                outcome = provider.failure(type(outcome).__name__)
            results[provider.name] = outcome

        merged = MergedResult(analysis_type=analysis, results=results)
        logger.info(
            "analysis.dispatched",
            extra={
                "analysis_type": analysis.value,
                "failed_providers": merged.failed_providers,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        return merged


