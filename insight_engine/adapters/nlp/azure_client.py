"""Azure AI Language (Text Analytics) adapter."""

from __future__ import annotations

from typing import Any

from insight_engine.adapters.nlp.base import AbstractNLPProvider
from insight_engine.core.errors import ProviderAppError
from insight_engine.schemas.nlp import (
    AzureSentiment,
    AzureSentimentScores,
    ClassificationItem,
    EntityItem,
    LanguageCandidate,
)


class AzureLanguageClient(AbstractNLPProvider):
    """Client for Azure AI Language using the async Text Analytics SDK.

    The SDK client is created on first use so that a missing endpoint or key
    only affects Azure's result slot.
    """

    name = "azure"
    display_name = "Azure"

    def __init__(
        self,
        endpoint: str | None = None,
        key: str | None = None,
        *,
        classification_project: str | None = None,
        classification_deployment: str | None = None,
        client: Any | None = None,
        timeout_seconds: float = 10.0,
        language_hint: str = "en",
    ) -> None:
        """Initialize the adapter.

        Args:
            endpoint: Azure Language resource endpoint.
            key: Azure Language resource key.
            classification_project: Custom classification project name.
            classification_deployment: Custom classification deployment name.
            client: Pre-built ``TextAnalyticsClient`` (mainly for tests).
            timeout_seconds: Upper bound for each call.
            language_hint: Language passed to analyses that accept one.
        """
        super().__init__(timeout_seconds=timeout_seconds, language_hint=language_hint)
        self._endpoint = endpoint
        self._key = key
        self._classification_project = classification_project
        self._classification_deployment = classification_deployment
        self._client = client

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client

        if not self._endpoint or not self._key:
            raise ProviderAppError(
                code="azure_not_configured",
                message="Azure Language endpoint or key is not configured",
            )

        from azure.ai.textanalytics.aio import TextAnalyticsClient
        from azure.core.credentials import AzureKeyCredential

        self._client = TextAnalyticsClient(
            endpoint=self._endpoint,
            credential=AzureKeyCredential(self._key),
        )
        return self._client

    @staticmethod
    def _first_document(results: Any) -> Any:
        """Return the single document result, raising on per-document errors."""
        document = results[0]
        if getattr(document, "is_error", False):
            error = document.error
            raise ProviderAppError(
                code=f"azure_{getattr(error, 'code', 'document_error')}",
                message=getattr(error, "message", None) or "Azure reported a document error",
            )
        return document

    async def _analyze_sentiment(self, text: str) -> AzureSentiment:
        results = await self._get_client().analyze_sentiment([text], language=self.language_hint)
        document = self._first_document(results)
        scores = document.confidence_scores
        return AzureSentiment(
            sentiment=document.sentiment,
            scores=AzureSentimentScores(
                positive=scores.positive,
                neutral=scores.neutral,
                negative=scores.negative,
            ),
        )

    async def _extract_key_phrases(self, text: str) -> list[str]:
        results = await self._get_client().extract_key_phrases([text], language=self.language_hint)
        return list(self._first_document(results).key_phrases)

    async def _recognize_entities(self, text: str) -> list[EntityItem]:
        results = await self._get_client().recognize_entities([text], language=self.language_hint)
        return [
            EntityItem(
                text=entity.text,
                type=entity.category,
                confidence=entity.confidence_score,
                offset=entity.offset,
                length=entity.length,
            )
            for entity in self._first_document(results).entities
        ]

    async def _detect_language(self, text: str) -> LanguageCandidate:
        results = await self._get_client().detect_language([text])
        primary = self._first_document(results).primary_language
        return LanguageCandidate(
            language=primary.name,
            code=primary.iso6391_name,
            confidence=primary.confidence_score,
        )

    async def _classify(self, text: str) -> list[ClassificationItem]:
        if not self._classification_project or not self._classification_deployment:
            raise ProviderAppError(
                code="azure_classification_not_configured",
                message="Azure classification requires a custom project and deployment",
            )

        poller = await self._get_client().begin_single_label_classify(
            [text],
            project_name=self._classification_project,
            deployment_name=self._classification_deployment,
            language=self.language_hint,
        )
        pages = await poller.result()

        items: list[ClassificationItem] = []
        async for document in pages:
            if getattr(document, "is_error", False):
                self._first_document([document])
            items.extend(
                ClassificationItem(
                    category=classification.category,
                    confidence=classification.confidence_score,
                )
                for classification in document.classifications
            )
        return items

    async def aclose(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            await self._client.close()
