"""AWS Comprehend adapter.

boto3 is synchronous, so each call runs in a worker thread. botocore timeouts
are set slightly below the adapter timeout so the thread does not outlive the
request by much.
"""

from __future__ import annotations

import asyncio
from typing import Any

from insight_engine.adapters.nlp.base import AbstractNLPProvider
from insight_engine.core.errors import ProviderAppError
from insight_engine.schemas.nlp import (
    AWSSentiment,
    AWSSentimentScores,
    ClassificationItem,
    EntityItem,
    LanguageCandidate,
)


class AWSComprehendClient(AbstractNLPProvider):
    """Client for AWS Comprehend real-time APIs."""

    name = "aws"
    display_name = "AWS"

    def __init__(
        self,
        region: str = "us-east-1",
        *,
        classifier_arn: str | None = None,
        client: Any | None = None,
        timeout_seconds: float = 10.0,
        language_hint: str = "en",
    ) -> None:
        """Initialize the adapter.

        Args:
            region: AWS region hosting Comprehend.
            classifier_arn: Endpoint ARN of a custom document classifier.
            client: Pre-built boto3 ``comprehend`` client (mainly for tests).
            timeout_seconds: Upper bound for each call.
            language_hint: ``LanguageCode`` sent to Comprehend.
        """
        super().__init__(timeout_seconds=timeout_seconds, language_hint=language_hint)
        self._region = region
        self._classifier_arn = classifier_arn
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            import boto3
            from botocore.config import Config

            self._client = boto3.client(
                "comprehend",
                region_name=self._region,
                config=Config(
                    connect_timeout=self.timeout_seconds,
                    read_timeout=self.timeout_seconds,
                    retries={"max_attempts": 1},
                ),
            )
        return self._client

    async def _call(self, operation: str, **params: Any) -> dict[str, Any]:
        client = await asyncio.to_thread(self._get_client)
        return await asyncio.to_thread(getattr(client, operation), **params)

    async def _analyze_sentiment(self, text: str) -> AWSSentiment:
        response = await self._call("detect_sentiment", Text=text, LanguageCode=self.language_hint)
        return AWSSentiment(
            sentiment=response["Sentiment"],
            scores=AWSSentimentScores.model_validate(response["SentimentScore"]),
        )

    async def _extract_key_phrases(self, text: str) -> list[str]:
        response = await self._call("detect_key_phrases", Text=text, LanguageCode=self.language_hint)
        return [phrase["Text"] for phrase in response.get("KeyPhrases", [])]

    async def _recognize_entities(self, text: str) -> list[EntityItem]:
        response = await self._call("detect_entities", Text=text, LanguageCode=self.language_hint)
        return [
            EntityItem(
                text=entity["Text"],
                type=entity["Type"],
                confidence=entity.get("Score"),
                offset=entity.get("BeginOffset"),
                length=(
                    entity["EndOffset"] - entity["BeginOffset"]
                    if "EndOffset" in entity and "BeginOffset" in entity
                    else None
                ),
            )
            for entity in response.get("Entities", [])
        ]

    async def _detect_language(self, text: str) -> list[LanguageCandidate]:
        response = await self._call("detect_dominant_language", Text=text)
        return [
            LanguageCandidate(
                language=candidate["LanguageCode"],
                code=candidate["LanguageCode"],
                confidence=candidate.get("Score"),
            )
            for candidate in response.get("Languages", [])
        ]

    async def _classify(self, text: str) -> list[ClassificationItem]:
        if not self._classifier_arn:
            raise ProviderAppError(
                code="aws_classification_not_configured",
                message="AWS classification requires a custom classifier endpoint ARN",
            )

        response = await self._call("classify_document", Text=text, EndpointArn=self._classifier_arn)
        return [
            ClassificationItem(category=item["Name"], confidence=item["Score"])
            for item in response.get("Classes", [])
        ]
