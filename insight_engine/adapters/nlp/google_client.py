"""Google Cloud Natural Language adapter.

The Natural Language API has no key-phrase or language-detection endpoint:
key phrases are the entity names ordered by salience, and the language is
the one the API reports while analyzing sentiment (without a score).
"""

from __future__ import annotations

from typing import Any

from insight_engine.adapters.nlp.base import AbstractNLPProvider
from insight_engine.schemas.nlp import (
    ClassificationItem,
    EntityItem,
    GoogleSentiment,
    GoogleSentimentScore,
    LanguageCandidate,
)


class GoogleLanguageClient(AbstractNLPProvider):
    """Client for Google Cloud Natural Language using the async gRPC client."""

    name = "google"
    display_name = "Google"

    def __init__(
        self,
        credentials_file: str | None = None,
        *,
        client: Any | None = None,
        timeout_seconds: float = 10.0,
        language_hint: str = "en",
    ) -> None:
        """Initialize the adapter.

        Args:
            credentials_file: Service account key file; Application Default
                Credentials are used when omitted.
            client: Pre-built ``LanguageServiceAsyncClient`` (mainly for tests).
            timeout_seconds: Upper bound for each call.
            language_hint: Unused by Google (the API detects the language).
        """
        super().__init__(timeout_seconds=timeout_seconds, language_hint=language_hint)
        self._credentials_file = credentials_file
        self._client = client

    def _get_client(self) -> Any:
        # Created lazily: the async gRPC client must be built inside the running loop.
        if self._client is None:
            from google.cloud import language_v1

            if self._credentials_file:
                self._client = language_v1.LanguageServiceAsyncClient.from_service_account_file(
                    self._credentials_file
                )
            else:
                self._client = language_v1.LanguageServiceAsyncClient()
        return self._client

    @staticmethod
    def _document(text: str) -> Any:
        from google.cloud import language_v1

        return language_v1.Document(content=text, type_=language_v1.Document.Type.PLAIN_TEXT)

    @staticmethod
    def _utf32() -> Any:
        from google.cloud import language_v1

        # UTF32 offsets are code point offsets, matching Python string indices.
        return language_v1.EncodingType.UTF32

    async def _sentiment_response(self, text: str) -> Any:
        return await self._get_client().analyze_sentiment(
            document=self._document(text),
            encoding_type=self._utf32(),
            timeout=self.timeout_seconds,
        )

    async def _entities(self, text: str) -> list[Any]:
        response = await self._get_client().analyze_entities(
            document=self._document(text),
            encoding_type=self._utf32(),
            timeout=self.timeout_seconds,
        )
        return list(response.entities)

    async def _analyze_sentiment(self, text: str) -> GoogleSentiment:
        response = await self._sentiment_response(text)
        return GoogleSentiment(
            sentiment=GoogleSentimentScore(
                score=response.document_sentiment.score,
                magnitude=response.document_sentiment.magnitude,
            ),
            language=response.language or None,
        )

    async def _extract_key_phrases(self, text: str) -> list[str]:
        entities = sorted(await self._entities(text), key=lambda e: e.salience, reverse=True)
        phrases: list[str] = []
        for entity in entities:
            if entity.name not in phrases:
                phrases.append(entity.name)
        return phrases

    async def _recognize_entities(self, text: str) -> list[EntityItem]:
        items: list[EntityItem] = []
        for entity in await self._entities(text):
            mention = entity.mentions[0].text if entity.mentions else None
            items.append(
                EntityItem(
                    text=entity.name,
                    type=getattr(entity.type_, "name", str(entity.type_)),
                    confidence=entity.salience,
                    offset=mention.begin_offset if mention is not None else None,
                    length=len(mention.content) if mention is not None else None,
                )
            )
        return items

    async def _detect_language(self, text: str) -> LanguageCandidate:
        response = await self._sentiment_response(text)
        return LanguageCandidate(language=response.language, code=response.language, confidence=None)

    async def _classify(self, text: str) -> list[ClassificationItem]:
        response = await self._get_client().classify_text(
            document=self._document(text),
            timeout=self.timeout_seconds,
        )
        return [
            ClassificationItem(category=category.name, confidence=category.confidence)
            for category in response.categories
        ]

    async def aclose(self) -> None:
        transport = getattr(self._client, "transport", None)
        if transport is not None and hasattr(transport, "close"):
            await transport.close()
