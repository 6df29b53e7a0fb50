"""Tests for the provider adapters' normalization and error containment.

SDK clients are replaced by mocks returning the vendor response shapes.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError

from insight_engine.adapters.nlp.aws_client import AWSComprehendClient
from insight_engine.adapters.nlp.azure_client import AzureLanguageClient
from insight_engine.adapters.nlp.factory import create_nlp_providers
from insight_engine.adapters.nlp.google_client import GoogleLanguageClient
from insight_engine.core.config import Settings
from insight_engine.schemas.analysis import AnalysisType, ProviderFailure, ProviderSuccess

TEXT = "I had the best day of my life in Seattle."


def _azure_doc(**fields) -> SimpleNamespace:
    return SimpleNamespace(is_error=False, **fields)


class _AsyncPages:
    def __init__(self, items: list) -> None:
        self._items = items

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for item in self._items:
            yield item


# ======================== Azure ========================


class TestAzureLanguageClient:
    @pytest.mark.asyncio
    async def test_sentiment_is_normalized(self) -> None:
        sdk = MagicMock()
        sdk.analyze_sentiment = AsyncMock(
            return_value=[
                _azure_doc(
                    sentiment="positive",
                    confidence_scores=SimpleNamespace(positive=0.98, neutral=0.01, negative=0.01),
                )
            ]
        )
        adapter = AzureLanguageClient(client=sdk)

        result = await adapter.analyze_sentiment(TEXT)

        assert isinstance(result, ProviderSuccess)
        assert result.to_wire() == {
            "sentiment": "positive",
            "scores": {"positive": 0.98, "neutral": 0.01, "negative": 0.01},
        }
        sdk.analyze_sentiment.assert_awaited_once_with([TEXT], language="en")

    @pytest.mark.asyncio
    async def test_entities_and_key_phrases(self) -> None:
        sdk = MagicMock()
        sdk.recognize_entities = AsyncMock(
            return_value=[
                _azure_doc(
                    entities=[
                        SimpleNamespace(
                            text="Seattle", category="Location", confidence_score=0.95, offset=33, length=7
                        )
                    ]
                )
            ]
        )
        sdk.extract_key_phrases = AsyncMock(return_value=[_azure_doc(key_phrases=["best day", "life"])])
        adapter = AzureLanguageClient(client=sdk)

        entities = await adapter.recognize_entities(TEXT)
        phrases = await adapter.extract_key_phrases(TEXT)

        assert entities.to_wire() == [
            {"text": "Seattle", "type": "Location", "confidence": 0.95, "offset": 33, "length": 7}
        ]
        assert phrases.to_wire() == ["best day", "life"]

    @pytest.mark.asyncio
    async def test_language_detection(self) -> None:
        sdk = MagicMock()
        sdk.detect_language = AsyncMock(
            return_value=[
                _azure_doc(
                    primary_language=SimpleNamespace(name="English", iso6391_name="en", confidence_score=1.0)
                )
            ]
        )
        adapter = AzureLanguageClient(client=sdk)

        result = await adapter.detect_language(TEXT)

        assert result.to_wire() == {"language": "English", "code": "en", "confidence": 1.0}

    @pytest.mark.asyncio
    async def test_classification_uses_configured_project(self) -> None:
        poller = MagicMock()
        poller.result = AsyncMock(
            return_value=_AsyncPages(
                [
                    _azure_doc(
                        classifications=[SimpleNamespace(category="Travel", confidence_score=0.7)]
                    )
                ]
            )
        )
        sdk = MagicMock()
        sdk.begin_single_label_classify = AsyncMock(return_value=poller)
        adapter = AzureLanguageClient(
            client=sdk,
            classification_project="demo",
            classification_deployment="prod",
        )

        result = await adapter.classify(TEXT)

        assert result.to_wire() == [{"category": "Travel", "confidence": 0.7}]
        kwargs = sdk.begin_single_label_classify.await_args.kwargs
        assert kwargs["project_name"] == "demo"
        assert kwargs["deployment_name"] == "prod"

    @pytest.mark.asyncio
    async def test_classification_without_project_is_error_marker(self) -> None:
        sdk = MagicMock()
        adapter = AzureLanguageClient(client=sdk)

        result = await adapter.classify(TEXT)

        assert isinstance(result, ProviderFailure)
        assert result.error == "Failed to get analysis from Azure"
        assert "project" in result.details
        sdk.begin_single_label_classify.assert_not_called()

    @pytest.mark.asyncio
    async def test_document_error_becomes_error_marker(self) -> None:
        sdk = MagicMock()
        sdk.analyze_sentiment = AsyncMock(
            return_value=[
                SimpleNamespace(
                    is_error=True,
                    error=SimpleNamespace(code="InvalidDocument", message="Document text is empty."),
                )
            ]
        )
        adapter = AzureLanguageClient(client=sdk)

        result = await adapter.analyze_sentiment(TEXT)

        assert isinstance(result, ProviderFailure)
        assert result.to_wire() == {
            "error": "Failed to get analysis from Azure",
            "details": "Document text is empty.",
        }

    @pytest.mark.asyncio
    async def test_missing_configuration_becomes_error_marker(self) -> None:
        adapter = AzureLanguageClient(endpoint=None, key=None)

        result = await adapter.analyze_sentiment(TEXT)

        assert isinstance(result, ProviderFailure)
        assert "not configured" in result.details


# ======================== AWS ========================


class TestAWSComprehendClient:
    @pytest.mark.asyncio
    async def test_sentiment_is_normalized(self) -> None:
        sdk = MagicMock()
        sdk.detect_sentiment.return_value = {
            "Sentiment": "POSITIVE",
            "SentimentScore": {"Positive": 0.99, "Negative": 0.0, "Neutral": 0.01, "Mixed": 0.0},
        }
        adapter = AWSComprehendClient(client=sdk)

        result = await adapter.analyze_sentiment(TEXT)

        assert result.to_wire() == {
            "sentiment": "POSITIVE",
            "scores": {"Positive": 0.99, "Negative": 0.0, "Neutral": 0.01, "Mixed": 0.0},
        }
        sdk.detect_sentiment.assert_called_once_with(Text=TEXT, LanguageCode="en")

    @pytest.mark.asyncio
    async def test_entities_keep_offsets(self) -> None:
        sdk = MagicMock()
        sdk.detect_entities.return_value = {
            "Entities": [
                {"Text": "Seattle", "Type": "LOCATION", "Score": 0.99, "BeginOffset": 33, "EndOffset": 40}
            ]
        }
        adapter = AWSComprehendClient(client=sdk)

        result = await adapter.recognize_entities(TEXT)

        assert result.to_wire() == [
            {"text": "Seattle", "type": "LOCATION", "confidence": 0.99, "offset": 33, "length": 7}
        ]

    @pytest.mark.asyncio
    async def test_language_returns_all_candidates(self) -> None:
        sdk = MagicMock()
        sdk.detect_dominant_language.return_value = {
            "Languages": [
                {"LanguageCode": "en", "Score": 0.98},
                {"LanguageCode": "fr", "Score": 0.02},
            ]
        }
        adapter = AWSComprehendClient(client=sdk)

        result = await adapter.detect_language(TEXT)

        assert [item["language"] for item in result.to_wire()] == ["en", "fr"]

    @pytest.mark.asyncio
    async def test_key_phrases_preserve_order(self) -> None:
        sdk = MagicMock()
        sdk.detect_key_phrases.return_value = {
            "KeyPhrases": [{"Text": "the best day"}, {"Text": "my life"}]
        }
        adapter = AWSComprehendClient(client=sdk)

        result = await adapter.extract_key_phrases(TEXT)

        assert result.to_wire() == ["the best day", "my life"]

    @pytest.mark.asyncio
    async def test_classification_requires_endpoint(self) -> None:
        sdk = MagicMock()
        adapter = AWSComprehendClient(client=sdk)

        result = await adapter.classify(TEXT)

        assert isinstance(result, ProviderFailure)
        sdk.classify_document.assert_not_called()

        sdk.classify_document.return_value = {"Classes": [{"Name": "travel", "Score": 0.6}]}
        configured = AWSComprehendClient(client=sdk, classifier_arn="arn:aws:comprehend:endpoint/demo")

        result = await configured.classify(TEXT)

        assert result.to_wire() == [{"category": "travel", "confidence": 0.6}]

    @pytest.mark.asyncio
    async def test_client_error_becomes_error_marker(self) -> None:
        sdk = MagicMock()
        sdk.detect_sentiment.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "not authorized"}},
            "DetectSentiment",
        )
        adapter = AWSComprehendClient(client=sdk)

        result = await adapter.analyze_sentiment(TEXT)

        assert isinstance(result, ProviderFailure)
        assert result.error == "Failed to get analysis from AWS"
        assert "AccessDeniedException" in result.details


# ======================== Google ========================


def _google_entity(name: str, type_name: str, salience: float, offset: int) -> SimpleNamespace:
    return SimpleNamespace(
        name=name,
        type_=SimpleNamespace(name=type_name),
        salience=salience,
        mentions=[SimpleNamespace(text=SimpleNamespace(content=name, begin_offset=offset))],
    )


class TestGoogleLanguageClient:
    @pytest.mark.asyncio
    async def test_sentiment_is_normalized(self) -> None:
        sdk = MagicMock()
        sdk.analyze_sentiment = AsyncMock(
            return_value=SimpleNamespace(
                document_sentiment=SimpleNamespace(score=0.9, magnitude=0.9),
                language="en",
            )
        )
        adapter = GoogleLanguageClient(client=sdk)

        result = await adapter.analyze_sentiment(TEXT)

        wire = result.to_wire()
        assert wire["sentiment"] == {"score": 0.9, "magnitude": 0.9}
        assert wire["language"] == "en"

    @pytest.mark.asyncio
    async def test_key_phrases_follow_salience(self) -> None:
        sdk = MagicMock()
        sdk.analyze_entities = AsyncMock(
            return_value=SimpleNamespace(
                entities=[
                    _google_entity("day", "OTHER", 0.2, 15),
                    _google_entity("Seattle", "LOCATION", 0.6, 33),
                    _google_entity("life", "OTHER", 0.2, 27),
                ]
            )
        )
        adapter = GoogleLanguageClient(client=sdk)

        phrases = await adapter.extract_key_phrases(TEXT)
        entities = await adapter.recognize_entities(TEXT)

        assert phrases.to_wire() == ["Seattle", "day", "life"]
        assert entities.to_wire()[1] == {
            "text": "Seattle",
            "type": "LOCATION",
            "confidence": 0.6,
            "offset": 33,
            "length": 7,
        }

    @pytest.mark.asyncio
    async def test_language_has_no_confidence(self) -> None:
        sdk = MagicMock()
        sdk.analyze_sentiment = AsyncMock(
            return_value=SimpleNamespace(
                document_sentiment=SimpleNamespace(score=0.1, magnitude=0.1),
                language="fr",
            )
        )
        adapter = GoogleLanguageClient(client=sdk)

        result = await adapter.detect_language("Bonjour tout le monde")

        assert result.to_wire() == {"language": "fr", "code": "fr", "confidence": None}

    @pytest.mark.asyncio
    async def test_classification(self) -> None:
        sdk = MagicMock()
        sdk.classify_text = AsyncMock(
            return_value=SimpleNamespace(
                categories=[SimpleNamespace(name="/Travel/Tourist Destinations", confidence=0.72)]
            )
        )
        adapter = GoogleLanguageClient(client=sdk)

        result = await adapter.classify(TEXT)

        assert result.to_wire() == [{"category": "/Travel/Tourist Destinations", "confidence": 0.72}]

    @pytest.mark.asyncio
    async def test_hanging_call_is_bounded_by_timeout(self) -> None:
        async def _hang(**_kwargs):
            await asyncio.sleep(10)

        sdk = MagicMock()
        sdk.analyze_sentiment = _hang
        adapter = GoogleLanguageClient(client=sdk, timeout_seconds=0.05)

        result = await adapter.analyze_sentiment(TEXT)

        assert isinstance(result, ProviderFailure)
        assert "did not answer" in result.details


# ======================== Shared behaviour ========================


@pytest.mark.asyncio
@pytest.mark.parametrize("analysis_type", list(AnalysisType))
async def test_run_routes_every_analysis_type(analysis_type: AnalysisType) -> None:
    sdk = MagicMock()
    sdk.classify_text = AsyncMock(return_value=SimpleNamespace(categories=[]))
    sdk.analyze_entities = AsyncMock(return_value=SimpleNamespace(entities=[]))
    sdk.analyze_sentiment = AsyncMock(
        return_value=SimpleNamespace(
            document_sentiment=SimpleNamespace(score=0.0, magnitude=0.0),
            language="en",
        )
    )
    adapter = GoogleLanguageClient(client=sdk)

    result = await adapter.run(analysis_type, TEXT)

    assert isinstance(result, ProviderSuccess)


def test_factory_builds_one_adapter_per_provider() -> None:
    providers = create_nlp_providers(Settings())

    assert [provider.name for provider in providers] == ["aws", "azure", "google"]
    assert all(provider.timeout_seconds > 0 for provider in providers)
