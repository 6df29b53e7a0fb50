"""Normalized provider payloads.

Each vendor keeps its own sentiment vocabulary (AWS upper-case labels with
capitalized score keys, Azure lower-case labels, Google score/magnitude), so
sentiment and language results are tagged per provider. Key phrases, entities
and classifications share one shape across vendors.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class AWSSentimentScores(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    positive: float = Field(..., alias="Positive")
    negative: float = Field(..., alias="Negative")
    neutral: float = Field(..., alias="Neutral")
    mixed: float = Field(..., alias="Mixed")


class AWSSentiment(BaseModel):
    """AWS Comprehend DetectSentiment result."""

    sentiment: Literal["POSITIVE", "NEGATIVE", "NEUTRAL", "MIXED"]
    scores: AWSSentimentScores


class AzureSentimentScores(BaseModel):
    positive: float
    neutral: float
    negative: float


class AzureSentiment(BaseModel):
    """Azure AI Language document sentiment."""

    sentiment: Literal["positive", "negative", "neutral", "mixed"]
    scores: AzureSentimentScores


class GoogleSentimentScore(BaseModel):
    score: float = Field(..., ge=-1.0, le=1.0, description="Overall polarity from -1 to 1.")
    magnitude: float = Field(..., ge=0.0, description="Overall emotional strength.")


class GoogleSentiment(BaseModel):
    """Google Natural Language document sentiment."""

    sentiment: GoogleSentimentScore
    language: str | None = None


class EntityItem(BaseModel):
    """A named entity located in the submitted text."""

    text: str
    type: str
    confidence: float | None = Field(
        None,
        description="Vendor confidence (Google reports salience instead).",
    )
    offset: int | None = Field(None, description="Character offset of the first mention.")
    length: int | None = Field(None, description="Character length of the first mention.")


class LanguageCandidate(BaseModel):
    """A detected language.

    ``confidence`` is None for vendors that report no score.
    """

    language: str
    code: str | None = None
    confidence: float | None = None


class ClassificationItem(BaseModel):
    category: str
    confidence: float


SentimentPayload = AWSSentiment | AzureSentiment | GoogleSentiment

LanguagePayload = LanguageCandidate | list[LanguageCandidate]

ProviderPayload = (
    AWSSentiment
    | AzureSentiment
    | GoogleSentiment
    | LanguageCandidate
    | list[LanguageCandidate]
    | list[EntityItem]
    | list[ClassificationItem]
    | list[str]
)
