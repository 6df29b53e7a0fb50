"""Schemas for analysis requests and the three-provider composite result."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from insight_engine.schemas.nlp import ProviderPayload


class AnalysisType(str, Enum):
    """Analyses every provider adapter supports."""

    SENTIMENT = "sentiment"
    KEY_PHRASES = "keyPhrases"
    ENTITIES = "entities"
    LANGUAGE = "language"
    CLASSIFICATION = "classification"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


DEFAULT_ANALYSIS_TYPE = AnalysisType.SENTIMENT

PROVIDER_NAMES: tuple[str, ...] = ("aws", "azure", "google")


class AnalyzeRequestBody(BaseModel):
    """Raw JSON body of ``POST /api/analyze``.

    Fields are deliberately loose; range and enumeration checks happen in the
    service so that each failure gets its own error code.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: Any = Field(
        None,
        description="Text to analyze.",
        examples=["I had the best day of my life."],
    )
    analysis_type: str | None = Field(
        None,
        alias="analysisType",
        description=f"One of {', '.join(AnalysisType.values())}. Defaults to sentiment.",
    )


class AnalyzeRequest(BaseModel):
    """Validated analysis input."""

    text: str
    analysis_type: AnalysisType


class ProviderSuccess(BaseModel):
    status: Literal["success"] = "success"
    provider: str
    data: ProviderPayload

    def to_wire(self) -> Any:
        return self.model_dump(mode="json", by_alias=True)["data"]


class ProviderFailure(BaseModel):
    status: Literal["error"] = "error"
    provider: str
    error: str
    details: str | None = None

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.details:
            body["details"] = self.details
        return body


ProviderResult = Annotated[ProviderSuccess | ProviderFailure, Field(discriminator="status")]


class MergedResult(BaseModel):
    """Results of one analysis type from all providers."""

    analysis_type: AnalysisType
    results: dict[str, ProviderResult]
    cached: bool = False

    @property
    def failed_providers(self) -> list[str]:
        return [
            name for name, result in self.results.items()
            if isinstance(result, ProviderFailure)
        ]

    def to_response(self) -> dict[str, Any]:
        """Render the public JSON body.

        Shape: ``{<analysisType>: {aws, azure, google}, message, cached}``.
        """

        return {
            self.analysis_type.value: {
                name: self.results[name].to_wire() for name in sorted(self.results)
            },
            "message": f"{self.analysis_type.value} analysis completed successfully.",
            "cached": self.cached,
        }
