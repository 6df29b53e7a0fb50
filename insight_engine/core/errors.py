"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional; the exception handlers only render the ones present.
    """

    description: str
    current_length: int
    min_length: int
    max_length: int
    retry_after: int
    reason: str
    supported_types: list[str]
    provider: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when client input is missing, malformed or out of range."""


class UnsupportedAnalysisTypeError(ValidationAppError):
    """Raised when an analysis type outside the fixed enumeration is requested."""


class RateLimitAppError(AppError):
    """Raised when a client exceeds its request budget."""


class ProviderAppError(AppError):
    """Raised by provider adapters for vendor-side failures.

    Never escapes an adapter: it is converted into a failure marker.
    """
