"""NLP provider adapter layer - one adapter per cloud vendor."""

from insight_engine.adapters.nlp.aws_client import AWSComprehendClient
from insight_engine.adapters.nlp.azure_client import AzureLanguageClient
from insight_engine.adapters.nlp.base import AbstractNLPProvider
from insight_engine.adapters.nlp.factory import create_nlp_providers
from insight_engine.adapters.nlp.google_client import GoogleLanguageClient

__all__ = [
    "AbstractNLPProvider",
    "AWSComprehendClient",
    "AzureLanguageClient",
    "GoogleLanguageClient",
    "create_nlp_providers",
]
