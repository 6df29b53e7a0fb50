"""Factory for the three provider adapters."""

from insight_engine.adapters.nlp.aws_client import AWSComprehendClient
from insight_engine.adapters.nlp.azure_client import AzureLanguageClient
from insight_engine.adapters.nlp.base import AbstractNLPProvider
from insight_engine.adapters.nlp.google_client import GoogleLanguageClient
from insight_engine.core.config import Settings, settings as default_settings


def create_nlp_providers(settings: Settings | None = None) -> list[AbstractNLPProvider]:
    """Instantiate the AWS, Azure and Google adapters from configuration.

    Missing credentials are not an error here: each adapter reports its own
    configuration problem in its result slot.

    Returns:
        list[AbstractNLPProvider]: One adapter per provider.
    """
    cfg = settings or default_settings
    common = {
        "timeout_seconds": cfg.providers.timeout_seconds,
        "language_hint": cfg.providers.language_hint,
    }

    return [
        AWSComprehendClient(
            region=cfg.aws.region,
            classifier_arn=cfg.aws.comprehend_classifier_arn,
            **common,
        ),
        AzureLanguageClient(
            endpoint=cfg.azure.endpoint,
            key=cfg.azure.key,
            classification_project=cfg.azure.classification_project,
            classification_deployment=cfg.azure.classification_deployment,
            **common,
        ),
        GoogleLanguageClient(
            credentials_file=cfg.google.credentials_file,
            **common,
        ),
    ]
