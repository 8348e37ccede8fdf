"""
Embedding provider factory.

Builds the configured LangChain embeddings model and wraps it in an
EmbeddingProvider.

Dependencies: langchain_ollama, langchain_aws, langchain_google_genai, langchain_core
System role: Embedding provider instantiation and selection
"""

import logging

from langchain_aws import BedrockEmbeddings
from langchain_core.embeddings import DeterministicFakeEmbedding, Embeddings
from langchain_ollama import OllamaEmbeddings

from memo_index.boundary.embedding.embedding_provider import (
    EmbeddingProvider,
    LangChainEmbeddingProvider,
)
from memo_index.boundary.embedding.embeddings_wrapper import FixedDimensionEmbeddings
from memo_index.configs import EmbeddingSettings
from memo_index.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def build_embeddings(settings: EmbeddingSettings) -> Embeddings:
    """
    Create the LangChain embeddings model selected by settings.

    Args:
        settings: Embedding settings

    Returns:
        Embeddings: Configured embeddings model

    Raises:
        ConfigurationError: If the provider is unknown
    """
    provider = settings.provider.lower()

    if provider == "ollama":
        return OllamaEmbeddings(model=settings.model, base_url=settings.base_url)
    elif provider == "google":
        return FixedDimensionEmbeddings(
            model=settings.model,
            output_dimensionality=settings.dimension,
        )
    elif provider == "bedrock":
        return BedrockEmbeddings(model_id=settings.model, region_name=settings.region)
    elif provider == "fake":
        return DeterministicFakeEmbedding(size=settings.dimension)

    raise ConfigurationError(
        f"Invalid embedding provider: {provider}. "
        "Must be 'ollama', 'google', 'bedrock' or 'fake'.",
        setting="embedding.provider",
    )


def get_embedding_provider(settings: EmbeddingSettings) -> EmbeddingProvider:
    """Build an EmbeddingProvider for the configured model."""
    embeddings = build_embeddings(settings)
    logger.info(
        f"{__name__}:get_embedding_provider - Using {type(embeddings).__name__}",
        extra={"provider": settings.provider, "model": settings.model},
    )
    return LangChainEmbeddingProvider(embeddings, timeout_seconds=settings.timeout_seconds)
