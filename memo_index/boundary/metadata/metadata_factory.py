"""
Metadata extractor factory.

Dependencies: langchain_ollama, langchain_google_genai, memo_index.configs
System role: Metadata extractor instantiation and selection
"""

import logging

from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_ollama import ChatOllama

from memo_index.boundary.metadata.metadata_extractor import (
    LLMMetadataExtractor,
    MetadataExtractor,
    RuleBasedMetadataExtractor,
)
from memo_index.configs import EmbeddingSettings
from memo_index.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def get_metadata_extractor(
    settings: EmbeddingSettings,
    default_category: str = "note",
) -> MetadataExtractor:
    """
    Build the metadata extractor selected by settings.

    Args:
        settings: Embedding and metadata model settings
        default_category: Category used when nothing else applies

    Returns:
        MetadataExtractor: Rule-based or LLM-backed extractor

    Raises:
        ConfigurationError: If the metadata provider is unknown
    """
    rules = RuleBasedMetadataExtractor(default_category=default_category)
    provider = settings.metadata_provider.lower()

    if provider == "rules":
        return rules
    elif provider == "ollama":
        model = ChatOllama(
            model=settings.metadata_model,
            base_url=settings.base_url,
            format="json",
            temperature=0,
        )
    elif provider == "google":
        model = ChatGoogleGenerativeAI(model=settings.metadata_model, temperature=0)
    else:
        raise ConfigurationError(
            f"Invalid metadata provider: {provider}. Must be 'rules', 'ollama' or 'google'.",
            setting="embedding.metadata_provider",
        )

    logger.info(
        f"{__name__}:get_metadata_extractor - Using {provider} model {settings.metadata_model}"
    )
    return LLMMetadataExtractor(model, fallback=rules)
