"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from memo_index.configs.embedding import EmbeddingSettings
from memo_index.configs.indexing import IndexingSettings
from memo_index.configs.settings import Settings, get_settings
from memo_index.configs.vector_store import VectorStoreSettings

__all__ = [
    "EmbeddingSettings",
    "IndexingSettings",
    "Settings",
    "VectorStoreSettings",
    "get_settings",
]
