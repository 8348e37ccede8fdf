"""
Core business logic module.

Contains the chunker, the memory cache, the persistence queue, association
preferences and the exception hierarchy.
"""

from memo_index.core.exceptions import (
    BackendUnavailableError,
    ConfigurationError,
    DimensionMismatchError,
    EmbeddingError,
    IndexingError,
    MemoIndexException,
    MetadataExtractionError,
    VectorStoreError,
)
from memo_index.core.chunker import Chunker
from memo_index.core.memory_cache import MemoryCache
from memo_index.core.persist_queue import PersistQueue

__all__ = [
    # Exceptions
    "BackendUnavailableError",
    "ConfigurationError",
    "DimensionMismatchError",
    "EmbeddingError",
    "IndexingError",
    "MemoIndexException",
    "MetadataExtractionError",
    "VectorStoreError",
    # Components
    "Chunker",
    "MemoryCache",
    "PersistQueue",
]
