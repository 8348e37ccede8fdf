"""
Vector backend factory for selecting between Qdrant (remote) and FAISS (embedded).

Depends on the MEMO_VECTOR_STORE_STORE_TYPE environment variable.
Provides consistent interface regardless of underlying implementation.

Dependencies: memo_index.boundary.vdb, memo_index.configs
System role: Vector backend instantiation and selection
"""

import logging

from memo_index.boundary.vdb.faiss_backend import FAISSBackend
from memo_index.boundary.vdb.qdrant_backend import QdrantBackend
from memo_index.boundary.vdb.vector_backend import VectorBackend
from memo_index.configs import VectorStoreSettings, get_settings
from memo_index.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def get_vector_backend(settings: VectorStoreSettings | None = None) -> VectorBackend:
    """
    Factory function to get a vector backend based on configuration.

    Args:
        settings: Vector store settings (defaults to the cached application settings)

    Returns:
        VectorBackend: QdrantBackend or FAISSBackend

    Raises:
        ConfigurationError: If the store type is unknown
    """
    settings = settings or get_settings().vector_store
    store_type = settings.store_type.lower()

    if store_type == "qdrant":
        logger.info(
            f"{__name__}:get_vector_backend - Creating Qdrant backend at {settings.qdrant_url}"
        )
        return QdrantBackend(
            collection_name=settings.collection_name,
            url=settings.qdrant_url,
            api_key=settings.qdrant_api_key,
            timeout=settings.timeout_seconds,
            retry_attempts=settings.retry_attempts,
            prefetch_multiplier=settings.prefetch_multiplier,
        )

    elif store_type == "faiss":
        logger.info(
            f"{__name__}:get_vector_backend - Creating FAISS backend in {settings.persist_directory}"
        )
        return FAISSBackend(
            persist_directory=settings.persist_directory,
            prefetch_multiplier=settings.prefetch_multiplier,
            rrf_k=settings.rrf_k,
        )

    else:
        raise ConfigurationError(
            f"Invalid vector store type: {store_type}. Must be 'qdrant' or 'faiss'.",
            setting="vector_store.store_type",
        )
