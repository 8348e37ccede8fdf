"""
Dependency wiring.

Builds a fully wired VectorIndexManager from settings. Every collaborator
is constructed here explicitly; nothing is shared through module globals.

Dependencies: memo_index.configs, memo_index.application, memo_index.boundary, memo_index.core
System role: Composition root for hosts
"""

import logging

from memo_index.application.services.vector_index_manager import (
    IndexEventListener,
    VectorIndexManager,
)
from memo_index.boundary.embedding.embedding_factory import get_embedding_provider
from memo_index.boundary.metadata.metadata_factory import get_metadata_extractor
from memo_index.boundary.vdb.vector_store_factory import get_vector_backend
from memo_index.configs import Settings, get_settings
from memo_index.core.chunker import Chunker
from memo_index.core.memory_cache import MemoryCache
from memo_index.core.persist_queue import PersistQueue

logger = logging.getLogger(__name__)


def build_index_manager(
    settings: Settings | None = None,
    listener: IndexEventListener | None = None,
) -> VectorIndexManager:
    """
    Build an index manager with its backend, providers, cache and queue.

    The manager is not started; call `await manager.start()` inside the
    event loop that will own it.

    Args:
        settings: Application settings (defaults to the cached settings)
        listener: Optional IndexEvent listener supplied by the host

    Returns:
        VectorIndexManager: Wired, not yet started manager
    """
    settings = settings or get_settings()
    indexing = settings.indexing

    backend = get_vector_backend(settings.vector_store)
    manager = VectorIndexManager(
        backend=backend,
        embedding_provider=get_embedding_provider(settings.embedding),
        chunker=Chunker(
            max_chunk_size=indexing.max_chunk_size,
            overlap_size=indexing.chunk_overlap,
        ),
        metadata_extractor=get_metadata_extractor(
            settings.embedding,
            default_category=indexing.default_category,
        ),
        cache=MemoryCache(max_size=indexing.cache_max_bytes),
        queue=PersistQueue(
            backend,
            batch_size=indexing.batch_size,
            flush_interval=indexing.flush_interval_seconds,
        ),
        default_category=indexing.default_category,
        summary_fallback_chars=indexing.summary_fallback_chars,
        search_limit=indexing.search_limit,
        listener=listener,
    )
    logger.info(
        f"{__name__}:build_index_manager - Built index manager",
        extra={
            "store_type": settings.vector_store.store_type,
            "embedding_provider": settings.embedding.provider,
        },
    )
    return manager
