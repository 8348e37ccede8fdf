"""
Vector index manager.

Orchestrates the write path (chunk, extract metadata, embed three ways,
cache, enqueue for persistence) and the read path (embed the query, score
cached chunks, run fused backend search, merge).

Dependencies: numpy, memo_index.core, memo_index.boundary
System role: Top-level indexing and search facade for the host application
"""

import asyncio
import logging
from typing import Callable

import numpy as np

from memo_index.boundary.documents.document_source import DocumentSource
from memo_index.boundary.embedding.embedding_provider import EmbeddingProvider
from memo_index.boundary.metadata.metadata_extractor import MetadataExtractor
from memo_index.boundary.vdb.vector_backend import VectorBackend
from memo_index.core.chunker import Chunker
from memo_index.core.exceptions import EmbeddingError, IndexingError, MemoIndexException
from memo_index.core.memory_cache import MemoryCache
from memo_index.core.persist_queue import PersistQueue
from memo_index.models.chunk import Chunk
from memo_index.models.events import IndexEvent, IndexFileResult, IndexRunReport
from memo_index.models.index_record import (
    ChunkMetadata,
    IndexRecord,
    NamedVectors,
    build_chunk_id,
)
from memo_index.models.metadata import ExtractedMetadata
from memo_index.models.search import CacheEntry, SearchFilter, SearchResult
from memo_index.models.stats import CacheStats, QueueStats
from memo_index.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

IndexEventListener = Callable[[IndexEvent], None]


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """
    Cosine similarity of two vectors.

    Returns 0.0 when either vector has zero norm or the dimensions differ.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        return 0.0
    denominator = np.linalg.norm(va) * np.linalg.norm(vb)
    if denominator == 0:
        return 0.0
    return float(np.dot(va, vb) / denominator)


def merge_results(
    cache_results: list[SearchResult],
    backend_results: list[SearchResult],
    limit: int,
) -> list[SearchResult]:
    """
    Merge cache and backend results by id.

    The cache entry wins when both tiers return the same id. Results are
    ordered by score, best first, and truncated to `limit`.
    """
    merged: dict[str, SearchResult] = {result.id: result for result in cache_results}
    for result in backend_results:
        merged.setdefault(result.id, result)
    ranked = sorted(merged.values(), key=lambda result: result.score, reverse=True)
    return ranked[:limit]


class VectorIndexManager:
    """
    Indexing and search facade.

    Owns one memory cache and one persistence queue; every collaborator is
    injected so hosts and tests control their lifetimes.
    """

    def __init__(
        self,
        backend: VectorBackend,
        embedding_provider: EmbeddingProvider,
        chunker: Chunker,
        metadata_extractor: MetadataExtractor,
        cache: MemoryCache,
        queue: PersistQueue,
        default_category: str = "note",
        summary_fallback_chars: int = 200,
        search_limit: int = 10,
        listener: IndexEventListener | None = None,
    ) -> None:
        """
        Initialize manager.

        Args:
            backend: Durable vector store
            embedding_provider: Produces content, summary, title and query embeddings
            chunker: Splits documents into chunks
            metadata_extractor: Produces summary, tags and category per chunk
            cache: Hot tier searched on every query
            queue: Write-behind buffer in front of the backend
            default_category: Category used when metadata extraction fails
            summary_fallback_chars: Content prefix embedded when a chunk has no summary
            search_limit: Default number of search results
            listener: Optional callable receiving IndexEvent notifications
        """
        self._backend = backend
        self._embedding_provider = embedding_provider
        self._chunker = chunker
        self._metadata_extractor = metadata_extractor
        self._cache = cache
        self._queue = queue
        self._default_category = default_category
        self._summary_fallback_chars = summary_fallback_chars
        self._search_limit = search_limit
        self._listener = listener

    @property
    def cache(self) -> MemoryCache:
        return self._cache

    @property
    def queue(self) -> PersistQueue:
        return self._queue

    @property
    def backend(self) -> VectorBackend:
        return self._backend

    # Lifecycle

    async def start(self) -> None:
        """Initialize the backend and start the background flush worker."""
        await self._backend.initialize()
        self._queue.start()
        logger.info(f"{__name__}:start - Index manager started")

    def stop(self) -> None:
        """Stop the background flush worker. Pending records stay queued."""
        self._queue.stop()

    async def close(self) -> None:
        """Stop the worker, flush pending records and release the backend."""
        self.stop()
        try:
            await self._queue.flush()
        finally:
            await self._backend.close()
        logger.info(f"{__name__}:close - Index manager closed")

    # Write path

    async def index_file(self, file_path: str, text: str) -> IndexFileResult:
        """
        Index every chunk of a document into the cache and persistence queue.

        Args:
            file_path: Document path, used in chunk ids and metadata
            text: Document text

        Returns:
            IndexFileResult: Number and ids of indexed chunks

        Raises:
            EmbeddingError: When the embedding provider fails (names the file)
            IndexingError: When chunking or record building fails (names the file)
        """
        logger.info(f"{__name__}:index_file - START", extra={"file_path": file_path})
        try:
            chunks = self._chunker.chunk(text)
            chunk_ids = [await self._index_chunk(file_path, chunk) for chunk in chunks]
        except Exception as e:
            error = self._indexing_error(file_path, e)
            log_exception_with_context(
                logger, f"{__name__}:index_file - FAILED", e, file_path=file_path
            )
            self._emit(IndexEvent(type="file_failed", file_path=file_path, error=error.message))
            raise error from e

        logger.info(
            f"{__name__}:index_file - SUCCESS",
            extra={"file_path": file_path, "chunks": len(chunk_ids)},
        )
        self._emit(IndexEvent(type="file_indexed", file_path=file_path, chunk_count=len(chunk_ids)))
        return IndexFileResult(file_path=file_path, chunk_count=len(chunk_ids), chunk_ids=chunk_ids)

    @staticmethod
    def _indexing_error(file_path: str, e: Exception) -> IndexingError:
        if isinstance(e, EmbeddingError):
            return EmbeddingError(
                f"Failed to embed {file_path}: {e.message}",
                file_path=file_path,
                details=dict(e.details),
            )
        return IndexingError(
            f"Failed to index {file_path}: {e}",
            file_path=file_path,
            details={"error_type": type(e).__name__},
        )

    async def _extract_metadata(self, text: str) -> ExtractedMetadata:
        try:
            return await self._metadata_extractor.extract(text)
        except Exception as e:
            logger.warning(
                f"{__name__}:_extract_metadata - Extraction failed, using defaults: "
                f"{type(e).__name__}: {e}"
            )
            return ExtractedMetadata(summary="", tags=[], category=self._default_category)

    async def _index_chunk(self, file_path: str, chunk: Chunk) -> str:
        chunk_id = build_chunk_id(file_path, chunk.index)
        extracted = await self._extract_metadata(chunk.content)

        content_vec, summary_vec, title_vec = await asyncio.gather(
            self._embedding_provider.embed(chunk.content),
            self._embedding_provider.embed(
                extracted.summary or chunk.content[: self._summary_fallback_chars]
            ),
            self._embedding_provider.embed(chunk.header_path or file_path),
        )

        tags = list(dict.fromkeys(tag for tag in [*extracted.tags, extracted.category] if tag))
        metadata = ChunkMetadata(
            file_path=file_path,
            header_path=chunk.header_path,
            start_line=chunk.start_line,
            end_line=chunk.end_line,
            content=chunk.content,
            summary=extracted.summary,
            tags=tags,
            category=extracted.category or self._default_category,
            word_count=len(chunk.content.split()),
        )
        record = IndexRecord(
            chunk_id=chunk_id,
            vectors=NamedVectors(content=content_vec, summary=summary_vec, title=title_vec),
            metadata=metadata,
        )

        self._cache.set(
            chunk_id,
            CacheEntry(id=chunk_id, content=chunk.content, embedding=content_vec, metadata=metadata),
        )
        self._queue.enqueue(record)
        return chunk_id

    async def update_file(self, file_path: str, text: str) -> IndexFileResult:
        """Remove every trace of a document, then index its new text."""
        await self._remove(file_path)
        return await self.index_file(file_path, text)

    async def remove_file(self, file_path: str) -> None:
        """
        Remove a document from the cache, the queue and the backend.

        Raises:
            VectorStoreError: When the backend delete fails
        """
        await self._remove(file_path)
        self._emit(IndexEvent(type="file_removed", file_path=file_path))

    async def _remove(self, file_path: str) -> None:
        # Pending entries stay until the backend delete succeeds.
        await self._backend.delete_by_file_path(file_path)
        cached = self._cache.delete_by_file_path(file_path)
        queued = self._queue.remove_by_file_path(file_path)
        logger.info(
            f"{__name__}:remove_file - Removed {file_path}",
            extra={"cached": cached, "queued": queued},
        )

    async def index_source(self, source: DocumentSource) -> IndexRunReport:
        """
        Re-index every document of a source.

        A failing document is recorded in the report and does not stop the run.

        Args:
            source: Document source to enumerate

        Returns:
            IndexRunReport: Counts plus the failed paths and their errors
        """
        report = IndexRunReport()
        for file_path in await source.list_documents():
            try:
                text = await source.read_file(file_path)
                result = await self.update_file(file_path, text)
            except MemoIndexException as e:
                report.failed_files.append(file_path)
                report.errors[file_path] = e.message
                continue
            report.indexed_files += 1
            report.total_chunks += result.chunk_count

        logger.info(
            f"{__name__}:index_source - Indexed {report.indexed_files} documents",
            extra={"chunks": report.total_chunks, "failed": len(report.failed_files)},
        )
        return report

    # Read path

    def _search_cache(
        self,
        query_vector: list[float],
        limit: int,
        filter: SearchFilter | None,
    ) -> list[SearchResult]:
        scored = [
            SearchResult(
                id=entry.id,
                score=cosine_similarity(query_vector, entry.embedding),
                metadata=entry.metadata,
            )
            for entry in self._cache.get_all()
            if filter is None or filter.matches(entry.metadata)
        ]
        scored.sort(key=lambda result: result.score, reverse=True)
        return scored[:limit]

    async def search(
        self,
        query: str,
        limit: int | None = None,
        tags: list[str] | None = None,
    ) -> list[SearchResult]:
        """
        Search the cache and the backend with one query embedding.

        Args:
            query: Query text
            limit: Maximum number of results (defaults to the configured limit)
            tags: Only return chunks carrying any of these tags

        Returns:
            list[SearchResult]: Merged results, best first

        Raises:
            EmbeddingError: When the query cannot be embedded
            BackendUnavailableError: When the backend cannot be reached
        """
        if limit is None:
            limit = self._search_limit
        if limit <= 0:
            return []
        filter = SearchFilter(tags=tags) if tags else None

        query_vector = await self._embedding_provider.embed(query)
        cache_results = self._search_cache(query_vector, limit, filter)
        backend_results = await self._backend.search_with_fusion(query_vector, limit=limit, filter=filter)

        results = merge_results(cache_results, backend_results, limit)
        logger.info(
            f"{__name__}:search - Found {len(results)} results",
            extra={"cache_hits": len(cache_results), "backend_hits": len(backend_results)},
        )
        return results

    # Persistence and stats

    async def flush(self) -> int:
        """Flush every pending record to the backend."""
        return await self._queue.flush()

    async def on_file_save(self, file_path: str) -> int:
        """Flush only the pending records of the saved document."""
        return await self._queue.flush(file_path=file_path)

    def get_from_cache(self, id: str) -> CacheEntry | None:
        return self._cache.get(id)

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()

    def queue_stats(self) -> QueueStats:
        return self._queue.stats()

    def _emit(self, event: IndexEvent) -> None:
        if self._listener is not None:
            self._listener(event)
