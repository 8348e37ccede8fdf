"""
Qdrant vector backend.

Stores each chunk as one point with three named vectors and searches them
with Qdrant's Query API, fusing the per-vector prefetches server-side with
reciprocal rank fusion.

Dependencies: qdrant_client, tenacity, memo_index.models
System role: Remote vector store
"""

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable

from qdrant_client import AsyncQdrantClient, models
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from memo_index.boundary.vdb.vector_backend import (
    DEFAULT_PREFETCH_MULTIPLIER,
    DEFAULT_SEARCH_LIMIT,
    VectorBackend,
)
from memo_index.core.exceptions import (
    BackendUnavailableError,
    DimensionMismatchError,
    VectorStoreError,
)
from memo_index.models.index_record import (
    CONTENT_VECTOR,
    VECTOR_NAMES,
    ChunkMetadata,
    IndexRecord,
)
from memo_index.models.search import SearchFilter, SearchResult

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (ResponseHandlingException, ConnectionError)

HTTP_NOT_FOUND = 404
HTTP_CONFLICT = 409


def point_id_for(chunk_id: str) -> str:
    """Map a chunk id to its deterministic Qdrant point id (UUIDv5)."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, chunk_id))


def build_tag_filter(filter: SearchFilter | None) -> models.Filter | None:
    """Translate a tag filter into a Qdrant "match any" condition."""
    if filter is None or not filter.tags:
        return None
    return models.Filter(
        must=[models.FieldCondition(key="tags", match=models.MatchAny(any=list(filter.tags)))]
    )


class QdrantBackend(VectorBackend):
    """
    Qdrant-backed multi-vector store.

    The collection is created lazily from the dimension of the first upserted
    record. Point ids are derived from chunk ids so re-indexing overwrites.
    """

    def __init__(
        self,
        collection_name: str = "memo_notes",
        url: str = "http://localhost:6333",
        api_key: str | None = None,
        timeout: int | None = None,
        retry_attempts: int = 3,
        prefetch_multiplier: int = DEFAULT_PREFETCH_MULTIPLIER,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """
        Initialize Qdrant backend.

        Args:
            collection_name: Collection holding the chunks
            url: Qdrant server URL
            api_key: Optional API key
            timeout: Request timeout in seconds
            retry_attempts: Attempts for transient transport failures
            prefetch_multiplier: Per-vector prefetch size as a multiple of the limit
            client: Preconfigured client (tests inject a mock)
        """
        self._collection_name = collection_name
        self._url = url
        self._client = client or AsyncQdrantClient(url=url, api_key=api_key, timeout=timeout)
        self._retry_attempts = retry_attempts
        self._prefetch_multiplier = prefetch_multiplier
        self._vector_size: int | None = None
        self._collection_lock = asyncio.Lock()

    @property
    def vector_size(self) -> int | None:
        return self._vector_size

    async def _call(
        self,
        operation: str,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """
        Run a client call, retrying transport failures.

        Raises:
            BackendUnavailableError: When every attempt failed to reach the server
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential_jitter(initial=0.5, max=10, jitter=1),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:{operation} - Retry {retry_state.attempt_number}/"
                f"{self._retry_attempts} after connection failure"
            ),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await func(*args, **kwargs)
        except TRANSIENT_ERRORS as e:
            logger.error(f"{__name__}:{operation} - Qdrant unreachable at {self._url}: {e}")
            raise BackendUnavailableError(
                message=f"Cannot reach Qdrant at {self._url}",
                operation=operation,
                details={"collection": self._collection_name, "error": str(e)},
            ) from e

    def _store_error(self, operation: str, e: UnexpectedResponse) -> VectorStoreError:
        return VectorStoreError(
            message=f"Qdrant {operation} failed",
            operation=operation,
            details={
                "collection": self._collection_name,
                "status_code": e.status_code,
                "reason": e.reason_phrase,
            },
        )

    async def initialize(self) -> None:
        """
        Check connectivity and adopt the dimension of an existing collection.

        A missing collection is not created here; it is created on first upsert.

        Raises:
            BackendUnavailableError: When Qdrant cannot be reached
        """
        if await self._collection_exists("initialize"):
            await self._load_vector_size("initialize")
        logger.info(
            f"{__name__}:initialize - SUCCESS",
            extra={"collection": self._collection_name, "vector_size": self._vector_size},
        )

    async def _collection_exists(self, operation: str) -> bool:
        return await self._call(operation, self._client.collection_exists, self._collection_name)

    async def _load_vector_size(self, operation: str, missing_ok: bool = False) -> Any:
        try:
            info = await self._call(operation, self._client.get_collection, self._collection_name)
        except UnexpectedResponse as e:
            if missing_ok and e.status_code == HTTP_NOT_FOUND:
                return None
            raise self._store_error(operation, e) from e
        vectors = info.config.params.vectors
        if isinstance(vectors, dict) and CONTENT_VECTOR in vectors:
            self._vector_size = vectors[CONTENT_VECTOR].size
        return info

    async def _ensure_collection(self, dimension: int) -> None:
        """Create the collection with three named cosine vectors if absent."""
        async with self._collection_lock:
            if self._vector_size is not None:
                return

            if await self._collection_exists("create_collection"):
                await self._load_vector_size("create_collection")
                if self._vector_size is not None:
                    return

            logger.info(
                f"{__name__}:_ensure_collection - Creating collection",
                extra={"collection": self._collection_name, "dimension": dimension},
            )
            vectors_config = {
                name: models.VectorParams(size=dimension, distance=models.Distance.COSINE)
                for name in VECTOR_NAMES
            }
            try:
                await self._call(
                    "create_collection",
                    self._client.create_collection,
                    collection_name=self._collection_name,
                    vectors_config=vectors_config,
                )
            except UnexpectedResponse as e:
                if e.status_code != HTTP_CONFLICT:
                    raise self._store_error("create_collection", e) from e
                logger.info(
                    f"{__name__}:_ensure_collection - Collection created concurrently, reusing it"
                )

            for field in ("file_path", "tags"):
                try:
                    await self._call(
                        "create_payload_index",
                        self._client.create_payload_index,
                        collection_name=self._collection_name,
                        field_name=field,
                        field_schema=models.PayloadSchemaType.KEYWORD,
                    )
                except UnexpectedResponse as e:
                    raise self._store_error("create_payload_index", e) from e

            self._vector_size = dimension

    def _check_dimension(self, dimension: int, operation: str) -> None:
        if self._vector_size is not None and dimension != self._vector_size:
            raise DimensionMismatchError(
                expected=self._vector_size,
                actual=dimension,
                operation=operation,
                details={"collection": self._collection_name},
            )

    async def upsert_multi_vector(self, record: IndexRecord) -> None:
        """
        Upsert one record as a point with three named vectors.

        Args:
            record: Record to store

        Raises:
            DimensionMismatchError: When the record dimension differs from the collection's
            BackendUnavailableError: When Qdrant cannot be reached
            VectorStoreError: When Qdrant rejects the write
        """
        if self._vector_size is None:
            await self._ensure_collection(record.vectors.dimension)
        self._check_dimension(record.vectors.dimension, "upsert")

        point = models.PointStruct(
            id=point_id_for(record.chunk_id),
            vector=record.vectors.by_name(),
            payload=record.to_payload(),
        )
        try:
            await self._call(
                "upsert",
                self._client.upsert,
                collection_name=self._collection_name,
                points=[point],
                wait=True,
            )
        except UnexpectedResponse as e:
            raise self._store_error("upsert", e) from e

    async def search_with_fusion(
        self,
        query_vector: list[float],
        limit: int = DEFAULT_SEARCH_LIMIT,
        filter: SearchFilter | None = None,
    ) -> list[SearchResult]:
        """
        Query the three named vectors and fuse them server-side with RRF.

        Args:
            query_vector: Query embedding
            limit: Maximum number of results
            filter: Optional tag filter applied to every prefetch

        Returns:
            list[SearchResult]: Fused results; empty when the collection is missing or empty

        Raises:
            DimensionMismatchError: When the query dimension differs from the collection's
            BackendUnavailableError: When Qdrant cannot be reached
        """
        info = await self._load_vector_size("search", missing_ok=True)
        if info is None:
            logger.info(f"{__name__}:search_with_fusion - Collection missing, returning no results")
            return []
        if not info.points_count:
            return []
        self._check_dimension(len(query_vector), "search")

        prefetch_limit = limit * self._prefetch_multiplier
        query_filter = build_tag_filter(filter)
        prefetch = [
            models.Prefetch(query=query_vector, using=name, limit=prefetch_limit, filter=query_filter)
            for name in VECTOR_NAMES
        ]
        try:
            response = await self._call(
                "search",
                self._client.query_points,
                collection_name=self._collection_name,
                prefetch=prefetch,
                query=models.FusionQuery(fusion=models.Fusion.RRF),
                limit=limit,
                with_payload=True,
            )
        except UnexpectedResponse as e:
            raise self._store_error("search", e) from e

        results: list[SearchResult] = []
        for point in response.points:
            payload = dict(point.payload or {})
            chunk_id = payload.pop("chunk_id", str(point.id))
            results.append(
                SearchResult(
                    id=chunk_id,
                    score=point.score or 0.0,
                    metadata=ChunkMetadata.model_validate(payload),
                )
            )

        logger.info(
            f"{__name__}:search_with_fusion - Found {len(results)} results",
            extra={"limit": limit, "tags": filter.tags if filter else None},
        )
        return results

    async def _delete(self, operation: str, selector: Any) -> None:
        try:
            await self._call(
                operation,
                self._client.delete,
                collection_name=self._collection_name,
                points_selector=selector,
                wait=True,
            )
        except UnexpectedResponse as e:
            if e.status_code == HTTP_NOT_FOUND:
                return
            raise self._store_error(operation, e) from e

    async def delete(self, id: str) -> None:
        await self._delete("delete", models.PointIdsList(points=[point_id_for(id)]))

    async def delete_by_file_path(self, file_path: str) -> None:
        selector = models.FilterSelector(
            filter=models.Filter(
                must=[models.FieldCondition(key="file_path", match=models.MatchValue(value=file_path))]
            )
        )
        await self._delete("delete_by_file_path", selector)

    async def count(self) -> int:
        if not await self._collection_exists("count"):
            return 0
        try:
            result = await self._call(
                "count", self._client.count, collection_name=self._collection_name, exact=True
            )
        except UnexpectedResponse as e:
            raise self._store_error("count", e) from e
        return result.count

    async def clear(self) -> None:
        """Drop the collection; it is recreated on the next upsert."""
        if await self._collection_exists("clear"):
            try:
                await self._call("clear", self._client.delete_collection, self._collection_name)
            except UnexpectedResponse as e:
                raise self._store_error("clear", e) from e
        self._vector_size = None
        logger.info(f"{__name__}:clear - Collection {self._collection_name} dropped")

    async def close(self) -> None:
        await self._client.close()
