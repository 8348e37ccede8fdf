"""
FAISS vector backend for embedded local storage.

Keeps one LangChain FAISS store per named vector (content, summary, title),
persisted side by side in a local directory. Searches run the three stores
concurrently and fuse the rankings with reciprocal rank fusion.

Dependencies: faiss-cpu, langchain_community.vectorstores, numpy
System role: Local vector store (no server required)
"""

import asyncio
import logging
from pathlib import Path

import faiss
import numpy as np
from langchain_community.docstore.in_memory import InMemoryDocstore
from langchain_community.vectorstores import FAISS
from langchain_community.vectorstores.utils import DistanceStrategy
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings

from memo_index.boundary.vdb.vector_backend import (
    DEFAULT_PREFETCH_MULTIPLIER,
    DEFAULT_SEARCH_LIMIT,
    RRF_K,
    RankedHit,
    VectorBackend,
    rrf_fusion,
)
from memo_index.core.exceptions import DimensionMismatchError, VectorStoreError
from memo_index.models.index_record import (
    CONTENT_VECTOR,
    VECTOR_NAMES,
    ChunkMetadata,
    IndexRecord,
)
from memo_index.models.search import SearchFilter, SearchResult

logger = logging.getLogger(__name__)


class PrecomputedEmbeddings(Embeddings):
    """Embedding placeholder for stores that only receive precomputed vectors."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        raise NotImplementedError("FAISSBackend only accepts precomputed vectors")

    def embed_query(self, text: str) -> list[float]:
        raise NotImplementedError("FAISSBackend only accepts precomputed vectors")


def _normalize(vector: list[float]) -> list[float]:
    """Scale to unit length so inner product equals cosine similarity."""
    array = np.asarray(vector, dtype=np.float32)
    norm = np.linalg.norm(array)
    if norm == 0:
        return array.tolist()
    return (array / norm).tolist()


class FAISSBackend(VectorBackend):
    """
    Embedded multi-vector store built on three FAISS inner-product indexes.

    All FAISS work runs in worker threads and is serialized by one
    asyncio.Lock. The dimension is fixed by the first stored record.
    Upserts stay in memory until persist(); deletes are saved immediately.
    """

    def __init__(
        self,
        persist_directory: str | Path = ".memo_index/vectors",
        prefetch_multiplier: int = DEFAULT_PREFETCH_MULTIPLIER,
        rrf_k: int = RRF_K,
    ) -> None:
        """
        Initialize FAISS backend.

        Args:
            persist_directory: Directory holding one index file pair per named vector
            prefetch_multiplier: Per-vector result count as a multiple of the limit
            rrf_k: Rank smoothing constant for fusion
        """
        self._persist_dir = Path(persist_directory)
        self._prefetch_multiplier = prefetch_multiplier
        self._rrf_k = rrf_k
        self._embeddings = PrecomputedEmbeddings()
        self._stores: dict[str, FAISS] = {}
        self._dimension: int | None = None
        self._dirty = False
        self._lock = asyncio.Lock()

    @property
    def dimension(self) -> int | None:
        return self._dimension

    async def initialize(self) -> None:
        """Load persisted indexes, if any."""
        async with self._lock:
            await asyncio.to_thread(self._load)
        logger.info(
            f"{__name__}:initialize - SUCCESS",
            extra={"persist_directory": str(self._persist_dir), "dimension": self._dimension},
        )

    def _load(self) -> None:
        if not all((self._persist_dir / f"{name}.faiss").exists() for name in VECTOR_NAMES):
            return
        try:
            stores = {
                name: FAISS.load_local(
                    str(self._persist_dir),
                    self._embeddings,
                    index_name=name,
                    allow_dangerous_deserialization=True,
                    distance_strategy=DistanceStrategy.MAX_INNER_PRODUCT,
                )
                for name in VECTOR_NAMES
            }
        except Exception as e:
            raise VectorStoreError(
                message="Failed to load FAISS indexes",
                operation="initialize",
                details={"persist_directory": str(self._persist_dir), "error": str(e)},
            ) from e
        self._stores = stores
        self._dimension = stores[CONTENT_VECTOR].index.d

    def _create_stores(self, dimension: int) -> None:
        self._stores = {
            name: FAISS(
                embedding_function=self._embeddings,
                index=faiss.IndexFlatIP(dimension),
                docstore=InMemoryDocstore(),
                index_to_docstore_id={},
                distance_strategy=DistanceStrategy.MAX_INNER_PRODUCT,
            )
            for name in VECTOR_NAMES
        }
        self._dimension = dimension
        logger.info(f"{__name__}:_create_stores - Created FAISS indexes with dimension={dimension}")

    def _save(self) -> None:
        self._persist_dir.mkdir(parents=True, exist_ok=True)
        for name, store in self._stores.items():
            store.save_local(str(self._persist_dir), index_name=name)

    def _check_dimension(self, dimension: int, operation: str) -> None:
        if self._dimension is not None and dimension != self._dimension:
            raise DimensionMismatchError(
                expected=self._dimension,
                actual=dimension,
                operation=operation,
                details={"persist_directory": str(self._persist_dir)},
            )

    @staticmethod
    def _stored_ids(store: FAISS) -> set[str]:
        return set(store.index_to_docstore_id.values())

    def _delete_ids(self, ids: list[str]) -> int:
        removed = 0
        for store in self._stores.values():
            present = [id for id in ids if id in self._stored_ids(store)]
            if present:
                store.delete(ids=present)
                removed = max(removed, len(present))
        return removed

    def _upsert(self, record: IndexRecord) -> None:
        if not self._stores:
            self._create_stores(record.vectors.dimension)
        self._delete_ids([record.chunk_id])

        payload = record.to_payload()
        for name, vector in record.vectors.by_name().items():
            self._stores[name].add_embeddings(
                text_embeddings=[(record.metadata.content, _normalize(vector))],
                metadatas=[payload],
                ids=[record.chunk_id],
            )
        self._dirty = True

    async def upsert_multi_vector(self, record: IndexRecord) -> None:
        """
        Insert or replace a record in all three indexes.

        The write is held in memory until persist() or close().

        Raises:
            DimensionMismatchError: When the record dimension differs from the stored one
            VectorStoreError: When FAISS rejects the write
        """
        async with self._lock:
            self._check_dimension(record.vectors.dimension, "upsert")
            try:
                await asyncio.to_thread(self._upsert, record)
            except Exception as e:
                raise VectorStoreError(
                    message="FAISS upsert failed",
                    operation="upsert",
                    details={"chunk_id": record.chunk_id, "error": str(e)},
                ) from e

    def _search_one(
        self,
        name: str,
        query_vector: list[float],
        k: int,
        filter: SearchFilter | None,
    ) -> list[RankedHit]:
        store = self._stores[name]
        total = store.index.ntotal
        if total == 0:
            return []

        metadata_filter = None
        if filter is not None and filter.tags:
            wanted = set(filter.tags)

            def metadata_filter(metadata: dict) -> bool:
                return bool(wanted.intersection(metadata.get("tags", [])))

        docs = store.similarity_search_with_score_by_vector(
            query_vector,
            k=k,
            filter=metadata_filter,
            fetch_k=total,
        )
        return [self._to_hit(doc) for doc, _score in docs]

    @staticmethod
    def _to_hit(doc: Document) -> RankedHit:
        payload = dict(doc.metadata)
        chunk_id = payload.pop("chunk_id")
        return RankedHit(id=chunk_id, metadata=ChunkMetadata.model_validate(payload))

    async def search_with_fusion(
        self,
        query_vector: list[float],
        limit: int = DEFAULT_SEARCH_LIMIT,
        filter: SearchFilter | None = None,
    ) -> list[SearchResult]:
        """
        Search the three indexes concurrently and fuse with RRF.

        Args:
            query_vector: Query embedding
            limit: Maximum number of fused results
            filter: Optional tag filter applied inside each per-vector search

        Returns:
            list[SearchResult]: Fused results; empty when nothing is stored
        """
        prefetch = limit * self._prefetch_multiplier
        normalized = _normalize(query_vector)
        async with self._lock:
            if not self._stores:
                return []
            self._check_dimension(len(query_vector), "search")
            result_sets = await asyncio.gather(
                *(
                    asyncio.to_thread(self._search_one, name, normalized, prefetch, filter)
                    for name in VECTOR_NAMES
                )
            )

        results = rrf_fusion(list(result_sets), limit=limit, k=self._rrf_k)
        logger.info(
            f"{__name__}:search_with_fusion - Found {len(results)} results",
            extra={"limit": limit, "tags": filter.tags if filter else None},
        )
        return results

    async def delete(self, id: str) -> None:
        async with self._lock:
            if not self._stores:
                return
            if await asyncio.to_thread(self._delete_ids, [id]):
                await asyncio.to_thread(self._save)
                self._dirty = False

    def _ids_for_file(self, file_path: str) -> list[str]:
        store = self._stores[CONTENT_VECTOR]
        ids = []
        for doc_id in store.index_to_docstore_id.values():
            doc = store.docstore.search(doc_id)
            if isinstance(doc, Document) and doc.metadata.get("file_path") == file_path:
                ids.append(doc_id)
        return ids

    async def delete_by_file_path(self, file_path: str) -> None:
        async with self._lock:
            if not self._stores:
                return
            ids = self._ids_for_file(file_path)
            if ids:
                await asyncio.to_thread(self._delete_ids, ids)
                await asyncio.to_thread(self._save)
                self._dirty = False
                logger.info(
                    f"{__name__}:delete_by_file_path - Deleted {len(ids)} records",
                    extra={"file_path": file_path},
                )

    async def count(self) -> int:
        if not self._stores:
            return 0
        return self._stores[CONTENT_VECTOR].index.ntotal

    def _remove_files(self) -> None:
        for name in VECTOR_NAMES:
            for suffix in (".faiss", ".pkl"):
                path = self._persist_dir / f"{name}{suffix}"
                if path.exists():
                    path.unlink()

    async def clear(self) -> None:
        """Drop every record and the persisted index files."""
        async with self._lock:
            self._stores = {}
            self._dimension = None
            self._dirty = False
            await asyncio.to_thread(self._remove_files)
        logger.info(f"{__name__}:clear - FAISS indexes cleared")

    async def persist(self) -> None:
        """Write the indexes to disk if anything changed since the last save."""
        async with self._lock:
            if not self._stores or not self._dirty:
                return
            try:
                await asyncio.to_thread(self._save)
            except Exception as e:
                raise VectorStoreError(
                    message="Failed to save FAISS indexes",
                    operation="persist",
                    details={"persist_directory": str(self._persist_dir), "error": str(e)},
                ) from e
            self._dirty = False
        logger.info(
            f"{__name__}:persist - SUCCESS",
            extra={"persist_directory": str(self._persist_dir), "records": await self.count()},
        )

    async def close(self) -> None:
        await self.persist()
