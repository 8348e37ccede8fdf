"""
Vector backend interface.

Abstract contract shared by the remote (Qdrant) and embedded (FAISS)
backends, plus the reciprocal rank fusion used by backends without native
fusion support.

Dependencies: memo_index.models
System role: Storage abstraction for multi-vector records
"""

from abc import ABC, abstractmethod
from typing import NamedTuple

from memo_index.models.index_record import ChunkMetadata, IndexRecord
from memo_index.models.search import SearchFilter, SearchResult

RRF_K = 60
DEFAULT_PREFETCH_MULTIPLIER = 2
DEFAULT_SEARCH_LIMIT = 10


class RankedHit(NamedTuple):
    """One entry of a single ranked list fed into fusion."""

    id: str
    metadata: ChunkMetadata


def rrf_fusion(
    result_sets: list[list[RankedHit]],
    limit: int,
    k: int = RRF_K,
) -> list[SearchResult]:
    """
    Fuse ranked lists with reciprocal rank fusion.

    Each list contributes 1 / (k + rank + 1) for an id at 0-based `rank`;
    contributions are summed per id. Results are ordered by fused score,
    ties keeping first-seen order, and truncated to `limit`.

    Args:
        result_sets: Ranked lists, best match first
        limit: Maximum number of fused results
        k: Rank smoothing constant

    Returns:
        list[SearchResult]: Fused results, best first
    """
    scores: dict[str, float] = {}
    metadata: dict[str, ChunkMetadata] = {}

    for results in result_sets:
        for rank, hit in enumerate(results):
            scores[hit.id] = scores.get(hit.id, 0.0) + 1.0 / (k + rank + 1)
            metadata.setdefault(hit.id, hit.metadata)

    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    return [
        SearchResult(id=id, score=score, metadata=metadata[id])
        for id, score in ranked[:limit]
    ]


class VectorBackend(ABC):
    """Durable store of multi-vector records with fused similarity search."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backend (connect, load persisted state)."""

    @abstractmethod
    async def upsert_multi_vector(self, record: IndexRecord) -> None:
        """
        Insert or replace a record by chunk id.

        Raises:
            DimensionMismatchError: When the vectors do not match the established dimension
            VectorStoreError: When the write fails
        """

    @abstractmethod
    async def search_with_fusion(
        self,
        query_vector: list[float],
        limit: int = DEFAULT_SEARCH_LIMIT,
        filter: SearchFilter | None = None,
    ) -> list[SearchResult]:
        """
        Search every named vector with the same query and fuse the rankings.

        An empty or not yet created store returns an empty list.

        Raises:
            BackendUnavailableError: When the store cannot be reached
        """

    @abstractmethod
    async def delete(self, id: str) -> None:
        """Delete one record by chunk id; unknown ids are ignored."""

    @abstractmethod
    async def delete_by_file_path(self, file_path: str) -> None:
        """Delete every record of a document."""

    @abstractmethod
    async def count(self) -> int:
        """Number of stored records."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every record."""

    async def persist(self) -> None:
        """Make every accepted write durable; called once per queue flush."""
        return None

    async def close(self) -> None:
        """Release resources held by the backend."""
        return None
