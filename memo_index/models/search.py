"""
Search models.

Request filter, cache entry and result schemas for similarity search.

Dependencies: pydantic
System role: Read path data structures
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from memo_index.models.index_record import ChunkMetadata


class SearchFilter(BaseModel):
    """Filter applied inside every per-vector search."""

    tags: list[str] = Field(
        default_factory=list,
        description="Match records carrying any of these tags",
    )

    def matches(self, metadata: ChunkMetadata) -> bool:
        """Return True when the metadata passes the filter."""
        if not self.tags:
            return True
        return any(tag in metadata.tags for tag in self.tags)


class CacheEntry(BaseModel):
    """Embedded chunk held by the in-memory cache."""

    id: str = Field(description="Chunk identifier")
    content: str = Field(description="Chunk text content")
    embedding: list[float] = Field(description="Content vector")
    metadata: ChunkMetadata
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SearchResult(BaseModel):
    """Single result from cache or backend search."""

    id: str = Field(description="Chunk identifier")
    score: float = Field(description="Cosine similarity or fused RRF score")
    metadata: ChunkMetadata
