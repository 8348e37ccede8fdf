"""Domain models for chunks, index records, search and statistics."""

from memo_index.models.association import NoteAssociation, build_association_id
from memo_index.models.chunk import Chunk, HeaderRef
from memo_index.models.events import IndexEvent, IndexFileResult, IndexRunReport
from memo_index.models.index_record import (
    CONTENT_VECTOR,
    SCHEMA_VERSION,
    SUMMARY_VECTOR,
    TITLE_VECTOR,
    VECTOR_NAMES,
    ChunkMetadata,
    IndexRecord,
    NamedVectors,
    build_chunk_id,
)
from memo_index.models.metadata import ExtractedMetadata
from memo_index.models.search import CacheEntry, SearchFilter, SearchResult
from memo_index.models.stats import CacheStats, QueueStats

__all__ = [
    "CONTENT_VECTOR",
    "SCHEMA_VERSION",
    "SUMMARY_VECTOR",
    "TITLE_VECTOR",
    "VECTOR_NAMES",
    "CacheEntry",
    "CacheStats",
    "Chunk",
    "ChunkMetadata",
    "ExtractedMetadata",
    "HeaderRef",
    "IndexEvent",
    "IndexFileResult",
    "IndexRecord",
    "IndexRunReport",
    "NamedVectors",
    "NoteAssociation",
    "QueueStats",
    "SearchFilter",
    "SearchResult",
    "build_association_id",
    "build_chunk_id",
]
