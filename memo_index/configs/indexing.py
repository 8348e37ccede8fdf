"""
Configuration settings for the indexing pipeline.

Provides environment-based configuration for chunking, the in-memory cache,
and the persistence queue.

Dependencies: pydantic, pydantic_settings
System role: Centralized indexing configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IndexingSettings(BaseSettings):
    """Settings for chunking, caching and batched persistence."""

    model_config = SettingsConfigDict(
        env_prefix="MEMO_INDEX_",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking settings
    max_chunk_size: int = Field(
        default=800,
        gt=0,
        description="Maximum chunk size in characters",
    )
    chunk_overlap: int = Field(
        default=0,
        ge=0,
        description="Overlap between consecutive chunks (accepted, not applied)",
    )

    # Memory cache
    cache_max_bytes: int = Field(
        default=50 * 1024 * 1024,
        gt=0,
        description="Byte budget of the in-memory chunk cache",
    )

    # Persist queue
    batch_size: int = Field(
        default=50,
        gt=0,
        description="Pending records that trigger an automatic flush",
    )
    flush_interval_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Period of the background flush",
    )

    # Indexing / search
    default_category: str = Field(
        default="note",
        description="Category used when metadata extraction fails",
    )
    summary_fallback_chars: int = Field(
        default=200,
        gt=0,
        description="Characters of content embedded as summary when no summary exists",
    )
    search_limit: int = Field(default=10, gt=0, description="Default number of search results")
