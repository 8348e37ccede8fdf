"""
Vector store configuration settings.

Selects the durable vector backend (Qdrant service or embedded FAISS store)
and carries its connection parameters and fusion constants.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for indexing and retrieval
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (Qdrant remote, FAISS embedded)."""

    model_config = SettingsConfigDict(
        env_prefix="MEMO_VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: str = Field(
        default="qdrant",
        description="Vector store type: 'qdrant' for the remote service, 'faiss' for the embedded local store",
    )
    collection_name: str = Field(
        default="memo_notes",
        description="Qdrant collection holding the chunks",
    )

    # Qdrant
    qdrant_url: str = Field(default="http://localhost:6333", description="Qdrant endpoint URL")
    qdrant_api_key: str | None = Field(default=None, description="Qdrant API key (optional)")
    timeout_seconds: int | None = Field(
        default=None,
        description="Request timeout for backend calls (None leaves it to the transport)",
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts for transient transport failures before giving up",
    )

    # FAISS
    persist_directory: str = Field(
        default=".memo_index/vectors",
        description="Directory holding the embedded FAISS indexes",
    )

    # Fusion
    rrf_k: int = Field(default=60, ge=0, description="Reciprocal rank fusion constant")
    prefetch_multiplier: int = Field(
        default=2,
        ge=1,
        description="Per-vector candidates fetched before fusion, as a multiple of the limit",
    )
