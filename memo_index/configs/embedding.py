"""
Embedding and metadata model configuration settings.

Selects the embedding provider and the optional LLM used for chunk
metadata extraction.

Dependencies: pydantic, pydantic_settings
System role: Model provider configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingSettings(BaseSettings):
    """Embedding provider and metadata extractor configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MEMO_EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    provider: str = Field(
        default="ollama",
        description="Embedding provider: 'ollama', 'google', 'bedrock' or 'fake'",
    )
    model: str = Field(
        default="nomic-embed-text",
        description="Embedding model ID for the selected provider",
    )
    base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL for self-hosted providers (Ollama)",
    )
    region: str = Field(default="us-east-1", description="AWS region for Bedrock embeddings")
    dimension: int = Field(
        default=768,
        gt=0,
        description="Output dimension (google and fake providers)",
    )
    timeout_seconds: float | None = Field(
        default=None,
        description="Per-call embedding timeout (None leaves it to the transport)",
    )

    # Metadata extraction
    metadata_provider: str = Field(
        default="rules",
        description="Metadata extractor: 'rules', 'ollama' or 'google'",
    )
    metadata_model: str = Field(
        default="llama3.2:3b",
        description="Chat model used for LLM metadata extraction",
    )
