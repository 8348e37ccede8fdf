"""
Embedding boundary layer.

Provides the EmbeddingProvider interface and its LangChain-backed adapter.

Dependencies: langchain_core
System role: Embedding generation adapters
"""

from memo_index.boundary.embedding.embedding_provider import (
    EmbeddingProvider,
    LangChainEmbeddingProvider,
)

__all__ = ["EmbeddingProvider", "LangChainEmbeddingProvider"]
