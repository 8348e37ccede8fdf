"""
Test suite for embedding providers.

Tests the LangChain adapter with fake and mocked embeddings plus the
provider factory.

System role: Verification of embedding generation boundary
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_ollama import OllamaEmbeddings

from memo_index.boundary.embedding.embedding_factory import (
    build_embeddings,
    get_embedding_provider,
)
from memo_index.boundary.embedding.embedding_provider import LangChainEmbeddingProvider
from memo_index.configs import EmbeddingSettings
from memo_index.core.exceptions import ConfigurationError, EmbeddingError


class TestLangChainEmbeddingProvider:
    """Test suite for LangChainEmbeddingProvider."""

    @pytest.mark.asyncio
    async def test_embed_should_return_vector_of_configured_size(self) -> None:
        """Test deterministic embeddings for the same text."""
        # Arrange
        provider = LangChainEmbeddingProvider(DeterministicFakeEmbedding(size=8))

        # Act
        first = await provider.embed("hello")
        second = await provider.embed("hello")

        # Assert
        assert len(first) == 8
        assert first == second

    @pytest.mark.asyncio
    async def test_embed_batch_should_preserve_order(self) -> None:
        """Test batch results line up with single embeddings."""
        # Arrange
        provider = LangChainEmbeddingProvider(DeterministicFakeEmbedding(size=4))

        # Act
        vectors = await provider.embed_batch(["a", "b"])

        # Assert
        assert vectors == [await provider.embed("a"), await provider.embed("b")]
        assert await provider.embed_batch([]) == []

    @pytest.mark.asyncio
    async def test_embed_should_wrap_provider_errors(self) -> None:
        """Test provider exceptions become EmbeddingError."""
        # Arrange
        embeddings = MagicMock()
        embeddings.aembed_query = AsyncMock(side_effect=RuntimeError("quota exceeded"))
        provider = LangChainEmbeddingProvider(embeddings)

        # Act & Assert
        with pytest.raises(EmbeddingError, match="quota exceeded"):
            await provider.embed("hello")

    @pytest.mark.asyncio
    async def test_embed_should_raise_embedding_error_on_timeout(self) -> None:
        """Test slow providers time out as EmbeddingError."""
        # Arrange
        async def slow_embed(text: str) -> list[float]:
            await asyncio.sleep(1)
            return [1.0]

        embeddings = MagicMock()
        embeddings.aembed_query = slow_embed
        provider = LangChainEmbeddingProvider(embeddings, timeout_seconds=0.01)

        # Act & Assert
        with pytest.raises(EmbeddingError, match="timed out"):
            await provider.embed("hello")


class TestEmbeddingFactory:
    """Test suite for the embedding factory."""

    def test_build_embeddings_should_create_fake_model(self) -> None:
        """Test the fake provider honors the dimension."""
        # Act
        embeddings = build_embeddings(EmbeddingSettings(provider="fake", dimension=16))

        # Assert
        assert isinstance(embeddings, DeterministicFakeEmbedding)
        assert embeddings.size == 16

    def test_build_embeddings_should_create_ollama_model(self) -> None:
        """Test the ollama provider uses model and base URL."""
        # Act
        embeddings = build_embeddings(
            EmbeddingSettings(provider="ollama", model="nomic-embed-text")
        )

        # Assert
        assert isinstance(embeddings, OllamaEmbeddings)
        assert embeddings.model == "nomic-embed-text"

    def test_build_embeddings_should_reject_unknown_provider(self) -> None:
        """Test unknown providers raise ConfigurationError."""
        # Act & Assert
        with pytest.raises(ConfigurationError) as exc_info:
            build_embeddings(EmbeddingSettings(provider="word2vec"))
        assert exc_info.value.details["setting"] == "embedding.provider"

    def test_get_embedding_provider_should_wrap_model(self) -> None:
        """Test the factory returns the LangChain adapter."""
        # Act
        provider = get_embedding_provider(EmbeddingSettings(provider="fake", dimension=4))

        # Assert
        assert isinstance(provider, LangChainEmbeddingProvider)
        assert isinstance(provider.embeddings, DeterministicFakeEmbedding)
