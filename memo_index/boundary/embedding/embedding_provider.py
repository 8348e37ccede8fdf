"""
Embedding provider port and LangChain adapter.

Defines the async embedding interface consumed by the index manager and an
adapter over any LangChain `Embeddings` implementation.

Dependencies: langchain_core.embeddings, memo_index.core.exceptions
System role: Embedding generation boundary
"""

import asyncio
import logging
from abc import ABC, abstractmethod

from langchain_core.embeddings import Embeddings

from memo_index.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class EmbeddingProvider(ABC):
    """Async text embedding interface."""

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Embed one text."""

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts, preserving order."""


class LangChainEmbeddingProvider(EmbeddingProvider):
    """
    EmbeddingProvider backed by a LangChain Embeddings model.

    Provider failures and timeouts are raised as EmbeddingError.
    """

    def __init__(self, embeddings: Embeddings, timeout_seconds: float | None = None) -> None:
        """
        Initialize provider.

        Args:
            embeddings: LangChain embeddings model
            timeout_seconds: Per-call timeout (None disables it)
        """
        self._embeddings = embeddings
        self._timeout = timeout_seconds

    @property
    def embeddings(self) -> Embeddings:
        return self._embeddings

    async def embed(self, text: str) -> list[float]:
        """
        Embed one text.

        Args:
            text: Text to embed

        Returns:
            list[float]: Embedding vector

        Raises:
            EmbeddingError: When the provider fails or times out
        """
        try:
            vector = await asyncio.wait_for(
                self._embeddings.aembed_query(text), timeout=self._timeout
            )
        except asyncio.TimeoutError as e:
            raise EmbeddingError(
                "Embedding request timed out",
                details={"timeout_seconds": self._timeout},
            ) from e
        except Exception as e:
            logger.error(f"{__name__}:embed - {type(e).__name__}: {e}")
            raise EmbeddingError(
                f"Embedding request failed: {e}",
                details={"provider": type(self._embeddings).__name__},
            ) from e
        return list(vector)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """
        Embed several texts in one provider call.

        Raises:
            EmbeddingError: When the provider fails or times out
        """
        if not texts:
            return []
        try:
            vectors = await asyncio.wait_for(
                self._embeddings.aembed_documents(texts), timeout=self._timeout
            )
        except asyncio.TimeoutError as e:
            raise EmbeddingError(
                "Batch embedding request timed out",
                details={"timeout_seconds": self._timeout, "texts": len(texts)},
            ) from e
        except Exception as e:
            logger.error(f"{__name__}:embed_batch - {type(e).__name__}: {e}")
            raise EmbeddingError(
                f"Batch embedding request failed: {e}",
                details={"provider": type(self._embeddings).__name__, "texts": len(texts)},
            ) from e
        return [list(vector) for vector in vectors]
