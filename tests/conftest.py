"""
Shared test fixtures and configuration for entire test suite.

Provides: record and metadata builders, a mocked vector backend, a scripted
embedding provider
Dependencies: pytest, unittest.mock
System role: Test infrastructure and fixture management
"""

from unittest.mock import AsyncMock

import pytest

from memo_index.boundary.embedding.embedding_provider import EmbeddingProvider
from memo_index.boundary.vdb.vector_backend import VectorBackend
from memo_index.models import ChunkMetadata, IndexRecord, NamedVectors, build_chunk_id


def build_metadata(
    file_path: str = "notes/a.md",
    content: str = "hello world",
    tags: list[str] | None = None,
    **overrides,
) -> ChunkMetadata:
    """Build ChunkMetadata with sensible defaults."""
    fields = {
        "file_path": file_path,
        "header_path": "# T",
        "start_line": 1,
        "end_line": 3,
        "content": content,
        "summary": "",
        "tags": tags if tags is not None else ["note"],
        "category": "note",
        "word_count": len(content.split()),
    }
    fields.update(overrides)
    return ChunkMetadata(**fields)


def build_record(
    file_path: str = "notes/a.md",
    index: int = 0,
    vector: list[float] | None = None,
    content: str = "hello world",
    tags: list[str] | None = None,
    chunk_id: str | None = None,
) -> IndexRecord:
    """Build an IndexRecord whose three vectors are identical."""
    vector = vector or [1.0, 0.0]
    return IndexRecord(
        chunk_id=chunk_id or build_chunk_id(file_path, index),
        vectors=NamedVectors(content=vector, summary=vector, title=vector),
        metadata=build_metadata(file_path=file_path, content=content, tags=tags),
    )


class ScriptedEmbeddingProvider(EmbeddingProvider):
    """
    Embedding provider returning a fixed vector per text.

    Texts without a scripted vector get `default`. Texts containing a
    string listed in `failing` raise the configured error.
    """

    def __init__(
        self,
        vectors: dict[str, list[float]] | None = None,
        default: list[float] | None = None,
        failing: tuple[str, ...] = (),
        error: Exception | None = None,
    ) -> None:
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0]
        self.failing = failing
        self.error = error or RuntimeError("embedding failed")
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if any(marker in text for marker in self.failing):
            raise self.error
        return list(self.vectors.get(text, self.default))

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed(text) for text in texts]


@pytest.fixture
def make_record():
    """Provide the IndexRecord builder."""
    return build_record


@pytest.fixture
def make_metadata():
    """Provide the ChunkMetadata builder."""
    return build_metadata


@pytest.fixture
def mock_backend() -> AsyncMock:
    """Provide mock vector backend returning no search results."""
    backend = AsyncMock(spec=VectorBackend)
    backend.search_with_fusion.return_value = []
    return backend


@pytest.fixture
def embedding_provider() -> ScriptedEmbeddingProvider:
    """Provide embedding provider that returns [1, 0] for every text."""
    return ScriptedEmbeddingProvider()


@pytest.fixture
def make_embedding_provider():
    """Provide the ScriptedEmbeddingProvider class for custom scripts."""
    return ScriptedEmbeddingProvider
