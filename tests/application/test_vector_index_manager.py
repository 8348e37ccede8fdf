"""
Test suite for VectorIndexManager.

Exercises the write and read paths with a real chunker, cache, queue and
rule-based extractor, a scripted embedding provider and a mocked backend.

System role: Verification of the indexing and search facade
"""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from memo_index.application.services.vector_index_manager import (
    VectorIndexManager,
    cosine_similarity,
    merge_results,
)
from memo_index.boundary.documents import FileSystemDocumentSource
from memo_index.boundary.metadata.metadata_extractor import RuleBasedMetadataExtractor
from memo_index.core.chunker import Chunker
from memo_index.core.exceptions import BackendUnavailableError, EmbeddingError, IndexingError
from memo_index.core.memory_cache import MemoryCache
from memo_index.core.persist_queue import PersistQueue
from memo_index.models import IndexEvent, SearchFilter, SearchResult


@pytest.fixture
def events() -> list[IndexEvent]:
    """Collect events emitted by the manager."""
    return []


@pytest.fixture
def build_manager(mock_backend: AsyncMock, events: list[IndexEvent], make_embedding_provider):
    """Provide a factory for managers with swappable collaborators."""

    def _build(
        embedding_provider=None,
        metadata_extractor=None,
    ) -> VectorIndexManager:
        return VectorIndexManager(
            backend=mock_backend,
            embedding_provider=embedding_provider or make_embedding_provider(),
            chunker=Chunker(max_chunk_size=800),
            metadata_extractor=metadata_extractor or RuleBasedMetadataExtractor(),
            cache=MemoryCache(),
            queue=PersistQueue(mock_backend, batch_size=100),
            listener=events.append,
        )

    return _build


class TestHelpers:
    """Test suite for similarity and merge helpers."""

    def test_cosine_similarity_should_handle_degenerate_vectors(self) -> None:
        """Test zero norm and mismatched shapes score zero."""
        # Act & Assert
        assert cosine_similarity([1.0, 0.0], [2.0, 0.0]) == pytest.approx(1.0)
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
        assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0
        assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0]) == 0.0

    def test_merge_results_should_prefer_cache_entry(self, make_metadata) -> None:
        """Test duplicate ids keep the cache result and ordering is by score."""
        # Arrange
        metadata = make_metadata()
        cache = [SearchResult(id="x", score=0.2, metadata=metadata)]
        backend = [
            SearchResult(id="x", score=0.9, metadata=metadata),
            SearchResult(id="y", score=0.5, metadata=metadata),
        ]

        # Act
        merged = merge_results(cache, backend, limit=10)

        # Assert
        assert [(result.id, result.score) for result in merged] == [("y", 0.5), ("x", 0.2)]
        assert len(merge_results(cache, backend, limit=1)) == 1


class TestVectorIndexManagerIndexing:
    """Test suite for the write path."""

    @pytest.mark.asyncio
    async def test_index_file_should_cache_and_enqueue_chunks(
        self, build_manager, events: list[IndexEvent]
    ) -> None:
        """Test a document is cached, queued and reported."""
        # Arrange
        manager = build_manager()

        # Act
        result = await manager.index_file("notes/a.md", "# T\n\nhello world")

        # Assert
        assert result.chunk_ids == ["notes/a.md-chunk-0"]
        entry = manager.get_from_cache("notes/a.md-chunk-0")
        assert entry.metadata.header_path == "# T"
        assert entry.metadata.summary == "T"
        assert entry.metadata.tags == ["hello", "world", "note"]
        assert entry.metadata.word_count == 4
        assert (entry.metadata.start_line, entry.metadata.end_line) == (1, 3)
        assert manager.queue_stats().pending == 1
        assert [event.type for event in events] == ["file_indexed"]
        assert events[0].chunk_count == 1

    @pytest.mark.asyncio
    async def test_index_file_should_embed_content_summary_and_title(
        self, build_manager, make_embedding_provider
    ) -> None:
        """Test the three embedding inputs of a chunk."""
        # Arrange
        provider = make_embedding_provider()
        manager = build_manager(embedding_provider=provider)

        # Act
        await manager.index_file("notes/a.md", "# T\n\nhello world")

        # Assert
        assert sorted(provider.calls) == sorted(["# T\n\nhello world", "T", "# T"])

    @pytest.mark.asyncio
    async def test_index_file_should_use_defaults_when_metadata_fails(
        self, build_manager, make_embedding_provider
    ) -> None:
        """Test failed extraction falls back to default category and content prefix."""
        # Arrange
        provider = make_embedding_provider()
        extractor = AsyncMock()
        extractor.extract.side_effect = RuntimeError("extractor down")
        manager = build_manager(embedding_provider=provider, metadata_extractor=extractor)

        # Act
        await manager.index_file("notes/a.md", "# T\n\nhello world")

        # Assert
        entry = manager.get_from_cache("notes/a.md-chunk-0")
        assert entry.metadata.tags == ["note"]
        assert entry.metadata.summary == ""
        assert provider.calls.count("# T\n\nhello world") == 2

    @pytest.mark.asyncio
    async def test_index_file_should_use_file_path_as_title_without_headers(
        self, build_manager, make_embedding_provider
    ) -> None:
        """Test header-less chunks embed the file path as title."""
        # Arrange
        provider = make_embedding_provider()
        manager = build_manager(embedding_provider=provider)

        # Act
        await manager.index_file("notes/plain.md", "Just text.")

        # Assert
        assert "notes/plain.md" in provider.calls

    @pytest.mark.asyncio
    async def test_index_file_should_raise_embedding_error_naming_file(
        self, build_manager, events: list[IndexEvent], make_embedding_provider
    ) -> None:
        """Test embedding failures name the file and emit file_failed."""
        # Arrange
        provider = make_embedding_provider(
            failing=("boom",), error=EmbeddingError("provider down")
        )
        manager = build_manager(embedding_provider=provider)

        # Act
        with pytest.raises(EmbeddingError) as exc_info:
            await manager.index_file("notes/a.md", "# T\n\nboom")

        # Assert
        assert exc_info.value.file_path == "notes/a.md"
        assert "notes/a.md" in exc_info.value.message
        assert events[-1].type == "file_failed"
        assert events[-1].file_path == "notes/a.md"

    @pytest.mark.asyncio
    async def test_index_file_should_wrap_other_failures_as_indexing_error(
        self, build_manager, make_embedding_provider
    ) -> None:
        """Test unexpected errors become IndexingError."""
        # Arrange
        manager = build_manager(embedding_provider=make_embedding_provider(failing=("boom",)))

        # Act & Assert
        with pytest.raises(IndexingError) as exc_info:
            await manager.index_file("notes/a.md", "boom")
        assert type(exc_info.value) is IndexingError
        assert exc_info.value.details["error_type"] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_update_file_should_replace_previous_chunks(
        self, build_manager, mock_backend: AsyncMock
    ) -> None:
        """Test updating removes stale chunks before indexing."""
        # Arrange
        manager = build_manager()
        await manager.index_file("a.md", "# One\n\nfirst\n# Two\n\nsecond")

        # Act
        result = await manager.update_file("a.md", "# One\n\nonly")

        # Assert
        assert result.chunk_count == 1
        assert manager.cache_stats().entries == 1
        assert manager.queue_stats().pending == 1
        mock_backend.delete_by_file_path.assert_awaited_with("a.md")

    @pytest.mark.asyncio
    async def test_remove_file_should_clear_every_tier(
        self, build_manager, mock_backend: AsyncMock, events: list[IndexEvent]
    ) -> None:
        """Test removal from cache, queue and backend."""
        # Arrange
        manager = build_manager()
        await manager.index_file("a.md", "# T\n\nhello")
        await manager.index_file("b.md", "# T\n\nhello")

        # Act
        await manager.remove_file("a.md")

        # Assert
        assert manager.get_from_cache("a.md-chunk-0") is None
        assert manager.get_from_cache("b.md-chunk-0") is not None
        assert [record.file_path for record in manager.queue.get_all()] == ["b.md"]
        mock_backend.delete_by_file_path.assert_awaited_once_with("a.md")
        assert events[-1].type == "file_removed"

    @pytest.mark.asyncio
    async def test_update_file_should_keep_pending_chunks_when_backend_delete_fails(
        self, build_manager, mock_backend: AsyncMock
    ) -> None:
        """Test an unreachable backend leaves the cached and queued chunks intact."""
        # Arrange
        manager = build_manager()
        await manager.index_file("a.md", "# T\n\nhello")
        mock_backend.delete_by_file_path.side_effect = BackendUnavailableError(
            "down", operation="delete_by_file_path"
        )

        # Act
        with pytest.raises(BackendUnavailableError):
            await manager.update_file("a.md", "# T\n\nhello again")

        # Assert
        assert manager.queue_stats().pending == 1
        assert manager.cache_stats().entries == 1
        assert manager.get_from_cache("a.md-chunk-0") is not None

    @pytest.mark.asyncio
    async def test_remove_file_should_keep_pending_chunks_when_backend_delete_fails(
        self, build_manager, mock_backend: AsyncMock, events: list[IndexEvent]
    ) -> None:
        """Test a failed removal keeps every tier and emits no removal event."""
        # Arrange
        manager = build_manager()
        await manager.index_file("a.md", "# T\n\nhello")
        mock_backend.delete_by_file_path.side_effect = BackendUnavailableError(
            "down", operation="delete_by_file_path"
        )

        # Act
        with pytest.raises(BackendUnavailableError):
            await manager.remove_file("a.md")

        # Assert
        assert manager.queue_stats().pending == 1
        assert manager.cache_stats().entries == 1
        assert all(event.type != "file_removed" for event in events)

    @pytest.mark.asyncio
    async def test_index_source_should_report_failures_and_continue(
        self, build_manager, tmp_path: Path, make_embedding_provider
    ) -> None:
        """Test a failing document is reported without stopping the run."""
        # Arrange
        (tmp_path / "bad.md").write_text("# Bad\n\nboom", encoding="utf-8")
        (tmp_path / "good.md").write_text("# Good\n\nfine", encoding="utf-8")
        manager = build_manager(embedding_provider=make_embedding_provider(failing=("boom",)))

        # Act
        report = await manager.index_source(FileSystemDocumentSource(tmp_path))

        # Assert
        assert report.indexed_files == 1
        assert report.total_chunks == 1
        assert report.failed_files == ["bad.md"]
        assert "bad.md" in report.errors["bad.md"]
        assert not report.success

    @pytest.mark.asyncio
    async def test_index_source_should_report_unreadable_document_and_continue(
        self, build_manager, tmp_path: Path
    ) -> None:
        """Test a document that cannot be decoded is reported, not raised."""
        # Arrange
        (tmp_path / "a_bad.md").write_bytes(b"# Bad\n\n\xff\xfe")
        (tmp_path / "b_good.md").write_text("# Good\n\nfine", encoding="utf-8")
        manager = build_manager()

        # Act
        report = await manager.index_source(FileSystemDocumentSource(tmp_path))

        # Assert
        assert report.failed_files == ["a_bad.md"]
        assert "a_bad.md" in report.errors["a_bad.md"]
        assert report.indexed_files == 1
        assert manager.get_from_cache("b_good.md-chunk-0") is not None


class TestVectorIndexManagerSearch:
    """Test suite for the read path."""

    @pytest.mark.asyncio
    async def test_search_should_find_cached_chunk(self, build_manager) -> None:
        """Test freshly indexed content is searchable before any flush."""
        # Arrange
        manager = build_manager()
        await manager.index_file("notes/a.md", "# T\n\nhello world")

        # Act
        results = await manager.search("hello")

        # Assert
        assert len(results) == 1
        assert results[0].id.endswith("-chunk-0")
        assert results[0].score == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_search_should_merge_backend_results(
        self, build_manager, mock_backend: AsyncMock, make_metadata
    ) -> None:
        """Test backend hits are merged behind better cache hits."""
        # Arrange
        mock_backend.search_with_fusion.return_value = [
            SearchResult(id="old.md-chunk-0", score=0.03, metadata=make_metadata(file_path="old.md")),
        ]
        manager = build_manager()
        await manager.index_file("notes/a.md", "# T\n\nhello world")

        # Act
        results = await manager.search("hello", limit=5)

        # Assert
        assert [result.id for result in results] == ["notes/a.md-chunk-0", "old.md-chunk-0"]
        mock_backend.search_with_fusion.assert_awaited_once_with([1.0, 0.0], limit=5, filter=None)

    @pytest.mark.asyncio
    async def test_search_should_apply_tag_filter_to_cache_and_backend(
        self, build_manager, mock_backend: AsyncMock
    ) -> None:
        """Test tags restrict cache results and are forwarded to the backend."""
        # Arrange
        manager = build_manager()
        await manager.index_file("code.md", "# T\n\nserver database")
        await manager.index_file("diary.md", "# T\n\ntoday mood")

        # Act
        results = await manager.search("anything", tags=["diary"])

        # Assert
        assert [result.metadata.file_path for result in results] == ["diary.md"]
        assert mock_backend.search_with_fusion.await_args.kwargs["filter"] == SearchFilter(
            tags=["diary"]
        )

    @pytest.mark.asyncio
    async def test_search_should_return_nothing_for_zero_limit(
        self, build_manager, mock_backend: AsyncMock
    ) -> None:
        """Test an explicit zero limit is honored instead of the default."""
        # Arrange
        manager = build_manager()
        await manager.index_file("notes/a.md", "# T\n\nhello world")

        # Act
        results = await manager.search("hello", limit=0)

        # Assert
        assert results == []
        mock_backend.search_with_fusion.assert_not_awaited()


class TestVectorIndexManagerLifecycle:
    """Test suite for start, flush and close."""

    @pytest.mark.asyncio
    async def test_on_file_save_should_flush_only_that_file(
        self, build_manager, mock_backend: AsyncMock
    ) -> None:
        """Test saving a document persists just its chunks."""
        # Arrange
        manager = build_manager()
        await manager.index_file("a.md", "# T\n\nhello")
        await manager.index_file("b.md", "# T\n\nhello")

        # Act
        flushed = await manager.on_file_save("a.md")

        # Assert
        assert flushed == 1
        assert mock_backend.upsert_multi_vector.await_args.args[0].file_path == "a.md"
        assert [record.file_path for record in manager.queue.get_all()] == ["b.md"]

    @pytest.mark.asyncio
    async def test_start_and_close_should_manage_backend(
        self, build_manager, mock_backend: AsyncMock
    ) -> None:
        """Test start initializes and close flushes then releases the backend."""
        # Arrange
        manager = build_manager()
        await manager.start()
        await manager.index_file("a.md", "# T\n\nhello")

        # Act
        await manager.close()

        # Assert
        mock_backend.initialize.assert_awaited_once()
        mock_backend.upsert_multi_vector.assert_awaited_once()
        mock_backend.close.assert_awaited_once()
        assert not manager.queue.is_running
        assert manager.queue_stats().pending == 0
