"""
Index record models.

Defines the closed metadata record and the multi-vector record stored by
the persistence queue and the vector backends.

Dependencies: pydantic
System role: Storage contract between indexer, queue and backends
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, model_validator

SCHEMA_VERSION = 1

CONTENT_VECTOR = "content_vec"
SUMMARY_VECTOR = "summary_vec"
TITLE_VECTOR = "title_vec"
VECTOR_NAMES: tuple[str, ...] = (CONTENT_VECTOR, SUMMARY_VECTOR, TITLE_VECTOR)


def build_chunk_id(file_path: str, index: int) -> str:
    """
    Build the deterministic identifier of a chunk.

    Args:
        file_path: Document path
        index: 0-based chunk index

    Returns:
        str: "<file_path>-chunk-<index>"
    """
    return f"{file_path}-chunk-{index}"


class NamedVectors(BaseModel):
    """The three embeddings of one chunk."""

    content: list[float] = Field(min_length=1, description="Embedding of the chunk text")
    summary: list[float] = Field(min_length=1, description="Embedding of the chunk summary")
    title: list[float] = Field(min_length=1, description="Embedding of the header path or file path")

    @model_validator(mode="after")
    def _check_dimensions(self) -> "NamedVectors":
        if not len(self.content) == len(self.summary) == len(self.title):
            raise ValueError(
                "content, summary and title vectors must share one dimension "
                f"(got {len(self.content)}, {len(self.summary)}, {len(self.title)})"
            )
        return self

    @property
    def dimension(self) -> int:
        return len(self.content)

    def by_name(self) -> dict[str, list[float]]:
        """Map each vector to its storage name."""
        return {
            CONTENT_VECTOR: self.content,
            SUMMARY_VECTOR: self.summary,
            TITLE_VECTOR: self.title,
        }


class ChunkMetadata(BaseModel):
    """
    Metadata attached to every stored chunk.

    The `tags` field is filterable in both backends; `file_path` is used
    for path deletes.
    """

    file_path: str = Field(description="Source document path")
    header_path: str = Field(default="", description="Rendered header stack")
    start_line: int = Field(ge=1, description="1-indexed first line")
    end_line: int = Field(ge=1, description="1-indexed last line")
    content: str = Field(description="Chunk text content")
    summary: str = Field(default="", description="Short summary of the chunk")
    tags: list[str] = Field(default_factory=list, description="Keyword tags, category included")
    category: str = Field(default="note", description="Inferred document category")
    word_count: int = Field(default=0, ge=0, description="Whitespace-delimited word count")
    indexed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC time the chunk was indexed",
    )
    schema_version: int = Field(default=SCHEMA_VERSION, description="Metadata record version")


class IndexRecord(BaseModel):
    """Unit of persistence: one chunk with its three vectors."""

    chunk_id: str = Field(description="Deterministic chunk identifier")
    vectors: NamedVectors
    metadata: ChunkMetadata

    @property
    def file_path(self) -> str:
        return self.metadata.file_path

    def to_payload(self) -> dict:
        """Serialize metadata for backend payload storage."""
        payload = self.metadata.model_dump(mode="json")
        payload["chunk_id"] = self.chunk_id
        return payload
