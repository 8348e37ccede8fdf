"""
Indexing event and report models.

Plain event objects handed to the host instead of framework callbacks.

Dependencies: pydantic
System role: Host notification and batch run reporting
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

IndexEventType = Literal["file_indexed", "file_failed", "file_removed"]


class IndexEvent(BaseModel):
    """Notification emitted by the index manager."""

    type: IndexEventType
    file_path: str
    chunk_count: int = Field(default=0, ge=0)
    error: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class IndexFileResult(BaseModel):
    """Outcome of indexing a single document."""

    file_path: str
    chunk_count: int = Field(ge=0)
    chunk_ids: list[str] = Field(default_factory=list)


class IndexRunReport(BaseModel):
    """Outcome of indexing every document of a source."""

    indexed_files: int = Field(default=0, ge=0)
    total_chunks: int = Field(default=0, ge=0)
    failed_files: list[str] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict, description="file_path -> error message")

    @property
    def success(self) -> bool:
        return not self.failed_files
