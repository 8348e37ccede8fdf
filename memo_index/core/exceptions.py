"""
Exception hierarchy for the memo index.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class MemoIndexException(Exception):
    """Base exception for all memo index errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(MemoIndexException):
    """Raised when settings select an unknown provider or store type."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize configuration error.

        Args:
            message: Error message
            setting: Name of the offending setting
            details: Additional context
        """
        details = details or {}
        if setting:
            details["setting"] = setting
        super().__init__(message, details)


class IndexingError(MemoIndexException):
    """Raised when a document cannot be indexed."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize indexing error.

        Args:
            message: Error message
            file_path: Path of the document that failed
            details: Additional context
        """
        details = details or {}
        if file_path:
            details["file_path"] = file_path
        self.file_path = file_path
        super().__init__(message, details)


class EmbeddingError(IndexingError):
    """Raised when embedding generation fails."""

    pass


class MetadataExtractionError(MemoIndexException):
    """Raised when chunk metadata extraction fails (non-critical)."""

    pass


class VectorStoreError(MemoIndexException):
    """Raised when vector store operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, search, delete, count, clear)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        self.operation = operation
        super().__init__(message, details)


class BackendUnavailableError(VectorStoreError):
    """Raised when the vector backend cannot be reached."""

    pass


class DimensionMismatchError(VectorStoreError):
    """Raised when a vector does not match the backend's established dimension."""

    def __init__(
        self,
        expected: int,
        actual: int,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize dimension mismatch error.

        Args:
            expected: Dimension fixed by the first record
            actual: Dimension that was received
            operation: Operation that failed
            details: Additional context
        """
        details = details or {}
        details.update({"expected": expected, "actual": actual})
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vector dimension {actual} does not match expected dimension {expected}",
            operation,
            details,
        )
