"""Document access boundary."""

from memo_index.boundary.documents.document_source import (
    DocumentSource,
    FileSystemDocumentSource,
)

__all__ = ["DocumentSource", "FileSystemDocumentSource"]
