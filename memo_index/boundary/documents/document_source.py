"""
Document source port and filesystem implementation.

The host application owns the documents; the indexer only reads them
through this interface.

Dependencies: pathlib, asyncio
System role: Document access boundary
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from memo_index.core.exceptions import IndexingError

logger = logging.getLogger(__name__)


class DocumentSource(ABC):
    """Read-only access to the documents being indexed."""

    @abstractmethod
    async def read_file(self, path: str) -> str:
        """
        Return the document text, or an empty string if it does not exist.

        Raises:
            IndexingError: When the document exists but cannot be read
        """

    @abstractmethod
    async def mtime(self, path: str) -> float | None:
        """Return the last modification time, or None if the document does not exist."""

    @abstractmethod
    async def list_documents(self) -> list[str]:
        """Return the paths of every document, in a stable order."""


class FileSystemDocumentSource(DocumentSource):
    """
    Documents stored under a root directory.

    Paths are POSIX-style and relative to the root, so they stay stable
    across machines and make portable chunk ids.
    """

    def __init__(
        self,
        root: str | Path,
        patterns: tuple[str, ...] = ("*.md",),
        encoding: str = "utf-8",
    ) -> None:
        """
        Initialize source.

        Args:
            root: Directory containing the documents
            patterns: Glob patterns matched recursively under root
            encoding: Text encoding of the documents
        """
        self._root = Path(root)
        self._patterns = patterns
        self._encoding = encoding

    def _resolve(self, path: str) -> Path:
        return self._root / path

    async def read_file(self, path: str) -> str:
        file_path = self._resolve(path)
        try:
            return await asyncio.to_thread(file_path.read_text, encoding=self._encoding)
        except FileNotFoundError:
            logger.warning(f"{__name__}:read_file - Missing document {path}, treating as empty")
            return ""
        except (UnicodeDecodeError, OSError) as e:
            raise IndexingError(
                f"Failed to read {path}: {e}",
                file_path=path,
                details={"error_type": type(e).__name__},
            ) from e

    async def mtime(self, path: str) -> float | None:
        file_path = self._resolve(path)
        try:
            stat = await asyncio.to_thread(file_path.stat)
        except FileNotFoundError:
            return None
        return stat.st_mtime

    def _scan(self) -> list[str]:
        found: set[str] = set()
        for pattern in self._patterns:
            for file_path in self._root.rglob(pattern):
                if file_path.is_file():
                    found.add(file_path.relative_to(self._root).as_posix())
        return sorted(found)

    async def list_documents(self) -> list[str]:
        if not self._root.is_dir():
            logger.warning(f"{__name__}:list_documents - Root {self._root} is not a directory")
            return []
        return await asyncio.to_thread(self._scan)
