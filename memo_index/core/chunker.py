"""
Header-aware markdown chunker.

Splits raw document text into bounded chunks that carry the markdown header
hierarchy active at their start, plus character offsets and 1-indexed line
ranges.

Dependencies: memo_index.models.chunk
System role: First stage of the indexing pipeline
"""

import logging
from typing import Iterator, NamedTuple

from memo_index.models.chunk import Chunk, HeaderRef

logger = logging.getLogger(__name__)

HEADER_PATH_SEPARATOR = " > "


class _Header(NamedTuple):
    level: int
    text: str
    position: int


class _Extent(NamedTuple):
    start: int
    end: int
    headers: list[HeaderRef]


def format_header_path(headers: list[HeaderRef]) -> str:
    """
    Render a header stack as "# H1 > ## H2".

    Args:
        headers: Root-to-leaf header stack

    Returns:
        str: Rendered path, empty when there are no headers
    """
    return HEADER_PATH_SEPARATOR.join(header.render() for header in headers)


def _iter_lines(text: str, start: int, end: int) -> Iterator[tuple[int, int]]:
    """Yield (line_start, line_end) offsets within [start, end), newline included."""
    pos = start
    while pos < end:
        newline = text.find("\n", pos, end)
        line_end = end if newline == -1 else newline + 1
        yield pos, line_end
        pos = line_end


class Chunker:
    """
    Markdown chunker preserving header hierarchy.

    A line is a header when, after left-trim, it starts with one or more '#'
    followed by non-empty text. Each header owns the text up to the next
    header; text before the first header forms a header-less chunk. Extents
    longer than `max_chunk_size` are split on line boundaries, and single
    lines longer than the limit are hard-split at fixed offsets.
    """

    def __init__(self, max_chunk_size: int = 800, overlap_size: int = 0) -> None:
        """
        Initialize chunker.

        Args:
            max_chunk_size: Maximum chunk length in characters
            overlap_size: Accepted for configuration compatibility; chunks never overlap

        Raises:
            ValueError: When max_chunk_size is not positive
        """
        if max_chunk_size <= 0:
            raise ValueError("max_chunk_size must be positive")
        self.max_chunk_size = max_chunk_size
        self.overlap_size = overlap_size
        if overlap_size:
            logger.warning(
                f"{__name__}:__init__ - overlap_size={overlap_size} is not applied; "
                "chunks are produced without overlap"
            )

    def chunk(self, text: str) -> list[Chunk]:
        """
        Split text into header-aware chunks.

        Args:
            text: Raw document text

        Returns:
            list[Chunk]: Chunks in document order with contiguous indexes
        """
        if not text or not text.strip():
            return []

        chunks: list[Chunk] = []
        for extent in self._extents(text):
            for start, end in self._split_extent(text, extent.start, extent.end):
                chunks.append(
                    Chunk(
                        content=text[start:end],
                        headers=extent.headers,
                        header_path=format_header_path(extent.headers),
                        index=len(chunks),
                        start_pos=start,
                        end_pos=end,
                        start_line=self._line_number(text, start),
                        end_line=self._line_number(text, end - 1),
                    )
                )

        logger.debug(
            f"{__name__}:chunk - Produced {len(chunks)} chunks",
            extra={"text_length": len(text)},
        )
        return chunks

    def _extents(self, text: str) -> list[_Extent]:
        headers = self._extract_headers(text)
        if not headers:
            return [_Extent(0, len(text), [])]

        extents: list[_Extent] = []
        if text[: headers[0].position].strip():
            extents.append(_Extent(0, headers[0].position, []))

        stack: list[HeaderRef] = []
        for i, header in enumerate(headers):
            while stack and stack[-1].level >= header.level:
                stack.pop()
            stack.append(HeaderRef(level=header.level, text=header.text))

            end = headers[i + 1].position if i + 1 < len(headers) else len(text)
            extents.append(_Extent(header.position, end, list(stack)))
        return extents

    @staticmethod
    def _extract_headers(text: str) -> list[_Header]:
        headers: list[_Header] = []
        for line_start, line_end in _iter_lines(text, 0, len(text)):
            stripped = text[line_start:line_end].lstrip()
            if not stripped.startswith("#"):
                continue
            level = len(stripped) - len(stripped.lstrip("#"))
            header_text = stripped[level:].strip()
            if header_text:
                headers.append(_Header(level, header_text, line_start))
        return headers

    def _split_extent(self, text: str, start: int, end: int) -> list[tuple[int, int]]:
        """Return (start, end) spans for one extent, skipping whitespace-only parts."""
        if not text[start:end].strip():
            return []
        if end - start <= self.max_chunk_size:
            return [(start, end)]

        spans: list[tuple[int, int]] = []
        buffer_start: int | None = None
        buffer_end = start

        def flush_buffer() -> None:
            nonlocal buffer_start
            if buffer_start is not None:
                spans.extend(self._trimmed(text, buffer_start, buffer_end))
            buffer_start = None

        for line_start, line_end in _iter_lines(text, start, end):
            buffered = 0 if buffer_start is None else buffer_end - buffer_start
            if buffered + (line_end - line_start) <= self.max_chunk_size:
                if buffer_start is None:
                    buffer_start = line_start
                buffer_end = line_end
                continue

            flush_buffer()
            if len(text[line_start:line_end].rstrip("\n")) > self.max_chunk_size:
                for piece_start in range(line_start, line_end, self.max_chunk_size):
                    piece_end = min(piece_start + self.max_chunk_size, line_end)
                    spans.extend(self._trimmed(text, piece_start, piece_end))
            else:
                buffer_start, buffer_end = line_start, line_end

        flush_buffer()
        return spans

    @staticmethod
    def _trimmed(text: str, start: int, end: int) -> list[tuple[int, int]]:
        content = text[start:end].rstrip()
        if not content.strip():
            return []
        return [(start, start + len(content))]

    @staticmethod
    def _line_number(text: str, position: int) -> int:
        return text.count("\n", 0, position) + 1
