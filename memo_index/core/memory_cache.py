"""
In-memory LRU cache of embedded chunks.

Holds recently indexed chunks under a fixed byte budget so that ambient
search can score them without a backend round-trip.

Dependencies: memo_index.models
System role: Hot tier of the two-tier search path
"""

import logging
from collections import OrderedDict

from memo_index.models.search import CacheEntry
from memo_index.models.stats import CacheStats

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 50 * 1024 * 1024
ENTRY_OVERHEAD_BYTES = 100


def estimate_entry_size(entry: CacheEntry) -> int:
    """
    Estimate the memory footprint of a cache entry in bytes.

    Content counts 2 bytes per character, each embedding component 8 bytes,
    and the compact JSON form of the metadata 2 bytes per character, plus a
    fixed per-entry overhead.

    Args:
        entry: Cache entry to measure

    Returns:
        int: Estimated size in bytes
    """
    return (
        2 * len(entry.content)
        + 8 * len(entry.embedding)
        + 2 * len(entry.metadata.model_dump_json())
        + ENTRY_OVERHEAD_BYTES
    )


class MemoryCache:
    """
    Byte-budgeted LRU cache keyed by chunk id.

    Recency is the order of the underlying OrderedDict: `set` and `get`
    move an entry to the most-recent end, eviction pops from the other end.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_BYTES) -> None:
        """
        Initialize cache.

        Args:
            max_size: Byte budget for all entries
        """
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._sizes: dict[str, int] = {}
        self._max_size = max_size
        self._current_size = 0

    def set(self, id: str, entry: CacheEntry) -> None:
        """
        Insert or replace an entry, evicting least recently used ones as needed.

        An entry larger than the whole budget is still stored once the cache
        has been emptied.

        Args:
            id: Chunk identifier
            entry: Entry to store
        """
        size = estimate_entry_size(entry)

        if id in self._entries:
            self._remove(id)

        while self._entries and self._current_size + size > self._max_size:
            evicted_id, _ = self._entries.popitem(last=False)
            self._current_size -= self._sizes.pop(evicted_id)
            logger.debug(f"{__name__}:set - Evicted {evicted_id}")

        self._entries[id] = entry
        self._sizes[id] = size
        self._current_size += size

    def get(self, id: str) -> CacheEntry | None:
        """Return the entry for `id` and mark it most recently used."""
        entry = self._entries.get(id)
        if entry is not None:
            self._entries.move_to_end(id)
        return entry

    def has(self, id: str) -> bool:
        return id in self._entries

    def delete(self, id: str) -> bool:
        """
        Remove one entry.

        Returns:
            bool: True when an entry was removed
        """
        if id not in self._entries:
            return False
        self._remove(id)
        return True

    def delete_by_file_path(self, file_path: str) -> int:
        """
        Remove every entry belonging to a document.

        Returns:
            int: Number of entries removed
        """
        ids = [id for id, entry in self._entries.items() if entry.metadata.file_path == file_path]
        for id in ids:
            self._remove(id)
        return len(ids)

    def get_by_file_path(self, file_path: str) -> list[CacheEntry]:
        return [entry for entry in self._entries.values() if entry.metadata.file_path == file_path]

    def get_all(self) -> list[CacheEntry]:
        return list(self._entries.values())

    def clear(self) -> None:
        self._entries.clear()
        self._sizes.clear()
        self._current_size = 0

    def size(self) -> int:
        """Number of entries held."""
        return len(self._entries)

    @property
    def current_size(self) -> int:
        return self._current_size

    @property
    def max_size(self) -> int:
        return self._max_size

    def stats(self) -> CacheStats:
        return CacheStats(
            entries=len(self._entries),
            current_size=self._current_size,
            max_size=self._max_size,
        )

    def _remove(self, id: str) -> None:
        del self._entries[id]
        self._current_size -= self._sizes.pop(id)
