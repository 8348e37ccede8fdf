"""
Statistics models for the cache and persistence queue.

Dependencies: pydantic
System role: Observability snapshots
"""

from pydantic import BaseModel, Field


class CacheStats(BaseModel):
    """Snapshot of memory cache occupancy."""

    entries: int = Field(ge=0)
    current_size: int = Field(ge=0, description="Estimated bytes held")
    max_size: int = Field(gt=0, description="Byte budget")

    @property
    def utilization(self) -> float:
        return self.current_size / self.max_size


class QueueStats(BaseModel):
    """Snapshot of persistence queue counters."""

    pending: int = Field(ge=0, description="Records waiting to be flushed")
    total_flushed: int = Field(default=0, ge=0)
    flush_count: int = Field(default=0, ge=0)
    failed_flushes: int = Field(default=0, ge=0)
    is_running: bool = False
