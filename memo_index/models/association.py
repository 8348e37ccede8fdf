"""
Note association model.

Represents a shared-concept link between two notes, produced by an external
concept engine and consumed read-only.

Dependencies: pydantic
System role: Association data structure
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


def build_association_id(note_a: str, note_b: str) -> str:
    """
    Build the order-independent identifier of a note pair.

    Args:
        note_a: First note id
        note_b: Second note id

    Returns:
        str: Both ids sorted lexicographically and joined by "|"
    """
    return "|".join(sorted((note_a, note_b)))


class NoteAssociation(BaseModel):
    """Association between two notes sharing concepts."""

    source_note_id: str
    target_note_id: str
    shared_concepts: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    discovered_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def association_id(self) -> str:
        return build_association_id(self.source_note_id, self.target_note_id)
