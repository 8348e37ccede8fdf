"""
Extracted metadata model.

Dependencies: pydantic
System role: MetadataExtractor output contract
"""

from pydantic import BaseModel, Field


class ExtractedMetadata(BaseModel):
    """Summary, tags and category produced for one chunk."""

    summary: str = Field(default="", description="One-line summary")
    tags: list[str] = Field(default_factory=list, description="Up to five lowercase tags")
    category: str = Field(default="note", description="Document category")
