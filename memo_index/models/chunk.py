"""
Chunk domain model.

Represents a contiguous, header-aware span of a source document.

Dependencies: pydantic
System role: Chunker output data structure
"""

from pydantic import BaseModel, Field, model_validator


class HeaderRef(BaseModel):
    """A markdown header on the active header stack."""

    level: int = Field(ge=1, description="Number of leading '#' characters")
    text: str = Field(description="Header text without the leading markers")

    def render(self) -> str:
        """Render the header back to its markdown form."""
        return f"{'#' * self.level} {self.text}"


class Chunk(BaseModel):
    """Document chunk with position and line metadata."""

    content: str = Field(min_length=1, description="Chunk text content")
    headers: list[HeaderRef] = Field(
        default_factory=list,
        description="Header stack active at the chunk's start",
    )
    header_path: str = Field(default="", description="Rendered header stack, e.g. '# A > ## B'")
    index: int = Field(ge=0, description="0-based position of the chunk in the document")
    start_pos: int = Field(ge=0, description="Inclusive character offset")
    end_pos: int = Field(description="Exclusive character offset")
    start_line: int = Field(ge=1, description="1-indexed first line")
    end_line: int = Field(ge=1, description="1-indexed last line")

    @model_validator(mode="after")
    def _check_ranges(self) -> "Chunk":
        if self.end_pos <= self.start_pos:
            raise ValueError("end_pos must be greater than start_pos")
        if self.end_line < self.start_line:
            raise ValueError("end_line must not precede start_line")
        return self
