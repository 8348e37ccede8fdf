"""Chunk metadata extraction (rule-based and LLM-backed)."""

from memo_index.boundary.metadata.metadata_extractor import (
    LLMMetadataExtractor,
    MetadataExtractor,
    RuleBasedMetadataExtractor,
    normalize_tags,
)

__all__ = [
    "LLMMetadataExtractor",
    "MetadataExtractor",
    "RuleBasedMetadataExtractor",
    "normalize_tags",
]
