"""Application services."""

from memo_index.application.services.vector_index_manager import VectorIndexManager

__all__ = ["VectorIndexManager"]
