"""
Vector database boundary layer.

Provides the VectorBackend interface and its implementations:
- QdrantBackend: remote Qdrant server with server-side RRF fusion
- FAISSBackend: embedded FAISS indexes with client-side RRF fusion

Dependencies: qdrant_client, faiss-cpu, langchain_community
System role: Vector store adapters for indexing and search
"""

from memo_index.boundary.vdb.vector_backend import RRF_K, RankedHit, VectorBackend, rrf_fusion


def get_vector_backend_factory():
    """Lazy import for the backend factory to avoid loading both client stacks eagerly."""
    from memo_index.boundary.vdb.vector_store_factory import get_vector_backend
    return get_vector_backend


__all__ = [
    "RRF_K",
    "RankedHit",
    "VectorBackend",
    "get_vector_backend_factory",
    "rrf_fusion",
]
