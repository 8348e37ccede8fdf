"""
memo_index: header-aware document indexing with two-tier multi-vector search.

Chunks markdown documents, embeds each chunk three ways (content, summary,
title), keeps recent chunks in an in-memory LRU cache and persists them in
batches to Qdrant or an embedded FAISS store searched with reciprocal rank
fusion.
"""

__version__ = "0.1.0"
