"""
Boundary layer for external system integrations.

Handles all interactions with external systems (vector stores, embedding
providers, language models, document storage).
"""
