"""
Structured logging helpers.

Renders index values compactly for `extra=` context: embeddings become
their dimension and records become their chunk id, so a log line never
carries a full vector or document.

Dependencies: logging (stdlib), pydantic, memo_index.models
System role: Logging helper functions
"""

import logging
from numbers import Number
from typing import Any

from pydantic import BaseModel

from memo_index.core.exceptions import MemoIndexException
from memo_index.models.index_record import ChunkMetadata, IndexRecord

MAX_LOG_VALUE_LENGTH = 200


def safe_log_value(value: Any, max_length: int = MAX_LOG_VALUE_LENGTH) -> str:
    """
    Convert a value to a short string for log context.

    Args:
        value: Value to render
        max_length: Length after which strings are truncated

    Returns:
        str: Compact representation
    """
    if value is None:
        return "None"
    if isinstance(value, IndexRecord):
        return f"IndexRecord({value.chunk_id})"
    if isinstance(value, ChunkMetadata):
        return f"{value.file_path}:{value.start_line}-{value.end_line}"
    if isinstance(value, BaseModel):
        return type(value).__name__
    if isinstance(value, (list, tuple)):
        if value and all(isinstance(item, Number) for item in value):
            return f"vector(dim={len(value)})"
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"

    text = str(value)
    if len(text) > max_length:
        return f"{text[:max_length]}... ({len(text)} chars)"
    return text


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: Exception,
    **context: Any,
) -> None:
    """
    Log an exception with rendered context and the error's own details.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception being reported
        **context: Additional context
    """
    extra = {key: safe_log_value(val) for key, val in context.items()}
    if isinstance(exc, MemoIndexException):
        for key, val in exc.details.items():
            extra.setdefault(f"error_{key}", safe_log_value(val))
    extra["error_type"] = type(exc).__name__
    logger.error(message, exc_info=exc, extra=extra)
