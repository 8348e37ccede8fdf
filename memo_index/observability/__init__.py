"""Logging configuration and structured logging helpers."""

from memo_index.observability.log_utils import log_exception_with_context, safe_log_value
from memo_index.observability.logger import configure_logging

__all__ = ["configure_logging", "log_exception_with_context", "safe_log_value"]
