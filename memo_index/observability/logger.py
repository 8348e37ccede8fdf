"""
Logger configuration.

Installs a single stdout handler for hosts that embed the indexer and
quiets the HTTP and vector store client loggers.

Dependencies: logging (stdlib), memo_index.configs
System role: Centralized logging configuration
"""

import logging
import sys

from memo_index.configs import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "botocore", "qdrant_client", "faiss")


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging for the indexer.

    Replaces existing root handlers so repeated calls do not duplicate output.

    Args:
        level: Log level name; defaults to MEMO_LOG_LEVEL from settings
    """
    level = (level or get_settings().log_level).upper()

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"{__name__}:configure_logging - Level set to {level}")
