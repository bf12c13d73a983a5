"""
LexiFlow Logging Module - Structured Application Logging.

Structured logging built on structlog, with rich console output for
development and JSON output for log aggregation. Pipeline components log
through loggers obtained from get_logger(); the sink is fire-and-forget
from their point of view.

Example:
    >>> from lexiflow.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Processing started", documents=10_000)
"""

from .logger import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
