"""
Structured logging configuration for LexiFlow.

This module provides the logging infrastructure with support for structured
logging, JSON formatting and rich console output. It integrates structlog
while keeping compatibility with standard Python logging, so records emitted
by the pipeline can be routed to any standard handler.

Functions:
    setup_logging(): Initialize logging configuration
    get_logger(name): Get configured logger instance

Configuration:
    Logging behavior is controlled by environment variables:
    - LOG_LEVEL: Minimum log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
    - LOG_FORMAT: Output format (json/text)
    - LOG_FILE_PATH: Optional file output path
    - DEBUG: Enable development mode with rich formatting

Example:
    >>> from lexiflow.core.logging.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Pipeline loaded", language="en", stages=3)
    >>> logger.error("Model not found on disk, ignoring", model="Tagger-en-")
"""

import logging
import logging.config
import sys
from pathlib import Path

import structlog
from rich.console import Console
from rich.logging import RichHandler

from lexiflow.core.config.settings import settings
from lexiflow.core.exceptions.custom_exceptions import ConfigurationError


def setup_logging() -> None:
    """
    Initialize logging configuration.

    Sets up structlog processors and standard library handlers. The
    handler set depends on the environment:
        - Development/debug: Rich console handler with colors and tracebacks
        - Otherwise: plain stream handler on stdout
        - File: additional file handler when LOG_FILE_PATH is configured

    Example:
        >>> from lexiflow.core.logging.logger import setup_logging
        >>> setup_logging()  # Call once at application startup
    """

    # Configure structlog processors
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.LOG_FORMAT.lower() == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    handlers = []

    if settings.DEBUG or settings.ENVIRONMENT == "development":
        console = Console(stderr=True)
        rich_handler = RichHandler(
            console=console,
            show_time=True,
            show_level=True,
            show_path=True,
            markup=False,
            rich_tracebacks=True,
        )
        rich_handler.setLevel(settings.LOG_LEVEL)
        handlers.append(rich_handler)
    else:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setLevel(settings.LOG_LEVEL)
        handlers.append(stream_handler)

    if settings.LOG_FILE_PATH:
        handlers.append(create_file_handler(settings.LOG_FILE_PATH, settings.LOG_LEVEL))

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        handlers=handlers,
        format="%(message)s",
    )


def create_file_handler(path: str, level: str) -> logging.FileHandler:
    """
    Open the log file, creating its directory if needed.

    Raises:
        ConfigurationError: If the file cannot be opened for writing
    """
    file_path = Path(path).expanduser()
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(file_path)
    except OSError as e:
        raise ConfigurationError(
            f"Cannot open log file {file_path}: {e}",
            error_code="LOG_FILE_ERROR",
            details={"path": str(file_path)},
        ) from e
    file_handler.setLevel(level)
    return file_handler


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured structured logger instance.

    Args:
        name (str): Logger name, typically __name__ of the calling module

    Returns:
        structlog.stdlib.BoundLogger: Configured logger instance

    Note:
        If logging hasn't been configured yet, this function will
        automatically call setup_logging() to ensure proper initialization.
    """
    if not structlog.is_configured():
        setup_logging()
    return structlog.get_logger(name)


# Setup logging on import
setup_logging()
