"""
Core configuration management for LexiFlow.

This module provides centralized configuration management using Pydantic settings
with support for environment variables, type validation, and computed properties.
All application settings are defined here with sensible defaults and validation.

Classes:
    Settings: Main configuration class with all application settings

Environment Variables:
    Application settings can be overridden using environment variables with the
    same names as the class attributes (case-sensitive).

Example:
    >>> from lexiflow.core.config.settings import Settings
    >>> settings = Settings()
    >>> print(settings.STREAM_BLOCK_SIZE)
    1000

Configuration Sections:
    - Application: Basic app configuration (name, version, environment)
    - Logging: Application logging configuration
    - Model Store: Location of persisted model artifacts
    - Streaming: Block and batch sizes for document streaming
"""

from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables using the
    same name as the attribute. For example, the STREAM_BLOCK_SIZE
    environment variable will override the sequential streaming block size.

    Attributes:
        APP_NAME: Application name identifier
        APP_VERSION: Current application version
        ENVIRONMENT: Deployment environment (development/testing/production)
        DEBUG: Enable debug mode with rich console logging

        LOG_LEVEL: Logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        LOG_FORMAT: Log format (json/text)
        LOG_FILE_PATH: Path for log file output (optional)

        MODEL_STORE_PATH: Root directory of the on-disk model store

        STREAM_BLOCK_SIZE: Documents processed per lock acquisition when
            streaming sequentially
        PARALLEL_BATCH_SIZE: Documents buffered before a parallel fan-out
        PROGRESS_REPORT_INTERVAL: Documents between throughput log lines
        MAX_WORKERS: Thread pool size for parallel processing (None lets
            the executor decide)

    Properties:
        model_store_dir: Expanded model store directory
    """

    # Application
    APP_NAME: str = "LexiFlow"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"
    LOG_FILE_PATH: Optional[str] = None

    # Model Store
    MODEL_STORE_PATH: str = "~/.lexiflow/models"

    # Streaming
    STREAM_BLOCK_SIZE: int = 1000
    PARALLEL_BATCH_SIZE: int = 10_000
    PROGRESS_REPORT_INTERVAL: int = 10_000
    MAX_WORKERS: Optional[int] = None

    @property
    def model_store_dir(self) -> Path:
        """
        Resolve the model store directory.

        Returns:
            Path: MODEL_STORE_PATH with the user home expanded
        """
        return Path(self.MODEL_STORE_PATH).expanduser()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate logging level is a supported value.

        Ensures the log level is one of the standard Python logging
        levels. Converts to uppercase for consistency.

        Args:
            v (str): The log level value to validate

        Returns:
            str: The validated and normalized log level

        Raises:
            ValueError: If log level is not supported
        """
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {valid_levels}")
        return v.upper()

    @field_validator("STREAM_BLOCK_SIZE", "PARALLEL_BATCH_SIZE", "PROGRESS_REPORT_INTERVAL")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Sizes and intervals must be positive."""
        if v <= 0:
            raise ValueError("value must be a positive integer")
        return v

    @field_validator("MAX_WORKERS")
    @classmethod
    def validate_max_workers(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("MAX_WORKERS must be a positive integer")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",  # This will ignore extra fields from environment
    )


def get_settings() -> Settings:
    """Get application settings instance"""
    return Settings()


settings = Settings()
