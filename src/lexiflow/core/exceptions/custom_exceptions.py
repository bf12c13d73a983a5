"""
Custom exception hierarchy for LexiFlow error handling.

This module defines a structured exception hierarchy that carries an error
code and a details dictionary alongside the human-readable message, so
callers and log records get consistent context.

Exception Hierarchy:
    LexiFlowError (base)
    ├── ConfigurationError: Configuration and setup issues
    ├── ModelNotFoundError: Persisted model artifact is missing
    ├── StorageError: Model store read/write failures
    ├── ProcessingError: Document processing failures
    ├── InvalidOperationError: Operation not valid for the object state
    └── PipelineError: Pipeline assembly or execution failures

Recoverable vs. fatal:
    ModelNotFoundError raised while reconstructing a stored pipeline is
    absorbed by the pipeline (the stage is dropped and the error logged).
    InvalidOperationError is always surfaced to the caller.

Example:
    >>> raise ModelNotFoundError(
    ...     "Model not found in store",
    ...     error_code="MODEL_NOT_FOUND",
    ...     details={"model": "AveragePerceptronTagger-en-", "version": 3}
    ... )
"""

from typing import Any, Dict, Optional


class LexiFlowError(Exception):
    """
    Base exception class for all LexiFlow application errors.

    Attributes:
        message (str): Human-readable error description
        error_code (str): Machine-readable error identifier
        details (Dict[str, Any]): Additional contextual information

    The error_code defaults to the class name when not specified.

    Example:
        >>> raise LexiFlowError(
        ...     "Pipeline record could not be decoded",
        ...     error_code="PIPELINE_DECODE_ERROR",
        ...     details={"path": "/models/en/Pipeline/default/0.bin"}
        ... )
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class ConfigurationError(LexiFlowError):
    """Raised when configuration validation or setup fails"""

    pass


class ModelNotFoundError(LexiFlowError, FileNotFoundError):
    """
    Raised when a persisted model artifact cannot be found.

    Stores raise it from load() when no artifact exists for the requested
    descriptor, including when the artifact vanished between an existence
    check and the load. It also derives from FileNotFoundError so callers
    handling plain file errors catch it too.
    """

    pass


class StorageError(LexiFlowError):
    """
    Raised when model store operations fail.

    Covers I/O failures and undecodable artifacts, as opposed to a missing
    artifact (see ModelNotFoundError).
    """

    pass


class ProcessingError(LexiFlowError):
    """Raised when document processing fails"""

    pass


class InvalidOperationError(LexiFlowError, ValueError):
    """
    Raised when an operation is not valid for the current object state.

    Common scenarios:
        - Updating a pipeline model with an object that is not a Process
        - Changing a document language after it has been fixed
    """

    pass


class PipelineError(LexiFlowError):
    """Raised when pipeline execution fails"""

    pass
