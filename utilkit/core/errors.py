"""
Custom error classes with structured logging.

All errors include correlation context and structured data for observability.
Absence of a value is never an error in this library: lookups return
sentinels (None/False/-1) instead.
"""

from typing import Optional, Dict, Any
from utilkit.common.logging import get_logger
from utilkit.common.logging.correlation import get_correlation_id, get_job_id

logger = get_logger(__name__)


class ToolkitError(Exception):
    """
    Base error class for all utilkit errors.

    Automatically logs errors with correlation context when raised.
    """

    def __init__(
        self,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """
        Initialize error with structured context.

        Args:
            message: Human-readable error message
            data: Structured data for observability
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.data = data or {}
        self.cause = cause

        self.correlation_id = get_correlation_id()
        self.job_id = get_job_id()

        self._log_error()

    def _log_error(self):
        """Log error with structured data."""
        log_data = {
            "error_type": self.__class__.__name__,
            "correlation_id": self.correlation_id,
            "job_id": self.job_id,
            **self.data,
        }

        if self.cause:
            log_data["cause"] = str(self.cause)

        logger.error(self.message, data=log_data, exc_info=self.cause is not None)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "data": self.data,
            "correlation_id": self.correlation_id,
            "job_id": self.job_id,
            "cause": str(self.cause) if self.cause else None,
        }


class InvalidArgumentError(ToolkitError, ValueError):
    """Null key or disallowed null value passed to a collection."""
    pass


class ConfigurationError(ToolkitError):
    """Error in configuration."""
    pass

