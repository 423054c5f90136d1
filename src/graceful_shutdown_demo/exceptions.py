# src/graceful_shutdown_demo/exceptions.py

"""
Shared custom exceptions for the Graceful Shutdown Demo function.

Centralizing exception definitions in a separate module prevents circular
import errors between the modules that raise and catch them.

Exception Hierarchy:
- GracefulShutdownDemoError (base)
  - RetryableError (can be retried)
    - ExtensionEventError
  - NonRetryableError (should not be retried)
    - ConfigurationError
    - ValidationError
      - InvalidRequestError
    - ExtensionRegistrationError
"""

from typing import Any, Dict, Optional


class GracefulShutdownDemoError(Exception):
    """Base exception for all Graceful Shutdown Demo errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = dict(context) if context else {}  # Copy context to prevent mutation
        self.correlation_id = correlation_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "correlation_id": self.correlation_id,
            "retryable": isinstance(self, RetryableError),
        }


class RetryableError(GracefulShutdownDemoError):
    """Base class for errors that can be retried."""
    pass


class NonRetryableError(GracefulShutdownDemoError):
    """Base class for errors that should not be retried."""
    pass


# === Configuration Errors ===

class ConfigurationError(NonRetryableError):
    """Raised when there's an error in the application configuration."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="CONFIGURATION_ERROR", **kwargs)


# === Validation Errors ===

class ValidationError(NonRetryableError):
    """Base class for validation errors."""
    pass


class InvalidRequestError(ValidationError):
    """Raised when an API Gateway request lacks a field the handler needs."""

    def __init__(self, field: str, **kwargs):
        message = f"Invalid request: missing or empty '{field}'"
        context = {"field": field}
        super().__init__(message, error_code="INVALID_REQUEST", context=context, **kwargs)


# === Extension Errors ===

class ExtensionError(GracefulShutdownDemoError):
    """Base class for Lambda Extensions API errors."""
    pass


class ExtensionRegistrationError(ExtensionError, NonRetryableError):
    """Raised when the extension cannot be registered during init."""

    def __init__(self, extension_name: str, status_code: Optional[int] = None, **kwargs):
        if status_code is None:
            message = f"Could not register extension '{extension_name}'"
        else:
            message = f"Could not register extension '{extension_name}': HTTP {status_code}"
        context = {"extension_name": extension_name, "status_code": status_code}
        super().__init__(message, error_code="EXTENSION_REGISTRATION_FAILED", context=context, **kwargs)


class ExtensionEventError(ExtensionError, RetryableError):
    """Raised when polling the Extensions API for the next event fails."""

    def __init__(self, operation: str, status_code: Optional[int] = None, **kwargs):
        message = f"Extensions API call failed during: {operation}"
        context = {"operation": operation, "status_code": status_code}
        super().__init__(message, error_code="EXTENSION_EVENT_FAILED", context=context, **kwargs)


# === Utility Functions ===

def is_retryable_error(error: Exception) -> bool:
    """Check if an error is retryable."""
    return isinstance(error, RetryableError)


def get_error_context(error: Exception) -> Dict[str, Any]:
    """Extract error context for logging."""
    if isinstance(error, GracefulShutdownDemoError):
        return error.to_dict()
    else:
        return {
            "error_type": error.__class__.__name__,
            "message": str(error),
            "retryable": False  # Unknown errors default to non-retryable
        }
