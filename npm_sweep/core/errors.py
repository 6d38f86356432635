# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Custom exceptions for npm-sweep.

All exceptions inherit from SweepError for consistent error handling.
"""

from typing import Any, List, Optional


class SweepError(Exception):
    """Base exception for all npm-sweep errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[dict] = None
    ):
        """
        Initialize error.

        Args:
            message: Human-readable error message
            status_code: HTTP-like status code
            details: Additional error details
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for reports."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details
        }


class ConfigurationError(SweepError):
    """Configuration error."""

    def __init__(self, message: str, config_file: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, status_code=500, details=details)
        self.config_file = config_file


class SchemaError(SweepError):
    """
    A persisted plan does not match the plan schema.

    `violations` holds one "path: message" entry per violated field.
    """

    def __init__(self, violations: List[str], details: Optional[dict] = None):
        self.violations = list(violations)
        message = "Invalid plan: " + "; ".join(self.violations)
        super().__init__(message, status_code=400, details=details)


class AuthenticationError(SweepError):
    """Could not establish the identity of the current registry user."""

    def __init__(self, message: str = "Could not authenticate with registry", details: Optional[dict] = None):
        super().__init__(message, status_code=401, details=details)


class RegistryError(SweepError):
    """
    Registry responded with an error.

    Carries the status code and the raw (parsed when possible) response body.
    """

    def __init__(self, message: str, status_code: int, body: Any = None):
        super().__init__(message, status_code=status_code)
        self.body = body


class AuthorizationError(RegistryError):
    """401/403 that is not a one-time password challenge."""

    def __init__(self, status_code: int, body: Any = None):
        super().__init__("Unauthorized", status_code, body)


class OtpRequiredError(RegistryError):
    """
    The registry wants a one-time password for this operation.

    Not a transient fault: never retried by the transport.
    """

    def __init__(self, status_code: int = 401, body: Any = None):
        super().__init__("OTP required for this operation", status_code, body)


class RegistryUnavailableError(RegistryError):
    """Network-level failure that survived every retry attempt."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message, status_code=0)
        self.attempts = attempts


class PolicyViolationError(SweepError):
    """An action would break an ownership or unpublish policy."""

    def __init__(self, message: str, code: str, package: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, status_code=409, details=details)
        self.code = code
        self.package = package


class OtpUnavailableError(SweepError):
    """No one-time password could be obtained."""

    def __init__(self, message: str = "Could not obtain a one-time password", details: Optional[dict] = None):
        super().__init__(message, status_code=401, details=details)


# Error Message Utilities

def sanitize_error_for_user(error: Exception, include_type: bool = True) -> str:
    """
    Sanitize error messages for user display.

    Args:
        error: The exception to sanitize
        include_type: Whether to include exception type

    Returns:
        User-friendly error message without stack trace
    """
    error_msg = str(error).strip()

    # Limit message length
    if len(error_msg) > 500:
        error_msg = error_msg[:500] + "..."

    if include_type:
        return f"{error.__class__.__name__}: {error_msg}"

    return error_msg
