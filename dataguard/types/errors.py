# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Error types and error codes for DataGuard.
Provides structured error handling across all packages.

Per-request outcomes are never errors: a malformed request still maps to a
decision. The exceptions below are raised for operator-facing problems such
as an invalid configuration or a corrupt directory snapshot.
"""

from enum import Enum
from typing import Dict, Any, Optional


class ErrorCode(str, Enum):
    """Standard error codes used across DataGuard."""
    NOT_FOUND = "not_found"
    INTERNAL_ERROR = "internal_error"
    VALIDATION_FAILED = "validation_failed"
    CONFIGURATION_ERROR = "configuration_error"
    DIRECTORY_ERROR = "directory_error"

    def __str__(self) -> str:
        return self.value


# Error code constants for easy import
NOT_FOUND = ErrorCode.NOT_FOUND
INTERNAL_ERROR = ErrorCode.INTERNAL_ERROR
VALIDATION_FAILED = ErrorCode.VALIDATION_FAILED
CONFIGURATION_ERROR = ErrorCode.CONFIGURATION_ERROR
DIRECTORY_ERROR = ErrorCode.DIRECTORY_ERROR


class DataGuardError(Exception):
    """Base exception for all DataGuard-related errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            'error': self.error_code.value,
            'message': self.message,
            'details': self.details
        }

        if self.cause:
            result['cause'] = str(self.cause)

        return result

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class ValidationError(DataGuardError):
    """Raised when validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, VALIDATION_FAILED, details)
        self.field = field
        self.value = value

        if field:
            self.details['field'] = field
        if value is not None:
            self.details['value'] = str(value)


class ConfigurationError(DataGuardError):
    """Raised when there's a configuration error."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, CONFIGURATION_ERROR, details)
        self.config_key = config_key
        self.config_value = config_value

        if config_key:
            self.details['config_key'] = config_key
        if config_value is not None:
            self.details['config_value'] = str(config_value)


class DirectoryError(DataGuardError):
    """
    Raised when directory data (users, roles, grants) is corrupt or unreadable.

    This is a fatal configuration error for the operator, not a request outcome.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        source: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, DIRECTORY_ERROR, details, cause)
        self.path = path
        self.source = source

        if path:
            self.details['path'] = path
        if source:
            self.details['source'] = source


class UnknownUserError(DataGuardError):
    """Raised when a directory lookup names a user that does not exist."""

    def __init__(self, user_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"User does not exist: {user_id}", NOT_FOUND, details)
        self.user_id = user_id
        self.details['user_id'] = user_id


# Error mapping for HTTP status codes
ERROR_CODE_TO_HTTP_STATUS = {
    NOT_FOUND: 404,
    INTERNAL_ERROR: 500,
    VALIDATION_FAILED: 422,
    CONFIGURATION_ERROR: 500,
    DIRECTORY_ERROR: 500,
}


def get_http_status(error_code: ErrorCode) -> int:
    """Get HTTP status code for an error code."""
    return ERROR_CODE_TO_HTTP_STATUS.get(error_code, 500)


def create_error_response(error: DataGuardError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        'error': error.error_code.value,
        'message': error.message,
        'details': error.details,
        'http_status': get_http_status(error.error_code)
    }
