"""
Custom Exception Classes for the Content Service

This module defines the error taxonomy used by the versioning subsystem and
its content collaborator. Every exception carries an HTTP status code and a
machine-readable error code so the exception handlers can render a
consistent error response.
"""

import enum
from typing import Any

from fastapi import status


class ErrorCode(str, enum.Enum):
    """Machine-readable error codes returned in error responses"""

    AUTH_FAILED = "AUTH_FAILED"
    AUTH_TOKEN_EXPIRED = "AUTH_TOKEN_EXPIRED"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_CONTENT_NOT_FOUND = "RESOURCE_CONTENT_NOT_FOUND"
    RESOURCE_VERSION_NOT_FOUND = "RESOURCE_VERSION_NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INVALID_OPERATION = "INVALID_OPERATION"
    VERSION_CONFLICT = "VERSION_CONFLICT"
    STORAGE_ERROR = "STORAGE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ContentServiceError(Exception):
    """Base exception class for all content service exceptions"""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Authentication Exceptions
# ============================================================================


class AuthenticationError(ContentServiceError):
    """Raised when the caller's identity cannot be established"""

    error_code = ErrorCode.AUTH_FAILED

    def __init__(self, message: str = "Authentication failed", details: dict[str, Any] | None = None):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED, details=details or {})


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired"""

    error_code = ErrorCode.AUTH_TOKEN_EXPIRED

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message=message)


class InvalidTokenError(AuthenticationError):
    """Raised when JWT token is invalid"""

    error_code = ErrorCode.AUTH_TOKEN_INVALID

    def __init__(self, message: str = "Invalid or malformed token"):
        super().__init__(message=message)


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class ResourceNotFoundError(ContentServiceError):
    """Base class for resource not found errors"""

    error_code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Any | None = None, message: str | None = None):
        if message is None:
            message = f"{resource_type} not found"
            if resource_id is not None:
                message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ContentNotFoundError(ResourceNotFoundError):
    """Raised when content is not found"""

    error_code = ErrorCode.RESOURCE_CONTENT_NOT_FOUND

    def __init__(self, content_id: Any | None = None):
        super().__init__(resource_type="Content", resource_id=content_id)


class VersionNotFoundError(ResourceNotFoundError):
    """Raised when a content version is not found, by number or by id"""

    error_code = ErrorCode.RESOURCE_VERSION_NOT_FOUND

    def __init__(self, version_id: Any | None = None, content_id: Any | None = None, version: int | None = None):
        if version is not None:
            super().__init__(
                resource_type="ContentVersion",
                resource_id=version_id,
                message=f"Version {version} not found for content '{content_id}'",
            )
            self.details.update({"content_id": content_id, "version": version})
        else:
            super().__init__(resource_type="ContentVersion", resource_id=version_id)


# ============================================================================
# Validation & Business Logic Exceptions
# ============================================================================


class InvalidArgumentError(ContentServiceError):
    """Raised when an argument is well-formed but not acceptable, e.g. a version of another content"""

    error_code = ErrorCode.INVALID_ARGUMENT

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=details or {})


class InvalidOperationError(ContentServiceError):
    """Raised when an operation is invalid in the current context"""

    error_code = ErrorCode.INVALID_OPERATION

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=details or {})


class VersionConflictError(ContentServiceError):
    """Raised when concurrent writers claim the same (content_id, version) pair"""

    error_code = ErrorCode.VERSION_CONFLICT

    def __init__(self, content_id: Any, version: int, attempts: int | None = None):
        details: dict[str, Any] = {"content_id": content_id, "version": version}
        if attempts is not None:
            details["attempts"] = attempts
        super().__init__(
            message=f"Version {version} of content '{content_id}' was written concurrently",
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


# ============================================================================
# Storage Exceptions
# ============================================================================


class StorageError(ContentServiceError):
    """Raised when the underlying database operation fails"""

    error_code = ErrorCode.STORAGE_ERROR

    def __init__(self, message: str = "A database error occurred", operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(message=message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)
