"""
Application exceptions.

Services raise these; the API layer renders them into the error envelope
using the HTTP status and error code each class carries. Nothing below the
API layer knows about HTTP otherwise.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Machine-readable codes returned in ``error.code``."""
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"
    TOKEN_INVALID = "TOKEN_INVALID"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Ledger conflicts
    CONFLICT = "CONFLICT"
    ALREADY_ALLOCATED = "ALREADY_ALLOCATED"
    DUPLICATE_PAYMENT = "DUPLICATE_PAYMENT"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"


class BaseAppException(Exception):
    """
    Root of the hierarchy.

    Subclasses set ``status_code`` and ``default_code``; instances carry the
    human message, the code actually used and a details mapping that is
    returned to the client as is.
    """

    status_code: int = 500
    default_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class ValidationError(BaseAppException):
    """Business rule violation or unusable input (400)."""
    status_code = 400
    default_code = ErrorCode.VALIDATION_ERROR


class ResourceNotFoundError(BaseAppException):
    """Referenced entity does not exist (404)."""
    status_code = 404
    default_code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id is not None:
                message = f"{message} (ID: {resource_id})"
        super().__init__(message, details={
            "resource_type": resource_type,
            "resource_id": resource_id,
        })


class ConflictError(BaseAppException):
    """Request repeats or contradicts recorded state (409)."""
    status_code = 409
    default_code = ErrorCode.CONFLICT


class DuplicatePaymentError(ConflictError):
    """A payment submission matches one that is already recorded."""

    def __init__(self, message: str, payment_id: int):
        super().__init__(message, ErrorCode.DUPLICATE_PAYMENT, {"paymentId": payment_id})
        self.payment_id = payment_id


class AuthenticationError(BaseAppException):
    """No credentials presented (401)."""
    status_code = 401
    default_code = ErrorCode.AUTHENTICATION_FAILED

    def __init__(self, message: str = "Authentication token missing"):
        super().__init__(message)


class AuthorizationError(BaseAppException):
    """Credentials present but not good enough for this action (403)."""
    status_code = 403
    default_code = ErrorCode.AUTHORIZATION_FAILED

    def __init__(
        self,
        message: str = "Access denied",
        required_permission: Optional[str] = None,
        error_code: Optional[ErrorCode] = None,
    ):
        details = {"required_permission": required_permission} if required_permission else None
        super().__init__(message, error_code, details)


class InvalidTokenError(AuthorizationError):
    """Token failed verification or carries unusable claims."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, error_code=ErrorCode.TOKEN_INVALID)


class DatabaseError(BaseAppException):
    """Unexpected persistence failure (500)."""
    default_code = ErrorCode.DATABASE_ERROR


__all__ = [
    "ErrorCode",
    "BaseAppException",
    "ValidationError",
    "ResourceNotFoundError",
    "ConflictError",
    "DuplicatePaymentError",
    "AuthenticationError",
    "AuthorizationError",
    "InvalidTokenError",
    "DatabaseError",
]
