"""
Custom Exceptions for Prefect Portal
====================================

Every resource operation returns a ``Result``; ``Result.unwrap()`` raises one
of these so the API layer can render a consistent error body.

Usage:
    from prefect_portal.core.exceptions import ResourceNotFoundError

    if record is None:
        raise ResourceNotFoundError("Complaint", complaint_id)
"""

from typing import Optional, Any, Dict


class PortalError(Exception):
    """Base exception for all portal errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(PortalError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidTokenError(AuthenticationError):
    """JWT token is invalid or expired"""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)
        self.code = "INVALID_TOKEN"


class AuthorizationError(PortalError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors
# ============================================

class ResourceNotFoundError(PortalError):
    """Record does not exist or is not visible to the caller"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str = ""):
        message = (
            f"{resource_type} with ID '{resource_id}' not found"
            if resource_id else f"{resource_type} not found"
        )
        super().__init__(
            message,
            code="NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class ConflictError(PortalError):
    """Write rejected because it clashes with stored state"""

    status_code = 409

    def __init__(self, message: str, resource_type: Optional[str] = None):
        super().__init__(message, code="CONFLICT")
        if resource_type:
            self.details["resource_type"] = resource_type


# ============================================
# Validation Errors
# ============================================

class ValidationError(PortalError):
    """Input validation failed"""

    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)

    @property
    def field(self) -> Optional[str]:
        return self.details.get("field")


class InvalidFileTypeError(ValidationError):
    """File type not allowed"""

    def __init__(self, file_type: str, allowed_types: list):
        super().__init__(
            f"File type '{file_type}' not allowed. Allowed: {', '.join(allowed_types)}",
            field="file",
        )
        self.code = "INVALID_FILE_TYPE"
        self.details.update({"file_type": file_type, "allowed_types": allowed_types})


# ============================================
# Backend Errors
# ============================================

class BackendError(PortalError):
    """Store or driver failure"""

    status_code = 500

    def __init__(self, message: str = "Backend request failed"):
        super().__init__(message, code="BACKEND_ERROR")


class RequestTimeoutError(BackendError):
    """Store round trip exceeded its time budget"""

    status_code = 504

    def __init__(self, timeout_seconds: float):
        super().__init__(f"Request timed out after {timeout_seconds}s")
        self.code = "REQUEST_TIMEOUT"
        self.details["timeout_seconds"] = timeout_seconds


class RateLimitError(PortalError):
    """Too many requests"""

    status_code = 429

    def __init__(self, retry_after: Optional[int] = None):
        super().__init__("Too many requests. Please slow down.", code="RATE_LIMITED")
        if retry_after:
            self.details["retry_after_seconds"] = retry_after


# ============================================
# Storage Errors
# ============================================

class StorageError(PortalError):
    """Storage operation failed"""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message, code="STORAGE_ERROR")
        if key:
            self.details["key"] = key


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: PortalError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
