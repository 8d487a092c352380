"""
Custom Exceptions for the Registration Portal
=============================================

Use these instead of generic Exception so the API layer can map every
failure to a status code and a stable error code.

Usage:
    from app.core.exceptions import DuplicateEmailError, RegistrationNotFoundError

    if existing:
        raise DuplicateEmailError(email)

    if not registration:
        raise RegistrationNotFoundError(registration_id)
"""

from typing import Optional, Any, Dict, List


class RegistrationPortalError(Exception):
    """Base exception for all portal errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Validation Errors (400-type)
# ============================================

class RegistrationValidationError(RegistrationPortalError):
    """
    One or more submitted fields are invalid.

    All violations are collected before raising; each entry in `errors` is
    {"field": <camelCase field name>, "message": <human readable message>}.
    """

    status_code = 400

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        self.errors = errors
        if message is None:
            message = "; ".join(e["message"] for e in errors) or "Invalid registration data"
        super().__init__(message, code="VALIDATION_ERROR", details={"errors": errors})

    @classmethod
    def single(cls, field: str, message: str) -> "RegistrationValidationError":
        return cls([{"field": field, "message": message}])


class ConflictError(RegistrationPortalError):
    """Write would violate a uniqueness rule"""

    status_code = 400

    def __init__(self, message: str, code: str = "CONFLICT", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class DuplicateEmailError(ConflictError):
    """A registration with this normalized email already exists"""

    def __init__(self, email: str):
        super().__init__(
            "Email already registered",
            code="DUPLICATE_EMAIL",
            details={"field": "email", "email": email}
        )


# ============================================
# Resource Errors (404-type)
# ============================================

class NotFoundError(RegistrationPortalError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class RegistrationNotFoundError(NotFoundError):
    """Registration not found"""

    def __init__(self, registration_id: str):
        super().__init__("Registration", registration_id)


# ============================================
# Infrastructure Errors (500-type)
# ============================================

class UnavailableError(RegistrationPortalError):
    """Storage or transport timed out or is unreachable; safe to retry"""

    status_code = 500

    def __init__(self, message: str = "Service temporarily unavailable. Please try again.", operation: Optional[str] = None):
        super().__init__(message, code="SERVICE_UNAVAILABLE", details={"retryable": True})
        if operation:
            self.details["operation"] = operation


class InternalError(RegistrationPortalError):
    """Unexpected failure"""

    status_code = 500

    def __init__(self, message: str = "An error occurred"):
        super().__init__(message, code="INTERNAL_ERROR")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: RegistrationPortalError) -> Dict[str, Any]:
    """Convert exception to the API error envelope"""
    body: Dict[str, Any] = {
        "success": False,
        "message": error.message,
        "code": error.code,
    }
    if isinstance(error, RegistrationValidationError):
        body["errors"] = error.errors
    if error.details.get("retryable"):
        body["retryable"] = True
    return body
