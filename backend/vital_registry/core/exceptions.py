"""
Custom Exceptions for the Vital Records Registry
================================================

Services raise these instead of HTTPException so that the same rules hold
for API handlers, background tasks and tests. The handlers registered in
``vital_registry.main`` turn them into ``{"message": ..., "code": ...}``
responses using ``status_code``.

Usage:
    from vital_registry.core.exceptions import NotFoundError, InvalidTransitionError

    if not registration:
        raise NotFoundError("BirthRegistration", registration_id)
"""

from typing import Optional, Any, Dict, List


class RegistryError(Exception):
    """Base exception for all registry errors"""

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
            "message": self.message,
            "code": self.code,
            **self.details,
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(RegistryError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password (deliberately indistinguishable)"""

    def __init__(self):
        super().__init__("Invalid email or password.")
        self.code = "INVALID_CREDENTIALS"


class EmailNotVerifiedError(AuthenticationError):
    """Password matched but the account email is not verified yet"""

    def __init__(self):
        super().__init__("Email not verified.")
        self.code = "EMAIL_NOT_VERIFIED"


class AuthorizationError(RegistryError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class NotFoundError(RegistryError):
    """Requested resource does not exist (or is not visible to the caller)"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} not found",
            code="NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": str(resource_id)}
        )


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(RegistryError):
    """Input validation failed"""

    status_code = 400

    def __init__(
        self,
        message: str = "Validation error",
        errors: Optional[List[Dict[str, Any]]] = None,
        field: Optional[str] = None
    ):
        if errors is None and field:
            errors = [{"field": field, "message": message}]
        super().__init__(message, code="VALIDATION_ERROR", details={"errors": errors or []})

    @property
    def fields(self) -> List[str]:
        return [e.get("field") for e in self.details.get("errors", [])]


class InvalidFileTypeError(ValidationError):
    """File type not allowed"""

    def __init__(self, file_type: str, allowed_types: list):
        super().__init__(
            f"Invalid file type '{file_type}'. Only {', '.join(allowed_types)} files are allowed.",
            field="document",
        )
        self.code = "INVALID_FILE_TYPE"
        self.details.update({"file_type": file_type, "allowed_types": allowed_types})


class FileTooLargeError(ValidationError):
    """Upload exceeds the size ceiling"""

    status_code = 413

    def __init__(self, size: int, max_size: int):
        super().__init__(
            f"File too large. Maximum size is {max_size // 1024 // 1024}MB",
            field="document",
        )
        self.code = "FILE_TOO_LARGE"
        self.details.update({"size": size, "max_size": max_size})


class ConflictError(RegistryError):
    """Unique value already taken (email, certificate number)"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")


class InvalidTransitionError(RegistryError):
    """Status change attempted from a terminal state"""

    status_code = 400

    def __init__(self, current_status: str, requested_status: str):
        super().__init__(
            f"Cannot change status from '{current_status}' to '{requested_status}'",
            code="INVALID_TRANSITION",
            details={"current_status": current_status, "requested_status": requested_status}
        )


# ============================================
# Infrastructure Errors
# ============================================

class UpstreamError(RegistryError):
    """Persistence or notification backend failed"""

    status_code = 500

    def __init__(self, message: str = "A server error occurred. Please try again later."):
        super().__init__(message, code="UPSTREAM_ERROR")
