# gatepass/services/common/errors.py
"""
Service-layer exceptions.

These exceptions are raised by service methods and by the bundled
collaborators. A rendering adapter catches them and turns them into a
transient notification; the client stays on its current step.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ServiceError(Exception):
    """Base exception for all service-layer errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ------------------------------------------------------------------ #
# Validation
# ------------------------------------------------------------------ #

class ValidationCode(str, Enum):
    """Reasons a piece of local input was refused."""

    MISSING_FIELD = "missingField"
    PASSWORD_MISMATCH = "passwordMismatch"
    WEAK_PASSWORD = "weakPassword"
    MISSING_OTHER_REASON = "missingOtherReason"
    INVALID_PASSCODE = "invalidPasscode"
    PASSCODE_EXPIRED = "passcodeExpired"
    PASSCODE_EXHAUSTED = "passcodeExhausted"


class ValidationError(ServiceError):
    """Raised when input is missing or malformed. Never reaches the store."""

    def __init__(
        self,
        message: str,
        code: ValidationCode = ValidationCode.MISSING_FIELD,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.code = code
        self.field = field


# ------------------------------------------------------------------ #
# Identity provider
# ------------------------------------------------------------------ #

class IdentityCode(str, Enum):
    """Rejections reported by the identity provider."""

    EMAIL_IN_USE = "emailInUse"
    WEAK_CREDENTIAL = "weakCredential"
    INVALID_EMAIL = "invalidEmail"
    WRONG_PASSWORD = "wrongPassword"
    NOT_FOUND = "notFound"
    INVALID_FORMAT = "invalidFormat"


class IdentityError(ServiceError):
    """Raised when the identity provider refuses an operation."""

    def __init__(
        self,
        code: IdentityCode,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message or _IDENTITY_MESSAGES[code], details)
        self.code = code


class CredentialError(IdentityError):
    """Raised when sign-in credentials are rejected."""


_IDENTITY_MESSAGES = {
    IdentityCode.EMAIL_IN_USE: "An account with this email already exists",
    IdentityCode.WEAK_CREDENTIAL: "Password is too weak",
    IdentityCode.INVALID_EMAIL: "Email address is not valid",
    IdentityCode.WRONG_PASSWORD: "Incorrect password",
    IdentityCode.NOT_FOUND: "No account found for this email",
    IdentityCode.INVALID_FORMAT: "Credential is not a valid email address",
}


# ------------------------------------------------------------------ #
# Authorization
# ------------------------------------------------------------------ #

class AuthorizationCode(str, Enum):
    ROLE_MISMATCH = "roleMismatch"
    NOT_APPROVED = "notApproved"
    FORBIDDEN = "forbidden"


class AuthorizationError(ServiceError):
    """Raised when an authenticated principal may not do something."""

    def __init__(
        self,
        message: str = "Authorization failed",
        code: AuthorizationCode = AuthorizationCode.FORBIDDEN,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.code = code


# ------------------------------------------------------------------ #
# Missing records
# ------------------------------------------------------------------ #

class NotFoundError(ServiceError):
    """Raised when a requested resource does not exist."""

    def __init__(
        self,
        resource_type: str,
        identifier: str,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = message or f"{resource_type} with identifier '{identifier}' not found"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.identifier = identifier


class ProfileError(NotFoundError):
    """Raised when an identity exists but has no profile record."""

    code = "notFound"

    def __init__(self, identifier: str) -> None:
        super().__init__(
            "UserProfile",
            identifier,
            message="User data not found",
        )


class RequestNotPendingError(NotFoundError):
    """Raised when a decision targets a record that is no longer pending."""

    def __init__(self, resource_type: str, identifier: str, current_status: str) -> None:
        super().__init__(
            resource_type,
            identifier,
            message=f"{resource_type} '{identifier}' is already {current_status}",
            details={"status": current_status},
        )
        self.current_status = current_status


# ------------------------------------------------------------------ #
# State and transport
# ------------------------------------------------------------------ #

class ConflictError(ServiceError):
    """Raised when an operation conflicts with current state."""

    def __init__(
        self,
        message: str,
        conflicting_field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.conflicting_field = conflicting_field


class RemoteError(ServiceError):
    """Raised when the store or identity provider cannot be reached."""

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        details = {"error_type": type(original_error).__name__} if original_error else None
        super().__init__(message, details)
        self.original_error = original_error
