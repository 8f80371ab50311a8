# gatepass/schemas/enums.py
"""
Enumeration types used across the application.
"""

from enum import Enum

__all__ = [
    "UserRole",
    "ApprovalStatus",
    "RegistrationStep",
    "AUTO_APPROVED_ROLES",
    "APPROVER_ROLES",
    "ACTIVE_STATUSES",
]


class UserRole(str, Enum):
    """Roles a principal can hold."""

    STUDENT = "student"
    PARENT = "parent"
    SECURITY = "security"
    WARDEN = "warden"
    ADMIN = "admin"


class ApprovalStatus(str, Enum):
    """Status of an account or a gate-pass request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RegistrationStep(str, Enum):
    """Steps of a registration attempt."""

    COLLECTING_ROLE = "collecting_role"
    COLLECTING_PROFILE = "collecting_profile"
    AWAITING_CODE = "awaiting_code"
    COMMITTING = "committing"
    DONE = "done"


# Roles whose profile is created already approved
AUTO_APPROVED_ROLES = frozenset({UserRole.WARDEN, UserRole.ADMIN})

# Roles allowed to decide registrations and gate passes
APPROVER_ROLES = frozenset({UserRole.WARDEN, UserRole.ADMIN})

# A gate pass in one of these states counts as active
ACTIVE_STATUSES = frozenset({ApprovalStatus.PENDING, ApprovalStatus.APPROVED})
