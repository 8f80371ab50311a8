# gatepass/services/common/permissions.py
"""
Permission and authorization utilities.

Role checks for the service layer. Every service method that acts on
behalf of a user receives a ``Principal`` and asserts the roles it needs.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from gatepass.schemas.enums import APPROVER_ROLES, ApprovalStatus, UserRole
from gatepass.schemas.user import UserProfile

from .errors import AuthorizationCode, AuthorizationError


class PermissionDenied(AuthorizationError):
    """Raised when a principal lacks the required role."""

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        role: Optional[UserRole] = None,
    ) -> None:
        super().__init__(message, code=AuthorizationCode.FORBIDDEN)
        self.user_id = user_id
        self.role = role


@dataclass(frozen=True)
class Principal:
    """
    An authenticated identity with its resolved role and approval status.

    Attributes:
        user_id: Identity handle (also the profile key)
        role: Role stored on the profile
        status: Approval status stored on the profile
        profile: Profile as loaded at sign-in
    """
    user_id: str
    role: UserRole
    status: ApprovalStatus
    profile: Optional[UserProfile] = None

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "Principal":
        return cls(
            user_id=profile.id,
            role=profile.role,
            status=profile.status,
            profile=profile,
        )

    def has_role(self, role: UserRole) -> bool:
        """Check if principal has a specific role."""
        return self.role == role

    def has_any_role(self, roles: Iterable[UserRole]) -> bool:
        """Check if principal has any of the specified roles."""
        return self.role in set(roles)

    @property
    def is_approver(self) -> bool:
        return self.role in APPROVER_ROLES


def require_role(
    principal: Principal,
    allowed_roles: Iterable[UserRole],
    *,
    error_message: Optional[str] = None,
) -> None:
    """
    Assert that principal has one of the allowed roles.

    Raises:
        PermissionDenied: If principal lacks required role

    Example:
        >>> require_role(principal, [UserRole.WARDEN, UserRole.ADMIN])
    """
    allowed_roles = list(allowed_roles)
    if not principal.has_any_role(allowed_roles):
        roles_str = ", ".join(sorted(r.value for r in allowed_roles))
        msg = error_message or (
            f"User {principal.user_id} with role '{principal.role.value}' "
            f"does not have one of required roles: {roles_str}"
        )
        raise PermissionDenied(msg, user_id=principal.user_id, role=principal.role)


def require_approver(principal: Principal) -> None:
    """Assert that principal is a warden or an admin."""
    require_role(
        principal,
        APPROVER_ROLES,
        error_message="Only wardens and admins can approve or reject",
    )
