# gatepass/schemas/user.py
"""
User profile schema and the per-role registration field table.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Tuple

from gatepass.schemas.base import DocumentSchema
from gatepass.schemas.enums import ApprovalStatus, UserRole

__all__ = [
    "UserProfile",
    "RoleField",
    "COMMON_REGISTRATION_FIELDS",
    "ROLE_FIELDS",
]


@dataclass(frozen=True)
class RoleField:
    """A role-specific registration input, keyed by its logical name."""

    name: str
    label: str
    required: bool = True


# Inputs every registration must fill in
COMMON_REGISTRATION_FIELDS: Tuple[str, ...] = (
    "fullName",
    "email",
    "phone",
    "username",
    "password",
    "confirmPassword",
)

ROLE_FIELDS: Dict[UserRole, Tuple[RoleField, ...]] = {
    UserRole.STUDENT: (
        RoleField("studentId", "Student ID"),
        RoleField("roomNumber", "Room Number"),
        RoleField("course", "Course"),
        RoleField("year", "Year"),
        RoleField("parentContact", "Parent Contact"),
    ),
    UserRole.PARENT: (
        RoleField("childStudentId", "Child's Student ID", required=False),
        RoleField("relationship", "Relationship"),
    ),
    UserRole.SECURITY: (
        RoleField("employeeId", "Employee ID"),
        RoleField("shift", "Shift"),
    ),
    UserRole.WARDEN: (
        RoleField("employeeId", "Employee ID"),
        RoleField("department", "Department"),
    ),
    UserRole.ADMIN: (
        RoleField("adminCode", "Admin Access Code"),
    ),
}


class UserProfile(DocumentSchema):
    """Profile record in the ``users`` collection, keyed by identity handle."""

    role: UserRole
    status: ApprovalStatus
    full_name: str
    email: str
    phone: str
    username: str
    created_at: datetime
    last_login: Optional[datetime] = None

    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None

    # Role-specific attributes
    student_id: Optional[str] = None
    room_number: Optional[str] = None
    course: Optional[str] = None
    year: Optional[str] = None
    parent_contact: Optional[str] = None
    child_student_id: Optional[str] = None
    relationship: Optional[str] = None
    employee_id: Optional[str] = None
    shift: Optional[str] = None
    department: Optional[str] = None
    admin_code: Optional[str] = None

    # Parent link, written by the linking operation
    linked_child: Optional[str] = None
    child_name: Optional[str] = None

    @property
    def is_approved(self) -> bool:
        return self.status == ApprovalStatus.APPROVED
