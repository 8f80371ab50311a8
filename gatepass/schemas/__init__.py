"""
Pydantic schemas for profiles, gate passes, complaints, audit entries
and dashboard aggregates.
"""

from gatepass.schemas.audit import AuditLogEntry
from gatepass.schemas.base import BaseSchema, DocumentSchema
from gatepass.schemas.complaint import Complaint, ComplaintForm
from gatepass.schemas.dashboard import AdminSummary, SecuritySummary, WardenSummary
from gatepass.schemas.enums import (
    ACTIVE_STATUSES,
    APPROVER_ROLES,
    AUTO_APPROVED_ROLES,
    ApprovalStatus,
    RegistrationStep,
    UserRole,
)
from gatepass.schemas.gate_pass import (
    OTHER_REASON,
    GatePassForm,
    GatePassRequest,
    PendingGatePass,
    StudentGatePassView,
)
from gatepass.schemas.user import (
    COMMON_REGISTRATION_FIELDS,
    ROLE_FIELDS,
    RoleField,
    UserProfile,
)

__all__ = [
    "AuditLogEntry",
    "BaseSchema",
    "DocumentSchema",
    "Complaint",
    "ComplaintForm",
    "AdminSummary",
    "SecuritySummary",
    "WardenSummary",
    "ACTIVE_STATUSES",
    "APPROVER_ROLES",
    "AUTO_APPROVED_ROLES",
    "ApprovalStatus",
    "RegistrationStep",
    "UserRole",
    "OTHER_REASON",
    "GatePassForm",
    "GatePassRequest",
    "PendingGatePass",
    "StudentGatePassView",
    "COMMON_REGISTRATION_FIELDS",
    "ROLE_FIELDS",
    "RoleField",
    "UserProfile",
]
