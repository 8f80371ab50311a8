# gatepass/services/dashboard/dashboard_service.py
"""
Aggregate counts for the staff dashboards.
"""
from __future__ import annotations

from typing import Optional

from gatepass.config.settings import settings
from gatepass.schemas.dashboard import AdminSummary, SecuritySummary, WardenSummary
from gatepass.schemas.enums import ApprovalStatus, UserRole
from gatepass.services.audit.audit_log_service import AuditLogService
from gatepass.services.common import permissions
from gatepass.services.common.permissions import Principal
from gatepass.services.gatepass.gate_pass_service import GatePassService
from gatepass.services.users.user_service import UserService


class DashboardService:
    def __init__(
        self,
        users: UserService,
        gate_passes: GatePassService,
        audit: AuditLogService,
        *,
        recent_limit: Optional[int] = None,
    ) -> None:
        self._users = users
        self._gate_passes = gate_passes
        self._audit = audit
        self.recent_limit = recent_limit or settings.RECENT_ACTIVITY_LIMIT

    def warden_summary(self, principal: Principal) -> WardenSummary:
        permissions.require_approver(principal)
        return WardenSummary(
            total_students=self._users.count(role=UserRole.STUDENT, status=ApprovalStatus.APPROVED),
            pending_approvals=self._users.count(status=ApprovalStatus.PENDING),
            active_gate_passes=self._gate_passes.count(ApprovalStatus.PENDING, ApprovalStatus.APPROVED),
            pending_gate_passes=self._gate_passes.count(ApprovalStatus.PENDING),
        )

    def admin_summary(self, principal: Principal) -> AdminSummary:
        permissions.require_role(principal, [UserRole.ADMIN])
        return AdminSummary(
            total_users=self._users.count(),
            approved_users=self._users.count(status=ApprovalStatus.APPROVED),
            recent_activity=self._audit.list_recent(self.recent_limit),
        )

    def security_summary(self, principal: Principal) -> SecuritySummary:
        permissions.require_role(principal, [UserRole.SECURITY, UserRole.WARDEN, UserRole.ADMIN])
        return SecuritySummary(
            active_gate_passes=self._gate_passes.count(ApprovalStatus.PENDING, ApprovalStatus.APPROVED),
            pending_gate_passes=self._gate_passes.count(ApprovalStatus.PENDING),
        )
