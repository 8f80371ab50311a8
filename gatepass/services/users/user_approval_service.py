# gatepass/services/users/user_approval_service.py
"""
Registration approval queue for wardens and admins.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List

from gatepass.core.constants import AUDIT_TYPE_ACCOUNT, USERS_COLLECTION
from gatepass.integrations.document_store import DocumentStore, PreconditionFailedError
from gatepass.schemas.enums import ApprovalStatus
from gatepass.schemas.user import UserProfile
from gatepass.services.audit.audit_log_service import AuditLogService
from gatepass.services.common import permissions
from gatepass.services.common.errors import NotFoundError, RequestNotPendingError
from gatepass.services.common.permissions import Principal
from gatepass.services.users.user_service import UserService

logger = logging.getLogger(__name__)

RESOURCE = "UserProfile"


class UserApprovalService:
    def __init__(self, store: DocumentStore, users: UserService, audit: AuditLogService) -> None:
        self._store = store
        self._users = users
        self._audit = audit

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def list_pending(self, principal: Principal) -> List[UserProfile]:
        """Profiles awaiting a decision, oldest first."""
        permissions.require_approver(principal)
        return self._users.list_profiles(status=ApprovalStatus.PENDING)

    def approve_user(self, principal: Principal, user_id: str) -> UserProfile:
        return self._decide(principal, user_id, ApprovalStatus.APPROVED)

    def reject_user(self, principal: Principal, user_id: str) -> UserProfile:
        return self._decide(principal, user_id, ApprovalStatus.REJECTED)

    def _decide(self, principal: Principal, user_id: str, decision: ApprovalStatus) -> UserProfile:
        """
        Raises:
            PermissionDenied: If the caller is not an approver
            NotFoundError: If there is no such profile
            RequestNotPendingError: If the profile was already decided
        """
        permissions.require_approver(principal)

        profile = self._users.get_profile(user_id)
        if profile is None:
            raise NotFoundError(RESOURCE, user_id)
        if profile.status != ApprovalStatus.PENDING:
            raise RequestNotPendingError(RESOURCE, user_id, profile.status.value)

        prefix = "approved" if decision == ApprovalStatus.APPROVED else "rejected"
        try:
            doc = self._store.update(
                USERS_COLLECTION,
                user_id,
                {
                    "status": decision.value,
                    f"{prefix}At": self._now(),
                    f"{prefix}By": principal.user_id,
                },
                expected={"status": ApprovalStatus.PENDING.value},
            )
        except PreconditionFailedError:
            latest = self._users.require_profile(user_id)
            raise RequestNotPendingError(RESOURCE, user_id, latest.status.value)

        updated = UserProfile.from_document(doc.id, doc.data)
        logger.info(f"Registration {user_id} {prefix} by {principal.user_id}")
        self._audit.record(
            f"{updated.role.value.capitalize()} account {prefix}: {updated.full_name}",
            AUDIT_TYPE_ACCOUNT,
            user_id=principal.user_id,
        )
        return updated
