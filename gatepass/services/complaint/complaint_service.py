# gatepass/services/complaint/complaint_service.py
"""
Complaints filed by students.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Union

from gatepass.core.constants import AUDIT_TYPE_COMPLAINT, COMPLAINTS_COLLECTION
from gatepass.integrations.document_store import Document, DocumentStore, Where
from gatepass.schemas.complaint import Complaint, ComplaintForm
from gatepass.schemas.enums import ApprovalStatus, UserRole
from gatepass.services.audit.audit_log_service import AuditLogService
from gatepass.services.common import permissions
from gatepass.services.common.errors import ValidationError
from gatepass.services.common.permissions import Principal

logger = logging.getLogger(__name__)


def _to_complaints(docs: List[Document]) -> List[Complaint]:
    complaints = [Complaint.from_document(d.id, d.data) for d in docs]
    complaints.sort(key=lambda c: c.created_at, reverse=True)
    return complaints


class ComplaintService:
    def __init__(self, store: DocumentStore, audit: AuditLogService) -> None:
        self._store = store
        self._audit = audit

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def submit(self, principal: Principal, form: Union[ComplaintForm, Mapping[str, Any]]) -> Complaint:
        """
        Raises:
            PermissionDenied: If the caller is not a student
            ValidationError: If type or description is blank
        """
        permissions.require_role(
            principal,
            [UserRole.STUDENT],
            error_message="Only students can file complaints",
        )
        if not isinstance(form, ComplaintForm):
            form = ComplaintForm.model_validate(dict(form))

        if not form.type:
            raise ValidationError("Please select a complaint type", field="type")
        if not form.description:
            raise ValidationError("Please describe the issue", field="description")

        payload = {
            "studentId": principal.user_id,
            "type": form.type,
            "description": form.description,
            "status": ApprovalStatus.PENDING.value,
            "createdAt": self._now(),
        }
        if form.location:
            payload["location"] = form.location

        complaint_id = self._store.create(COMPLAINTS_COLLECTION, payload)
        logger.info(f"Complaint {complaint_id} filed by {principal.user_id}")
        self._audit.record(
            f"Complaint filed: {form.type}",
            AUDIT_TYPE_COMPLAINT,
            user_id=principal.user_id,
        )
        return Complaint.from_document(complaint_id, payload)

    def list_own(self, principal: Principal) -> List[Complaint]:
        permissions.require_role(principal, [UserRole.STUDENT])
        docs = self._store.query(COMPLAINTS_COLLECTION, Where("studentId", "==", principal.user_id))
        return _to_complaints(docs)

    def list_all(self, principal: Principal) -> List[Complaint]:
        permissions.require_approver(principal)
        return _to_complaints(self._store.query(COMPLAINTS_COLLECTION))
