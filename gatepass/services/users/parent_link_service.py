# gatepass/services/users/parent_link_service.py
from __future__ import annotations

import logging

from gatepass.core.constants import AUDIT_TYPE_ACCOUNT, USERS_COLLECTION
from gatepass.integrations.document_store import DocumentStore
from gatepass.schemas.enums import UserRole
from gatepass.schemas.user import UserProfile
from gatepass.services.audit.audit_log_service import AuditLogService
from gatepass.services.common import permissions
from gatepass.services.common.errors import NotFoundError, ValidationError
from gatepass.services.common.permissions import Principal
from gatepass.services.users.user_service import UserService

logger = logging.getLogger(__name__)


class ParentLinkService:
    """
    Links a parent account to a student by the student's institutional id.
    """

    def __init__(self, store: DocumentStore, users: UserService, audit: AuditLogService) -> None:
        self._store = store
        self._users = users
        self._audit = audit

    def link_child(self, principal: Principal, student_id: str) -> UserProfile:
        """
        Write ``linkedChild``, ``childName`` and ``childStudentId`` on the
        caller's profile. The student's profile is not touched.

        Raises:
            PermissionDenied: If the caller is not a parent
            ValidationError: If ``student_id`` is blank
            NotFoundError: If no student has that id
        """
        permissions.require_role(
            principal,
            [UserRole.PARENT],
            error_message="Only parents can link a student",
        )
        student_id = (student_id or "").strip()
        if not student_id:
            raise ValidationError("Please enter the student ID", field="studentId")

        student = self._users.find_student(student_id)
        if student is None:
            raise NotFoundError("Student", student_id, message="Student not found")

        doc = self._store.update(
            USERS_COLLECTION,
            principal.user_id,
            {
                "linkedChild": student.id,
                "childName": student.full_name,
                "childStudentId": student.student_id,
            },
        )
        logger.info(f"Parent {principal.user_id} linked to student {student.id}")
        self._audit.record(
            f"Parent linked to {student.full_name}",
            AUDIT_TYPE_ACCOUNT,
            user_id=principal.user_id,
        )
        return UserProfile.from_document(doc.id, doc.data)
