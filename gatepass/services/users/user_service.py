# gatepass/services/users/user_service.py
"""
Profile lookups over the ``users`` collection.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from gatepass.core.constants import USERS_COLLECTION
from gatepass.integrations.document_store import DocumentStore, Where
from gatepass.schemas.enums import ApprovalStatus, UserRole
from gatepass.schemas.user import UserProfile
from gatepass.services.common.errors import ProfileError

logger = logging.getLogger(__name__)


class UserService:
    """
    Read access to user profiles, shared by the other services.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        doc = self._store.get(USERS_COLLECTION, user_id)
        if doc is None:
            return None
        return UserProfile.from_document(doc.id, doc.data)

    def require_profile(self, user_id: str) -> UserProfile:
        """
        Raises:
            ProfileError: If no profile is stored for ``user_id``
        """
        profile = self.get_profile(user_id)
        if profile is None:
            raise ProfileError(user_id)
        return profile

    def find_student(self, student_id: str) -> Optional[UserProfile]:
        """
        Student profile whose ``studentId`` equals ``student_id``.

        Student ids are not unique in storage; the earliest registration
        wins.
        """
        docs = self._store.query(
            USERS_COLLECTION,
            Where("studentId", "==", student_id),
            Where("role", "==", UserRole.STUDENT.value),
            order_by="createdAt",
        )
        if len(docs) > 1:
            logger.warning(f"{len(docs)} students share studentId {student_id}, using the first")
        if not docs:
            return None
        return UserProfile.from_document(docs[0].id, docs[0].data)

    def list_profiles(
        self,
        *,
        role: Optional[UserRole] = None,
        status: Optional[ApprovalStatus] = None,
    ) -> List[UserProfile]:
        where = []
        if role is not None:
            where.append(Where("role", "==", role.value))
        if status is not None:
            where.append(Where("status", "==", status.value))
        docs = self._store.query(USERS_COLLECTION, *where, order_by="createdAt")
        return [UserProfile.from_document(d.id, d.data) for d in docs]

    def count(
        self,
        *,
        role: Optional[UserRole] = None,
        status: Optional[ApprovalStatus] = None,
    ) -> int:
        return len(self.list_profiles(role=role, status=status))
