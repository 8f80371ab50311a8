# gatepass/services/auth/authentication_service.py
"""
Sign-in, session restore and sign-out.

Turns an identity-provider handle into a ``Principal`` after checking
the stored profile's role and approval status.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Union

from gatepass.config.logging import mask_email
from gatepass.core.constants import AUDIT_TYPE_AUTH, USERS_COLLECTION
from gatepass.integrations.document_store import DocumentStore
from gatepass.integrations.identity_provider import IdentityProvider
from gatepass.schemas.enums import AUTO_APPROVED_ROLES, ApprovalStatus, UserRole
from gatepass.schemas.user import UserProfile
from gatepass.services.audit.audit_log_service import AuditLogService
from gatepass.services.auth.registration_service import parse_role
from gatepass.services.common.errors import (
    AuthorizationCode,
    AuthorizationError,
    ProfileError,
    ServiceError,
)
from gatepass.services.common.permissions import Principal
from gatepass.services.users.user_service import UserService

logger = logging.getLogger(__name__)


class AuthenticationService:
    """
    Resolves credentials into a principal.

    Every rejection after the provider accepted the credentials signs
    the identity out again, so a refused client is never left signed in.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        store: DocumentStore,
        users: UserService,
        audit: AuditLogService,
    ) -> None:
        self._identity = identity
        self._store = store
        self._users = users
        self._audit = audit

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    # -------------------------------------------------------------------------
    # Sign-in
    # -------------------------------------------------------------------------

    def sign_in(self, role: Union[UserRole, str], credential: str, password: str) -> Principal:
        """
        Authenticate and check the profile against the selected role.

        Raises:
            CredentialError: notFound, wrongPassword or invalidFormat
            ProfileError: If the identity has no profile
            AuthorizationError: roleMismatch or notApproved
            RemoteError: If a collaborator cannot be reached
        """
        selected = parse_role(role)
        handle = self._identity.authenticate(credential, password)

        try:
            profile = self._check_profile(handle, selected)
            now = self._now()
            updated = self._store.update(USERS_COLLECTION, handle, {"lastLogin": now})
            profile = UserProfile.from_document(updated.id, updated.data)
        except ServiceError:
            self._identity.sign_out(handle)
            raise

        self._audit.record(
            f"{profile.full_name} signed in as {selected.value}",
            AUDIT_TYPE_AUTH,
            user_id=handle,
        )
        logger.info(f"Signed in {selected.value} {mask_email(profile.email)}")
        return Principal.from_profile(profile)

    def restore_session(self) -> Optional[Principal]:
        """
        Principal for the identity the provider already holds, if any.

        Raises:
            ProfileError: If the identity has no profile
            AuthorizationError: notApproved
        """
        handle = self._identity.current_identity()
        if handle is None:
            return None
        try:
            profile = self._check_profile(handle, None)
        except ServiceError:
            self._identity.sign_out(handle)
            raise
        return Principal.from_profile(profile)

    def sign_out(self, principal: Optional[Principal] = None) -> None:
        self._identity.sign_out()
        if principal is not None:
            self._audit.record("User signed out", AUDIT_TYPE_AUTH, user_id=principal.user_id)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _check_profile(self, handle: str, selected: Optional[UserRole]) -> UserProfile:
        profile = self._users.get_profile(handle)
        if profile is None:
            logger.warning(f"Identity {handle} has no profile")
            raise ProfileError(handle)

        if selected is not None and profile.role != selected:
            raise AuthorizationError(
                f"This account is registered as {profile.role.value}, not {selected.value}",
                code=AuthorizationCode.ROLE_MISMATCH,
                details={"role": profile.role.value},
            )

        if profile.role not in AUTO_APPROVED_ROLES and profile.status != ApprovalStatus.APPROVED:
            message = (
                "Your account has been rejected"
                if profile.status == ApprovalStatus.REJECTED
                else "Your account is pending approval"
            )
            raise AuthorizationError(
                message,
                code=AuthorizationCode.NOT_APPROVED,
                details={"status": profile.status.value},
            )
        return profile
