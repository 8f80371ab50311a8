# gatepass/services/auth/registration_service.py
"""
Registration flow: role selection, profile form, passcode gate and the
commit that creates the identity and its profile.

One ``RegistrationFlow`` belongs to one client. It keeps everything the
candidate typed so that going back, or a failed commit, never loses
input.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union

from gatepass.config.logging import mask_email
from gatepass.config.settings import settings
from gatepass.core.constants import AUDIT_TYPE_REGISTRATION, USERS_COLLECTION
from gatepass.integrations.document_store import DocumentStore
from gatepass.integrations.identity_provider import IdentityProvider
from gatepass.schemas.enums import AUTO_APPROVED_ROLES, ApprovalStatus, RegistrationStep, UserRole
from gatepass.schemas.user import COMMON_REGISTRATION_FIELDS, ROLE_FIELDS, UserProfile
from gatepass.services.audit.audit_log_service import AuditLogService
from gatepass.services.auth.otp_service import IssuedPasscode, PasscodeService
from gatepass.services.common.errors import (
    ConflictError,
    ServiceError,
    ValidationCode,
    ValidationError,
)
from gatepass.services.system.system_service import SystemService

logger = logging.getLogger(__name__)

# Inputs that are checked but never written to the profile
_SECRET_FIELDS = frozenset({"password", "confirmPassword"})


def initial_status(role: UserRole) -> ApprovalStatus:
    """Status a freshly registered profile starts with."""
    return ApprovalStatus.APPROVED if role in AUTO_APPROVED_ROLES else ApprovalStatus.PENDING


def parse_role(role: Union[UserRole, str, None]) -> UserRole:
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole((role or "").strip().lower())
    except ValueError:
        raise ValidationError("Please select a valid role", field="role") from None


class RegistrationFlow:
    """
    Per-client registration state machine.

    Steps: collecting_role -> collecting_profile -> awaiting_code ->
    committing -> done. ``back`` walks from awaiting_code to
    collecting_profile and from there to collecting_role.

    Usage:
        >>> flow = container.new_client().start_registration()
        >>> flow.select_role("student")
        >>> code = flow.submit_profile({...})
        >>> profile = flow.verify_code(code)
    """

    def __init__(
        self,
        identity: IdentityProvider,
        store: DocumentStore,
        passcodes: PasscodeService,
        audit: AuditLogService,
        system: SystemService,
        *,
        min_password_length: Optional[int] = None,
    ) -> None:
        self._identity = identity
        self._store = store
        self._passcodes = passcodes
        self._audit = audit
        self._system = system
        self._min_password_length = min_password_length or settings.PASSWORD_MIN_LENGTH

        self.step = RegistrationStep.COLLECTING_ROLE
        self.role: Optional[UserRole] = None
        self.values: Dict[str, str] = {}
        self.profile: Optional[UserProfile] = None
        self._passcode: Optional[IssuedPasscode] = None

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _expect(self, *steps: RegistrationStep) -> None:
        if self.step not in steps:
            raise ConflictError(
                f"Registration is at step '{self.step.value}'",
                conflicting_field="step",
                details={"step": self.step.value},
            )

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    def select_role(self, role: Union[UserRole, str]) -> RegistrationStep:
        self._expect(RegistrationStep.COLLECTING_ROLE)
        self.role = parse_role(role)
        self.step = RegistrationStep.COLLECTING_PROFILE
        return self.step

    def submit_profile(self, values: Mapping[str, Any]) -> str:
        """
        Validate the profile form and issue a passcode.

        Values are kept even when validation fails.

        Returns:
            The passcode to show to the candidate

        Raises:
            ValidationError: missingField, passwordMismatch or weakPassword
        """
        self._expect(RegistrationStep.COLLECTING_PROFILE)
        self.values = self._clean(values)
        self._validate()

        self._passcode = self._passcodes.issue()
        self.step = RegistrationStep.AWAITING_CODE
        logger.info(f"Passcode issued for {self.role.value} registration {mask_email(self.values['email'])}")
        return self._passcode.code

    def resend_code(self) -> str:
        self._expect(RegistrationStep.AWAITING_CODE)
        self._passcode = self._passcodes.issue()
        return self._passcode.code

    def back(self) -> RegistrationStep:
        self._expect(RegistrationStep.AWAITING_CODE, RegistrationStep.COLLECTING_PROFILE)
        if self.step == RegistrationStep.AWAITING_CODE:
            self._passcode = None
            self.step = RegistrationStep.COLLECTING_PROFILE
        else:
            self.step = RegistrationStep.COLLECTING_ROLE
        return self.step

    def verify_code(self, code: str) -> UserProfile:
        """
        Check the passcode and, on a match, create the account.

        Raises:
            ValidationError: invalidPasscode, passcodeExpired or passcodeExhausted
            IdentityError: If the identity provider refuses the account
            RemoteError: If the profile could not be stored
        """
        self._expect(RegistrationStep.AWAITING_CODE)
        self._passcodes.check(self._passcode, code)

        self.step = RegistrationStep.COMMITTING
        try:
            self.profile = self._commit()
        except ServiceError:
            self.step = RegistrationStep.AWAITING_CODE
            raise

        self._passcode = None
        self.step = RegistrationStep.DONE
        return self.profile

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _clean(self, values: Mapping[str, Any]) -> Dict[str, str]:
        known = set(COMMON_REGISTRATION_FIELDS) | {f.name for f in ROLE_FIELDS[self.role]}
        cleaned = {}
        for key, value in values.items():
            if key not in known or value is None:
                continue
            text = str(value)
            if not text.strip():
                continue
            # Passwords are kept exactly as typed
            cleaned[key] = text if key in _SECRET_FIELDS else text.strip()
        return cleaned

    def _validate(self) -> None:
        for name in COMMON_REGISTRATION_FIELDS:
            if not self.values.get(name):
                raise ValidationError("Please fill in all required fields", field=name)

        if self.values["password"] != self.values["confirmPassword"]:
            raise ValidationError(
                "Passwords do not match",
                code=ValidationCode.PASSWORD_MISMATCH,
                field="confirmPassword",
            )
        if len(self.values["password"]) < self._min_password_length:
            raise ValidationError(
                f"Password must be at least {self._min_password_length} characters long",
                code=ValidationCode.WEAK_PASSWORD,
                field="password",
            )

        for role_field in ROLE_FIELDS[self.role]:
            if role_field.required and not self.values.get(role_field.name):
                raise ValidationError(
                    f"Please fill in {role_field.label}",
                    field=role_field.name,
                )

    def _commit(self) -> UserProfile:
        handle = self._identity.create_identity(self.values["email"], self.values["password"])

        profile = UserProfile.model_validate({
            **{k: v for k, v in self.values.items() if k not in _SECRET_FIELDS},
            "id": handle,
            "role": self.role,
            "status": initial_status(self.role),
            "createdAt": self._now(),
        })
        payload = profile.to_document()
        payload["lastLogin"] = None
        try:
            self._store.set(USERS_COLLECTION, handle, payload)
        except ServiceError:
            logger.error(f"Profile write failed, identity {handle} left without a profile")
            self._identity.sign_out(handle)
            raise

        self._system.increment_registration_counters(self.role)
        self._audit.record(
            f"New {self.role.value} registered: {profile.full_name}",
            AUDIT_TYPE_REGISTRATION,
            user_id=handle,
        )
        # Registration never leaves the candidate signed in
        self._identity.sign_out(handle)

        logger.info(f"Registered {self.role.value} {handle} with status {profile.status.value}")
        return profile
