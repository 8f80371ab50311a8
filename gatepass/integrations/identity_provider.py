# gatepass/integrations/identity_provider.py
"""
Identity provider interface and the bundled SQL-backed implementation.

A provider instance belongs to one client: it remembers which identity
is currently signed in and tells listeners when that changes.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gatepass.config.logging import mask_email
from gatepass.config.settings import settings
from gatepass.models.base import utcnow
from gatepass.repositories import IdentityRepository
from gatepass.services.common import security
from gatepass.services.common.errors import (
    CredentialError,
    IdentityCode,
    IdentityError,
    RemoteError,
)
from gatepass.services.common.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Optional[str]], None]


class IdentityProvider(Protocol):
    """
    Abstract identity provider.

    Implementations can wrap a hosted auth service or a local table.
    """

    def create_identity(self, email: str, password: str) -> str: ...
    def authenticate(self, email: str, password: str) -> str: ...
    def sign_out(self, handle: Optional[str] = None) -> None: ...
    def current_identity(self) -> Optional[str]: ...
    def on_identity_changed(self, listener: IdentityListener) -> Callable[[], None]: ...


class LocalIdentityProvider:
    """
    Email + password identities stored in ``identity_accounts``.

    Creating an identity signs it in, the way hosted providers do.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        min_password_length: Optional[int] = None,
    ) -> None:
        self._session_factory = session_factory
        self._min_password_length = min_password_length or settings.PASSWORD_MIN_LENGTH
        self._current: Optional[str] = None
        self._listeners: List[IdentityListener] = []

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _normalize_email(email: str) -> Optional[str]:
        try:
            return validate_email((email or "").strip(), check_deliverability=False).normalized.lower()
        except EmailNotValidError:
            return None

    def _set_current(self, handle: Optional[str]) -> None:
        if handle == self._current:
            return
        self._current = handle
        for listener in list(self._listeners):
            try:
                listener(handle)
            except Exception as e:
                logger.error(f"Identity listener failed: {str(e)}", exc_info=True)

    # ------------------------------------------------------------------ #
    # Provider operations
    # ------------------------------------------------------------------ #

    def create_identity(self, email: str, password: str) -> str:
        """
        Create an email/password identity and sign it in.

        Raises:
            IdentityError: invalidEmail, weakCredential or emailInUse
            RemoteError: If the credential table cannot be written
        """
        normalized = self._normalize_email(email)
        if normalized is None:
            raise IdentityError(IdentityCode.INVALID_EMAIL)
        if len(password or "") < self._min_password_length:
            raise IdentityError(
                IdentityCode.WEAK_CREDENTIAL,
                f"Password must be at least {self._min_password_length} characters",
            )

        password_hash = security.hash_password(password)
        try:
            with UnitOfWork(self._session_factory) as uow:
                repo = uow.get_repo(IdentityRepository)
                if repo.get_by_email(normalized) is not None:
                    raise IdentityError(IdentityCode.EMAIL_IN_USE)
                account = repo.create(normalized, password_hash)
                handle = account.id
        except IntegrityError as exc:
            raise IdentityError(IdentityCode.EMAIL_IN_USE) from exc
        except SQLAlchemyError as exc:
            raise RemoteError("Identity provider unavailable", exc) from exc

        logger.info(f"Identity created for {mask_email(normalized)}")
        self._set_current(handle)
        return handle

    def authenticate(self, email: str, password: str) -> str:
        """
        Verify credentials and sign the identity in.

        Raises:
            CredentialError: invalidFormat, notFound or wrongPassword
            RemoteError: If the credential table cannot be read
        """
        normalized = self._normalize_email(email)
        if normalized is None:
            raise CredentialError(IdentityCode.INVALID_FORMAT)

        try:
            with UnitOfWork(self._session_factory) as uow:
                account = uow.get_repo(IdentityRepository).get_by_email(normalized)
                if account is None:
                    raise CredentialError(IdentityCode.NOT_FOUND)
                if not security.verify_password(password or "", account.password_hash):
                    raise CredentialError(IdentityCode.WRONG_PASSWORD)
                account.last_sign_in_at = utcnow()
                handle = account.id
        except SQLAlchemyError as exc:
            raise RemoteError("Identity provider unavailable", exc) from exc

        logger.info(f"Identity authenticated: {mask_email(normalized)}")
        self._set_current(handle)
        return handle

    def sign_out(self, handle: Optional[str] = None) -> None:
        """Sign out the current identity; a non-current ``handle`` is a no-op."""
        if handle is not None and handle != self._current:
            return
        self._set_current(None)

    def current_identity(self) -> Optional[str]:
        return self._current

    def on_identity_changed(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
