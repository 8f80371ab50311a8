# gatepass/services/auth/context_service.py
"""
Per-client session context: the signed-in principal, the page the
client is on and its registration flow.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from gatepass.core.constants import DASHBOARD_PAGES, WELCOME_PAGE
from gatepass.integrations.identity_provider import IdentityProvider
from gatepass.schemas.enums import UserRole
from gatepass.services.auth.authentication_service import AuthenticationService
from gatepass.services.auth.registration_service import RegistrationFlow
from gatepass.services.common.permissions import Principal

logger = logging.getLogger(__name__)


class ClientContext:
    """
    State a rendering adapter keeps for one client.

    Follows the identity provider: when the identity is signed out from
    anywhere, the principal is dropped and the client goes back to the
    welcome page.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        auth: AuthenticationService,
        registration_factory: Callable[[], RegistrationFlow],
    ) -> None:
        self._auth = auth
        self._registration_factory = registration_factory
        self.principal: Optional[Principal] = None
        self.page: str = WELCOME_PAGE
        self.registration: Optional[RegistrationFlow] = None
        self._unsubscribe = identity.on_identity_changed(self._on_identity_changed)

    def _on_identity_changed(self, handle: Optional[str]) -> None:
        if handle is None and self.principal is not None:
            logger.debug(f"Identity {self.principal.user_id} signed out, clearing context")
            self.principal = None
            self.page = WELCOME_PAGE

    def _enter(self, principal: Principal) -> Principal:
        self.principal = principal
        self.page = DASHBOARD_PAGES[principal.role.value]
        return principal

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None

    def start_registration(self) -> RegistrationFlow:
        self.registration = self._registration_factory()
        return self.registration

    def sign_in(self, role: Union[UserRole, str], credential: str, password: str) -> Principal:
        return self._enter(self._auth.sign_in(role, credential, password))

    def restore(self) -> Optional[Principal]:
        principal = self._auth.restore_session()
        if principal is None:
            return None
        return self._enter(principal)

    def sign_out(self) -> None:
        principal = self.principal
        self._auth.sign_out(principal)
        self.principal = None
        self.page = WELCOME_PAGE

    def close(self) -> None:
        self._unsubscribe()
