"""
Service factory for dependency injection and service instantiation.

Shared services are created once per factory and reused. Each client
gets its own identity provider and context through ``new_client``.
"""

import logging
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from gatepass.integrations.document_store import DocumentStore
from gatepass.integrations.identity_provider import IdentityProvider, LocalIdentityProvider
from gatepass.integrations.sql_document_store import SQLDocumentStore
from gatepass.services.audit import AuditLogService
from gatepass.services.auth import (
    AuthenticationService,
    ClientContext,
    PasscodeService,
    RegistrationFlow,
)
from gatepass.services.complaint import ComplaintService
from gatepass.services.dashboard import DashboardService
from gatepass.services.gatepass import GatePassService
from gatepass.services.system import SystemService
from gatepass.services.users import ParentLinkService, UserApprovalService, UserService

logger = logging.getLogger(__name__)


class ServiceFactory:
    """
    Factory for creating service instances with their collaborators.

    Usage:
        >>> factory = ServiceFactory(SessionLocal)
        >>> client = factory.new_client()
        >>> principal = client.sign_in("student", "a@hostel.edu", "secret1")
        >>> factory.gate_passes().student_view(principal)
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        store: Optional[DocumentStore] = None,
        identity_factory: Optional[Callable[[], IdentityProvider]] = None,
        passcodes: Optional[PasscodeService] = None,
    ) -> None:
        self.session_factory = session_factory
        self.store = store or SQLDocumentStore(session_factory)
        self._identity_factory = identity_factory or (lambda: LocalIdentityProvider(session_factory))
        self._passcodes = passcodes
        self._service_cache: Dict[str, Any] = {}

    def _cached(self, key: str, build: Callable[[], Any]) -> Any:
        if key not in self._service_cache:
            self._service_cache[key] = build()
            logger.debug(f"Created {type(self._service_cache[key]).__name__} instance")
        return self._service_cache[key]

    # -------------------------------------------------------------------------
    # Shared services
    # -------------------------------------------------------------------------

    def audit(self) -> AuditLogService:
        return self._cached("audit", lambda: AuditLogService(self.store))

    def system(self) -> SystemService:
        return self._cached("system", lambda: SystemService(self.store))

    def passcodes(self) -> PasscodeService:
        return self._cached("passcodes", lambda: self._passcodes or PasscodeService())

    def users(self) -> UserService:
        return self._cached("users", lambda: UserService(self.store))

    def user_approvals(self) -> UserApprovalService:
        return self._cached(
            "user_approvals",
            lambda: UserApprovalService(self.store, self.users(), self.audit()),
        )

    def parent_links(self) -> ParentLinkService:
        return self._cached(
            "parent_links",
            lambda: ParentLinkService(self.store, self.users(), self.audit()),
        )

    def gate_passes(self) -> GatePassService:
        return self._cached(
            "gate_passes",
            lambda: GatePassService(self.store, self.users(), self.audit()),
        )

    def dashboards(self) -> DashboardService:
        return self._cached(
            "dashboards",
            lambda: DashboardService(self.users(), self.gate_passes(), self.audit()),
        )

    def complaints(self) -> ComplaintService:
        return self._cached("complaints", lambda: ComplaintService(self.store, self.audit()))

    # -------------------------------------------------------------------------
    # Per-client services
    # -------------------------------------------------------------------------

    def new_client(self, identity: Optional[IdentityProvider] = None) -> ClientContext:
        """Context for one client, with its own signed-in identity."""
        identity = identity or self._identity_factory()
        auth = AuthenticationService(identity, self.store, self.users(), self.audit())

        def registration_factory() -> RegistrationFlow:
            return RegistrationFlow(
                identity,
                self.store,
                self.passcodes(),
                self.audit(),
                self.system(),
            )

        return ClientContext(identity, auth, registration_factory)
