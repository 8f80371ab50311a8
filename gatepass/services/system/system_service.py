# gatepass/services/system/system_service.py
"""
Reads the ``system/config`` document and maintains the registration
counters in ``system/counters``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from gatepass.core.constants import SYSTEM_COLLECTION, SYSTEM_CONFIG_DOC, SYSTEM_COUNTERS_DOC
from gatepass.integrations.document_store import DocumentStore
from gatepass.schemas.enums import UserRole
from gatepass.services.common.errors import RemoteError

logger = logging.getLogger(__name__)


class SystemService:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def get_config(self) -> Dict[str, Any]:
        """Free-form configuration document; empty if it was never written."""
        doc = self._store.get(SYSTEM_COLLECTION, SYSTEM_CONFIG_DOC)
        return dict(doc.data) if doc else {}

    def get_counters(self) -> Dict[str, int]:
        doc = self._store.get(SYSTEM_COLLECTION, SYSTEM_COUNTERS_DOC)
        return {k: int(v) for k, v in doc.data.items()} if doc else {}

    def increment_registration_counters(self, role: UserRole) -> None:
        """
        Bump ``totalRegistrations`` and ``<role>Registrations``.

        Read-modify-write without a lock, so concurrent registrations may
        lose an increment. Failures are logged and swallowed.
        """
        role_key = f"{role.value}Registrations"
        try:
            counters = self.get_counters()
            self._store.set(
                SYSTEM_COLLECTION,
                SYSTEM_COUNTERS_DOC,
                {
                    "totalRegistrations": counters.get("totalRegistrations", 0) + 1,
                    role_key: counters.get(role_key, 0) + 1,
                },
                merge=True,
            )
        except RemoteError as e:
            logger.warning(f"Registration counters not updated: {e.message}")
