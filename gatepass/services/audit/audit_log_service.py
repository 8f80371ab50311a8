# gatepass/services/audit/audit_log_service.py
"""
Append-only activity log in the ``auditLogs`` collection.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from gatepass.core.constants import AUDIT_LOG_COLLECTION
from gatepass.integrations.document_store import DocumentStore
from gatepass.schemas.audit import AuditLogEntry
from gatepass.services.common.errors import RemoteError

logger = logging.getLogger(__name__)


class AuditLogService:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def record(self, activity: str, type: str, user_id: Optional[str] = None) -> Optional[str]:
        """
        Append an entry. Best effort: a store failure is logged and the
        caller carries on.

        Returns:
            The new entry id, or None if the write failed
        """
        payload = {
            "activity": activity,
            "type": type,
            "timestamp": self._now(),
        }
        if user_id is not None:
            payload["userId"] = user_id
        try:
            return self._store.create(AUDIT_LOG_COLLECTION, payload)
        except RemoteError as e:
            logger.warning(f"Audit entry not recorded ({type}): {e.message}")
            return None

    def list_recent(self, limit: int = 10) -> List[AuditLogEntry]:
        docs = self._store.query(
            AUDIT_LOG_COLLECTION,
            order_by="timestamp",
            descending=True,
            limit=limit,
        )
        return [AuditLogEntry.from_document(d.id, d.data) for d in docs]
