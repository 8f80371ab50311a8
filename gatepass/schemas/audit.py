# gatepass/schemas/audit.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from gatepass.schemas.base import DocumentSchema

__all__ = ["AuditLogEntry"]


class AuditLogEntry(DocumentSchema):
    """Append-only activity record in ``auditLogs``."""

    activity: str
    type: str
    user_id: Optional[str] = None
    timestamp: datetime
