# gatepass/schemas/dashboard.py
"""
Aggregate counts shown on the staff dashboards.
"""

from __future__ import annotations

from typing import List

from pydantic import Field

from gatepass.schemas.audit import AuditLogEntry
from gatepass.schemas.base import BaseSchema

__all__ = ["WardenSummary", "AdminSummary", "SecuritySummary"]


class WardenSummary(BaseSchema):
    total_students: int = 0
    pending_approvals: int = 0
    active_gate_passes: int = 0
    pending_gate_passes: int = 0


class AdminSummary(BaseSchema):
    total_users: int = 0
    approved_users: int = 0
    recent_activity: List[AuditLogEntry] = Field(default_factory=list)


class SecuritySummary(BaseSchema):
    active_gate_passes: int = 0
    pending_gate_passes: int = 0
