# gatepass/schemas/gate_pass.py
"""
Gate-pass request schemas and the read views built from them.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from gatepass.schemas.base import BaseSchema, DocumentSchema
from gatepass.schemas.enums import ACTIVE_STATUSES, ApprovalStatus

__all__ = [
    "OTHER_REASON",
    "GatePassForm",
    "GatePassRequest",
    "StudentGatePassView",
    "PendingGatePass",
]

# Reason value that requires free text
OTHER_REASON = "other"


class GatePassForm(BaseSchema):
    """Values submitted on the gate-pass request form."""

    reason: str = ""
    other_reason: str = ""
    destination: str = ""
    exit_time: Optional[datetime] = None
    return_time: Optional[datetime] = None
    contact_person: Optional[str] = None

    @field_validator("exit_time", "return_time", "contact_person", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class GatePassRequest(DocumentSchema):
    """Record in the ``gatePassRequests`` collection."""

    student_id: str
    reason: str
    destination: str
    exit_time: datetime
    return_time: datetime
    contact_person: Optional[str] = None
    status: ApprovalStatus = ApprovalStatus.PENDING
    created_at: datetime

    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class StudentGatePassView(BaseSchema):
    """A student's requests as seen by the student or a linked parent."""

    student_id: str
    requests: List[GatePassRequest] = Field(default_factory=list)
    recent_activity: List[GatePassRequest] = Field(default_factory=list)
    active_count: int = 0


class PendingGatePass(BaseSchema):
    """A pending request enriched with its owner's profile for approvers."""

    request: GatePassRequest
    student_label: str
    student_name: Optional[str] = None
    student_number: Optional[str] = None
    room_number: Optional[str] = None
