# gatepass/schemas/complaint.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from gatepass.schemas.base import BaseSchema, DocumentSchema
from gatepass.schemas.enums import ApprovalStatus

__all__ = ["ComplaintForm", "Complaint"]


class ComplaintForm(BaseSchema):
    type: str = ""
    description: str = ""
    location: Optional[str] = None


class Complaint(DocumentSchema):
    """Complaint filed by a student."""

    student_id: str
    type: str
    description: str
    location: Optional[str] = None
    status: ApprovalStatus = ApprovalStatus.PENDING
    created_at: datetime
