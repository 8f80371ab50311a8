"""Student complaints."""

from gatepass.services.complaint.complaint_service import ComplaintService

__all__ = ["ComplaintService"]
