"""Activity log services."""

from gatepass.services.audit.audit_log_service import AuditLogService

__all__ = ["AuditLogService"]
