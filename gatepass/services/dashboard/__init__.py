"""Staff dashboard aggregates."""

from gatepass.services.dashboard.dashboard_service import DashboardService

__all__ = ["DashboardService"]
