"""System configuration and counters."""

from gatepass.services.system.system_service import SystemService

__all__ = ["SystemService"]
