"""Gate-pass request services."""

from gatepass.services.gatepass.gate_pass_service import GatePassService

__all__ = ["GatePassService"]
