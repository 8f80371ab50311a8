"""
Identity and onboarding services.

- PasscodeService: locally generated one-time passcodes
- RegistrationFlow: per-client registration state machine
- AuthenticationService: sign-in, session restore, sign-out
- ClientContext: principal and current page for one client
"""

from gatepass.services.auth.authentication_service import AuthenticationService
from gatepass.services.auth.context_service import ClientContext
from gatepass.services.auth.otp_service import IssuedPasscode, PasscodeService
from gatepass.services.auth.registration_service import RegistrationFlow, initial_status

__all__ = [
    "AuthenticationService",
    "ClientContext",
    "IssuedPasscode",
    "PasscodeService",
    "RegistrationFlow",
    "initial_status",
]
