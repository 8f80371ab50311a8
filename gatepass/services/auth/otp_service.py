"""
One-time passcode gate for registration.

The code is generated locally and handed back to the caller for
display; nothing is delivered out of band. Attempt and expiry limits
come from settings and are off unless configured.
"""

from __future__ import annotations

import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from gatepass.config.settings import settings
from gatepass.services.common.errors import ValidationCode, ValidationError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class IssuedPasscode:
    """A passcode waiting to be confirmed."""

    code: str
    issued_at: datetime
    expires_at: Optional[datetime] = None
    attempts: int = 0


class PasscodeService:
    """
    Generates and checks numeric passcodes.

    Usage:
        >>> otp = PasscodeService()
        >>> issued = otp.issue()
        >>> otp.check(issued, "123456")
    """

    def __init__(
        self,
        *,
        length: Optional[int] = None,
        max_attempts: Optional[int] = None,
        validity_minutes: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.length = length or settings.OTP_LENGTH
        self.max_attempts = max_attempts if max_attempts is not None else settings.OTP_MAX_ATTEMPTS
        self.validity_minutes = (
            validity_minutes if validity_minutes is not None else settings.OTP_VALIDITY_MINUTES
        )
        self._clock = clock

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def generate_code(self) -> str:
        """Uniformly random digits, leading zeros allowed."""
        return "".join(secrets.choice("0123456789") for _ in range(self.length))

    def issue(self) -> IssuedPasscode:
        now = self._clock()
        expires_at = None
        if self.validity_minutes:
            expires_at = now + timedelta(minutes=self.validity_minutes)
        logger.debug("Passcode issued")
        return IssuedPasscode(code=self.generate_code(), issued_at=now, expires_at=expires_at)

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    def check(self, issued: IssuedPasscode, candidate: str) -> None:
        """
        Confirm ``candidate`` against ``issued``.

        Raises:
            ValidationError: invalidPasscode on mismatch, passcodeExpired
                past the validity window, passcodeExhausted once the
                attempt limit is used up
        """
        if issued.expires_at is not None and self._clock() >= issued.expires_at:
            raise ValidationError(
                "Passcode has expired, request a new one",
                code=ValidationCode.PASSCODE_EXPIRED,
                field="otp",
            )
        if self.max_attempts is not None and issued.attempts >= self.max_attempts:
            raise ValidationError(
                "Too many incorrect attempts, request a new passcode",
                code=ValidationCode.PASSCODE_EXHAUSTED,
                field="otp",
            )

        issued.attempts += 1
        candidate = (candidate or "").strip()
        if not hmac.compare_digest(candidate.encode("utf-8"), issued.code.encode("utf-8")):
            logger.info(f"Passcode mismatch (attempt {issued.attempts})")
            raise ValidationError(
                "Invalid OTP. Please try again.",
                code=ValidationCode.INVALID_PASSCODE,
                field="otp",
            )
