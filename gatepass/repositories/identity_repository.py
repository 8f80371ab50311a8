"""
Identity Repository

Credential lookups for the bundled identity provider.
"""

from typing import Optional

from sqlalchemy import select

from gatepass.models.identity import IdentityAccount
from gatepass.repositories.base import BaseRepository


class IdentityRepository(BaseRepository[IdentityAccount]):
    """Credential records keyed by identity handle."""

    model = IdentityAccount

    def get_by_email(self, email: str) -> Optional[IdentityAccount]:
        stmt = select(IdentityAccount).where(IdentityAccount.email == email)
        return self.session.scalars(stmt).first()

    def create(self, email: str, password_hash: str) -> IdentityAccount:
        return self.add(IdentityAccount(email=email, password_hash=password_hash))
