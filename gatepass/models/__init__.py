"""
Persistence models.

Importing this package registers every table on ``Base.metadata``.
"""

from gatepass.models.base import Base, TimestampMixin, utcnow
from gatepass.models.document import StoredDocument
from gatepass.models.identity import IdentityAccount

__all__ = [
    "Base",
    "TimestampMixin",
    "utcnow",
    "StoredDocument",
    "IdentityAccount",
]
