"""Session-bound repositories used inside a UnitOfWork."""

from gatepass.repositories.base import BaseRepository
from gatepass.repositories.document_repository import DocumentRepository
from gatepass.repositories.identity_repository import IdentityRepository

__all__ = ["BaseRepository", "DocumentRepository", "IdentityRepository"]
