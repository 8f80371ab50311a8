"""
Document table backing the bundled document store.

Every collection lives in the same table; a document is addressed by
``(collection, id)`` and its payload is a JSON object. ``version`` is
bumped on every write so updates can be made conditional.
"""

from typing import Any, Dict

from sqlalchemy import JSON, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from gatepass.models.base import Base, TimestampMixin


class StoredDocument(Base, TimestampMixin):
    """One JSON document inside a named collection."""

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_collection_created", "collection", "created_at"),
    )

    collection: Mapped[str] = mapped_column(String(100), primary_key=True)
    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f"<StoredDocument {self.collection}/{self.id} v{self.version}>"
