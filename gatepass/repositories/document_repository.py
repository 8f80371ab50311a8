"""
Document Repository

Reads and writes JSON documents grouped by collection, with a
version-checked update for conditional writes.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select, update

from gatepass.models.base import utcnow
from gatepass.models.document import StoredDocument
from gatepass.repositories.base import BaseRepository


class DocumentRepository(BaseRepository[StoredDocument]):
    """Document persistence for every collection."""

    model = StoredDocument

    def find(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        return self.get({"collection": collection, "id": doc_id})

    def list_collection(self, collection: str) -> List[StoredDocument]:
        """All documents of a collection in creation order."""
        stmt = (
            select(StoredDocument)
            .where(StoredDocument.collection == collection)
            .order_by(StoredDocument.created_at, StoredDocument.id)
        )
        return list(self.session.scalars(stmt))

    def insert(self, collection: str, doc_id: str, data: Dict[str, Any]) -> StoredDocument:
        return self.add(StoredDocument(collection=collection, id=doc_id, data=dict(data), version=1))

    def compare_and_set(self, document: StoredDocument, data: Dict[str, Any]) -> bool:
        """
        Replace the payload only if nobody else wrote since ``document``
        was read. Returns False when the version moved on.
        """
        stmt = (
            update(StoredDocument)
            .where(
                StoredDocument.collection == document.collection,
                StoredDocument.id == document.id,
                StoredDocument.version == document.version,
            )
            .values(data=dict(data), version=document.version + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1
