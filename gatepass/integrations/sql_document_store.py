# gatepass/integrations/sql_document_store.py
"""
Document store backed by a single SQLAlchemy table.

Each call runs in its own UnitOfWork. Subscribers are notified
synchronously after the write has been committed.
"""
from __future__ import annotations

import logging
import re
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple
from uuid import uuid4

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gatepass.integrations.document_store import (
    Document,
    DocumentNotFoundError,
    PreconditionFailedError,
    SnapshotCallback,
    Subscription,
    Where,
    matches_all,
)
from gatepass.repositories import DocumentRepository
from gatepass.services.common.errors import RemoteError
from gatepass.services.common.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(f"Document store {operation} failed: {exc}")
        raise RemoteError(f"Document store {operation} failed", exc) from exc


_PAYLOAD = TypeAdapter(Dict[str, Any])
_DATETIME = TypeAdapter(datetime)
_ISO_DATETIME = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")


def _jsonable(data: Mapping[str, Any]) -> Dict[str, Any]:
    return _PAYLOAD.dump_python(dict(data), mode="json")


def _sort_key(value: Any) -> Tuple[int, Any]:
    """ISO timestamps compare as instants; they and numbers sort before plain strings."""
    if isinstance(value, str) and _ISO_DATETIME.match(value):
        try:
            parsed = _DATETIME.validate_python(value)
        except PydanticValidationError:
            return (1, value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return (0, parsed.timestamp())
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, float(value))
    if isinstance(value, str):
        return (1, value)
    return (2, str(value))


def _sorted(documents: List[Document], order_by: Optional[str], descending: bool) -> List[Document]:
    if not order_by:
        return documents
    present = [d for d in documents if d.data.get(order_by) is not None]
    missing = [d for d in documents if d.data.get(order_by) is None]
    present.sort(key=lambda d: _sort_key(d.data[order_by]), reverse=descending)
    return present + missing


class SQLDocumentStore:
    """
    ``DocumentStore`` implementation over the ``documents`` table.

    Usage:
        >>> store = SQLDocumentStore(SessionLocal)
        >>> request_id = store.create("gatePassRequests", {"status": "pending"})
        >>> store.update("gatePassRequests", request_id, {"status": "approved"},
        ...              expected={"status": "pending"})
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory
        self._subscriptions: Dict[str, List[Subscription]] = defaultdict(list)

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def create(self, collection: str, data: Mapping[str, Any]) -> str:
        doc_id = str(uuid4())
        with _translate_errors("create"):
            with UnitOfWork(self._session_factory) as uow:
                uow.get_repo(DocumentRepository).insert(collection, doc_id, _jsonable(data))
        logger.debug(f"Created {collection}/{doc_id}")
        self._notify(collection)
        return doc_id

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any], *, merge: bool = False) -> None:
        payload = _jsonable(data)
        with _translate_errors("set"):
            with UnitOfWork(self._session_factory) as uow:
                repo = uow.get_repo(DocumentRepository)
                existing = repo.find(collection, doc_id)
                if existing is None:
                    repo.insert(collection, doc_id, payload)
                else:
                    existing.data = {**existing.data, **payload} if merge else payload
                    existing.version = existing.version + 1
        self._notify(collection)

    def update(
        self,
        collection: str,
        doc_id: str,
        changes: Mapping[str, Any],
        *,
        expected: Optional[Mapping[str, Any]] = None,
    ) -> Document:
        """
        Merge ``changes`` into an existing document.

        With ``expected``, the write only happens if every listed field
        still holds the expected value and no other write landed in
        between.

        Raises:
            DocumentNotFoundError: If the document does not exist
            PreconditionFailedError: If the expectation does not hold
        """
        payload = _jsonable(changes)
        expected = _jsonable(expected) if expected else {}
        with _translate_errors("update"):
            with UnitOfWork(self._session_factory) as uow:
                repo = uow.get_repo(DocumentRepository)
                existing = repo.find(collection, doc_id)
                if existing is None:
                    raise DocumentNotFoundError(collection, doc_id)

                actual = {key: existing.data.get(key) for key in expected}
                if actual != expected:
                    raise PreconditionFailedError(collection, doc_id, actual)

                new_data = {**existing.data, **payload}
                if not repo.compare_and_set(existing, new_data):
                    raise PreconditionFailedError(collection, doc_id)

        self._notify(collection)
        return Document(id=doc_id, data=new_data)

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with _translate_errors("get"):
            with UnitOfWork(self._session_factory) as uow:
                stored = uow.get_repo(DocumentRepository).find(collection, doc_id)
                if stored is None:
                    return None
                return Document(id=stored.id, data=dict(stored.data))

    def query(
        self,
        collection: str,
        *where: Where,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        with _translate_errors("query"):
            with UnitOfWork(self._session_factory) as uow:
                rows = uow.get_repo(DocumentRepository).list_collection(collection)
                documents = [
                    Document(id=row.id, data=dict(row.data))
                    for row in rows
                    if matches_all(row.data, where)
                ]

        documents = _sorted(documents, order_by, descending)
        if limit is not None:
            documents = documents[:limit]
        return documents

    # ------------------------------------------------------------------ #
    # Live queries
    # ------------------------------------------------------------------ #

    def subscribe(
        self,
        collection: str,
        *where: Where,
        callback: SnapshotCallback,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Subscription:
        """
        Run ``query`` now and again after every write to ``collection``,
        handing each result to ``callback``.
        """
        subscription = Subscription(
            collection=collection,
            where=tuple(where),
            callback=callback,
            order_by=order_by,
            descending=descending,
            _cancel=self._remove,
        )
        self._subscriptions[collection].append(subscription)
        logger.debug(f"Subscribed to {collection}")
        self._deliver(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        subscribers = self._subscriptions.get(subscription.collection, [])
        if subscription in subscribers:
            subscribers.remove(subscription)

    def _notify(self, collection: str) -> None:
        for subscription in list(self._subscriptions.get(collection, [])):
            if subscription.active:
                self._deliver(subscription)

    def _deliver(self, subscription: Subscription) -> None:
        try:
            snapshot = self.query(
                subscription.collection,
                *subscription.where,
                order_by=subscription.order_by,
                descending=subscription.descending,
            )
            subscription.callback(snapshot)
        except Exception as e:
            logger.error(
                f"Error delivering snapshot of {subscription.collection}: {str(e)}",
                exc_info=True,
            )
