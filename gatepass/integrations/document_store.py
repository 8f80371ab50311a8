# gatepass/integrations/document_store.py
"""
Document store interface.

The services talk to the store only through this protocol: create, set,
get, update, query and a live-subscription variant of query. Field
filters are expressed with ``Where`` predicates evaluated against the
stored payload.
"""
from __future__ import annotations

import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from gatepass.services.common.errors import ConflictError, NotFoundError

__all__ = [
    "Document",
    "Where",
    "Subscription",
    "DocumentStore",
    "DocumentNotFoundError",
    "PreconditionFailedError",
]


@dataclass(frozen=True)
class Document:
    """A stored document: its key within the collection and its payload."""

    id: str
    data: Dict[str, Any]

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


def _in(value: Any, options: Any) -> bool:
    return value in options


def _not_in(value: Any, options: Any) -> bool:
    return value not in options


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": _in,
    "not-in": _not_in,
}


@dataclass(frozen=True)
class Where:
    """
    Field predicate, e.g. ``Where("status", "in", ["pending", "approved"])``.

    A document without the field never matches, except for ``!=`` and
    ``not-in``.
    """

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in _OPERATORS:
            raise ValueError(f"Unsupported operator {self.op!r}")

    def matches(self, data: Mapping[str, Any]) -> bool:
        if self.field not in data:
            return self.op in ("!=", "not-in")
        try:
            return _OPERATORS[self.op](data[self.field], self.value)
        except TypeError:
            # Ordering comparison between incompatible types
            return False


def matches_all(data: Mapping[str, Any], where: Sequence[Where]) -> bool:
    return all(w.matches(data) for w in where)


SnapshotCallback = Callable[[List[Document]], None]


@dataclass(eq=False)
class Subscription:
    """Handle returned by ``DocumentStore.subscribe``."""

    collection: str
    where: tuple
    callback: SnapshotCallback
    order_by: Optional[str] = None
    descending: bool = False
    _cancel: Optional[Callable[["Subscription"], None]] = field(default=None, repr=False)
    active: bool = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        if self._cancel is not None:
            self._cancel(self)


class DocumentNotFoundError(NotFoundError):
    """Raised by ``update`` when the target document does not exist."""

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(collection, doc_id)
        self.collection = collection


class PreconditionFailedError(ConflictError):
    """Raised by a conditional ``update`` whose expectation no longer holds."""

    def __init__(self, collection: str, doc_id: str, actual: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            f"Document {collection}/{doc_id} changed before the update was applied",
            details={"actual": actual or {}},
        )
        self.collection = collection
        self.doc_id = doc_id
        self.actual = actual or {}


class DocumentStore(Protocol):
    """
    Abstract document store.

    Implementations can use a SQL table, a hosted document database, etc.
    Transport failures are reported as ``RemoteError``.
    """

    def create(self, collection: str, data: Mapping[str, Any]) -> str: ...

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any], *, merge: bool = False) -> None: ...

    def get(self, collection: str, doc_id: str) -> Optional[Document]: ...

    def update(
        self,
        collection: str,
        doc_id: str,
        changes: Mapping[str, Any],
        *,
        expected: Optional[Mapping[str, Any]] = None,
    ) -> Document: ...

    def query(
        self,
        collection: str,
        *where: Where,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]: ...

    def subscribe(
        self,
        collection: str,
        *where: Where,
        callback: SnapshotCallback,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Subscription: ...
