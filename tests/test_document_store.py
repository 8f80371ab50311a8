from datetime import datetime, timezone

import pytest

from gatepass.db import drop_db
from gatepass.integrations import (
    DocumentNotFoundError,
    PreconditionFailedError,
    Where,
)
from gatepass.repositories import DocumentRepository
from gatepass.services.common import UnitOfWork
from gatepass.services.common.errors import NotFoundError, RemoteError


def test_create_and_get_serializes_datetimes(store):
    when = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
    doc_id = store.create("things", {"name": "lamp", "at": when})

    doc = store.get("things", doc_id)
    assert doc.id == doc_id
    assert doc.data == {"name": "lamp", "at": "2024-05-01T09:30:00Z"}


def test_get_missing_returns_none(store):
    assert store.get("things", "nope") is None


def test_set_overwrites_unless_merge(store):
    store.set("system", "counters", {"a": 1, "b": 2})
    store.set("system", "counters", {"b": 3}, merge=True)
    assert store.get("system", "counters").data == {"a": 1, "b": 3}

    store.set("system", "counters", {"c": 4})
    assert store.get("system", "counters").data == {"c": 4}


def test_update_merges_changes(store):
    doc_id = store.create("things", {"name": "lamp", "status": "pending"})
    doc = store.update("things", doc_id, {"status": "approved"}, expected={"status": "pending"})

    assert doc.data == {"name": "lamp", "status": "approved"}
    assert store.get("things", doc_id).data["status"] == "approved"


def test_update_missing_document(store):
    with pytest.raises(DocumentNotFoundError) as exc_info:
        store.update("things", "ghost", {"status": "approved"})
    assert isinstance(exc_info.value, NotFoundError)


def test_update_with_failed_expectation_leaves_document(store):
    doc_id = store.create("things", {"status": "rejected"})

    with pytest.raises(PreconditionFailedError) as exc_info:
        store.update("things", doc_id, {"status": "approved"}, expected={"status": "pending"})

    assert exc_info.value.actual == {"status": "rejected"}
    assert store.get("things", doc_id).data == {"status": "rejected"}


def test_compare_and_set_refuses_stale_version(store, session_factory):
    doc_id = store.create("things", {"status": "pending"})
    with UnitOfWork(session_factory) as uow:
        stale = uow.get_repo(DocumentRepository).find("things", doc_id)

    store.update("things", doc_id, {"status": "approved"})

    with UnitOfWork(session_factory) as uow:
        assert uow.get_repo(DocumentRepository).compare_and_set(stale, {"status": "rejected"}) is False
    assert store.get("things", doc_id).data == {"status": "approved"}


def test_query_filters_orders_and_limits(store):
    store.create("things", {"kind": "a", "rank": 2})
    store.create("things", {"kind": "b", "rank": 1})
    store.create("things", {"kind": "a", "rank": 3})
    store.create("things", {"kind": "a"})

    docs = store.query("things", Where("kind", "==", "a"), order_by="rank", descending=True)
    assert [d.get("rank") for d in docs] == [3, 2, None]

    docs = store.query("things", order_by="rank", limit=2)
    assert [d.get("rank") for d in docs] == [1, 2]

    docs = store.query("things", Where("kind", "in", ["b"]))
    assert len(docs) == 1


def test_query_orders_timestamps_within_one_second(store):
    store.set("things", "late", {"createdAt": "2024-05-01T09:00:00.300000Z"})
    store.set("things", "early", {"createdAt": "2024-05-01T09:00:00Z"})
    store.set("things", "offset", {"createdAt": "2024-05-01T14:29:59.900000+05:30"})

    docs = store.query("things", order_by="createdAt")
    assert [d.id for d in docs] == ["offset", "early", "late"]

    docs = store.query("things", order_by="createdAt", descending=True)
    assert [d.id for d in docs] == ["late", "early", "offset"]


def test_query_does_not_read_plain_strings_as_dates(store):
    store.set("things", "b", {"code": "2"})
    store.set("things", "a", {"code": "10"})

    docs = store.query("things", order_by="code")
    assert [d.id for d in docs] == ["a", "b"]


def test_query_only_sees_its_collection(store):
    store.create("things", {"kind": "a"})
    store.create("others", {"kind": "a"})
    assert len(store.query("things")) == 1


@pytest.mark.parametrize(
    "where, expected",
    [
        (Where("status", "==", "pending"), False),
        (Where("status", "!=", "pending"), True),
        (Where("status", "not-in", ["pending"]), True),
        (Where("status", "in", ["pending"]), False),
    ],
)
def test_where_on_missing_field(where, expected):
    assert where.matches({"other": 1}) is expected


def test_where_incompatible_types_do_not_match():
    assert Where("rank", ">", 3).matches({"rank": "high"}) is False


def test_where_rejects_unknown_operator():
    with pytest.raises(ValueError):
        Where("rank", "~", 3)


def test_subscribe_delivers_now_and_after_writes(store):
    snapshots = []
    sub = store.subscribe("things", Where("kind", "==", "a"), callback=snapshots.append)
    assert snapshots == [[]]

    store.create("things", {"kind": "a"})
    store.create("things", {"kind": "b"})
    assert [len(s) for s in snapshots] == [0, 1, 1]

    sub.unsubscribe()
    store.create("things", {"kind": "a"})
    assert len(snapshots) == 3
    assert sub.active is False


def test_failing_subscriber_does_not_break_writer(store):
    def explode(_docs):
        raise RuntimeError("boom")

    store.subscribe("things", callback=explode)
    doc_id = store.create("things", {"kind": "a"})
    assert store.get("things", doc_id) is not None


def test_database_failure_is_remote_error(store, engine):
    drop_db(engine)
    with pytest.raises(RemoteError):
        store.get("things", "x")
    with pytest.raises(RemoteError):
        store.create("things", {"kind": "a"})


def test_unit_of_work_commits_on_clean_exit(session_factory, store):
    with UnitOfWork(session_factory) as uow:
        uow.get_repo(DocumentRepository).insert("things", "kept", {"kind": "a"})

    assert store.get("things", "kept").data == {"kind": "a"}


def test_unit_of_work_rolls_back_on_error(session_factory, store):
    with pytest.raises(RuntimeError):
        with UnitOfWork(session_factory) as uow:
            uow.get_repo(DocumentRepository).insert("things", "lost", {"kind": "a"})
            raise RuntimeError("boom")

    assert store.get("things", "lost") is None
