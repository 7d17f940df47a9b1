from __future__ import annotations

import sqlite3
import threading

import pytest

from conftest import make_record
from core.db import ensure_schema
from core.errors import NotFoundError, StoreUnavailableError, ValidationError
from core.services.feed import RecordFeed
from core.services.records import (
    NewWasteRecord,
    delete_record,
    get_record,
    insert_record,
    list_records,
    sort_records,
)


# ---------------------- Helpers ----------------------
def new_record(**kwargs) -> NewWasteRecord:
    defaults = {
        "branch": "Atitlán Central",
        "category": "Mermas Bodega",
        "date": "2024-01-05",
        "value": 12.5,
    }
    defaults.update(kwargs)
    return NewWasteRecord(**defaults)


# ---------------------- Store ----------------------
def test_insert_assigns_id_and_timestamp(conn):
    rec = insert_record(conn, new_record(code=" BEB-010 ", notes="vencido"))
    assert rec.id
    assert rec.created_at
    assert rec.code == "BEB-010"
    assert get_record(conn, rec.id) == rec


def test_list_is_date_descending(conn):
    for d in ["2024-01-05", "2024-03-01", "2024-02-10"]:
        insert_record(conn, new_record(date=d))
    assert [r.date for r in list_records(conn)] == ["2024-03-01", "2024-02-10", "2024-01-05"]


@pytest.mark.parametrize(
    "override",
    [
        {"branch": ""},
        {"category": "  "},
        {"date": ""},
        {"date": "05/01/2024"},
        {"value": None},
        {"value": -1},
        {"value": "abc"},
        {"date": "2024-13-45"},
        {"date": "2024-02-30"},
        {"value": "inf"},
        {"value": float("nan")},
        {"value": float("-inf")},
    ],
)
def test_invalid_records_are_rejected_before_write(conn, override):
    with pytest.raises(ValidationError):
        insert_record(conn, new_record(**override))
    assert list_records(conn) == []


def test_zero_value_is_allowed(conn):
    assert insert_record(conn, new_record(value=0)).value == 0.0


def test_leap_day_is_a_valid_date(conn):
    assert insert_record(conn, new_record(date="2024-02-29")).date == "2024-02-29"


def test_ensure_schema_can_rerun_without_losing_records(conn):
    rec = insert_record(conn, new_record(notes="roto"))
    ensure_schema(conn)
    assert get_record(conn, rec.id) == rec
    cols = [r["name"] for r in conn.execute("PRAGMA table_info(waste_records);")]
    assert "notes" in cols


def test_delete(conn):
    rec = insert_record(conn, new_record())
    delete_record(conn, rec.id)
    assert get_record(conn, rec.id) is None
    with pytest.raises(NotFoundError):
        delete_record(conn, rec.id)


def test_sort_records():
    records = [
        make_record(date="2024-01-02", value=5, branch="B"),
        make_record(date="2024-01-03", value=1, branch="A"),
        make_record(date="2024-01-01", value=9, branch="C"),
    ]
    assert [r.value for r in sort_records(records)] == [1, 5, 9]
    assert [r.value for r in sort_records(records, "value", descending=False)] == [1, 5, 9]
    assert [r.branch for r in sort_records(records, "branch", descending=True)] == ["C", "B", "A"]
    with pytest.raises(ValidationError):
        sort_records(records, "notes")


# ---------------------- Feed ----------------------
def test_feed_pushes_on_subscribe_and_on_write(conn):
    feed = RecordFeed(conn)
    seen = []
    unsubscribe = feed.subscribe(seen.append)
    assert seen == [[]]

    rec = feed.insert(new_record())
    assert [r.id for r in seen[-1]] == [rec.id]

    feed.delete(rec.id)
    assert seen[-1] == []
    assert len(seen) == 3

    unsubscribe()
    assert feed.subscriber_count == 0
    feed.insert(new_record())
    assert len(seen) == 3
    assert len(feed.snapshot()) == 1


def test_feed_late_subscriber_gets_current_snapshot(conn):
    feed = RecordFeed(conn)
    feed.insert(new_record())
    seen = []
    feed.subscribe(seen.append)
    assert len(seen) == 1 and len(seen[0]) == 1


def test_feed_failed_write_does_not_publish(conn):
    feed = RecordFeed(conn)
    seen = []
    feed.subscribe(seen.append)
    with pytest.raises(ValidationError):
        feed.insert(new_record(branch=""))
    assert seen == [[]]


def test_feed_store_failure_clears_snapshot(tmp_path):
    c = sqlite3.connect(str(tmp_path / "broken.db"))
    c.row_factory = sqlite3.Row
    # no schema: reading waste_records fails
    feed = RecordFeed(c)
    errors = []
    changes = []
    feed.subscribe(changes.append, on_error=errors.append)

    assert changes == []
    assert len(errors) == 1 and isinstance(errors[0], StoreUnavailableError)
    assert feed.snapshot() == []
    assert feed.error is errors[0]
    c.close()


def test_shared_feed_survives_concurrent_sessions(conn):
    feed = RecordFeed(conn)
    seen = []
    feed.subscribe(seen.append)
    errors = []

    def session(n):
        try:
            for _ in range(n):
                feed.insert(new_record())
                feed.refresh()
                feed.snapshot()
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=session, args=(10,)) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert feed.error is None
    assert len(feed.snapshot()) == 40
    assert len(seen[-1]) == 40
