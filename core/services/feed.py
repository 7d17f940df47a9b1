from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Callable, Optional

import streamlit as st

from core.db import get_conn
from core.errors import StoreUnavailableError
from core.services.records import NewWasteRecord, WasteRecord, delete_record, insert_record, list_records

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[list[WasteRecord]], None]
ErrorCallback = Callable[[StoreUnavailableError], None]


class RecordFeed:
    """
    Observable view of the record store.

    Subscribers get the full record list on every change. Writes made through
    the feed re-publish immediately. When the store cannot be read the snapshot
    is cleared and error callbacks fire; nothing is retried.

    Streamlit pages poll: each rerun calls refresh() and reads snapshot(),
    because a script run cannot be woken by a callback. subscribe() is for
    in-process listeners. get_record_feed() shares one instance across all
    sessions, which run on separate threads, so reads, writes and the
    subscriber list are guarded by one re-entrant lock.
    """

    def __init__(self, conn):
        self.conn = conn
        self._subscribers: list[tuple[ChangeCallback, Optional[ErrorCallback]]] = []
        self._snapshot: list[WasteRecord] = []
        self.loading = True
        self.error: Optional[StoreUnavailableError] = None
        self._lock = threading.RLock()

    def subscribe(self, on_change: ChangeCallback, on_error: Optional[ErrorCallback] = None) -> Callable[[], None]:
        entry = (on_change, on_error)
        with self._lock:
            self._subscribers.append(entry)
            if self.loading:
                self.refresh()
            elif self.error is not None:
                if on_error is not None:
                    on_error(self.error)
            else:
                on_change(list(self._snapshot))

        def unsubscribe() -> None:
            with self._lock:
                if entry in self._subscribers:
                    self._subscribers.remove(entry)

        return unsubscribe


    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def snapshot(self) -> list[WasteRecord]:
        with self._lock:
            if self.loading:
                self.refresh()
            return list(self._snapshot)

    def refresh(self) -> None:
        with self._lock:
            try:
                records = list_records(self.conn)
            except sqlite3.Error as e:
                logger.exception("Could not load waste records")
                self._snapshot = []
                self.loading = False
                self.error = StoreUnavailableError(f"Could not load waste records: {e}")
                for _, on_error in list(self._subscribers):
                    if on_error is not None:
                        on_error(self.error)
                return

            self._snapshot = records
            self.loading = False
            self.error = None
            for on_change, _ in list(self._subscribers):
                on_change(list(records))

    def insert(self, rec: NewWasteRecord) -> WasteRecord:
        with self._lock:
            record = insert_record(self.conn, rec)
            self.refresh()
        return record

    def delete(self, record_id: str) -> None:
        with self._lock:
            delete_record(self.conn, record_id)
            self.refresh()


@st.cache_resource
def get_record_feed(db_path: Path) -> RecordFeed:
    return RecordFeed(get_conn(db_path))

