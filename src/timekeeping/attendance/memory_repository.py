from __future__ import annotations

import threading
from datetime import date
from typing import Optional, Sequence

from ..core.exceptions import AlreadyClockedIn, NoOpenSession
from .model import TimeRecord
from .repository import AttendanceLedger


def apply_put(records: list[TimeRecord], record: TimeRecord) -> list[TimeRecord]:
    """Return the user's records after appending or closing ``record``.

    Shared by the in-process ledgers so they enforce the same transitions.
    """

    existing = next((r for r in records if r.day_key == record.day_key), None)

    if record.is_open:
        if existing is not None:
            raise AlreadyClockedIn()
        return [*records, record]

    if existing is None or existing.record_id != record.record_id or not existing.is_open:
        raise NoOpenSession()
    if existing.time_in != record.time_in:
        raise ValueError("time_in is immutable")
    return [record if r.record_id == record.record_id else r for r in records]


class InMemoryAttendanceLedger(AttendanceLedger):
    def __init__(self):
        self._records: dict[int, list[TimeRecord]] = {}
        self._lock = threading.Lock()

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[TimeRecord]:
        with self._lock:
            for r in self._records.get(int(user_id), []):
                if r.day_key == work_date:
                    return r
        return None

    def put(self, user_id: int, record: TimeRecord) -> None:
        with self._lock:
            current = self._records.get(int(user_id), [])
            self._records[int(user_id)] = apply_put(current, record)

    def list_for_user(self, user_id: int) -> Sequence[TimeRecord]:
        with self._lock:
            return list(self._records.get(int(user_id), []))
