from __future__ import annotations

import logging
import threading
import weakref
from datetime import date, datetime
from typing import Iterator, Optional

from ..common.datetime_utils import Clock, day_key, format_time, now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import AlreadyClockedIn, DomainError, InvalidOrdering, NoOpenSession
from .model import TimeRecord
from .repository import AttendanceLedger

log = logging.getLogger(__name__)


class RecordHistory:
    """Newest-first view over one user's ledger.

    Nothing is read until iteration starts, and every new iteration reads the
    ledger again, so the view can be kept and re-iterated after mutations.
    """

    def __init__(self, ledger: AttendanceLedger, user_id: int):
        self._ledger = ledger
        self._user_id = int(user_id)

    def __iter__(self) -> Iterator[TimeRecord]:
        records = self._ledger.list_for_user(self._user_id)
        return iter(sorted(records, key=lambda r: r.time_in, reverse=True))

    def __len__(self) -> int:
        return len(self._ledger.list_for_user(self._user_id))


class AttendanceService:
    """Use cases: clock in / clock out, one record per user per day."""

    def __init__(self, ledger: AttendanceLedger, *, clock: Clock = now_local, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self._ledger = ledger
        self._clock = clock
        self._history_limit = int(history_limit)
        # An entry lives only while some caller holds its lock.
        self._locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    @property
    def history_limit(self) -> int:
        return self._history_limit

    def _lock_for(self, user_id: int) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(int(user_id), threading.Lock())

    def clock_in(self, user_id: int, *, now: datetime | None = None) -> TimeRecord:
        with self._lock_for(user_id):
            now = now or self._clock()
            today = day_key(now)

            existing = self._ledger.get_for_user_and_date(user_id, today)
            if existing:
                log.warning("User %s already timed in on %s", user_id, today)
                raise AlreadyClockedIn()

            record = TimeRecord.open_at(user_id, now)
            self._put(user_id, record)
            log.info("User %s timed in at %s", user_id, now.isoformat())
            return record

    def clock_out(self, user_id: int, *, now: datetime | None = None) -> TimeRecord:
        with self._lock_for(user_id):
            now = now or self._clock()
            today = day_key(now)

            record = self._ledger.get_for_user_and_date(user_id, today)
            if not record or not record.is_open:
                log.warning("User %s has no open record on %s", user_id, today)
                raise NoOpenSession()

            try:
                closed = record.closed_at(now)
            except InvalidOrdering:
                log.warning("User %s clock-out at %s precedes time-in %s", user_id, now.isoformat(), record.time_in.isoformat())
                raise

            self._put(user_id, closed)
            log.info("User %s timed out at %s", user_id, now.isoformat())
            return closed

    def _put(self, user_id: int, record: TimeRecord) -> None:
        try:
            self._ledger.put(user_id, record)
        except DomainError as exc:
            log.warning("Ledger rejected record %s for user %s: %s", record.record_id, user_id, exc)
            raise

    def list_records(self, user_id: int) -> RecordHistory:
        return RecordHistory(self._ledger, user_id)

    def get_today_record(self, user_id: int, today: Optional[date] = None) -> Optional[TimeRecord]:
        """Get today's attendance record for a user"""
        return self._ledger.get_for_user_and_date(user_id, today or day_key(self._clock()))

    def get_history_ui(self, user_id: int, *, limit: int | None = None) -> list[dict]:
        limit = self._history_limit if limit is None else int(limit)
        rows = []
        for r in self.list_records(user_id):
            if len(rows) >= limit:
                break
            rows.append(self._to_ui(r))
        return rows

    def _to_ui(self, r: TimeRecord) -> dict:
        return {
            "record_id": r.record_id,
            "date": r.day_key.strftime("%Y-%m-%d"),
            "time_in": format_time(r.time_in),
            "time_out": format_time(r.time_out),
            "status": "open" if r.is_open else "closed",
        }
