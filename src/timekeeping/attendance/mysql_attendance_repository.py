from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import AlreadyClockedIn, NoOpenSession, PersistenceFailure
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import TimeRecord
from .repository import AttendanceLedger

log = logging.getLogger(__name__)


def _to_record(r) -> TimeRecord:
    return TimeRecord(
        record_id=str(r["record_id"]),
        user_id=int(r["user_id"]),
        day_key=r["day_key"],
        time_in=r["time_in"],
        time_out=r.get("time_out"),
    )


class MySQLAttendanceLedger(AttendanceLedger):
    """Ledger backed by the ``time_records`` table.

    The unique key on (user_id, day_key) arbitrates racing clock-ins across
    processes; closing is a conditional UPDATE on ``time_out IS NULL``.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[TimeRecord]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT record_id, user_id, day_key, time_in, time_out
                    FROM time_records
                    WHERE user_id=%s AND day_key=%s
                    """,
                    (int(user_id), work_date),
                )
                r = fetchone(cur)
                return _to_record(r) if r else None
        except mysql.connector.Error as exc:
            log.exception("Lookup failed for user %s on %s", user_id, work_date)
            raise PersistenceFailure() from exc

    def put(self, user_id: int, record: TimeRecord) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                if record.is_open:
                    cur.execute(
                        """
                        INSERT INTO time_records(record_id, user_id, day_key, time_in, time_out)
                        VALUES(%s,%s,%s,%s,NULL)
                        """,
                        (record.record_id, int(user_id), record.day_key, record.time_in),
                    )
                    return
                cur.execute(
                    """
                    UPDATE time_records
                    SET time_out=%s
                    WHERE record_id=%s AND user_id=%s AND time_out IS NULL
                    """,
                    (record.time_out, record.record_id, int(user_id)),
                )
                if cur.rowcount == 0:
                    raise NoOpenSession()
        except mysql.connector.IntegrityError as exc:
            if exc.errno == errorcode.ER_DUP_ENTRY:
                raise AlreadyClockedIn() from exc
            log.exception("Integrity error writing record %s", record.record_id)
            raise PersistenceFailure() from exc
        except mysql.connector.Error as exc:
            log.exception("Write failed for record %s", record.record_id)
            raise PersistenceFailure() from exc

    def list_for_user(self, user_id: int) -> Sequence[TimeRecord]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT record_id, user_id, day_key, time_in, time_out
                    FROM time_records
                    WHERE user_id=%s
                    ORDER BY time_in ASC
                    """,
                    (int(user_id),),
                )
                return [_to_record(r) for r in fetchall(cur)]
        except mysql.connector.Error as exc:
            log.exception("Listing failed for user %s", user_id)
            raise PersistenceFailure() from exc
