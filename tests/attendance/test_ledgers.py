from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

import mysql.connector
import pytest
from mysql.connector import errorcode

from timekeeping.attendance.json_repository import JsonFileAttendanceLedger
from timekeeping.attendance.memory_repository import InMemoryAttendanceLedger
from timekeeping.attendance.model import TimeRecord
from timekeeping.attendance.mysql_attendance_repository import MySQLAttendanceLedger
from timekeeping.core.exceptions import AlreadyClockedIn, NoOpenSession, PersistenceFailure


@pytest.fixture(params=["memory", "json"])
def ledger(request, tmp_path):
    if request.param == "json":
        return JsonFileAttendanceLedger(tmp_path / "ledger.json")
    return InMemoryAttendanceLedger()


def test_put_appends_then_closes(ledger, fixed_now):
    rec = TimeRecord.open_at(1, fixed_now)
    ledger.put(1, rec)
    closed = rec.closed_at(fixed_now + timedelta(hours=8))
    ledger.put(1, closed)

    assert ledger.get_for_user_and_date(1, fixed_now.date()) == closed
    assert ledger.list_for_user(1) == [closed]


def test_put_refuses_second_record_for_same_day(ledger, fixed_now):
    ledger.put(1, TimeRecord.open_at(1, fixed_now))

    with pytest.raises(AlreadyClockedIn):
        ledger.put(1, TimeRecord.open_at(1, fixed_now + timedelta(hours=1)))

    assert len(ledger.list_for_user(1)) == 1


def test_put_refuses_to_close_twice(ledger, fixed_now):
    rec = TimeRecord.open_at(1, fixed_now)
    ledger.put(1, rec)
    ledger.put(1, rec.closed_at(fixed_now + timedelta(hours=1)))

    with pytest.raises(NoOpenSession):
        ledger.put(1, rec.closed_at(fixed_now + timedelta(hours=2)))

    assert ledger.get_for_user_and_date(1, fixed_now.date()).time_out == fixed_now + timedelta(hours=1)


def test_json_ledger_survives_reopen(tmp_path, fixed_now):
    path = tmp_path / "nested" / "ledger.json"
    rec = TimeRecord.open_at(3, fixed_now)
    JsonFileAttendanceLedger(path).put(3, rec)

    reopened = JsonFileAttendanceLedger(path)

    assert reopened.list_for_user(3) == [rec]
    assert json.loads(path.read_text())["3"][0]["time_out"] is None


def test_json_ledger_corrupt_file_is_persistence_failure(tmp_path, fixed_now):
    path = tmp_path / "ledger.json"
    path.write_text("{not json")

    with pytest.raises(PersistenceFailure):
        JsonFileAttendanceLedger(path).list_for_user(1)


def test_json_ledger_failed_write_keeps_previous_file(tmp_path, fixed_now, monkeypatch):
    path = tmp_path / "ledger.json"
    ledger = JsonFileAttendanceLedger(path)
    ledger.put(1, TimeRecord.open_at(1, fixed_now))
    before = path.read_text()

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("timekeeping.attendance.json_repository.os.replace", broken_replace)

    with pytest.raises(PersistenceFailure):
        ledger.put(1, TimeRecord.open_at(1, fixed_now + timedelta(days=1)))

    assert path.read_text() == before
    assert list(tmp_path.glob(".ledger-*")) == []


@pytest.mark.parametrize("content", ["[]", "42", '"ledger"'])
def test_json_ledger_non_object_file_is_persistence_failure(tmp_path, content):
    path = tmp_path / "ledger.json"
    path.write_text(content)

    with pytest.raises(PersistenceFailure):
        JsonFileAttendanceLedger(path).list_for_user(1)


def test_json_ledger_concurrent_writers_in_one_process_keep_every_record(tmp_path, fixed_now):
    ledger = JsonFileAttendanceLedger(tmp_path / "ledger.json")
    users = range(1, 9)

    with ThreadPoolExecutor(max_workers=len(users)) as pool:
        list(pool.map(lambda uid: ledger.put(uid, TimeRecord.open_at(uid, fixed_now)), users))

    reopened = JsonFileAttendanceLedger(tmp_path / "ledger.json")
    assert [len(reopened.list_for_user(uid)) for uid in users] == [1] * len(users)


class FakeCursor:
    def __init__(self, *, error=None, rowcount=1, row=None):
        self._error = error
        self.rowcount = rowcount
        self._row = row
        self.executed = []

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        if self._error is not None:
            raise self._error

    def fetchone(self):
        return self._row

    def fetchall(self):
        return [self._row] if self._row else []

    def close(self):
        pass


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False

    def cursor(self, dictionary=False):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class FakeConnFactory:
    def __init__(self, cursor):
        self.conn = FakeConnection(cursor)

    def connect(self):
        return self.conn


def test_mysql_duplicate_day_maps_to_already_clocked_in(fixed_now):
    dup = mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    factory = FakeConnFactory(FakeCursor(error=dup))

    with pytest.raises(AlreadyClockedIn):
        MySQLAttendanceLedger(factory).put(1, TimeRecord.open_at(1, fixed_now))

    assert factory.conn.rolled_back


def test_mysql_close_without_open_row_is_no_open_session(fixed_now):
    rec = TimeRecord.open_at(1, fixed_now)
    factory = FakeConnFactory(FakeCursor(rowcount=0))

    with pytest.raises(NoOpenSession):
        MySQLAttendanceLedger(factory).put(1, rec.closed_at(fixed_now + timedelta(hours=1)))

    assert not factory.conn.committed


def test_mysql_driver_error_is_persistence_failure(fixed_now):
    factory = FakeConnFactory(FakeCursor(error=mysql.connector.OperationalError(msg="gone away")))

    with pytest.raises(PersistenceFailure):
        MySQLAttendanceLedger(factory).get_for_user_and_date(1, fixed_now.date())


def test_mysql_row_maps_to_record(fixed_now):
    row = {
        "record_id": "abc",
        "user_id": 4,
        "day_key": fixed_now.date(),
        "time_in": fixed_now,
        "time_out": None,
    }
    factory = FakeConnFactory(FakeCursor(row=row))

    rec = MySQLAttendanceLedger(factory).get_for_user_and_date(4, fixed_now.date())

    assert rec == TimeRecord(record_id="abc", user_id=4, day_key=fixed_now.date(), time_in=fixed_now)
