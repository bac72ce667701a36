from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from mysql.connector import errorcode
from mysql.connector import errors as mysql_errors

from fakes import pkt
from night_attendance.attendance.model import AttendancePatch, NewAttendance
from night_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from night_attendance.core.enums import AttendanceStatus
from night_attendance.core.exceptions import StoreUnavailableError


class FakeCursor:
    """Replays a scripted result (or exception) per execute() call."""

    def __init__(self, script):
        self._script = script
        self.executed = []
        self.rowcount = 0
        self.lastrowid = None
        self._rows = []

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), params))
        step = self._script.pop(0)
        if isinstance(step, Exception):
            raise step
        self._rows = step.get("rows", [])
        self.rowcount = step.get("rowcount", len(self._rows))
        self.lastrowid = step.get("lastrowid")

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, script):
        self.cursor_obj = FakeCursor(script)
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


class FakeConnFactory:
    def __init__(self, *script):
        self.conn = FakeConnection(list(script))

    def connect(self):
        return self.conn

    @property
    def executed(self):
        return self.conn.cursor_obj.executed


def row(**overrides):
    values = {
        "attendance_id": 7,
        "employee_id": 3,
        "shift_date": date(2025, 1, 1),
        "clock_in": datetime(2025, 1, 1, 17, 0),
        "clock_out": None,
        "status": "Present",
        "auto_marked": 0,
        "auto_closed": 0,
        "notes": None,
    }
    values.update(overrides)
    return values


NEW = NewAttendance(employee_id=3, shift_date=date(2025, 1, 1), status=AttendanceStatus.PRESENT, clock_in=pkt(2025, 1, 1, 22, 0))


def test_insert_if_absent_created():
    factory = FakeConnFactory({"rowcount": 1, "lastrowid": 7}, {"rows": [row()]})

    result = MySQLAttendanceRepository(factory).insert_if_absent(NEW)

    assert result.created is True
    assert result.record.attendance_id == 7
    assert result.record.clock_in == datetime(2025, 1, 1, 17, 0, tzinfo=timezone.utc)
    insert_sql, insert_params = factory.executed[0]
    assert insert_sql.startswith("INSERT INTO attendance_records")
    # Stored as naive UTC: 22:00 PKT is 17:00 UTC.
    assert insert_params[2] == datetime(2025, 1, 1, 17, 0)
    assert factory.conn.commits == 1
    assert factory.conn.closed


def test_insert_if_absent_duplicate_returns_existing():
    duplicate = mysql_errors.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    factory = FakeConnFactory(duplicate, {"rows": [row(status="Absent", clock_in=None, auto_marked=1)]})

    result = MySQLAttendanceRepository(factory).insert_if_absent(NEW)

    assert result.created is False
    assert result.record.is_placeholder
    assert result.record.auto_marked is True
    assert "WHERE ar.employee_id=%s AND ar.shift_date=%s" in factory.executed[1][0]
    assert factory.conn.rollbacks == 0


def test_insert_if_absent_other_integrity_error_propagates():
    fk_error = mysql_errors.IntegrityError(msg="FK fails", errno=errorcode.ER_NO_REFERENCED_ROW_2)
    factory = FakeConnFactory(fk_error)

    with pytest.raises(mysql_errors.IntegrityError):
        MySQLAttendanceRepository(factory).insert_if_absent(NEW)
    assert factory.conn.rollbacks == 1
    assert factory.conn.closed


def test_lost_connection_maps_to_store_unavailable():
    factory = FakeConnFactory(mysql_errors.OperationalError(msg="Lost connection", errno=2013))

    with pytest.raises(StoreUnavailableError):
        MySQLAttendanceRepository(factory).get_by_id(7)
    assert factory.conn.rollbacks == 1


def test_claim_placeholder_is_conditional():
    factory = FakeConnFactory({"rowcount": 0})

    claimed = MySQLAttendanceRepository(factory).claim_placeholder(
        attendance_id=7, clock_in=pkt(2025, 1, 1, 19, 0), status=AttendanceStatus.PRESENT
    )

    assert claimed is False
    assert "clock_in IS NULL AND clock_out IS NULL" in factory.executed[0][0]


def test_update_only_if_open_returns_none_when_already_closed():
    factory = FakeConnFactory({"rowcount": 0})

    result = MySQLAttendanceRepository(factory).update_by_id(
        7, AttendancePatch(clock_out=pkt(2025, 1, 2, 5, 30)), only_if_open=True
    )

    assert result is None
    sql, params = factory.executed[0]
    assert "clock_in IS NOT NULL AND clock_out IS NULL" in sql
    assert params == (datetime(2025, 1, 2, 0, 30), 7)
    assert len(factory.executed) == 1


def test_update_appends_note_in_sql():
    closed = row(clock_out=datetime(2025, 1, 2, 0, 30), auto_closed=1, notes="auto-clocked-out at shift end")
    factory = FakeConnFactory({"rowcount": 1}, {"rows": [closed]})

    result = MySQLAttendanceRepository(factory).update_by_id(
        7,
        AttendancePatch(clock_out=pkt(2025, 1, 2, 5, 30), auto_closed=True, append_note="auto-clocked-out at shift end"),
        only_if_open=True,
    )

    sql, params = factory.executed[0]
    assert "CONCAT_WS" in sql
    assert params == (datetime(2025, 1, 2, 0, 30), 1, "auto-clocked-out at shift end", 7)
    assert result.auto_closed is True
    assert result.clock_out == pkt(2025, 1, 2, 5, 30)


def test_bulk_update_counts_matched_and_modified():
    factory = FakeConnFactory(
        {"rows": [{"found": 1}]},
        {"rowcount": 1},
        {"rows": []},
        {"rows": [{"found": 1}]},
        {"rowcount": 0},
    )

    result = MySQLAttendanceRepository(factory).bulk_update(
        [
            (1, AttendancePatch(status=AttendanceStatus.LATE)),
            (2, AttendancePatch(status=AttendanceStatus.LATE)),
            (3, AttendancePatch(status=AttendanceStatus.LATE)),
        ]
    )

    assert (result.matched_count, result.modified_count) == (2, 1)


def test_aggregate_status_counts_zero_fills():
    factory = FakeConnFactory({"rows": [{"status": "Absent", "total": 4}, {"status": "Present", "total": 9}]})

    counts = MySQLAttendanceRepository(factory).aggregate_status_counts(
        start=date(2025, 1, 1), end=date(2025, 1, 1), department="Support"
    )

    assert counts == {
        AttendanceStatus.PRESENT: 9,
        AttendanceStatus.ABSENT: 4,
        AttendanceStatus.LATE: 0,
        AttendanceStatus.HALF_DAY: 0,
    }
    assert factory.executed[0][1] == (date(2025, 1, 1), date(2025, 1, 1), "Support")


def test_list_open_sessions_filters_in_sql():
    factory = FakeConnFactory({"rows": [row(), row(attendance_id=8, employee_id=4)]})

    records = MySQLAttendanceRepository(factory).list_by_shift_date(date(2025, 1, 1), open_only=True)

    assert [r.attendance_id for r in records] == [7, 8]
    assert "ar.clock_in IS NOT NULL AND ar.clock_out IS NULL" in factory.executed[0][0]


def test_timestamps_are_stored_in_whole_seconds():
    factory = FakeConnFactory({"rowcount": 1, "lastrowid": 7}, {"rows": [row()]})
    new = NewAttendance(
        employee_id=3,
        shift_date=date(2025, 1, 1),
        status=AttendanceStatus.PRESENT,
        clock_in=pkt(2025, 1, 1, 22, 0).replace(microsecond=600000),
    )

    MySQLAttendanceRepository(factory).insert_if_absent(new)

    assert factory.executed[0][1][2] == datetime(2025, 1, 1, 17, 0, 0)


def test_list_by_date_range_filters_in_sql():
    factory = FakeConnFactory({"rows": [row(), row(attendance_id=8, shift_date=date(2025, 1, 2))]})

    records = MySQLAttendanceRepository(factory).list_by_date_range(
        date(2025, 1, 1), date(2025, 1, 2), employee_id=3, status=AttendanceStatus.PRESENT
    )

    assert [r.shift_date for r in records] == [date(2025, 1, 1), date(2025, 1, 2)]
    sql, params = factory.executed[0]
    assert "ar.shift_date BETWEEN %s AND %s AND ar.employee_id=%s AND ar.status=%s" in sql
    assert params == (date(2025, 1, 1), date(2025, 1, 2), 3, "Present")


def test_get_report_rows_joins_employee_projection():
    joined = row(employee_code="EMP003", first_name="Sara", last_name="Khan", department="Support")
    factory = FakeConnFactory({"rows": [joined]})

    rows = MySQLAttendanceRepository(factory).get_report_rows(
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 1),
        department="Support",
        status=AttendanceStatus.PRESENT,
    )

    assert rows[0].record.attendance_id == 7
    assert rows[0].employee_projection() == {
        "id": 3,
        "employeeId": "EMP003",
        "firstName": "Sara",
        "lastName": "Khan",
        "department": "Support",
    }
    sql, params = factory.executed[0]
    assert "JOIN employees e ON e.employee_id = ar.employee_id" in sql
    assert "ar.shift_date BETWEEN %s AND %s AND e.department=%s AND ar.status=%s" in sql
    assert params == (date(2025, 1, 1), date(2025, 1, 1), "Support", "Present")
