from __future__ import annotations

from datetime import date

import pytest

from fakes import FixedClock, InMemoryAttendance, InMemoryEmployees, make_employee, make_settings, pkt
from night_attendance.container import assemble_container
from night_attendance.core.constants import SEEDING_JOB_ID
from night_attendance.core.enums import AttendanceStatus
from night_attendance.core.exceptions import StoreUnavailableError
from night_attendance.main import create_app


@pytest.fixture
def clock():
    return FixedClock(pkt(2025, 1, 1, 22, 0))


@pytest.fixture
def employees():
    return InMemoryEmployees.of(make_employee(1), make_employee(2), make_employee(3, department="Sales"))


@pytest.fixture
def attendance(employees):
    return InMemoryAttendance(employees)


@pytest.fixture
def container(attendance, employees, clock):
    return assemble_container(
        attendance_repo=attendance,
        employees_repo=employees,
        shift_settings=make_settings(),
        clock=clock,
    )


@pytest.fixture
def app(container):
    return create_app(container=container, settings_module="night_attendance.config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, employee_id=1, role="employee"):
    with client.session_transaction() as sess:
        sess["employee_id"] = employee_id
        sess["role"] = role


def test_window_info_needs_no_session(client, clock):
    clock.set(pkt(2025, 1, 1, 17, 0))

    resp = client.get("/api/attendance/window")

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["isWithinWindow"] is False
    assert data["allowedWindow"] == "6:00 PM - 5:30 AM PKT"
    assert data["nextAvailableTime"] == "2025-01-01T18:00:00+05:00"
    assert data["secondsUntilOpen"] == 3600


def test_clock_in_requires_session(client):
    resp = client.post("/api/attendance/clock-in")

    assert resp.status_code == 401


def test_clock_in_created_then_conflict(client):
    login(client)

    resp = client.post("/api/attendance/clock-in")
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["shiftDate"] == "2025-01-01"
    assert data["status"] == "Present"
    assert data["clockIn"] == "2025-01-01T22:00:00+05:00"
    assert data["employee"]["employeeId"] == "EMP001"

    resp = client.post("/api/attendance/clock-in")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ALREADY_CLOCKED_IN_TODAY"


def test_clock_in_outside_window_is_forbidden_with_countdown(client, clock):
    login(client)
    clock.set(pkt(2025, 1, 1, 10, 0))

    resp = client.post("/api/attendance/clock-in")

    assert resp.status_code == 403
    body = resp.get_json()
    assert body["error"] == "ATTENDANCE_TIME_RESTRICTED"
    assert body["nextAvailableTime"] == "2025-01-01T18:00:00+05:00"
    assert body["allowedWindow"] == "6:00 PM - 5:30 AM PKT"


def test_clock_in_unknown_employee(client):
    login(client, employee_id=42)

    resp = client.post("/api/attendance/clock-in")

    assert resp.status_code == 404
    assert resp.get_json()["error"] == "EMPLOYEE_NOT_FOUND"


def test_clock_out_flow_and_status(client, clock):
    login(client)
    client.post("/api/attendance/clock-in")
    clock.set(pkt(2025, 1, 2, 4, 0))

    resp = client.post("/api/attendance/clock-out")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["hoursWorked"] == 6.0

    resp = client.post("/api/attendance/clock-in")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ALREADY_CLOCKED_OUT_TODAY"

    status = client.get("/api/attendance/status").get_json()["data"]
    assert status["isClockedIn"] is True
    assert status["isClockedOut"] is True
    assert status["record"]["shiftDate"] == "2025-01-01"


def test_clock_out_without_session(client):
    login(client)

    resp = client.post("/api/attendance/clock-out")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "NO_ACTIVE_SESSION"


def test_store_outage_is_a_generic_server_error(client, attendance):
    login(client)

    def down(new):
        raise StoreUnavailableError("connection refused")

    attendance.insert_if_absent = down

    resp = client.post("/api/attendance/clock-in")

    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "message": "Internal server error"}


def test_admin_routes_reject_employees(client):
    login(client)

    assert client.get("/api/attendance/admin").status_code == 403
    assert client.post("/api/jobs/seed-absences").status_code == 403


def test_admin_list_and_summary(client, attendance):
    attendance.add(1, date(2025, 1, 1), clock_in=pkt(2025, 1, 1, 18, 0), clock_out=pkt(2025, 1, 1, 23, 0))
    attendance.add(2, date(2025, 1, 1), status=AttendanceStatus.ABSENT, auto_marked=True)
    attendance.add(3, date(2025, 1, 1), clock_in=pkt(2025, 1, 1, 19, 0), status=AttendanceStatus.LATE)
    login(client, employee_id=99, role="admin")

    body = client.get("/api/attendance/admin?date=2025-01-01&status=Present").get_json()
    assert body["count"] == 1
    assert body["data"][0]["employee"]["firstName"] == "First1"
    assert body["data"][0]["hoursWorked"] == 5.0

    summary = client.get("/api/attendance/admin/summary?date=2025-01-01").get_json()["data"]
    assert summary == {"Present": 1, "Absent": 1, "Late": 1, "Half-day": 0, "totalEmployees": 3}

    resp = client.get("/api/attendance/admin?date=01-01-2025")
    assert resp.status_code == 400


def test_admin_patch_and_bulk(client, attendance):
    record = attendance.add(3, date(2025, 1, 1), clock_in=pkt(2025, 1, 1, 19, 0), status=AttendanceStatus.LATE)
    login(client, employee_id=99, role="admin")

    resp = client.patch(f"/api/attendance/admin/{record.attendance_id}", json={"status": "Present"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "Present"

    assert client.patch("/api/attendance/admin/999", json={"status": "Present"}).status_code == 404
    assert client.patch(f"/api/attendance/admin/{record.attendance_id}", json={"status": "Vacation"}).status_code == 400

    resp = client.post(
        "/api/attendance/admin/bulk",
        json={"records": [{"id": record.attendance_id, "status": "Half-day", "clockOut": "2025-01-01T23:00:00+05:00"}, {"id": 999, "status": "Present"}]},
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"] == {"matchedCount": 1, "modifiedCount": 1}
    assert attendance.get_by_id(record.attendance_id).clock_out == pkt(2025, 1, 1, 23, 0)


def test_manual_seeding_and_conflict(client, container, clock):
    clock.set(pkt(2025, 1, 1, 18, 0))
    login(client, employee_id=99, role="admin")

    resp = client.post("/api/jobs/seed-absences")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["created"] == 3

    lock = container.scheduler._locks[SEEDING_JOB_ID]
    lock.acquire()
    try:
        resp = client.post("/api/jobs/seed-absences")
    finally:
        lock.release()
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "JOB_ALREADY_RUNNING"


def test_manual_finalization_and_schedule(client, attendance, clock):
    attendance.add(1, date(2025, 1, 1), clock_in=pkt(2025, 1, 1, 23, 0))
    clock.set(pkt(2025, 1, 2, 6, 30))
    login(client, employee_id=99, role="admin")

    data = client.post("/api/jobs/finalize").get_json()["data"]
    assert data["closed"] == 1
    assert data["summary"]["autoClosed"] == 1

    schedule = client.get("/api/jobs/schedule").get_json()["data"]
    assert schedule["running"] is False
    assert schedule["nextFireTimes"]["absence_seeding"] == "2025-01-02T18:00:00+05:00"


def test_manual_finalization_during_running_shift_is_rejected(client, attendance, clock):
    record = attendance.add(1, date(2025, 1, 1), clock_in=pkt(2025, 1, 1, 22, 0))
    clock.set(pkt(2025, 1, 2, 1, 0))
    login(client, employee_id=99, role="admin")

    resp = client.post("/api/jobs/finalize")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "VALIDATION_ERROR"
    assert attendance.get_by_id(record.attendance_id).is_open
