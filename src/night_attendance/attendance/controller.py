from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request

from ..common.auth import admin_required, current_employee_id, login_required
from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.validators import parse_status, require_positive_id
from ..core.exceptions import ValidationError
from ..container import Container
from .model import AttendancePatch, AttendanceRecord, AttendanceReportRow


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def record_to_dict(record: AttendanceRecord) -> dict:
    return {
        "id": record.attendance_id,
        "employeeId": record.employee_id,
        "shiftDate": record.shift_date.isoformat(),
        "clockIn": _iso(record.clock_in),
        "clockOut": _iso(record.clock_out),
        "status": record.status.value,
        "autoMarked": record.auto_marked,
        "autoClosed": record.auto_closed,
        "notes": record.notes,
    }


def _report_row_to_dict(row: AttendanceReportRow, hours: float) -> dict:
    out = record_to_dict(row.record)
    out["employee"] = row.employee_projection()
    out["hoursWorked"] = hours
    return out


def _date_arg(name: str):
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD") from None


def _datetime_field(payload: dict, name: str):
    raw = payload[name]
    if raw is None:
        return None
    try:
        return parse_iso_datetime(str(raw))
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 timestamp") from None


def _patch_from_payload(payload: dict) -> AttendancePatch:
    fields = {}
    if "status" in payload:
        status = parse_status(payload.get("status"))
        if status is None:
            raise ValidationError("status cannot be empty")
        fields["status"] = status
    if "clockIn" in payload:
        fields["clock_in"] = _datetime_field(payload, "clockIn")
    if "clockOut" in payload:
        fields["clock_out"] = _datetime_field(payload, "clockOut")
    if "notes" in payload:
        fields["notes"] = payload.get("notes")
    return AttendancePatch(**fields)


def register(app: Flask, container: Container) -> None:
    service = container.clocking_service
    admin = container.admin_service

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="api_clock_in")
    @login_required
    def api_clock_in():
        result = service.clock_in(current_employee_id())
        record = result.record
        return jsonify({
            "success": True,
            "message": "Clocked in successfully",
            "data": {
                "id": record.attendance_id,
                "clockIn": _iso(record.clock_in),
                "shiftDate": record.shift_date.isoformat(),
                "status": record.status.value,
                "employee": result.employee.projection(),
            },
        }), 201

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="api_clock_out")
    @login_required
    def api_clock_out():
        result = service.clock_out(current_employee_id())
        record = result.record
        return jsonify({
            "success": True,
            "message": "Clocked out successfully",
            "data": {
                "id": record.attendance_id,
                "clockIn": _iso(record.clock_in),
                "clockOut": _iso(record.clock_out),
                "hoursWorked": result.hours_worked,
            },
        }), 200

    @app.route("/api/attendance/status", methods=["GET"], endpoint="api_attendance_status")
    @login_required
    def api_attendance_status():
        view = service.get_status(current_employee_id())
        return jsonify({
            "success": True,
            "data": {
                "shiftDate": view.shift_date.isoformat(),
                "hasRecord": view.has_record,
                "isClockedIn": view.is_clocked_in,
                "isClockedOut": view.is_clocked_out,
                "record": record_to_dict(view.record) if view.record else None,
            },
        }), 200

    # -- admin -----------------------------------------------------------

    @app.route("/api/attendance/admin", methods=["GET"], endpoint="api_attendance_admin_list")
    @admin_required
    def api_attendance_admin_list():
        rows = admin.list_attendance(
            on_date=_date_arg("date"),
            start=_date_arg("start"),
            end=_date_arg("end"),
            department=request.args.get("department"),
            status=parse_status(request.args.get("status")),
        )
        data = [_report_row_to_dict(row, service.worked_hours(row.record)) for row in rows]
        return jsonify({"success": True, "count": len(data), "data": data}), 200

    @app.route("/api/attendance/admin/<attendance_id>", methods=["PATCH"], endpoint="api_attendance_admin_update")
    @admin_required
    def api_attendance_admin_update(attendance_id):
        record_id = require_positive_id(attendance_id, "attendance id")
        patch = _patch_from_payload(request.get_json(silent=True) or {})
        if patch.is_empty():
            raise ValidationError("No fields to update")
        updated = admin.update_record(record_id, patch)
        return jsonify({"success": True, "data": record_to_dict(updated)}), 200

    @app.route("/api/attendance/admin/bulk", methods=["POST"], endpoint="api_attendance_admin_bulk")
    @admin_required
    def api_attendance_admin_bulk():
        payload = request.get_json(silent=True) or {}
        raw_items = payload.get("records")
        if not isinstance(raw_items, list):
            raise ValidationError("records must be a list")

        items = []
        for raw in raw_items:
            if not isinstance(raw, dict):
                raise ValidationError("each record must be an object")
            record_id = require_positive_id(raw.get("id"), "id")
            items.append((record_id, _patch_from_payload(raw)))

        result = admin.bulk_update(items)
        return jsonify({
            "success": True,
            "data": {"matchedCount": result.matched_count, "modifiedCount": result.modified_count},
        }), 200

    @app.route("/api/attendance/admin/summary", methods=["GET"], endpoint="api_attendance_admin_summary")
    @admin_required
    def api_attendance_admin_summary():
        summary = admin.summary(
            on_date=_date_arg("date"),
            start=_date_arg("start"),
            end=_date_arg("end"),
            department=request.args.get("department"),
        )
        return jsonify({"success": True, "data": summary}), 200
