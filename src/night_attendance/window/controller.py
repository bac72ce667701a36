from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/window", methods=["GET"], endpoint="api_attendance_window")
    def api_attendance_window():
        """Window state for the client countdown; no session needed."""
        info = container.window_policy.window_info(container.clock())
        return jsonify({"success": True, "data": info.to_dict()}), 200
