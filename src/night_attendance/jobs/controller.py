from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import admin_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    scheduler = container.scheduler

    @app.route("/api/jobs/seed-absences", methods=["POST"], endpoint="api_jobs_seed_absences")
    @admin_required
    def api_jobs_seed_absences():
        result = scheduler.run_seeding()
        return jsonify({"success": True, "data": result.to_dict()}), 200

    @app.route("/api/jobs/finalize", methods=["POST"], endpoint="api_jobs_finalize")
    @admin_required
    def api_jobs_finalize():
        result = scheduler.run_finalization()
        return jsonify({"success": True, "data": result.to_dict()}), 200

    @app.route("/api/jobs/schedule", methods=["GET"], endpoint="api_jobs_schedule")
    @admin_required
    def api_jobs_schedule():
        fire_times = scheduler.next_fire_times()
        return jsonify({
            "success": True,
            "data": {
                "running": scheduler.running,
                "nextFireTimes": {job_id: t.isoformat() for job_id, t in fire_times.items()},
            },
        }), 200
