from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.enums import Role
from ..core.exceptions import AuthorizationError


def _unauthenticated():
    return jsonify({"success": False, "error": "UNAUTHENTICATED", "message": "Please log in to continue"}), 401


def login_required(view):
    """Requires an employee session issued by the account service."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return _unauthenticated()
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "role" not in session:
            return _unauthenticated()
        if session.get("role") != Role.ADMIN.value:
            return jsonify(AuthorizationError("Admin access required").to_dict()), 403
        return view(*args, **kwargs)

    return wrapper


def current_employee_id() -> int:
    return int(session["employee_id"])
