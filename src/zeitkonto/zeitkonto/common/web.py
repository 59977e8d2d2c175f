from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.enums import Role


def error_response(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        return Role.EMPLOYEE


def current_name() -> str:
    return (session.get("name") or "").strip()


def employee_access_required(view):
    """Admins may act on any employee; everyone else only on their own ``employee_id``."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response("Bitte melde dich an, um fortzufahren.", 401)
        if session.get("role") != Role.ADMIN.value and str(session.get("user_id")) != str(kwargs.get("employee_id")):
            return error_response("Keine Berechtigung", 403)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response("Bitte melde dich an, um fortzufahren.", 401)
        if session.get("role") != Role.ADMIN.value:
            return error_response("Keine Berechtigung", 403)
        return view(*args, **kwargs)

    return wrapper
