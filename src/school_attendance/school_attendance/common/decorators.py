from __future__ import annotations

from functools import wraps

from flask import jsonify, session


def role_required(*allowed_roles):
    """Restrict a JSON endpoint to the given roles.

    The upstream auth layer stores ``user_id`` and ``role`` in the Flask
    session. Usage: ``@role_required("admin", "teacher")``.
    """
    allowed = {getattr(r, "value", r).lower() for r in allowed_roles}

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401

            role = str(session.get("role") or "").lower()
            if allowed and role not in allowed:
                return jsonify({"success": False, "message": "Access forbidden: insufficient permissions"}), 403

            return fn(*args, **kwargs)

        return wrapper

    return decorator


def current_user_id() -> str:
    return str(session["user_id"])
