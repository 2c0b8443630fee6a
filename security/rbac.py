from functools import wraps
from flask import g, jsonify

def require_roles(*role_names: str):
    """
    Usage: @require_roles("owner", "queue_master")

    superadmin passes every role check.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = getattr(g, "user", None)
            if user is None:
                return jsonify(message="Unauthenticated", error="unauthenticated"), 401

            if user.role != "superadmin" and user.role not in role_names:
                return jsonify(message="Forbidden", error="forbidden"), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator

def superadmin_only(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = getattr(g, "user", None)
        if user is None:
            return jsonify(message="Unauthenticated", error="unauthenticated"), 401
        if user.role != "superadmin":
            return jsonify(message="Forbidden", error="forbidden"), 403
        return fn(*args, **kwargs)
    return wrapper
