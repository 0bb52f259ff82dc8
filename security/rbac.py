from functools import wraps
from flask import g, jsonify

from models.enums import Role
from utils.auth_context import unauthenticated_response


def require_roles(*roles: Role):
    """
    Usage: @require_roles(Role.ADMIN)
    """
    allowed = {Role(r).value for r in roles}

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if getattr(g, "user", None) is None:
                return unauthenticated_response()

            if g.user.role not in allowed:
                return jsonify(message="Access denied. Admin privileges required."), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator


admin_required = require_roles(Role.ADMIN)
