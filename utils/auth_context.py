from functools import wraps
from flask import g, jsonify, request

from models.user import User
from security.tokens import TokenError, decode_access_token
from utils.ids import get_by_id

NO_TOKEN = "No token provided, access denied"


def _bearer_token():
    header = request.headers.get("Authorization", "")
    if not header:
        return None
    if header.startswith("Bearer "):
        header = header[len("Bearer "):]
    return header.strip() or None


def load_current_user():
    """
    Resolve the request's bearer token to an active user.

    Never rejects: g.user is None for anonymous requests and g.auth_error
    records why a presented token was refused. Mandatory routes turn that
    into a 401 through login_required.
    """
    g.user = None
    g.auth_error = NO_TOKEN

    token = _bearer_token()
    if not token:
        return

    try:
        user_id = decode_access_token(token)
    except TokenError as exc:
        g.auth_error = str(exc)
        return

    user = get_by_id(User, user_id)
    if user is None:
        g.auth_error = "Token is not valid - user not found"
        return
    if not user.is_active:
        g.auth_error = "Account is deactivated"
        return

    g.user = user
    g.auth_error = None


def unauthenticated_response():
    return jsonify(message=getattr(g, "auth_error", None) or NO_TOKEN), 401


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            return unauthenticated_response()
        return fn(*args, **kwargs)
    return wrapper


def current_user_or_none():
    """Optional-auth routes read the caller through this; None means anonymous."""
    return getattr(g, "user", None)
