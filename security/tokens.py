from datetime import datetime, timedelta, timezone

from flask import current_app
from jose import ExpiredSignatureError, JWTError, jwt


class TokenError(Exception):
    pass


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


def _secret() -> str:
    return current_app.config.get("JWT_SECRET") or current_app.config["SECRET_KEY"]


def _algorithm() -> str:
    return current_app.config.get("JWT_ALGORITHM", "HS256")


def create_access_token(user_id: int, role: str, expires_in: int = None) -> str:
    lifetime = expires_in
    if lifetime is None:
        lifetime = current_app.config.get("JWT_EXPIRES_SECONDS", 7 * 24 * 60 * 60)
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": now + timedelta(seconds=lifetime),
    }
    return jwt.encode(claims, _secret(), algorithm=_algorithm())


def decode_access_token(token: str) -> int:
    """
    Verify signature and expiry; returns the user id from ``sub``.
    Raises TokenExpired or TokenInvalid.
    """
    try:
        claims = jwt.decode(token, _secret(), algorithms=[_algorithm()])
    except ExpiredSignatureError as exc:
        raise TokenExpired("Token has expired") from exc
    except JWTError as exc:
        raise TokenInvalid("Invalid token") from exc

    try:
        return int(claims.get("sub"))
    except (TypeError, ValueError) as exc:
        raise TokenInvalid("Invalid token") from exc
