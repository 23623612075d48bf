"""
Security utilities - admin access code check, signed session tokens

The admin session cookie is a JWT signed with SECRET_KEY that carries the
opaque session token stored in admin_sessions. The signature stops forged
cookies before any database lookup; the row decides whether the session is
still active.
"""
import hmac
from datetime import datetime, timezone
from typing import Optional

from jose import JWTError, jwt

from app.core.config import settings

SESSION_TOKEN_TYPE = "admin_session"


def verify_admin_code(code: Optional[str]) -> bool:
    """Constant-time comparison of a submitted code against ADMIN_ACCESS_CODE."""
    if not code:
        return False
    return hmac.compare_digest(
        code.encode("utf-8"),
        settings.ADMIN_ACCESS_CODE.encode("utf-8"),
    )


def create_session_cookie(session_token: str, expires_at: datetime) -> str:
    """Sign a session token for the admin cookie / bearer header."""
    now = datetime.now(timezone.utc)
    to_encode = {
        "sid": session_token,
        "type": SESSION_TOKEN_TYPE,
        "iat": now,
        "exp": expires_at,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_cookie(value: str) -> Optional[str]:
    """Return the session token from a signed cookie, or None if invalid/expired."""
    try:
        payload = jwt.decode(
            value,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except JWTError:
        return None

    if payload.get("type") != SESSION_TOKEN_TYPE:
        return None
    return payload.get("sid")
