"""
CSRF Token Management

Double-submit cookie pattern for the admin dashboard:
1. Login sets a signed CSRF token as a non-HttpOnly cookie
2. The dashboard reads the cookie and echoes it in the X-CSRF-Token header
3. Admin mutations authenticated by cookie require cookie == header
"""
import hashlib
import hmac
import secrets
import time
from typing import Optional

from app.core.config import settings


def get_csrf_secret() -> str:
    """Get CSRF secret key, deriving from main SECRET_KEY if not set."""
    if settings.CSRF_SECRET_KEY:
        return settings.CSRF_SECRET_KEY
    return hashlib.sha256(f"{settings.SECRET_KEY}_csrf".encode()).hexdigest()


def _sign(message: str) -> str:
    return hmac.new(
        get_csrf_secret().encode(),
        message.encode(),
        hashlib.sha256
    ).hexdigest()


def generate_csrf_token() -> str:
    """
    Generate a new CSRF token.

    Format: {random_hex}.{timestamp}.{signature}
    """
    random_part = secrets.token_hex(32)
    timestamp = str(int(time.time()))
    return f"{random_part}.{timestamp}.{_sign(f'{random_part}.{timestamp}')}"


def validate_csrf_token(token: Optional[str], max_age_seconds: Optional[int] = None) -> bool:
    """Check signature and age of a CSRF token (age defaults to the admin session length)."""
    if not token:
        return False

    if max_age_seconds is None:
        max_age_seconds = settings.ADMIN_SESSION_HOURS * 3600

    try:
        random_part, timestamp_str, signature = token.split(".")
        if not hmac.compare_digest(signature, _sign(f"{random_part}.{timestamp_str}")):
            return False
        if max_age_seconds > 0 and time.time() - int(timestamp_str) > max_age_seconds:
            return False
        return True
    except (ValueError, TypeError):
        return False


def tokens_match(cookie_token: Optional[str], header_token: Optional[str]) -> bool:
    """Cookie and header tokens must both be valid and identical (constant-time)."""
    if not cookie_token or not header_token:
        return False

    if not validate_csrf_token(cookie_token):
        return False

    return hmac.compare_digest(cookie_token, header_token)
