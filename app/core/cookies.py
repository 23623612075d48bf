"""
Cookie Management Utilities

Centralized cookie handling for the admin session.
"""
from typing import Optional
from fastapi import Response
from starlette.requests import Request

from app.core.config import settings
from app.core.csrf import generate_csrf_token


# Cookie names
ADMIN_SESSION_COOKIE = "catalog_admin_session"
CSRF_TOKEN_COOKIE = "catalog_csrf_token"
CSRF_TOKEN_HEADER = "X-CSRF-Token"


def get_cookie_domain(request: Request) -> Optional[str]:
    """
    Get the cookie domain from settings or auto-detect from request.

    Returns None for localhost to let the browser auto-set.
    For production, returns the root domain with leading dot for cross-subdomain sharing.
    """
    if settings.COOKIE_DOMAIN:
        return settings.COOKIE_DOMAIN

    host = request.headers.get("host", "").split(":")[0]

    if host in ("localhost", "127.0.0.1", "test", ""):
        return None

    # e.g., api.example.com -> .example.com
    parts = host.split(".")
    if len(parts) >= 2:
        return f".{'.'.join(parts[-2:])}"

    return host


def set_session_cookies(
    response: Response,
    request: Request,
    session_cookie: str,
) -> str:
    """
    Set the admin session cookie and its CSRF companion.

    - session cookie: HttpOnly, Secure (not readable by JS)
    - csrf token: Non-HttpOnly (readable by JS for the header)

    Returns the CSRF token for including in response body.
    """
    domain = get_cookie_domain(request)
    csrf_token = generate_csrf_token()
    max_age = settings.ADMIN_SESSION_HOURS * 60 * 60

    response.set_cookie(
        key=ADMIN_SESSION_COOKIE,
        value=session_cookie,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        domain=domain,
        max_age=max_age,
        path="/",
    )

    response.set_cookie(
        key=CSRF_TOKEN_COOKIE,
        value=csrf_token,
        httponly=False,  # JS needs to read this
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        domain=domain,
        max_age=max_age,
        path="/",
    )

    return csrf_token


def clear_session_cookies(response: Response, request: Request) -> None:
    """Clear the admin session cookies."""
    domain = get_cookie_domain(request)

    for cookie_name in (ADMIN_SESSION_COOKIE, CSRF_TOKEN_COOKIE):
        response.delete_cookie(key=cookie_name, domain=domain, path="/")


def get_session_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(ADMIN_SESSION_COOKIE)


def get_csrf_token_from_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(CSRF_TOKEN_COOKIE)


def get_csrf_token_from_header(request: Request) -> Optional[str]:
    return request.headers.get(CSRF_TOKEN_HEADER)
