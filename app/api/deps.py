"""
API dependencies

Admin auth accepts the signed session token either from the HttpOnly cookie
(CSRF double-submit required on mutations) or as a Bearer header.
"""
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import decode_session_cookie
from app.core.cookies import (
    get_session_cookie,
    get_csrf_token_from_cookie,
    get_csrf_token_from_header,
)
from app.core.csrf import tokens_match
from app.services.admin_session_service import AdminSessionService

# Optional bearer - doesn't fail if no Authorization header
security = HTTPBearer(auto_error=False)


@dataclass
class AdminContext:
    """Authenticated admin request: the session token and how it arrived."""
    session_token: str
    via_cookie: bool


def get_token_from_request(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
) -> Optional[str]:
    """
    Extract the signed session token.

    Priority:
    1. Authorization header (Bearer token) - scripts and API clients
    2. HttpOnly cookie - admin dashboard
    """
    if credentials and credentials.credentials:
        return credentials.credentials
    return get_session_cookie(request)


def validate_csrf_for_mutation(request: Request, via_cookie: bool) -> bool:
    """Cookie-authenticated mutations need matching CSRF cookie and header."""
    if request.method in ("GET", "HEAD", "OPTIONS"):
        return True
    if not via_cookie:
        return True

    return tokens_match(
        get_csrf_token_from_cookie(request),
        get_csrf_token_from_header(request),
    )


async def _resolve_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
    db: AsyncSession,
) -> Optional[AdminContext]:
    signed = get_token_from_request(request, credentials)
    if not signed:
        return None

    session_token = decode_session_cookie(signed)
    if not session_token:
        return None

    if not await AdminSessionService.is_session_valid(db, session_token):
        return None

    via_cookie = not (credentials and credentials.credentials)
    return AdminContext(session_token=session_token, via_cookie=via_cookie)


async def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> AdminContext:
    """Require a valid admin session."""
    admin = await _resolve_admin(request, credentials, db)
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin session required"
        )

    if not validate_csrf_for_mutation(request, admin.via_cookie):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="CSRF token missing or invalid"
        )

    return admin


async def get_optional_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Optional[AdminContext]:
    """Admin context if the request carries a valid session, None otherwise."""
    return await _resolve_admin(request, credentials, db)
