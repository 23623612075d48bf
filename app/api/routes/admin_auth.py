"""
Admin authentication routes

Code-based login: a correct access code opens a server-side session whose
signed token is set as an HttpOnly cookie (and returned for Bearer use).
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_log import log_admin_action, ACTION_ADMIN_LOGIN, ACTION_ADMIN_LOGOUT
from app.core.config import settings
from app.core.cookies import set_session_cookies, clear_session_cookies
from app.core.database import get_db
from app.core.rate_limit import limiter, get_client_ip
from app.core.security import verify_admin_code, create_session_cookie
from app.api.deps import get_optional_admin, require_admin, AdminContext
from app.schemas.admin import AdminLoginRequest, AdminLoginResponse, AdminSessionStatus
from app.services.admin_session_service import AdminSessionService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=AdminLoginResponse)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def login(
    request: Request,
    response: Response,
    data: AdminLoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Exchange the admin access code for a session"""
    client_ip = get_client_ip(request)

    if not verify_admin_code(data.code):
        log_admin_action(ACTION_ADMIN_LOGIN, "admin_session", ip_address=client_ip, success=False)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access code"
        )

    session = await AdminSessionService.create_session(db)
    signed = create_session_cookie(session.token, session.expires_at)
    csrf_token = set_session_cookies(response, request, signed)

    log_admin_action(ACTION_ADMIN_LOGIN, "admin_session", session.id, ip_address=client_ip)
    return AdminLoginResponse(
        authenticated=True,
        csrf_token=csrf_token,
        access_token=signed,
        expires_in=settings.ADMIN_SESSION_HOURS * 3600,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    """Invalidate the current session and clear cookies"""
    await AdminSessionService.invalidate_session(db, admin.session_token)
    clear_session_cookies(response, request)

    log_admin_action(ACTION_ADMIN_LOGOUT, "admin_session", ip_address=get_client_ip(request))


@router.get("/session", response_model=AdminSessionStatus)
async def check_session(admin: Optional[AdminContext] = Depends(get_optional_admin)):
    """Whether the request carries a valid admin session"""
    return AdminSessionStatus(authenticated=admin is not None)
