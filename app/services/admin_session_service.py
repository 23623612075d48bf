"""
Admin Session Service

Server-side admin sessions. Expiry is detected lazily: the first check after
expires_at flips the row inactive.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.admin_session import AdminSession

logger = logging.getLogger(__name__)


class AdminSessionService:

    @staticmethod
    async def create_session(db: AsyncSession, hours: Optional[int] = None) -> AdminSession:
        """Create an active session expiring after ADMIN_SESSION_HOURS."""
        hours = hours if hours is not None else settings.ADMIN_SESSION_HOURS
        session = AdminSession(
            token=secrets.token_urlsafe(32),
            is_active=True,
            expires_at=datetime.now(timezone.utc) + timedelta(hours=hours),
        )
        db.add(session)
        await db.commit()
        await db.refresh(session)

        logger.info(f"Admin session {session.id} created, expires {session.expires_at}")
        return session

    @staticmethod
    async def _get(db: AsyncSession, token: str) -> Optional[AdminSession]:
        result = await db.execute(select(AdminSession).where(AdminSession.token == token))
        return result.scalar_one_or_none()

    @staticmethod
    async def is_session_valid(db: AsyncSession, token: Optional[str]) -> bool:
        if not token:
            return False

        session = await AdminSessionService._get(db, token)
        if session is None or not session.is_active:
            return False

        if session.is_expired():
            session.is_active = False
            await db.commit()
            logger.info(f"Admin session {session.id} expired")
            return False

        return True

    @staticmethod
    async def invalidate_session(db: AsyncSession, token: Optional[str]) -> bool:
        """Deactivate a session; the row is kept. Returns False if unknown."""
        if not token:
            return False

        session = await AdminSessionService._get(db, token)
        if session is None:
            return False

        session.is_active = False
        await db.commit()
        logger.info(f"Admin session {session.id} invalidated")
        return True
