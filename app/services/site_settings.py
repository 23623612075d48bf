"""
Site Settings Service

Database-driven key/value configuration (maintenance mode, etc.).
"""
from datetime import datetime, timezone
from typing import Dict, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.site_settings import SiteSetting

logger = logging.getLogger(__name__)

MAINTENANCE_MODE_KEY = "maintenance_mode"


class SiteSettingsService:
    """
    Read and upsert site settings.

    Keeps a per-instance cache; instances are created per request/session,
    so values are never stale across requests.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self._cache: Dict[str, str] = {}

    async def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a setting value by key, or default when absent."""
        if key in self._cache:
            return self._cache[key]

        result = await self.db.execute(
            select(SiteSetting).where(SiteSetting.key == key)
        )
        setting = result.scalar_one_or_none()

        if setting is None:
            return default

        self._cache[key] = setting.value
        return setting.value

    async def set(self, key: str, value: str, description: Optional[str] = None) -> SiteSetting:
        """Upsert by key: insert if absent, else update value and timestamp."""
        result = await self.db.execute(
            select(SiteSetting).where(SiteSetting.key == key)
        )
        setting = result.scalar_one_or_none()

        if setting is None:
            setting = SiteSetting(key=key, value=value, description=description)
            self.db.add(setting)
        else:
            setting.value = value
            if description is not None:
                setting.description = description
            setting.updated_at = datetime.now(timezone.utc)

        await self.db.commit()
        await self.db.refresh(setting)

        self._cache[key] = setting.value
        logger.info(f"Site setting {key} updated")
        return setting

    async def get_maintenance_mode(self) -> bool:
        value = await self.get(MAINTENANCE_MODE_KEY, "false")
        return (value or "").strip().lower() == "true"

    async def set_maintenance_mode(self, enabled: bool) -> bool:
        await self.set(
            MAINTENANCE_MODE_KEY,
            "true" if enabled else "false",
            description="Storefront maintenance mode",
        )
        return enabled
