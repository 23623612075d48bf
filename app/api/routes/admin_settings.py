"""
Admin API Routes for Site Settings

Maintenance mode switch plus raw key/value access.
"""
import logging

from fastapi import APIRouter, HTTPException, Depends, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_log import log_admin_action, ACTION_CONFIG_UPDATE
from app.core.database import get_db
from app.core.rate_limit import get_client_ip
from app.api.deps import require_admin, AdminContext
from app.schemas.admin import (
    MaintenanceModeRequest,
    SiteConfigResponse,
    SettingUpdateRequest,
    SettingResponse,
)
from app.services.site_settings import SiteSettingsService

logger = logging.getLogger(__name__)

router = APIRouter()

SETTING_KEY_PATTERN = "^[a-z][a-z0-9_]*$"


@router.get("/maintenance", response_model=SiteConfigResponse)
async def get_maintenance(
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    return SiteConfigResponse(maintenance_mode=await SiteSettingsService(db).get_maintenance_mode())


@router.put("/maintenance", response_model=SiteConfigResponse)
async def set_maintenance(
    data: MaintenanceModeRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    enabled = await SiteSettingsService(db).set_maintenance_mode(data.enabled)
    log_admin_action(
        ACTION_CONFIG_UPDATE, "site_setting", "maintenance_mode",
        details={"enabled": enabled},
        ip_address=get_client_ip(request),
    )
    logger.info(f"Maintenance mode set to {enabled}")
    return SiteConfigResponse(maintenance_mode=enabled)


@router.get("/settings/{key}", response_model=SettingResponse)
async def get_setting(
    key: str = Path(..., max_length=100, pattern=SETTING_KEY_PATTERN),
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    value = await SiteSettingsService(db).get(key)
    if value is None:
        raise HTTPException(status_code=404, detail=f"Setting '{key}' not found")
    return SettingResponse(key=key, value=value)


@router.put("/settings/{key}", response_model=SettingResponse)
async def put_setting(
    data: SettingUpdateRequest,
    request: Request,
    key: str = Path(..., max_length=100, pattern=SETTING_KEY_PATTERN),
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    setting = await SiteSettingsService(db).set(key, data.value, description=data.description)
    log_admin_action(ACTION_CONFIG_UPDATE, "site_setting", key, ip_address=get_client_ip(request))
    return SettingResponse.model_validate(setting)
