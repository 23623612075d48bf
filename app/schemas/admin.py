"""
Admin Schemas - login and site configuration
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AdminLoginRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=200)


class AdminLoginResponse(BaseModel):
    authenticated: bool
    csrf_token: str
    access_token: str
    expires_in: int


class AdminSessionStatus(BaseModel):
    authenticated: bool


class MaintenanceModeRequest(BaseModel):
    enabled: bool


class SiteConfigResponse(BaseModel):
    maintenance_mode: bool


class SettingUpdateRequest(BaseModel):
    value: str = Field(..., max_length=10000)
    description: Optional[str] = Field(None, max_length=500)


class SettingResponse(BaseModel):
    key: str
    value: str
    description: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
