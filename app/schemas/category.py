"""
Category Schemas
"""
import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _normalize_color(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not HEX_COLOR_RE.match(v):
        raise ValueError("color must be a #RRGGBB hex value")
    return v.upper()


def _strip_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("title must not be blank")
    return v


class CategoryCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, description="#RRGGBB")
    is_active: bool = True

    @field_validator("title")
    @classmethod
    def strip_title(cls, v):
        return _strip_title(v)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        return _normalize_color(v)


class CategoryUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v):
        return _strip_title(v)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        return _normalize_color(v)


class CategorySummary(BaseModel):
    """Category as embedded in product responses."""
    id: str
    title: str
    color: str

    model_config = {"from_attributes": True}


class CategoryResponse(CategorySummary):
    description: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
