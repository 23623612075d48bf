"""
Stack Schemas

Request/response models for storefront stacks and their members.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, Field, field_validator


# ==================== Member Schemas ====================

class StackMemberIn(BaseModel):
    """Member as supplied by the admin form; positions are renumbered 1..N."""
    product_id: str = Field(..., min_length=1)
    position: int = Field(default=0, ge=0)


class StackMemberAdd(BaseModel):
    product_id: str = Field(..., min_length=1)
    position: Optional[int] = Field(None, ge=1, description="1-based; defaults to the end")


class StackMemberMove(BaseModel):
    position: int = Field(..., ge=1)


class StackProductSummary(BaseModel):
    id: str
    title: str
    gross_price: Decimal
    discount_price: Optional[Decimal] = None
    discount_percent: int
    images: List[str] = []
    is_active: bool

    model_config = {"from_attributes": True}


class StackMemberResponse(BaseModel):
    product_id: str
    position: int
    product: StackProductSummary

    model_config = {"from_attributes": True}


# ==================== Stack Schemas ====================

class StackCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    is_active: bool = True
    members: Optional[List[StackMemberIn]] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v


class StackUpdate(BaseModel):
    """Partial update. A members list (even empty) replaces all members."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    is_active: Optional[bool] = None
    members: Optional[List[StackMemberIn]] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v


class StackResponse(BaseModel):
    id: str
    title: str
    display_order: int
    is_active: bool
    members: List[StackMemberResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StackOrderEntry(BaseModel):
    id: str = Field(..., min_length=1)
    display_order: int = Field(..., ge=0)


class StackReorderRequest(BaseModel):
    stacks: List[StackOrderEntry] = Field(..., min_length=1)
