"""
Product Schemas

Request/response models for the catalog product endpoints. Input
validation lives here; the services trust what they receive apart from the
cross-field price rule, which also depends on stored values.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.category import CategorySummary


def _clean_images(images: Optional[List[str]]) -> Optional[List[str]]:
    if images is None:
        return None
    return [url.strip() for url in images if url and url.strip()]


# ==================== Requests ====================

class ProductBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    gross_price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    discount_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    images: List[str] = Field(default_factory=list, description="Public image URLs")
    is_active: bool = True

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    @field_validator("images")
    @classmethod
    def clean_images(cls, v):
        return _clean_images(v)


class ProductCreate(ProductBase):
    category_ids: Optional[List[str]] = Field(None, description="Replaces the product's categories")

    @model_validator(mode="after")
    def check_discount(self):
        if self.discount_price is not None and self.discount_price > self.gross_price:
            raise ValueError("discount_price must not exceed gross_price")
        return self


class ProductUpdate(BaseModel):
    """Partial update. Only fields present in the payload are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    gross_price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    discount_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    images: Optional[List[str]] = None
    is_active: Optional[bool] = None
    category_ids: Optional[List[str]] = None

    @field_validator("images")
    @classmethod
    def clean_images(cls, v):
        return _clean_images(v)

    @model_validator(mode="after")
    def check_discount(self):
        if (
            self.gross_price is not None
            and self.discount_price is not None
            and self.discount_price > self.gross_price
        ):
            raise ValueError("discount_price must not exceed gross_price")
        return self


# ==================== Responses ====================

class ProductResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    gross_price: Decimal
    discount_price: Optional[Decimal] = None
    discount_percent: int
    images: List[str] = []
    is_active: bool
    categories: List[CategorySummary] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProductList(BaseModel):
    items: List[ProductResponse]
    total: int
    page: int
    per_page: int
    pages: int
