"""
Product model

Catalog item with gross price, optional discounted price and a derived
discount percentage. Hard delete; membership rows in stack_products and
product_categories go with the product.
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, JSON, Numeric, Index, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


def new_id() -> str:
    """UUID4 text id shared by the catalog tables."""
    return str(uuid.uuid4())


def compute_discount_percent(gross_price, discount_price) -> int:
    """
    Whole-number percentage saved: round((gross - discounted) / gross * 100).

    Half-up on the exact decimal value, clamped to 0..100. No discounted price
    (or a non-positive gross) means 0.
    """
    if discount_price is None or gross_price is None:
        return 0
    gross = Decimal(str(gross_price))
    discounted = Decimal(str(discount_price))
    if gross <= 0:
        return 0
    percent = ((gross - discounted) / gross * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return max(0, min(100, int(percent)))


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)

    # Pricing: Numeric(12,2) for money, percentage is derived only
    gross_price = Column(Numeric(12, 2), nullable=False)
    discount_price = Column(Numeric(12, 2), nullable=True)
    discount_percent = Column(Integer, nullable=False, default=0)

    # Public object-storage URLs
    images = Column(JSON, default=lambda: [])

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        server_default=func.now()
    )

    # Relationships
    categories = relationship(
        "Category",
        secondary="product_categories",
        order_by="Category.title",
        viewonly=True,
    )
    stack_memberships = relationship("StackProduct", back_populates="product", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("gross_price > 0", name="check_gross_price_positive"),
        CheckConstraint("discount_price >= 0", name="check_discount_price_non_negative"),
        Index("ix_products_active_title", "is_active", "title"),
    )

    def apply_pricing(self, gross_price, discount_price: Optional[object]) -> None:
        """Set both prices and recompute the stored percentage."""
        self.gross_price = gross_price
        self.discount_price = discount_price
        self.discount_percent = compute_discount_percent(gross_price, discount_price)

    def __repr__(self):
        return f"<Product {self.id} {self.title!r}>"
