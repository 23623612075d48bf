"""
Stack models

A stack is an ordered, titled collection of products shown on the storefront.
Stacks are ordered by display_order; members by a dense 1..N position.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base
from app.models.product import new_id


class Stack(Base):
    __tablename__ = "stacks"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    display_order = Column(Integer, nullable=False, default=0)  # not unique
    is_active = Column(Boolean, default=True, nullable=False)

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

    members = relationship(
        "StackProduct",
        back_populates="stack",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="StackProduct.position",
    )

    __table_args__ = (
        Index("ix_stacks_display_order", "display_order", "created_at"),
    )

    def __repr__(self):
        return f"<Stack {self.id} {self.title!r} order={self.display_order}>"


class StackProduct(Base):
    """Product membership in a stack with its 1-based position."""
    __tablename__ = "stack_products"

    id = Column(String(36), primary_key=True, default=new_id)
    stack_id = Column(String(36), ForeignKey("stacks.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    stack = relationship("Stack", back_populates="members")
    product = relationship("Product", back_populates="stack_memberships")

    __table_args__ = (
        UniqueConstraint("stack_id", "product_id", name="uq_stack_product"),
        Index("ix_stack_products_stack_position", "stack_id", "position"),
    )
