"""
Product Service

Listing, search and mutation of catalog products.

Prices: discount_percent is derived, never accepted from callers. Any write
touching either price recomputes it from the merged (stored + incoming)
pair, and the merged pair must satisfy discount_price <= gross_price.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, List, Tuple

from sqlalchemy import select, func, or_, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.exceptions import (
    NotFoundError,
    CatalogValidationError,
    StorageBackendError,
    ExternalServiceError,
)
from app.models.category import ProductCategory
from app.models.product import Product, compute_discount_percent
from app.models.stack import StackProduct
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.category_service import CategoryService
from app.services.storage import StorageService

logger = logging.getLogger(__name__)


@dataclass
class ProductFilter:
    query: Optional[str] = None
    page: int = 1
    page_size: int = field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE)
    stack_id: Optional[str] = None
    category_ids: List[str] = field(default_factory=list)
    include_inactive: bool = False

    def __post_init__(self):
        self.page = max(1, self.page or 1)
        self.page_size = max(1, min(self.page_size or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE))
        if self.query is not None:
            self.query = self.query.strip() or None


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _check_price_pair(gross_price, discount_price) -> None:
    if gross_price is None or gross_price <= 0:
        raise CatalogValidationError("gross_price must be greater than zero", field="gross_price")
    if discount_price is not None:
        if discount_price < 0:
            raise CatalogValidationError("discount_price must not be negative", field="discount_price")
        if discount_price > gross_price:
            raise CatalogValidationError(
                "discount_price must not exceed gross_price", field="discount_price"
            )


async def _commit(db: AsyncSession, operation: str) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Product {operation} failed: {e}")
        raise StorageBackendError(f"Product {operation} failed", operation=operation) from e


class ProductService:

    # ==================== Queries ====================

    @staticmethod
    async def list_products(
        db: AsyncSession,
        filters: Optional[ProductFilter] = None,
    ) -> Tuple[List[Product], int]:
        """
        List products matching every supplied filter.

        Returns tuple of (products, total_count); total counts all matching
        rows before pagination. Ordered by title, then id.
        """
        filters = filters or ProductFilter()
        query = select(Product)

        if not filters.include_inactive:
            query = query.where(Product.is_active.is_(True))

        if filters.query:
            pattern = f"%{_escape_like(filters.query)}%"
            query = query.where(or_(
                Product.title.ilike(pattern, escape="\\"),
                Product.id.ilike(pattern, escape="\\"),
            ))

        if filters.stack_id:
            query = query.where(Product.id.in_(
                select(StackProduct.product_id).where(StackProduct.stack_id == filters.stack_id)
            ))

        if filters.category_ids:
            # IN-subquery keeps one row per product when it matches several categories
            query = query.where(Product.id.in_(
                select(ProductCategory.product_id).where(
                    ProductCategory.category_id.in_(filters.category_ids)
                )
            ))

        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        query = (
            query.options(selectinload(Product.categories))
            .order_by(Product.title, Product.id)
            .offset((filters.page - 1) * filters.page_size)
            .limit(filters.page_size)
        )
        result = await db.execute(query)
        return list(result.scalars().all()), total

    @staticmethod
    async def get_product(db: AsyncSession, product_id: str) -> Product:
        """Fetch one product with its categories, regardless of active state."""
        result = await db.execute(
            select(Product)
            .where(Product.id == product_id)
            .options(selectinload(Product.categories))
            .execution_options(populate_existing=True)
        )
        product = result.scalar_one_or_none()
        if product is None:
            raise NotFoundError("product", product_id)
        return product

    # ==================== Mutations ====================

    @staticmethod
    async def create_product(
        db: AsyncSession,
        data: ProductCreate,
        category_ids: Optional[List[str]] = None,
    ) -> Product:
        if category_ids is None:
            category_ids = data.category_ids

        _check_price_pair(data.gross_price, data.discount_price)

        product = Product(
            title=data.title.strip(),
            description=data.description,
            images=list(data.images or []),
            is_active=data.is_active,
        )
        product.apply_pricing(data.gross_price, data.discount_price)
        db.add(product)
        await db.flush()

        if category_ids is not None:
            await CategoryService.replace_product_categories(db, product.id, category_ids)

        await _commit(db, "create")
        logger.info(f"Created product {product.title} (ID: {product.id})")
        return await ProductService.get_product(db, product.id)

    @staticmethod
    async def update_product(
        db: AsyncSession,
        product_id: str,
        data: ProductUpdate,
        category_ids: Optional[List[str]] = None,
    ) -> Product:
        """
        Apply a partial update.

        Only fields present in the payload are written. Sending
        discount_price explicitly as null clears the discount.
        """
        product = await ProductService.get_product(db, product_id)
        changes = data.model_dump(exclude_unset=True)
        payload_category_ids = changes.pop("category_ids", None)
        if category_ids is None:
            category_ids = payload_category_ids

        if "gross_price" in changes or "discount_price" in changes:
            gross = changes.pop("gross_price", product.gross_price)
            discount = changes.pop("discount_price", product.discount_price)
            _check_price_pair(gross, discount)
            product.apply_pricing(gross, discount)

        for name, value in changes.items():
            if name == "title":
                if value is None or not value.strip():
                    raise CatalogValidationError("title must not be blank", field="title")
                value = value.strip()
            elif name == "images":
                value = list(value or [])
            elif name == "is_active" and value is None:
                continue
            setattr(product, name, value)

        if category_ids is not None:
            await CategoryService.replace_product_categories(db, product.id, category_ids)

        await _commit(db, "update")
        logger.info(f"Updated product {product.id} fields={sorted(data.model_fields_set)}")
        return await ProductService.get_product(db, product.id)

    @staticmethod
    async def toggle_active(db: AsyncSession, product_id: str) -> Product:
        product = await ProductService.get_product(db, product_id)
        product.is_active = not product.is_active
        await _commit(db, "toggle")

        logger.info(f"Product {product.id} is_active -> {product.is_active}")
        return product

    @staticmethod
    async def delete_product(
        db: AsyncSession,
        product_id: str,
        storage: Optional[StorageService] = None,
    ) -> None:
        """
        Hard-delete a product and its memberships.

        Image removal from object storage is attempted first and is advisory:
        failures are logged and the row delete goes ahead.
        """
        product = await ProductService.get_product(db, product_id)
        images = list(product.images or [])

        if storage is not None and images:
            try:
                removed = await storage.delete_images(images)
                logger.info(f"Removed {removed} image(s) for product {product_id}")
            except ExternalServiceError as e:
                logger.warning(f"Image cleanup failed for product {product_id}: {e.message} {e.details}")

        await db.execute(delete(StackProduct).where(StackProduct.product_id == product_id))
        await db.execute(delete(ProductCategory).where(ProductCategory.product_id == product_id))
        await db.delete(product)
        await _commit(db, "delete")

        logger.info(f"Deleted product {product_id}")


__all__ = ["ProductService", "ProductFilter", "compute_discount_percent"]
