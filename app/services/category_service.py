"""
Category Service

CRUD for categories plus the product↔category association.
"""
import logging
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models.category import Category, ProductCategory, DEFAULT_CATEGORY_COLOR
from app.schemas.category import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)


class CategoryService:

    @staticmethod
    async def list_categories(db: AsyncSession, include_inactive: bool = False) -> List[Category]:
        query = select(Category)
        if not include_inactive:
            query = query.where(Category.is_active.is_(True))
        query = query.order_by(Category.title, Category.id)

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_category(db: AsyncSession, category_id: str) -> Category:
        category = await db.get(Category, category_id)
        if category is None:
            raise NotFoundError("category", category_id)
        return category

    @staticmethod
    async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
        category = Category(
            title=data.title.strip(),
            description=data.description,
            color=data.color or DEFAULT_CATEGORY_COLOR,
            is_active=data.is_active,
        )
        db.add(category)
        await db.commit()
        await db.refresh(category)

        logger.info(f"Created category {category.title} (ID: {category.id})")
        return category

    @staticmethod
    async def update_category(db: AsyncSession, category_id: str, data: CategoryUpdate) -> Category:
        category = await CategoryService.get_category(db, category_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "title" and value is not None:
                value = value.strip()
            if field in ("title", "color", "is_active") and value is None:
                continue
            setattr(category, field, value)

        await db.commit()
        await db.refresh(category)
        return category

    @staticmethod
    async def toggle_active(db: AsyncSession, category_id: str) -> Category:
        category = await CategoryService.get_category(db, category_id)
        category.is_active = not category.is_active
        await db.commit()
        await db.refresh(category)

        logger.info(f"Category {category.id} is_active -> {category.is_active}")
        return category

    @staticmethod
    async def delete_category(db: AsyncSession, category_id: str) -> None:
        category = await CategoryService.get_category(db, category_id)

        await db.execute(delete(ProductCategory).where(ProductCategory.category_id == category_id))
        await db.delete(category)
        await db.commit()

        logger.info(f"Deleted category {category_id}")

    @staticmethod
    async def replace_product_categories(
        db: AsyncSession,
        product_id: str,
        category_ids: List[str],
    ) -> None:
        """
        Make the product's category set exactly `category_ids`.

        Runs inside the caller's transaction: flushes, never commits.
        """
        wanted: List[str] = []
        for category_id in category_ids:
            if category_id not in wanted:
                wanted.append(category_id)

        if wanted:
            result = await db.execute(select(Category.id).where(Category.id.in_(wanted)))
            found = set(result.scalars().all())
            missing = [c for c in wanted if c not in found]
            if missing:
                raise NotFoundError("category", missing[0])

        await db.execute(delete(ProductCategory).where(ProductCategory.product_id == product_id))
        for category_id in wanted:
            db.add(ProductCategory(product_id=product_id, category_id=category_id))
        await db.flush()

    @staticmethod
    async def get_product_category_ids(db: AsyncSession, product_id: str) -> List[str]:
        result = await db.execute(
            select(ProductCategory.category_id).where(ProductCategory.product_id == product_id)
        )
        return list(result.scalars().all())
