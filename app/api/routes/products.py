"""
Public product routes

Storefront listing/search and product detail. Inactive products are only
listed for a valid admin session.
"""
from math import ceil
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import NotFoundError
from app.api.deps import get_optional_admin, AdminContext
from app.models.product import Product
from app.schemas.category import CategorySummary
from app.schemas.product import ProductResponse, ProductList
from app.services.product_service import ProductService, ProductFilter

router = APIRouter()


def product_to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        title=product.title,
        description=product.description,
        gross_price=product.gross_price,
        discount_price=product.discount_price,
        discount_percent=product.discount_percent or 0,
        images=list(product.images or []),
        is_active=product.is_active,
        categories=[CategorySummary.model_validate(c) for c in product.categories],
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def parse_id_list(raw: Optional[str]) -> List[str]:
    """Comma-separated ids -> list, blanks dropped."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


@router.get("", response_model=ProductList)
async def list_products(
    q: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    stack_id: Optional[str] = None,
    category_ids: Optional[str] = Query(None, description="Comma-separated category ids"),
    include_inactive: bool = False,
    db: AsyncSession = Depends(get_db),
    admin: Optional[AdminContext] = Depends(get_optional_admin),
):
    """List products with search, stack/category filters and pagination"""
    filters = ProductFilter(
        query=q,
        page=page,
        page_size=limit,
        stack_id=stack_id,
        category_ids=parse_id_list(category_ids),
        include_inactive=include_inactive and admin is not None,
    )
    products, total = await ProductService.list_products(db, filters)

    return ProductList(
        items=[product_to_response(p) for p in products],
        total=total,
        page=filters.page,
        per_page=filters.page_size,
        pages=ceil(total / filters.page_size) if total else 0,
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, db: AsyncSession = Depends(get_db)):
    """Get product by ID (active products only)"""
    try:
        product = await ProductService.get_product(db, product_id)
    except NotFoundError:
        product = None

    if product is None or not product.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )
    return product_to_response(product)
