"""
Admin product routes

All mutations are audit logged. Image cleanup on delete is best effort.
"""
import logging
from math import ceil
from typing import Optional

from fastapi import APIRouter, Depends, status, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_log import (
    log_admin_action,
    ACTION_PRODUCT_CREATE,
    ACTION_PRODUCT_UPDATE,
    ACTION_PRODUCT_TOGGLE,
    ACTION_PRODUCT_DELETE,
)
from app.core.config import settings
from app.core.database import get_db
from app.core.rate_limit import get_client_ip
from app.api.deps import require_admin, AdminContext
from app.api.routes.products import product_to_response, parse_id_list
from app.schemas.product import ProductCreate, ProductUpdate, ProductResponse, ProductList
from app.services.product_service import ProductService, ProductFilter
from app.services.storage import StorageService, get_storage_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ProductList)
async def list_all_products(
    q: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    stack_id: Optional[str] = None,
    category_ids: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    """Admin listing, inactive products included"""
    filters = ProductFilter(
        query=q,
        page=page,
        page_size=limit,
        stack_id=stack_id,
        category_ids=parse_id_list(category_ids),
        include_inactive=True,
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
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    return product_to_response(await ProductService.get_product(db, product_id))


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    product = await ProductService.create_product(db, data)
    log_admin_action(
        ACTION_PRODUCT_CREATE, "product", product.id,
        details={"title": product.title, "gross_price": str(product.gross_price)},
        ip_address=get_client_ip(request),
    )
    return product_to_response(product)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    data: ProductUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    """Partial update; category_ids (even empty) replaces the category set"""
    product = await ProductService.update_product(db, product_id, data)
    log_admin_action(
        ACTION_PRODUCT_UPDATE, "product", product_id,
        details={"fields": sorted(data.model_fields_set)},
        ip_address=get_client_ip(request),
    )
    return product_to_response(product)


@router.post("/{product_id}/toggle-status", response_model=ProductResponse)
async def toggle_product_status(
    product_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    await ProductService.toggle_active(db, product_id)
    product = await ProductService.get_product(db, product_id)
    log_admin_action(
        ACTION_PRODUCT_TOGGLE, "product", product_id,
        details={"is_active": product.is_active},
        ip_address=get_client_ip(request),
    )
    return product_to_response(product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
    storage: StorageService = Depends(get_storage_service),
):
    await ProductService.delete_product(db, product_id, storage=storage)
    log_admin_action(ACTION_PRODUCT_DELETE, "product", product_id, ip_address=get_client_ip(request))
