"""
Admin category routes
"""
from typing import List

from fastapi import APIRouter, Depends, status, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_log import (
    log_admin_action,
    ACTION_CATEGORY_CREATE,
    ACTION_CATEGORY_UPDATE,
    ACTION_CATEGORY_TOGGLE,
    ACTION_CATEGORY_DELETE,
)
from app.core.database import get_db
from app.core.rate_limit import get_client_ip
from app.api.deps import require_admin, AdminContext
from app.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from app.services.category_service import CategoryService

router = APIRouter()


@router.get("", response_model=List[CategoryResponse])
async def list_all_categories(
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    categories = await CategoryService.list_categories(db, include_inactive=True)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    data: CategoryCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    category = await CategoryService.create_category(db, data)
    log_admin_action(
        ACTION_CATEGORY_CREATE, "category", category.id,
        details={"title": category.title},
        ip_address=get_client_ip(request),
    )
    return CategoryResponse.model_validate(category)


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    category = await CategoryService.update_category(db, category_id, data)
    log_admin_action(ACTION_CATEGORY_UPDATE, "category", category_id, ip_address=get_client_ip(request))
    return CategoryResponse.model_validate(category)


@router.post("/{category_id}/toggle-status", response_model=CategoryResponse)
async def toggle_category_status(
    category_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    category = await CategoryService.toggle_active(db, category_id)
    log_admin_action(
        ACTION_CATEGORY_TOGGLE, "category", category_id,
        details={"is_active": category.is_active},
        ip_address=get_client_ip(request),
    )
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    await CategoryService.delete_category(db, category_id)
    log_admin_action(ACTION_CATEGORY_DELETE, "category", category_id, ip_address=get_client_ip(request))
