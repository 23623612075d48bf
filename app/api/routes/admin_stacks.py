"""
Admin stack routes

Stack CRUD, storefront ordering and membership edits.
"""
from typing import List

from fastapi import APIRouter, Depends, status, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_log import (
    log_admin_action,
    ACTION_STACK_CREATE,
    ACTION_STACK_UPDATE,
    ACTION_STACK_TOGGLE,
    ACTION_STACK_DELETE,
    ACTION_STACK_REORDER,
    ACTION_STACK_MEMBERS,
)
from app.core.database import get_db
from app.core.rate_limit import get_client_ip
from app.api.deps import require_admin, AdminContext
from app.api.routes.stacks import stack_to_response
from app.schemas.stack import (
    StackCreate,
    StackUpdate,
    StackResponse,
    StackReorderRequest,
    StackMemberAdd,
    StackMemberMove,
)
from app.services.stack_service import StackService

router = APIRouter()


# ==================== Stacks ====================

@router.get("", response_model=List[StackResponse])
async def list_all_stacks(
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    """All stacks, inactive and empty ones included"""
    listings = await StackService.list_stacks(db, include_inactive=True)
    return [stack_to_response(listing) for listing in listings]


@router.put("/reorder", status_code=status.HTTP_204_NO_CONTENT)
async def reorder_stacks(
    data: StackReorderRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    await StackService.reorder_stacks(db, data.stacks)
    log_admin_action(
        ACTION_STACK_REORDER, "stack",
        details={"order": [entry.id for entry in data.stacks]},
        ip_address=get_client_ip(request),
    )


@router.get("/{stack_id}", response_model=StackResponse)
async def get_stack(
    stack_id: str,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    return stack_to_response(await StackService.get_stack(db, stack_id))


@router.post("", response_model=StackResponse, status_code=status.HTTP_201_CREATED)
async def create_stack(
    data: StackCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    listing = await StackService.create_stack(db, data)
    log_admin_action(
        ACTION_STACK_CREATE, "stack", listing.stack.id,
        details={"title": listing.stack.title, "members": len(listing.members)},
        ip_address=get_client_ip(request),
    )
    return stack_to_response(listing)


@router.patch("/{stack_id}", response_model=StackResponse)
async def update_stack(
    stack_id: str,
    data: StackUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    """Partial update; a members list replaces every member"""
    listing = await StackService.update_stack(db, stack_id, data)
    log_admin_action(
        ACTION_STACK_UPDATE, "stack", stack_id,
        details={"fields": sorted(data.model_fields_set)},
        ip_address=get_client_ip(request),
    )
    return stack_to_response(listing)


@router.post("/{stack_id}/toggle-status", response_model=StackResponse)
async def toggle_stack_status(
    stack_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    stack = await StackService.toggle_active(db, stack_id)
    log_admin_action(
        ACTION_STACK_TOGGLE, "stack", stack_id,
        details={"is_active": stack.is_active},
        ip_address=get_client_ip(request),
    )
    return stack_to_response(await StackService.get_stack(db, stack_id))


@router.delete("/{stack_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stack(
    stack_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    await StackService.delete_stack(db, stack_id)
    log_admin_action(ACTION_STACK_DELETE, "stack", stack_id, ip_address=get_client_ip(request))


# ==================== Members ====================

@router.post("/{stack_id}/products", response_model=StackResponse, status_code=status.HTTP_201_CREATED)
async def add_stack_product(
    stack_id: str,
    data: StackMemberAdd,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    listing = await StackService.add_product_to_stack(db, stack_id, data.product_id, data.position)
    log_admin_action(
        ACTION_STACK_MEMBERS, "stack", stack_id,
        details={"added": data.product_id},
        ip_address=get_client_ip(request),
    )
    return stack_to_response(listing)


@router.put("/{stack_id}/products/{product_id}", response_model=StackResponse)
async def move_stack_product(
    stack_id: str,
    product_id: str,
    data: StackMemberMove,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    listing = await StackService.move_stack_product(db, stack_id, product_id, data.position)
    log_admin_action(
        ACTION_STACK_MEMBERS, "stack", stack_id,
        details={"moved": product_id, "position": data.position},
        ip_address=get_client_ip(request),
    )
    return stack_to_response(listing)


@router.delete("/{stack_id}/products/{product_id}", response_model=StackResponse)
async def remove_stack_product(
    stack_id: str,
    product_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: AdminContext = Depends(require_admin),
):
    listing = await StackService.remove_product_from_stack(db, stack_id, product_id)
    log_admin_action(
        ACTION_STACK_MEMBERS, "stack", stack_id,
        details={"removed": product_id},
        ip_address=get_client_ip(request),
    )
    return stack_to_response(listing)
