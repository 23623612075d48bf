"""
Public stack routes
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.stack import StackResponse, StackMemberResponse, StackProductSummary
from app.services.stack_service import StackService, StackListing

router = APIRouter()


def stack_to_response(listing: StackListing) -> StackResponse:
    stack = listing.stack
    return StackResponse(
        id=stack.id,
        title=stack.title,
        display_order=stack.display_order,
        is_active=stack.is_active,
        members=[
            StackMemberResponse(
                product_id=member.product_id,
                position=member.position,
                product=StackProductSummary(
                    id=member.product.id,
                    title=member.product.title,
                    gross_price=member.product.gross_price,
                    discount_price=member.product.discount_price,
                    discount_percent=member.product.discount_percent or 0,
                    images=list(member.product.images or []),
                    is_active=member.product.is_active,
                ),
            )
            for member in listing.members
        ],
        created_at=stack.created_at,
        updated_at=stack.updated_at,
    )


@router.get("", response_model=List[StackResponse])
async def list_stacks(db: AsyncSession = Depends(get_db)):
    """Active stacks with their active products; empty stacks are omitted"""
    listings = await StackService.list_stacks(db, include_inactive=False)
    return [stack_to_response(listing) for listing in listings]
