"""
Public category routes
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.category import CategoryResponse
from app.services.category_service import CategoryService

router = APIRouter()


@router.get("", response_model=List[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    categories = await CategoryService.list_categories(db, include_inactive=False)
    return [CategoryResponse.model_validate(c) for c in categories]
