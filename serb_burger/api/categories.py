"""
Category endpoints. Reads are public; writes need an admin session.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.api.deps import IdPath, require_admin
from serb_burger.database import get_db
from serb_burger.schemas import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    ErrorResponse,
    MessageResponse,
)
from serb_burger.services import catalog

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@router.get("", response_model=list[CategoryOut], summary="List Categories")
async def list_categories(db: AsyncSession = Depends(get_db)) -> list[CategoryOut]:
    """All categories ordered by name, with their product counts."""
    return await catalog.list_categories(db)


@router.post(
    "",
    response_model=CategoryOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    summary="Create Category",
)
async def create_category(
    data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
) -> CategoryOut:
    return await catalog.create_category(db, data)


@router.get("/{category_id}", response_model=CategoryOut)
async def get_category(category_id: IdPath, db: AsyncSession = Depends(get_db)) -> CategoryOut:
    return await catalog.get_category(db, category_id)


@router.put("/{category_id}", response_model=CategoryOut, dependencies=[Depends(require_admin)])
async def update_category(
    category_id: IdPath,
    data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
) -> CategoryOut:
    return await catalog.update_category(db, category_id, data)


@router.delete("/{category_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_category(category_id: IdPath, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    """Refused while the category still contains products."""
    await catalog.delete_category(db, category_id)
    return MessageResponse(message="Категория успешно удалена")
