"""
Ingredient endpoints. Reads are public; writes need an admin session.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.api.deps import IdPath, require_admin
from serb_burger.database import get_db
from serb_burger.schemas import (
    ErrorResponse,
    IngredientCreate,
    IngredientOut,
    IngredientUpdate,
    MessageResponse,
)
from serb_burger.services import catalog

router = APIRouter(
    prefix="/ingredients",
    tags=["Ingredients"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@router.get("", response_model=list[IngredientOut], summary="List Ingredients")
async def list_ingredients(db: AsyncSession = Depends(get_db)) -> list[IngredientOut]:
    """Ordered by type, then name."""
    return await catalog.list_ingredients(db)


@router.post(
    "",
    response_model=IngredientOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    summary="Create Ingredient",
)
async def create_ingredient(
    data: IngredientCreate,
    db: AsyncSession = Depends(get_db),
) -> IngredientOut:
    return await catalog.create_ingredient(db, data)


@router.get("/{ingredient_id}", response_model=IngredientOut)
async def get_ingredient(ingredient_id: IdPath, db: AsyncSession = Depends(get_db)) -> IngredientOut:
    return await catalog.get_ingredient(db, ingredient_id)


@router.put("/{ingredient_id}", response_model=IngredientOut, dependencies=[Depends(require_admin)])
async def update_ingredient(
    ingredient_id: IdPath,
    data: IngredientUpdate,
    db: AsyncSession = Depends(get_db),
) -> IngredientOut:
    return await catalog.update_ingredient(db, ingredient_id, data)


@router.delete("/{ingredient_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_ingredient(ingredient_id: IdPath, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    """Refused while any product still uses the ingredient."""
    await catalog.delete_ingredient(db, ingredient_id)
    return MessageResponse(message="Ингредиент успешно удален")
