"""
Product endpoints, including each product's ingredient configuration.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.api.deps import IdPath, require_admin
from serb_burger.database import get_db
from serb_burger.schemas import (
    ErrorResponse,
    MessageResponse,
    ProductCreate,
    ProductIngredientCreate,
    ProductIngredientOut,
    ProductIngredientUpdate,
    ProductOut,
    ProductUpdate,
)
from serb_burger.services import catalog

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)

admin_only = [Depends(require_admin)]


# =============================================================================
# PRODUCTS
# =============================================================================

@router.get("", response_model=list[ProductOut], summary="List Products")
async def list_products(db: AsyncSession = Depends(get_db)) -> list[ProductOut]:
    """Products ordered by name, with category, ingredient links and order counts."""
    return await catalog.list_products(db)


@router.post(
    "",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
    summary="Create Product",
)
async def create_product(data: ProductCreate, db: AsyncSession = Depends(get_db)) -> ProductOut:
    return await catalog.create_product(db, data)


@router.get("/{product_id}", response_model=ProductOut)
async def get_product(product_id: IdPath, db: AsyncSession = Depends(get_db)) -> ProductOut:
    return await catalog.get_product(db, product_id)


@router.put("/{product_id}", response_model=ProductOut, dependencies=admin_only)
async def update_product(
    product_id: IdPath,
    data: ProductUpdate,
    db: AsyncSession = Depends(get_db),
) -> ProductOut:
    return await catalog.update_product(db, product_id, data)


@router.delete("/{product_id}", response_model=MessageResponse, dependencies=admin_only)
async def delete_product(product_id: IdPath, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    """Refused once the product appears in any order."""
    await catalog.delete_product(db, product_id)
    return MessageResponse(message="Продукт успешно удален")


# =============================================================================
# INGREDIENT CONFIGURATION
# =============================================================================

@router.get("/{product_id}/ingredients", response_model=list[ProductIngredientOut])
async def list_product_ingredients(
    product_id: IdPath,
    db: AsyncSession = Depends(get_db),
) -> list[ProductIngredientOut]:
    return await catalog.list_product_ingredients(db, product_id)


@router.post(
    "/{product_id}/ingredients",
    response_model=ProductIngredientOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
async def add_product_ingredient(
    product_id: IdPath,
    data: ProductIngredientCreate,
    db: AsyncSession = Depends(get_db),
) -> ProductIngredientOut:
    return await catalog.add_product_ingredient(db, product_id, data)


@router.delete("/{product_id}/ingredients", response_model=MessageResponse, dependencies=admin_only)
async def clear_product_ingredients(
    product_id: IdPath,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Detach every ingredient, typically before re-attaching a new set."""
    await catalog.clear_product_ingredients(db, product_id)
    return MessageResponse(message="Все ингредиенты продукта удалены")


@router.put(
    "/{product_id}/ingredients/{ingredient_id}",
    response_model=ProductIngredientOut,
    dependencies=admin_only,
)
async def update_product_ingredient(
    product_id: IdPath,
    ingredient_id: IdPath,
    data: ProductIngredientUpdate,
    db: AsyncSession = Depends(get_db),
) -> ProductIngredientOut:
    return await catalog.update_product_ingredient(db, product_id, ingredient_id, data)


@router.delete(
    "/{product_id}/ingredients/{ingredient_id}",
    response_model=MessageResponse,
    dependencies=admin_only,
)
async def remove_product_ingredient(
    product_id: IdPath,
    ingredient_id: IdPath,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await catalog.remove_product_ingredient(db, product_id, ingredient_id)
    return MessageResponse(message="Ингредиент успешно удален из продукта")
