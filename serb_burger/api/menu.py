from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.database import get_db
from serb_burger.schemas import MenuCategory
from serb_burger.services.menu import build_menu

router = APIRouter(tags=["Menu"])


@router.get("/menu", response_model=list[MenuCategory], summary="Storefront Menu")
async def get_menu(db: AsyncSession = Depends(get_db)) -> list[MenuCategory]:
    """Public, category-grouped product listing with ingredient options."""
    return await build_menu(db)
