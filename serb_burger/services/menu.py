"""
Public menu: products grouped by category with their ingredient options.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.models import Category, Product
from serb_burger.schemas import MenuCategory, MenuIngredient, MenuProduct
from serb_burger.services.customization import IngredientOption


def _menu_ingredient(option: IngredientOption) -> MenuIngredient:
    return MenuIngredient(
        id=option.ingredient_id,
        name=option.name,
        price=option.price,
        type=option.type,
        selection_type=option.selection_type,
        is_required=option.is_required,
        max_quantity=option.max_quantity,
    )


def _menu_product(product: Product, category_slug: str) -> MenuProduct:
    options = [IngredientOption.from_link(link) for link in product.ingredient_links]
    options.sort(key=lambda o: (o.sort_order, o.ingredient_id))
    return MenuProduct(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        image=product.image,
        category=category_slug,
        ingredients=[_menu_ingredient(o) for o in options],
    )


async def build_menu(db: AsyncSession) -> list[MenuCategory]:
    """
    Categories by name, products by name within each; categories without
    products are left out.
    """
    result = await db.execute(
        select(Product)
        .join(Category, Product.category_id == Category.id)
        .order_by(Category.name, Category.id, Product.name, Product.id)
    )

    menu: dict[int, MenuCategory] = {}
    for product in result.scalars().all():
        category = product.category
        if category.id not in menu:
            menu[category.id] = MenuCategory(id=category.id, name=category.name, slug=category.slug)
        menu[category.id].items.append(_menu_product(product, category.slug))

    return list(menu.values())
