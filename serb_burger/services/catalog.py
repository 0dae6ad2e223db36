"""
Catalog Service

Database operations behind the catalog endpoints: categories, ingredients,
products and product-ingredient links. Functions take the request's
``AsyncSession``, raise ``NotFound`` / ``Conflict`` / ``ValidationFailed``
and return response schemas with their ``_count`` blocks filled in.
"""

import logging
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.core.errors import Conflict, NotFound, ValidationFailed
from serb_burger.models import Category, Ingredient, OrderItem, Product, ProductIngredient
from serb_burger.schemas import (
    CategoryBrief,
    CategoryCount,
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    IngredientCount,
    IngredientCreate,
    IngredientOut,
    IngredientUpdate,
    ProductCount,
    ProductCreate,
    ProductIngredientCreate,
    ProductIngredientOut,
    ProductIngredientUpdate,
    ProductOut,
    ProductUpdate,
)

logger = logging.getLogger(__name__)


CATEGORY_NOT_FOUND = "Категория не найдена"
INGREDIENT_NOT_FOUND = "Ингредиент не найден"
PRODUCT_NOT_FOUND = "Продукт не найден"
LINK_NOT_FOUND = "Связь между продуктом и ингредиентом не найдена"
SLUG_TAKEN = "Категория с таким slug уже существует"
LINK_EXISTS = "Этот ингредиент уже добавлен к продукту"


async def _commit(db: AsyncSession, conflict_message: str) -> None:
    """Commit, mapping unique-constraint races to ``Conflict``."""
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Integrity error on commit: {e.orig}")
        raise Conflict(conflict_message) from e


async def _reload(db: AsyncSession, model, pk: int):
    """Re-select a row so its relationships reflect the committed state."""
    result = await db.execute(
        select(model).where(model.id == pk).execution_options(populate_existing=True)
    )
    return result.scalar_one()


# =============================================================================
# CATEGORIES
# =============================================================================

def _category_out(category: Category, products: int) -> CategoryOut:
    return CategoryOut(
        id=category.id,
        name=category.name,
        slug=category.slug,
        count=CategoryCount(products=products),
    )


def _categories_query():
    return (
        select(Category, func.count(Product.id))
        .outerjoin(Product, Product.category_id == Category.id)
        .group_by(Category.id)
    )


async def list_categories(db: AsyncSession) -> list[CategoryOut]:
    result = await db.execute(_categories_query().order_by(Category.name))
    return [_category_out(category, count) for category, count in result.all()]


async def get_category(db: AsyncSession, category_id: int) -> CategoryOut:
    result = await db.execute(_categories_query().where(Category.id == category_id))
    row = result.first()
    if row is None:
        raise NotFound(CATEGORY_NOT_FOUND)
    return _category_out(*row)


async def _slug_taken(db: AsyncSession, slug: str, exclude_id: Optional[int] = None) -> bool:
    query = select(Category.id).where(Category.slug == slug)
    if exclude_id is not None:
        query = query.where(Category.id != exclude_id)
    return (await db.execute(query)).first() is not None


async def create_category(db: AsyncSession, data: CategoryCreate) -> CategoryOut:
    if await _slug_taken(db, data.slug):
        raise Conflict(SLUG_TAKEN)

    category = Category(name=data.name, slug=data.slug)
    db.add(category)
    await _commit(db, SLUG_TAKEN)

    logger.info(f"Category created: {category.slug} (#{category.id})")
    return _category_out(category, 0)


async def update_category(db: AsyncSession, category_id: int, data: CategoryUpdate) -> CategoryOut:
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFound(CATEGORY_NOT_FOUND)

    if data.slug and data.slug != category.slug and await _slug_taken(db, data.slug, category_id):
        raise Conflict(SLUG_TAKEN)

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(category, field, value)
    await _commit(db, SLUG_TAKEN)

    logger.info(f"Category updated: #{category_id}")
    return await get_category(db, category_id)


async def delete_category(db: AsyncSession, category_id: int) -> None:
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFound(CATEGORY_NOT_FOUND)

    products = await db.scalar(
        select(func.count(Product.id)).where(Product.category_id == category_id)
    )
    if products:
        raise Conflict("Невозможно удалить категорию, содержащую продукты")

    await db.delete(category)
    await db.commit()
    logger.info(f"Category deleted: #{category_id}")


# =============================================================================
# INGREDIENTS
# =============================================================================

def _ingredient_out(ingredient: Ingredient, links: int) -> IngredientOut:
    return IngredientOut(
        id=ingredient.id,
        name=ingredient.name,
        price=ingredient.price,
        type=ingredient.type,
        count=IngredientCount(product_ingredients=links),
    )


def _ingredients_query():
    return (
        select(Ingredient, func.count(ProductIngredient.id))
        .outerjoin(ProductIngredient, ProductIngredient.ingredient_id == Ingredient.id)
        .group_by(Ingredient.id)
    )


async def list_ingredients(db: AsyncSession) -> list[IngredientOut]:
    result = await db.execute(_ingredients_query().order_by(Ingredient.type, Ingredient.name))
    return [_ingredient_out(ingredient, count) for ingredient, count in result.all()]


async def get_ingredient(db: AsyncSession, ingredient_id: int) -> IngredientOut:
    result = await db.execute(_ingredients_query().where(Ingredient.id == ingredient_id))
    row = result.first()
    if row is None:
        raise NotFound(INGREDIENT_NOT_FOUND)
    return _ingredient_out(*row)


async def create_ingredient(db: AsyncSession, data: IngredientCreate) -> IngredientOut:
    ingredient = Ingredient(name=data.name, price=data.price, type=data.type)
    db.add(ingredient)
    await db.commit()

    logger.info(f"Ingredient created: {ingredient.name} (#{ingredient.id})")
    return _ingredient_out(ingredient, 0)


async def update_ingredient(db: AsyncSession, ingredient_id: int,
                            data: IngredientUpdate) -> IngredientOut:
    ingredient = await db.get(Ingredient, ingredient_id)
    if ingredient is None:
        raise NotFound(INGREDIENT_NOT_FOUND)

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(ingredient, field, value)
    await db.commit()

    logger.info(f"Ingredient updated: #{ingredient_id}")
    return await get_ingredient(db, ingredient_id)


async def delete_ingredient(db: AsyncSession, ingredient_id: int) -> None:
    ingredient = await db.get(Ingredient, ingredient_id)
    if ingredient is None:
        raise NotFound(INGREDIENT_NOT_FOUND)

    links = await db.scalar(
        select(func.count(ProductIngredient.id)).where(ProductIngredient.ingredient_id == ingredient_id)
    )
    if links:
        raise Conflict("Невозможно удалить ингредиент, который используется в продуктах")

    await db.delete(ingredient)
    await db.commit()
    logger.info(f"Ingredient deleted: #{ingredient_id}")


# =============================================================================
# PRODUCTS
# =============================================================================

def _product_out(product: Product, order_items: int) -> ProductOut:
    return ProductOut(
        id=product.id,
        name=product.name,
        description=product.description,
        image=product.image,
        price=product.price,
        category_id=product.category_id,
        category=CategoryBrief.model_validate(product.category),
        product_ingredients=[ProductIngredientOut.model_validate(l) for l in product.ingredient_links],
        count=ProductCount(order_items=order_items),
    )


def _products_query():
    return (
        select(Product, func.count(OrderItem.id))
        .outerjoin(OrderItem, OrderItem.product_id == Product.id)
        .group_by(Product.id)
    )


async def list_products(db: AsyncSession) -> list[ProductOut]:
    result = await db.execute(_products_query().order_by(Product.name))
    return [_product_out(product, count) for product, count in result.all()]


async def get_product(db: AsyncSession, product_id: int) -> ProductOut:
    result = await db.execute(_products_query().where(Product.id == product_id))
    row = result.first()
    if row is None:
        raise NotFound(PRODUCT_NOT_FOUND)
    return _product_out(*row)


async def _require_product(db: AsyncSession, product_id: int) -> Product:
    product = await db.get(Product, product_id)
    if product is None:
        raise NotFound(PRODUCT_NOT_FOUND)
    return product


async def _check_category_exists(db: AsyncSession, category_id: int) -> None:
    if await db.get(Category, category_id) is None:
        raise ValidationFailed(CATEGORY_NOT_FOUND)


async def create_product(db: AsyncSession, data: ProductCreate) -> ProductOut:
    await _check_category_exists(db, data.category_id)

    product = Product(**data.model_dump())
    db.add(product)
    await db.commit()

    logger.info(f"Product created: {product.name} (#{product.id})")
    return _product_out(await _reload(db, Product, product.id), 0)


async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate) -> ProductOut:
    product = await _require_product(db, product_id)

    changes = data.model_dump(exclude_unset=True)
    if changes.get("category_id") is not None and changes["category_id"] != product.category_id:
        await _check_category_exists(db, changes["category_id"])

    for field, value in changes.items():
        # Explicit null clears optional text fields only
        if value is None and field not in ("description", "image"):
            continue
        setattr(product, field, value)
    await db.commit()

    logger.info(f"Product updated: #{product_id}")
    await _reload(db, Product, product_id)
    return await get_product(db, product_id)


async def delete_product(db: AsyncSession, product_id: int) -> None:
    product = await _require_product(db, product_id)

    order_items = await db.scalar(
        select(func.count(OrderItem.id)).where(OrderItem.product_id == product_id)
    )
    if order_items:
        raise Conflict("Невозможно удалить продукт, который используется в заказах")

    await db.delete(product)  # cascades to ingredient links
    await db.commit()
    logger.info(f"Product deleted: #{product_id}")


# =============================================================================
# PRODUCT INGREDIENT LINKS
# =============================================================================

async def _get_link(db: AsyncSession, product_id: int, ingredient_id: int) -> ProductIngredient:
    result = await db.execute(
        select(ProductIngredient).where(
            ProductIngredient.product_id == product_id,
            ProductIngredient.ingredient_id == ingredient_id,
        )
    )
    link = result.scalar_one_or_none()
    if link is None:
        raise NotFound(LINK_NOT_FOUND)
    return link


async def list_product_ingredients(db: AsyncSession, product_id: int) -> list[ProductIngredientOut]:
    await _require_product(db, product_id)
    result = await db.execute(
        select(ProductIngredient)
        .where(ProductIngredient.product_id == product_id)
        .order_by(ProductIngredient.sort_order, ProductIngredient.id)
    )
    return [ProductIngredientOut.model_validate(link) for link in result.scalars().all()]


async def add_product_ingredient(db: AsyncSession, product_id: int,
                                 data: ProductIngredientCreate) -> ProductIngredientOut:
    await _require_product(db, product_id)
    if await db.get(Ingredient, data.ingredient_id) is None:
        raise ValidationFailed(INGREDIENT_NOT_FOUND)

    existing = await db.execute(
        select(ProductIngredient.id).where(
            ProductIngredient.product_id == product_id,
            ProductIngredient.ingredient_id == data.ingredient_id,
        )
    )
    if existing.first() is not None:
        raise Conflict(LINK_EXISTS)

    link = ProductIngredient(product_id=product_id, **data.model_dump())
    db.add(link)
    await _commit(db, LINK_EXISTS)

    logger.info(f"Ingredient #{data.ingredient_id} linked to product #{product_id}")
    return ProductIngredientOut.model_validate(await _reload(db, ProductIngredient, link.id))


async def update_product_ingredient(db: AsyncSession, product_id: int, ingredient_id: int,
                                    data: ProductIngredientUpdate) -> ProductIngredientOut:
    link = await _get_link(db, product_id, ingredient_id)

    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        # maxQuantity: null means unbounded; other fields ignore nulls
        if value is None and field != "max_quantity":
            continue
        setattr(link, field, value)
    await db.commit()

    logger.info(f"Link product #{product_id} / ingredient #{ingredient_id} updated")
    return ProductIngredientOut.model_validate(await _reload(db, ProductIngredient, link.id))


async def remove_product_ingredient(db: AsyncSession, product_id: int, ingredient_id: int) -> None:
    link = await _get_link(db, product_id, ingredient_id)
    await db.delete(link)
    await db.commit()
    logger.info(f"Ingredient #{ingredient_id} unlinked from product #{product_id}")


async def clear_product_ingredients(db: AsyncSession, product_id: int) -> int:
    """Detach every ingredient from a product; returns how many were removed."""
    await _require_product(db, product_id)
    result = await db.execute(
        delete(ProductIngredient).where(ProductIngredient.product_id == product_id)
    )
    await db.commit()
    logger.info(f"All ingredients unlinked from product #{product_id} ({result.rowcount})")
    return result.rowcount
