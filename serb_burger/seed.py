"""
Starter catalog for a fresh database.

Loads the house menu (ingredients by type, four categories, burgers with
their ingredient options, drinks, snacks and dipping sauces). Base
ingredients come first in each product's option order; the base bun and
patty are required single choices.

Usage:
    python scripts/seed_menu.py
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.models import (
    Category,
    Ingredient,
    IngredientType,
    Product,
    ProductIngredient,
    SelectionType,
)

logger = logging.getLogger(__name__)

IMAGE_URL = "https://images.unsplash.com/photo-{}?w=400&h=300&fit=crop&crop=center"


INGREDIENTS = {
    # key: (name, price, type)
    "bun-classic": ("Булочка классическая", 0, IngredientType.BUN),
    "bun-brioche": ("Бриошь", 50, IngredientType.BUN),
    "bun-whole-grain": ("Цельнозерновая", 30, IngredientType.BUN),
    "patty-beef": ("Говяжья котлета", 0, IngredientType.PATTY),
    "patty-chicken": ("Куриная котлета", 0, IngredientType.PATTY),
    "patty-double": ("Двойная котлета", 150, IngredientType.PATTY),
    "patty-veggie": ("Вегетарианская котлета", 80, IngredientType.PATTY),
    "cheese-cheddar": ("Чеддер", 30, IngredientType.CHEESE),
    "cheese-blue": ("Дорблю", 50, IngredientType.CHEESE),
    "cheese-mozzarella": ("Моцарелла", 40, IngredientType.CHEESE),
    "cheese-parmesan": ("Пармезан", 45, IngredientType.CHEESE),
    "veg-tomato": ("Томаты", 0, IngredientType.VEGETABLE),
    "veg-lettuce": ("Салат Айсберг", 0, IngredientType.VEGETABLE),
    "veg-onion": ("Лук красный", 0, IngredientType.VEGETABLE),
    "veg-pickle": ("Маринованный огурец", 20, IngredientType.VEGETABLE),
    "veg-jalapeno": ("Халапеньо", 30, IngredientType.VEGETABLE),
    "veg-cucumber": ("Огурец свежий", 15, IngredientType.VEGETABLE),
    "veg-spinach": ("Шпинат", 25, IngredientType.VEGETABLE),
    "addon-bacon": ("Бекон", 60, IngredientType.ADDON),
    "addon-egg": ("Яйцо", 40, IngredientType.ADDON),
    "addon-avocado": ("Авокадо", 70, IngredientType.ADDON),
    "addon-mushrooms": ("Грибы", 35, IngredientType.ADDON),
    "sauce-ketchup": ("Кетчуп", 0, IngredientType.SAUCE),
    "sauce-bbq": ("Барбекю", 0, IngredientType.SAUCE),
    "sauce-mayo": ("Майонез", 0, IngredientType.SAUCE),
    "sauce-garlic": ("Чесночный", 10, IngredientType.SAUCE),
    "sauce-spicy": ("Острый", 15, IngredientType.SAUCE),
}

CATEGORIES = {
    "burgers": "Бургеры",
    "drinks": "Напитки",
    "snacks": "Закуски",
    "sauces": "Соусы",
}

# Selection policy per ingredient type: (selection, max quantity)
TYPE_POLICY = {
    IngredientType.BUN: (SelectionType.SINGLE, None),
    IngredientType.PATTY: (SelectionType.SINGLE, None),
    IngredientType.CHEESE: (SelectionType.MULTIPLE, 2),
    IngredientType.VEGETABLE: (SelectionType.MULTIPLE, None),
    IngredientType.ADDON: (SelectionType.MULTIPLE, 3),
    IngredientType.SAUCE: (SelectionType.MULTIPLE, 2),
}

BURGERS = [
    {
        "name": "Сербский Классический",
        "description": "Сочная плескавица в домашней булочке с традиционными овощами",
        "image": IMAGE_URL.format("1568901346375-23c9450c58cd"),
        "price": 350,
        "base": ["bun-classic", "patty-beef", "veg-tomato", "veg-lettuce", "veg-onion", "sauce-ketchup"],
        "extra": [
            "bun-brioche", "bun-whole-grain", "patty-chicken", "patty-double", "patty-veggie",
            "cheese-cheddar", "cheese-blue", "cheese-mozzarella", "cheese-parmesan",
            "veg-pickle", "veg-jalapeno", "veg-cucumber", "veg-spinach",
            "addon-bacon", "addon-egg", "addon-avocado", "addon-mushrooms",
            "sauce-bbq", "sauce-mayo", "sauce-garlic", "sauce-spicy",
        ],
    },
    {
        "name": "Сырный Взрыв",
        "description": "Много сыра не бывает - двойная порция чеддера и моцареллы",
        "image": IMAGE_URL.format("1571091718767-18b5b1457add"),
        "price": 420,
        "base": ["bun-classic", "patty-beef", "cheese-cheddar", "cheese-mozzarella", "sauce-mayo"],
        "extra": [
            "bun-brioche", "patty-double", "patty-veggie",
            "cheese-blue", "cheese-parmesan",
            "veg-lettuce", "veg-tomato", "veg-onion", "veg-pickle", "veg-jalapeno",
            "addon-bacon", "addon-egg", "addon-avocado",
            "sauce-bbq", "sauce-garlic", "sauce-spicy",
        ],
    },
    {
        "name": "Острый Серб",
        "description": "Для любителей остренького с халапеньо и острым соусом",
        "image": IMAGE_URL.format("1551782450-17144efb5723"),
        "price": 390,
        "base": ["bun-classic", "patty-beef", "veg-tomato", "veg-lettuce", "veg-jalapeno", "sauce-spicy"],
        "extra": [
            "bun-brioche", "patty-double", "patty-chicken",
            "cheese-cheddar", "cheese-blue",
            "veg-onion", "veg-pickle", "veg-cucumber",
            "addon-bacon", "addon-egg",
            "sauce-bbq", "sauce-mayo", "sauce-garlic",
        ],
    },
    {
        "name": "Вегетарианский",
        "description": "Нежная овощная котлета с свежими овощами и авокадо",
        "image": IMAGE_URL.format("1520072959219-c595dc870360"),
        "price": 380,
        "base": [
            "bun-whole-grain", "patty-veggie", "veg-tomato", "veg-lettuce",
            "veg-cucumber", "veg-spinach", "addon-avocado", "sauce-garlic",
        ],
        "extra": [
            "bun-brioche", "bun-classic",
            "cheese-mozzarella", "cheese-parmesan",
            "veg-onion", "veg-pickle", "veg-jalapeno",
            "addon-mushrooms",
            "sauce-mayo", "sauce-bbq",
        ],
    },
    {
        "name": "Бекон Бомба",
        "description": "Классика + хрустящий бекон + яйцо",
        "image": IMAGE_URL.format("1551782450-17144efb5723"),
        "price": 450,
        "base": [
            "bun-brioche", "patty-beef", "addon-bacon", "addon-egg",
            "cheese-cheddar", "veg-tomato", "veg-lettuce", "sauce-bbq",
        ],
        "extra": [
            "bun-classic", "patty-double", "patty-chicken",
            "cheese-blue", "cheese-mozzarella",
            "veg-onion", "veg-pickle", "veg-jalapeno", "veg-cucumber",
            "addon-avocado", "addon-mushrooms",
            "sauce-mayo", "sauce-garlic", "sauce-spicy",
        ],
    },
    {
        "name": "Двойной Серб",
        "description": "Двойная порция мяса для настоящих гурманов",
        "image": IMAGE_URL.format("1586190848861-99aa4a171e90"),
        "price": 520,
        "base": [
            "bun-brioche", "patty-double", "cheese-cheddar", "cheese-mozzarella",
            "veg-tomato", "veg-lettuce", "veg-onion", "sauce-bbq",
        ],
        "extra": [
            "bun-classic", "bun-whole-grain",
            "cheese-blue", "cheese-parmesan",
            "veg-pickle", "veg-jalapeno", "veg-cucumber", "veg-spinach",
            "addon-bacon", "addon-egg", "addon-avocado", "addon-mushrooms",
            "sauce-mayo", "sauce-garlic", "sauce-spicy",
        ],
    },
]

# (category, name, description, image id, price)
SIMPLE_PRODUCTS = [
    ("drinks", "Coca-Cola", "Классический вкус - освежает и бодрит", "1554866585-cd94860890b7", 120),
    ("drinks", "Sprite", "Лимон-лайм, освежающий и легкий", "1625772299848-391b6a87d7b3", 120),
    ("drinks", "Fanta Апельсин", "Яркий апельсиновый вкус для хорошего настроения",
     "1581006852262-e4307cf6283a", 120),
    ("drinks", "Минеральная вода", "Природная вода с газами, полезная для здоровья",
     "1564415075618-47e8f29b9b4c", 80),
    ("snacks", "Картофель Фри", "Золотистый картофель фри с солью", "1639024471283-03518883512d", 150),
    ("snacks", "Картофель с сыром", "Фри с расплавленным чеддером и зеленью",
     "1585109649139-366815a0d713", 200),
    ("snacks", "Луковые кольца", "Хрустящие кольца лука в панировке", "1596797038530-2c107229654b", 180),
    ("snacks", "Палочки Моцарелла", "Сырные палочки в хрустящей панировке с соусом",
     "1541599468348-e96984315621", 220),
    ("snacks", "Куриные наггетсы", "Нежное куриное мясо в панировке (6 шт)",
     "1567620832903-9fc6debc209f", 250),
    ("sauces", "Сырный соус", "Тягучий сырный соус для обмакивания", "1471943311424-646960669fbc", 40),
    ("sauces", "Барбекю", "Сладко-острый соус с дымком", "1558642452-9d2a7deb7f62", 40),
    ("sauces", "Чесночный", "Острый чесночный соус с травами", "1551782450-17144efb5723", 40),
    ("sauces", "Острый", "Для любителей жара", "1596797038530-2c107229654b", 40),
    ("sauces", "Майонез", "Классический майонез", "1627625802912-208e587a8a23", 30),
    ("sauces", "Кетчуп", "Традиционный томатный кетчуп", "1601004890684-d8cbf643f5f2", 30),
]


def _burger_links(base: list[str], extra: list[str],
                  ingredients: dict[str, Ingredient]) -> list[ProductIngredient]:
    links = []
    for sort_order, key in enumerate(base + extra):
        ingredient = ingredients[key]
        selection, max_quantity = TYPE_POLICY[ingredient.type]
        links.append(ProductIngredient(
            ingredient=ingredient,
            selection_type=selection,
            # The base bun and patty must always be present
            is_required=key in base and selection == SelectionType.SINGLE,
            max_quantity=max_quantity,
            sort_order=sort_order,
        ))
    return links


async def seed_catalog(db: AsyncSession) -> bool:
    """
    Insert the starter catalog unless products already exist.

    Returns:
        True if the catalog was seeded, False if it was left untouched
    """
    existing = await db.scalar(select(func.count(Product.id)))
    if existing:
        logger.info(f"Catalog already has {existing} products, skipping seed")
        return False

    ingredients = {
        key: Ingredient(name=name, price=price, type=type_)
        for key, (name, price, type_) in INGREDIENTS.items()
    }
    categories = {slug: Category(name=name, slug=slug) for slug, name in CATEGORIES.items()}
    db.add_all(list(ingredients.values()) + list(categories.values()))

    for burger in BURGERS:
        db.add(Product(
            name=burger["name"],
            description=burger["description"],
            image=burger["image"],
            price=burger["price"],
            category=categories["burgers"],
            ingredient_links=_burger_links(burger["base"], burger["extra"], ingredients),
        ))

    for slug, name, description, image_id, price in SIMPLE_PRODUCTS:
        db.add(Product(
            name=name,
            description=description,
            image=IMAGE_URL.format(image_id),
            price=price,
            category=categories[slug],
        ))

    await db.commit()
    logger.info(
        f"Catalog seeded: {len(categories)} categories, {len(ingredients)} ingredients, "
        f"{len(BURGERS) + len(SIMPLE_PRODUCTS)} products"
    )
    return True
