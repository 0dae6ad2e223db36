"""
Storefront Session (cart + active order)

The shopper's in-progress cart and the order being tracked after checkout
live in one versioned document, ``StorefrontSession``. Clients persist it
through a ``SessionRepository`` and never touch storage directly; older
documents are upgraded by ``migrate_session`` on load.

The ``/api/session`` endpoints keep the document server-side under an opaque
client key; checkout with that key empties the cart and records the order.
"""

import json
import logging
import os
import re
import tempfile
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, List, Optional

from filelock import FileLock
from pydantic import Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.core.config import get_settings
from serb_burger.core.errors import NotFound
from serb_burger.models import IngredientType, OrderStatus, Product
from serb_burger.schemas import SESSION_KEY_PATTERN, CamelModel
from serb_burger.services.customization import Customizer, IngredientOption
from serb_burger.services.pricing import cart_total, line_total, unit_price

logger = logging.getLogger(__name__)

SESSION_SCHEMA_VERSION = 1


class CartIngredient(CamelModel):
    id: int
    name: str
    price: float
    type: IngredientType


class CartItem(CamelModel):
    id: str
    product_id: int
    product_name: str
    product_image: Optional[str] = None
    quantity: int = Field(1, ge=1)
    selected_ingredients: List[CartIngredient] = []
    total_price: float  # unit price incl. ingredients

    @property
    def line_total(self) -> float:
        return line_total(self.total_price, self.quantity)


class ActiveOrder(CamelModel):
    id: str
    number: int
    status: OrderStatus = OrderStatus.PREPARING


class StorefrontSession(CamelModel):
    schema_version: int = SESSION_SCHEMA_VERSION
    items: List[CartItem] = []
    active_order: Optional[ActiveOrder] = None

    # -------------------------------------------------------------------------
    # Cart operations
    # -------------------------------------------------------------------------

    def add_item(self, product: Any, ingredients: Iterable[IngredientOption]) -> CartItem:
        """
        Add one customized product with quantity 1.

        ``product`` is anything with ``id``, ``name``, ``image`` and
        ``price`` (ORM row or menu schema).
        """
        chosen = list(ingredients)
        ingredients_key = "-".join(sorted(str(o.ingredient_id) for o in chosen))
        item = CartItem(
            id=f"{product.id}-{ingredients_key}-{int(time.time() * 1000)}",
            product_id=product.id,
            product_name=product.name,
            product_image=getattr(product, "image", None),
            quantity=1,
            selected_ingredients=[
                CartIngredient(id=o.ingredient_id, name=o.name, price=o.price, type=o.type)
                for o in chosen
            ],
            total_price=unit_price(product.price, (o.price for o in chosen)),
        )
        # Same product and options added within one millisecond
        while any(existing.id == item.id for existing in self.items):
            item.id += "+"
        self.items.append(item)
        return item

    def remove_item(self, item_id: str) -> None:
        self.items = [i for i in self.items if i.id != item_id]

    def update_quantity(self, item_id: str, delta: int) -> None:
        """Change quantity by ``delta``; never drops below 1."""
        for item in self.items:
            if item.id == item_id:
                item.quantity = max(1, item.quantity + delta)

    def clear(self) -> None:
        self.items = []

    def total(self) -> float:
        return cart_total((i.total_price, i.quantity) for i in self.items)

    def to_order_items(self) -> list[dict]:
        """Cart lines in the shape accepted by ``POST /api/checkout``."""
        return [
            {
                "productId": item.product_id,
                "quantity": item.quantity,
                "selectedIngredients": [
                    {"id": ing.id, "price": ing.price} for ing in item.selected_ingredients
                ],
                "totalPrice": item.total_price,
            }
            for item in self.items
        ]

    # -------------------------------------------------------------------------
    # Active order
    # -------------------------------------------------------------------------

    def set_active_order(self, order_id: str, number: int,
                         status: OrderStatus = OrderStatus.PREPARING) -> None:
        self.active_order = ActiveOrder(id=order_id, number=number, status=status)

    def clear_active_order(self) -> None:
        self.active_order = None


# =============================================================================
# MIGRATION
# =============================================================================

def _is_int(value: Any) -> bool:
    return isinstance(value, int) or (isinstance(value, str) and value.isdigit())


def _migrate_v0(raw: dict) -> dict:
    """
    Unversioned documents hold ``{"state": {"items": [...]}}`` for the cart
    and ``{"state": {"activeOrder": {...}}}`` for the order tracker. Items
    referring to non-numeric catalog ids have no database counterpart and
    are dropped.
    """
    state = raw.get("state", raw)
    items = []
    for item in state.get("items", []):
        ingredients = item.get("selectedIngredients", [])
        if not _is_int(item.get("productId")) or not all(_is_int(i.get("id")) for i in ingredients):
            logger.warning(f"Dropping legacy cart item {item.get('id')!r}: unknown catalog ids")
            continue
        items.append({
            **item,
            "productId": int(item["productId"]),
            "selectedIngredients": [
                {k: v for k, v in {**i, "id": int(i["id"])}.items() if k != "isDefault"}
                for i in ingredients
            ],
        })
    return {
        "schemaVersion": 1,
        "items": items,
        "activeOrder": state.get("activeOrder"),
    }


_MIGRATIONS = {0: _migrate_v0}


def migrate_session(raw: dict) -> StorefrontSession:
    """Upgrade a stored document to the current schema and parse it."""
    version = raw.get("schemaVersion", 0)
    if version > SESSION_SCHEMA_VERSION:
        raise ValueError(f"Unsupported session schema version {version}")
    while version < SESSION_SCHEMA_VERSION:
        raw = _MIGRATIONS[version](raw)
        version = raw["schemaVersion"]
    return StorefrontSession.model_validate(raw)


# =============================================================================
# REPOSITORIES
# =============================================================================

_KEY_RE = re.compile(SESSION_KEY_PATTERN)


class SessionRepository(ABC):
    """Storage for storefront sessions, keyed by an opaque client key."""

    @abstractmethod
    def load(self, key: str) -> StorefrontSession:
        """Return the stored session, or a fresh one if none exists."""

    @abstractmethod
    def save(self, key: str, session: StorefrontSession) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @staticmethod
    def _check_key(key: str) -> str:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid session key: {key!r}")
        return key

    @staticmethod
    def _dump(session: StorefrontSession) -> str:
        return session.model_dump_json(by_alias=True)


class InMemorySessionRepository(SessionRepository):
    def __init__(self):
        self._documents: dict[str, str] = {}

    def load(self, key: str) -> StorefrontSession:
        document = self._documents.get(self._check_key(key))
        if document is None:
            return StorefrontSession()
        return migrate_session(json.loads(document))

    def save(self, key: str, session: StorefrontSession) -> None:
        self._documents[self._check_key(key)] = self._dump(session)

    def delete(self, key: str) -> None:
        self._documents.pop(self._check_key(key), None)


class JsonFileSessionRepository(SessionRepository):
    """
    One JSON file per session key inside ``directory``.

    Reads and writes of a key hold ``<key>.json.lock``.
    """

    LOCK_TIMEOUT = 10  # seconds

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{self._check_key(key)}.json"

    def _lock(self, path: Path) -> FileLock:
        return FileLock(f"{path}.lock", timeout=self.LOCK_TIMEOUT)

    def load(self, key: str) -> StorefrontSession:
        path = self._path(key)
        with self._lock(path):
            if not path.exists():
                return StorefrontSession()
            document = json.loads(path.read_text(encoding="utf-8"))
        return migrate_session(document)

    def save(self, key: str, session: StorefrontSession) -> None:
        path = self._path(key)
        with self._lock(path):
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(self._dump(session))
            os.replace(tmp_name, path)
        logger.debug(f"Session saved: {key}")

    def delete(self, key: str) -> None:
        path = self._path(key)
        with self._lock(path):
            path.unlink(missing_ok=True)


@lru_cache()
def get_session_repository() -> SessionRepository:
    """Configured session store (cached); JSON files under SESSION_DIR."""
    return JsonFileSessionRepository(get_settings().session_dir)


# =============================================================================
# CATALOG-BACKED OPERATIONS
# =============================================================================

async def add_product(db: AsyncSession, session: StorefrontSession, product_id: int,
                      ingredient_ids: Iterable[int]) -> CartItem:
    """
    Add a product with the chosen ingredients, priced from the catalog.

    Raises:
        NotFound: unknown product
        SelectionError: choice breaks the product's ingredient rules
    """
    result = await db.execute(select(Product).where(Product.id == product_id))
    product = result.scalar_one_or_none()
    if product is None:
        raise NotFound("Продукт не найден", details={"productId": product_id})

    options = Customizer.for_product(product).check_selection(ingredient_ids)
    item = session.add_item(product, options)
    logger.info(f"Cart item added: {item.id} ({item.total_price:.2f})")
    return item


def require_item(session: StorefrontSession, item_id: str) -> CartItem:
    for item in session.items:
        if item.id == item_id:
            return item
    raise NotFound("Позиция корзины не найдена", details={"itemId": item_id})
