"""tests/conftest.py – shared fixtures for all tests."""
import os
import tempfile
from pathlib import Path

# Settings and the engine are built at import time: configure first.
DB_PATH = Path(tempfile.gettempdir()) / "serb_burger_test.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{DB_PATH}"
os.environ["ENV_MODE"] = "development"
os.environ["DEBUG"] = "false"
os.environ["ADMIN_PASSWORD"] = "test-admin"
os.environ["WATA_API_KEY"] = ""
os.environ["WATA_SHOP_ID"] = ""
os.environ["WATA_WEBHOOK_SECRET"] = ""
os.environ["SESSION_DIR"] = str(Path(tempfile.gettempdir()) / "serb_burger_test_sessions")

import pytest
from fastapi.testclient import TestClient

from serb_burger.models import IngredientType, SelectionType
from serb_burger.services.cart import InMemorySessionRepository
from serb_burger.services.customization import IngredientOption

ADMIN_PASSWORD = "test-admin"


# ── Builders ───────────────────────────────────────────────────────────────────

def option(ingredient_id: int, type_: IngredientType = IngredientType.ADDON, **kw) -> IngredientOption:
    defaults = dict(
        ingredient_id=ingredient_id,
        name=f"Ингредиент {ingredient_id}",
        price=0.0,
        type=type_,
        selection_type=SelectionType.MULTIPLE,
        is_required=False,
        max_quantity=None,
        sort_order=ingredient_id,
    )
    defaults.update(kw)
    return IngredientOption(**defaults)


def make_category(client, name="Бургеры", slug="burgers") -> dict:
    r = client.post("/api/categories", json={"name": name, "slug": slug})
    assert r.status_code == 201, r.text
    return r.json()


def make_ingredient(client, name="Бекон", price=60, type_="addon") -> dict:
    r = client.post("/api/ingredients", json={"name": name, "price": price, "type": type_})
    assert r.status_code == 201, r.text
    return r.json()


def make_product(client, category_id: int, name="Сербский Классический", price=350, **kw) -> dict:
    r = client.post("/api/products", json={"name": name, "price": price, "categoryId": category_id, **kw})
    assert r.status_code == 201, r.text
    return r.json()


def link(client, product_id: int, ingredient_id: int, selection="multiple", **kw) -> dict:
    r = client.post(
        f"/api/products/{product_id}/ingredients",
        json={"ingredientId": ingredient_id, "selectionType": selection, **kw},
    )
    assert r.status_code == 201, r.text
    return r.json()


# ── Fixtures ───────────────────────────────────────────────────────────────────

@pytest.fixture
def sessions():
    """Storefront sessions kept in memory for one test."""
    return InMemorySessionRepository()


@pytest.fixture
def app(sessions):
    from serb_burger.main import app as fastapi_app
    from serb_burger.services.cart import get_session_repository
    from serb_burger.services.payment import reset_payment_service

    reset_payment_service()
    fastapi_app.dependency_overrides[get_session_repository] = lambda: sessions
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()
    reset_payment_service()


@pytest.fixture
def client(app):
    """Anonymous client on a fresh database; lifespan creates the tables."""
    DB_PATH.unlink(missing_ok=True)
    with TestClient(app) as c:
        yield c
    DB_PATH.unlink(missing_ok=True)


@pytest.fixture
def admin(client):
    """The same client, logged in as admin."""
    r = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert r.status_code == 200
    return client


@pytest.fixture
def burger(admin):
    """Category 'burgers' with a 350 ₽ burger and bacon (60 ₽) attached."""
    category = make_category(admin)
    product = make_product(admin, category["id"])
    bacon = make_ingredient(admin)
    link(admin, product["id"], bacon["id"])
    return {"category": category, "product": product, "bacon": bacon}
