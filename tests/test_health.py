"""
tests/test_health.py – root, health check and the starter catalog.
"""
import pytest

from conftest import make_category, make_product
from serb_burger.database import async_session_maker
from serb_burger.seed import BURGERS, CATEGORIES, INGREDIENTS, SIMPLE_PRODUCTS, seed_catalog


class TestRoot:
    def test_links(self, client):
        body = client.get("/").json()
        assert body["message"] == "Welcome to Serb Burger"
        assert body["menu"] == "/api/menu"
        assert body["health"] == "/health"


class TestHealth:
    def test_fresh_database(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "operational"
        assert body["database"] == "healthy"
        assert body["payment_service"] == "mock: healthy"
        assert body["environment"] == "development"
        assert (body["products"], body["categories"], body["ingredients"]) == (0, 0, 0)

    def test_counts(self, admin, burger):
        make_product(admin, make_category(admin, "Напитки", "drinks")["id"], "Sprite", 120)
        body = admin.get("/health").json()
        assert (body["products"], body["categories"], body["ingredients"]) == (2, 2, 1)


# ── Starter catalog ────────────────────────────────────────────────────────────

class TestSeed:
    @pytest.mark.asyncio
    async def test_seed_and_skip(self, client):
        async with async_session_maker() as db:
            assert await seed_catalog(db) is True
        async with async_session_maker() as db:
            assert await seed_catalog(db) is False

        body = client.get("/health").json()
        assert body["products"] == len(BURGERS) + len(SIMPLE_PRODUCTS)
        assert body["categories"] == len(CATEGORIES)
        assert body["ingredients"] == len(INGREDIENTS)

    @pytest.mark.asyncio
    async def test_seeded_burgers_are_orderable(self, client):
        async with async_session_maker() as db:
            await seed_catalog(db)

        menu = {c["slug"]: c for c in client.get("/api/menu").json()}
        classic = next(p for p in menu["burgers"]["items"] if p["name"] == "Сербский Классический")

        required = [o for o in classic["ingredients"] if o["isRequired"]]
        assert {o["type"] for o in required} == {"bun", "patty"}
        assert all(o["selectionType"] == "single" for o in required)

        r = client.post("/api/checkout", json={
            "items": [{
                "productId": classic["id"],
                "quantity": 1,
                "selectedIngredients": [{"id": o["id"]} for o in required],
            }],
            "paymentMethod": "card",
        })
        assert r.status_code == 200
        assert r.json()["totalAmount"] == classic["price"] + sum(o["price"] for o in required)
