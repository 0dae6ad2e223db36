"""
tests/test_session_api.py – server-kept storefront sessions: cart edits,
legacy documents and checkout straight from a stored cart.
"""
import pytest

from conftest import make_ingredient
from serb_burger.core.config import get_settings
from serb_burger.services.cart import JsonFileSessionRepository, get_session_repository
from serb_burger.services.payment import MockPaymentService, PaymentGateway, get_payment_gateway

KEY = "shopper-1"


def add(client, burger, key=KEY, with_bacon=True):
    ingredients = [burger["bacon"]["id"]] if with_bacon else []
    return client.post(f"/api/session/{key}/items", json={
        "productId": burger["product"]["id"],
        "selectedIngredients": ingredients,
    })


# ── Documents ──────────────────────────────────────────────────────────────────

class TestDocument:
    def test_new_key_is_empty(self, client):
        r = client.get(f"/api/session/{KEY}")
        assert r.status_code == 200
        assert r.json() == {"schemaVersion": 1, "items": [], "activeOrder": None}

    def test_legacy_document_migrated(self, client, sessions):
        r = client.put(f"/api/session/{KEY}", json={"state": {"items": [
            {"id": "a", "productId": "3", "productName": "Бургер", "quantity": 2,
             "selectedIngredients": [{"id": "7", "name": "Бекон", "price": 60, "type": "addon", "isDefault": False}],
             "totalPrice": 410},
            {"id": "b", "productId": "classic", "productName": "Старый", "quantity": 1,
             "selectedIngredients": [], "totalPrice": 350},
        ]}})
        assert r.status_code == 200
        body = r.json()
        assert body["schemaVersion"] == 1
        assert [i["id"] for i in body["items"]] == ["a"]
        assert body["items"][0]["productId"] == 3
        assert body["items"][0]["selectedIngredients"][0]["id"] == 7
        assert sessions.load(KEY).total() == 820

    @pytest.mark.parametrize("document", [
        {"schemaVersion": 99},
        {"schemaVersion": 1, "items": [{"id": "a"}]},
    ])
    def test_invalid_document(self, client, document):
        r = client.put(f"/api/session/{KEY}", json=document)
        assert r.status_code == 400
        assert r.json()["error"] == "Некорректный документ сессии"

    def test_delete(self, client, burger):
        add(client, burger)
        r = client.delete(f"/api/session/{KEY}")
        assert r.status_code == 200
        assert r.json()["success"] is True
        assert client.get(f"/api/session/{KEY}").json()["items"] == []

    @pytest.mark.parametrize("key", ["bad.key", "a" * 65, "ключ"])
    def test_invalid_key(self, client, key):
        assert client.get(f"/api/session/{key}").status_code == 400

    def test_stored_as_json_file(self, app, client, burger, tmp_path):
        app.dependency_overrides[get_session_repository] = lambda: JsonFileSessionRepository(tmp_path)
        assert add(client, burger).status_code == 200
        assert (tmp_path / f"{KEY}.json").exists()
        assert client.get(f"/api/session/{KEY}").json()["items"][0]["totalPrice"] == 410

    def test_default_store_uses_session_dir(self):
        get_session_repository.cache_clear()
        try:
            repository = get_session_repository()
            assert isinstance(repository, JsonFileSessionRepository)
            assert str(repository.directory) == get_settings().session_dir
        finally:
            get_session_repository.cache_clear()


# ── Cart items ─────────────────────────────────────────────────────────────────

class TestCartItems:
    def test_add_prices_from_catalog(self, client, burger):
        r = add(client, burger)
        assert r.status_code == 200
        item = r.json()["items"][0]
        assert item["productName"] == "Сербский Классический"
        assert item["quantity"] == 1
        assert item["totalPrice"] == 410
        assert [i["name"] for i in item["selectedIngredients"]] == ["Бекон"]

    def test_same_product_added_twice(self, client, burger):
        add(client, burger)
        items = add(client, burger).json()["items"]
        assert len(items) == 2
        assert items[0]["id"] != items[1]["id"]

    def test_unknown_product(self, client):
        r = client.post(f"/api/session/{KEY}/items", json={"productId": 999})
        assert r.status_code == 404
        assert r.json()["error"] == "Продукт не найден"

    def test_ingredient_not_linked(self, admin, burger):
        cheese = make_ingredient(admin, "Сыр", 40)
        r = admin.post(f"/api/session/{KEY}/items", json={
            "productId": burger["product"]["id"],
            "selectedIngredients": [cheese["id"]],
        })
        assert r.status_code == 400
        assert admin.get(f"/api/session/{KEY}").json()["items"] == []

    def test_change_quantity(self, client, burger):
        item_id = add(client, burger).json()["items"][0]["id"]
        r = client.patch(f"/api/session/{KEY}/items/{item_id}", json={"delta": 2})
        assert r.status_code == 200
        assert r.json()["items"][0]["quantity"] == 3

        r = client.patch(f"/api/session/{KEY}/items/{item_id}", json={"delta": -10})
        assert r.json()["items"][0]["quantity"] == 1

    def test_remove(self, client, burger):
        add(client, burger, with_bacon=False)
        item_id = add(client, burger).json()["items"][1]["id"]
        r = client.delete(f"/api/session/{KEY}/items/{item_id}")
        assert r.status_code == 200
        assert [i["totalPrice"] for i in r.json()["items"]] == [350]

    def test_unknown_item(self, client, burger):
        add(client, burger)
        assert client.patch(f"/api/session/{KEY}/items/nope", json={"delta": 1}).status_code == 404
        r = client.delete(f"/api/session/{KEY}/items/nope")
        assert r.status_code == 404
        assert r.json()["error"] == "Позиция корзины не найдена"


# ── Checkout ───────────────────────────────────────────────────────────────────

class TestSessionCheckout:
    def test_stored_cart(self, client, burger):
        add(client, burger)
        add(client, burger, with_bacon=False)

        r = client.post("/api/checkout", json={"sessionKey": KEY, "paymentMethod": "card"})
        assert r.status_code == 200
        assert r.json()["orderNumber"] == 1
        assert r.json()["totalAmount"] == 760

        session = client.get(f"/api/session/{KEY}").json()
        assert session["items"] == []
        assert session["activeOrder"]["number"] == 1
        assert session["activeOrder"]["status"] == "preparing"

    def test_exported_items(self, client, burger, sessions):
        add(client, burger)
        session = sessions.load(KEY)

        r = client.post("/api/checkout", json={
            "items": session.to_order_items(),
            "paymentMethod": "cash",
            "totalAmount": session.total(),
        })
        assert r.status_code == 200
        assert r.json()["totalAmount"] == 410
        # Without the key the stored cart is left alone
        assert len(sessions.load(KEY).items) == 1

    def test_explicit_items_with_key(self, client, burger, sessions):
        add(client, burger)
        items = sessions.load(KEY).to_order_items()

        r = client.post("/api/checkout", json={"items": items, "sessionKey": KEY, "paymentMethod": "card"})
        assert r.status_code == 200
        assert sessions.load(KEY).items == []
        assert sessions.load(KEY).active_order.number == r.json()["orderNumber"]

    def test_empty_cart(self, client):
        r = client.post("/api/checkout", json={"sessionKey": KEY, "paymentMethod": "card"})
        assert r.status_code == 400
        assert r.json()["error"] == "Корзина пуста"

    def test_items_or_key_required(self, client):
        assert client.post("/api/checkout", json={"paymentMethod": "card"}).status_code == 400

    def test_declined_keeps_cart(self, app, client, burger, sessions):
        app.dependency_overrides[get_payment_gateway] = (
            lambda: PaymentGateway(MockPaymentService(failure_rate=1.0))
        )
        add(client, burger)
        r = client.post("/api/checkout", json={"sessionKey": KEY, "paymentMethod": "card"})
        assert r.status_code == 400
        assert len(sessions.load(KEY).items) == 1
        assert sessions.load(KEY).active_order is None
