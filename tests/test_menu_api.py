"""
tests/test_menu_api.py – public storefront menu.
"""
from conftest import link, make_category, make_ingredient, make_product


class TestMenu:
    def test_empty(self, client):
        r = client.get("/api/menu")
        assert r.status_code == 200
        assert r.json() == []

    def test_groups_by_category(self, admin):
        drinks = make_category(admin, "Напитки", "drinks")
        burgers = make_category(admin, "Бургеры", "burgers")
        make_product(admin, drinks["id"], "Sprite", 120)
        make_product(admin, drinks["id"], "Coca-Cola", 120)
        make_product(admin, burgers["id"])

        menu = admin.get("/api/menu").json()
        assert [c["slug"] for c in menu] == ["burgers", "drinks"]
        assert [p["name"] for p in menu[1]["items"]] == ["Coca-Cola", "Sprite"]
        assert all(p["category"] == "drinks" for p in menu[1]["items"])

    def test_categories_without_products_left_out(self, admin):
        make_category(admin, "Соусы", "sauces")
        burgers = make_category(admin)
        make_product(admin, burgers["id"])
        assert [c["slug"] for c in admin.get("/api/menu").json()] == ["burgers"]

    def test_product_without_ingredients(self, admin):
        category = make_category(admin, "Напитки", "drinks")
        make_product(admin, category["id"], "Sprite", 120)
        product = admin.get("/api/menu").json()[0]["items"][0]
        assert product["ingredients"] == []
        assert product["price"] == 120

    def test_ingredient_options(self, admin, burger):
        bun = make_ingredient(admin, "Булочка классическая", 0, "bun")
        link(admin, burger["product"]["id"], bun["id"], selection="single", isRequired=True, sortOrder=0)
        admin.put(
            f"/api/products/{burger['product']['id']}/ingredients/{burger['bacon']['id']}",
            json={"sortOrder": 1, "maxQuantity": 3},
        )

        item = admin.get("/api/menu").json()[0]["items"][0]
        assert item["ingredients"] == [
            {
                "id": bun["id"], "name": "Булочка классическая", "price": 0, "type": "bun",
                "selectionType": "single", "isRequired": True, "maxQuantity": None,
            },
            {
                "id": burger["bacon"]["id"], "name": "Бекон", "price": 60, "type": "addon",
                "selectionType": "multiple", "isRequired": False, "maxQuantity": 3,
            },
        ]

    def test_repeated_reads_are_identical(self, burger, admin):
        assert admin.get("/api/menu").json() == admin.get("/api/menu").json()

    def test_reflects_catalog_changes(self, admin, burger):
        admin.put(f"/api/products/{burger['product']['id']}", json={"price": 370})
        assert admin.get("/api/menu").json()[0]["items"][0]["price"] == 370

    def test_public(self, client):
        assert client.get("/api/menu").status_code == 200
