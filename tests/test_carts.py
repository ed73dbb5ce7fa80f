"""Cart endpoints: get-or-create, add, update, remove, clear."""

from decimal import Decimal

from app.data.models.cart import CartModel
from app.repos.cart_repo import CartRepo


def _add(client, session_id, product_id, quantity=1):
    return client.post(
        f"/cart/{session_id}/items",
        json={"productId": product_id, "quantity": quantity},
    )


def _assert_total(cart_json):
    expected = sum(
        (Decimal(i["price"]) * i["quantity"] for i in cart_json["items"]),
        Decimal("0"),
    )
    assert Decimal(cart_json["total"]) == expected


def _miss_first_lookup(monkeypatch):
    # pierwszy odczyt nie widzi koszyka utworzonego przez inne zadanie
    original = CartRepo.get_cart
    calls = []

    def get_cart(self, session_id):
        calls.append(session_id)
        if len(calls) == 1:
            return None
        return original(self, session_id)

    monkeypatch.setattr(CartRepo, "get_cart", get_cart)


class TestGetOrCreateCart:
    def test_creates_empty_cart(self, client, db):
        response = client.get("/cart/sess-1")
        assert response.status_code == 200

        body = response.json()
        assert body["sessionId"] == "sess-1"
        assert body["items"] == []
        assert Decimal(body["total"]) == 0
        assert db.query(CartModel).filter_by(session_id="sess-1").count() == 1

    def test_returns_existing_cart(self, client, db):
        first = client.get("/cart/sess-1").json()
        second = client.get("/cart/sess-1").json()

        assert first["id"] == second["id"]
        assert db.query(CartModel).count() == 1

    def test_cart_created_concurrently_is_reused(self, client, db, monkeypatch):
        existing = client.get("/cart/sess-1").json()
        _miss_first_lookup(monkeypatch)

        response = client.get("/cart/sess-1")
        assert response.status_code == 200
        assert response.json()["id"] == existing["id"]
        assert db.query(CartModel).count() == 1

    def test_add_item_reuses_cart_created_concurrently(self, client, db, make_product, monkeypatch):
        product = make_product()
        existing = client.get("/cart/sess-1").json()
        _miss_first_lookup(monkeypatch)

        response = _add(client, "sess-1", product.id, 2)
        assert response.status_code == 200, response.text
        body = response.json()
        assert body["id"] == existing["id"]
        assert [i["quantity"] for i in body["items"]] == [2]
        assert db.query(CartModel).count() == 1


class TestAddItem:
    def test_add_item_expands_product(self, client, make_product):
        product = make_product(name="Mouse", price="12.50", stock=5)

        response = _add(client, "sess-1", product.id, 2)
        assert response.status_code == 200

        body = response.json()
        assert len(body["items"]) == 1
        item = body["items"][0]
        assert item["productId"] == product.id
        assert item["quantity"] == 2
        assert Decimal(item["price"]) == Decimal("12.50")
        assert item["product"]["name"] == "Mouse"
        assert Decimal(body["total"]) == Decimal("25.00")

    def test_add_creates_cart_lazily(self, client, db, make_product):
        product = make_product()
        assert _add(client, "fresh-session", product.id).status_code == 200
        assert db.query(CartModel).filter_by(session_id="fresh-session").count() == 1

    def test_add_same_product_merges_line_and_keeps_price(self, client, db, make_product):
        product = make_product(price="10.00", stock=10)
        _add(client, "sess-1", product.id, 1)

        product.price = Decimal("99.00")
        db.commit()

        body = _add(client, "sess-1", product.id, 2).json()
        assert len(body["items"]) == 1
        assert body["items"][0]["quantity"] == 3
        assert Decimal(body["items"][0]["price"]) == Decimal("10.00")
        assert Decimal(body["total"]) == Decimal("30.00")

    def test_new_line_captures_current_price(self, client, make_product):
        a = make_product(name="A", price="10.00")
        b = make_product(name="B", price="5.00")

        _add(client, "sess-1", a.id, 2)
        body = _add(client, "sess-1", b.id, 1).json()

        assert [Decimal(i["price"]) for i in body["items"]] == [Decimal("10.00"), Decimal("5.00")]
        _assert_total(body)

    def test_out_of_stock_leaves_cart_unchanged(self, client, make_product):
        product = make_product(stock=2)
        _add(client, "sess-1", product.id, 1)

        response = _add(client, "sess-1", product.id, 3)
        assert response.status_code == 400
        assert response.json()["message"] == "Insufficient stock"

        cart = client.get("/cart/sess-1").json()
        assert cart["items"][0]["quantity"] == 1
        assert Decimal(cart["total"]) == Decimal("10.00")

    def test_unknown_product(self, client):
        response = _add(client, "sess-1", 999, 1)
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"

    def test_quantity_must_be_positive(self, client, make_product):
        product = make_product()
        response = _add(client, "sess-1", product.id, 0)
        assert response.status_code == 400
        assert "message" in response.json()

    def test_missing_product_id(self, client):
        response = client.post("/cart/sess-1/items", json={"quantity": 1})
        assert response.status_code == 400


class TestUpdateItemQuantity:
    def test_sets_quantity(self, client, make_product):
        product = make_product(price="4.00", stock=3)
        item_id = _add(client, "sess-1", product.id, 1).json()["items"][0]["id"]

        # bez ponownej walidacji stanu - 7 > stock 3 przechodzi
        response = client.put(f"/cart/sess-1/items/{item_id}", json={"quantity": 7})
        assert response.status_code == 200
        body = response.json()
        assert body["items"][0]["quantity"] == 7
        assert Decimal(body["total"]) == Decimal("28.00")

    def test_zero_quantity_removes_line(self, client, make_product):
        a = make_product(name="A")
        b = make_product(name="B", price="3.00")
        item_id = _add(client, "sess-1", a.id, 1).json()["items"][0]["id"]
        _add(client, "sess-1", b.id, 2)

        body = client.put(f"/cart/sess-1/items/{item_id}", json={"quantity": 0}).json()
        assert [i["productId"] for i in body["items"]] == [b.id]
        assert Decimal(body["total"]) == Decimal("6.00")

    def test_negative_quantity_removes_line(self, client, make_product):
        product = make_product()
        item_id = _add(client, "sess-1", product.id, 1).json()["items"][0]["id"]

        body = client.put(f"/cart/sess-1/items/{item_id}", json={"quantity": -3}).json()
        assert body["items"] == []
        assert Decimal(body["total"]) == 0

    def test_missing_cart(self, client):
        response = client.put("/cart/nope/items/1", json={"quantity": 2})
        assert response.status_code == 404
        assert response.json()["message"] == "Cart not found"

    def test_missing_item(self, client):
        client.get("/cart/sess-1")
        response = client.put("/cart/sess-1/items/12345", json={"quantity": 2})
        assert response.status_code == 404
        assert response.json()["message"] == "Item not found in cart"


class TestRemoveItem:
    def test_remove_item(self, client, make_product):
        a = make_product(name="A", price="10.00")
        b = make_product(name="B", price="2.00")
        item_id = _add(client, "sess-1", a.id, 1).json()["items"][0]["id"]
        _add(client, "sess-1", b.id, 3)

        response = client.delete(f"/cart/sess-1/items/{item_id}")
        assert response.status_code == 200
        body = response.json()
        assert len(body["items"]) == 1
        assert Decimal(body["total"]) == Decimal("6.00")

    def test_remove_from_missing_cart(self, client):
        assert client.delete("/cart/nope/items/1").status_code == 404

    def test_remove_missing_item(self, client):
        client.get("/cart/sess-1")
        assert client.delete("/cart/sess-1/items/77").status_code == 404


class TestClearCart:
    def test_clear(self, client, make_product):
        product = make_product()
        _add(client, "sess-1", product.id, 2)

        response = client.delete("/cart/sess-1")
        assert response.status_code == 200
        body = response.json()
        assert body["items"] == []
        assert Decimal(body["total"]) == 0

        # koszyk nie jest usuwany, tylko oprozniany
        again = client.get("/cart/sess-1").json()
        assert again["id"] == body["id"]

    def test_clear_missing_cart(self, client):
        response = client.delete("/cart/nope")
        assert response.status_code == 404
        assert response.json()["message"] == "Cart not found"


class TestTotalInvariant:
    def test_total_matches_lines_after_every_mutation(self, client, make_product):
        a = make_product(name="A", price="1.10", stock=50)
        b = make_product(name="B", price="2.35", stock=50)

        body = _add(client, "sess-1", a.id, 3).json()
        _assert_total(body)
        body = _add(client, "sess-1", b.id, 4).json()
        _assert_total(body)
        body = _add(client, "sess-1", a.id, 2).json()
        _assert_total(body)

        b_line = next(i for i in body["items"] if i["productId"] == b.id)
        body = client.put(f"/cart/sess-1/items/{b_line['id']}", json={"quantity": 9}).json()
        _assert_total(body)

        a_line = next(i for i in body["items"] if i["productId"] == a.id)
        body = client.delete(f"/cart/sess-1/items/{a_line['id']}").json()
        _assert_total(body)

        body = client.delete("/cart/sess-1").json()
        _assert_total(body)
