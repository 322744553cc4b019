# tests/test_cart_api.py
import pytest
from sqlmodel import Session, select

from conftest import make_product
from storefront.core.errors import Conflict
from storefront.database import engine
from storefront.models.cart import Cart
from storefront.models.product import Product
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.services.cart_service import CartService


def add(client, headers, product, quantity=1):
    return client.post(
        "/api/cart/items",
        json={"product_id": str(product.id), "quantity": quantity},
        headers=headers,
    )


def test_cart_is_created_lazily(client, user, user_headers):
    res = client.get("/api/cart", headers=user_headers)
    assert res.status_code == 200
    body = res.json()
    assert body["user_id"] == str(user.id)
    assert body["items"] == []
    assert body["total"] == 0
    assert body["formatted_total"] == "0.00"

    # second read returns the same cart
    again = client.get("/api/cart", headers=user_headers).json()
    assert again["id"] == body["id"]


def test_cart_requires_authentication(client):
    assert client.get("/api/cart").status_code == 401


def test_add_item_uses_catalog_price(client, user_headers):
    product = make_product(price=12.5)

    res = add(client, user_headers, product, quantity=2)
    assert res.status_code == 200
    body = res.json()
    assert body["subtotal"] == 25
    assert body["total_items"] == 2
    assert body["items"][0]["price"] == 12.5
    assert body["items"][0]["total_price"] == 25
    assert body["items"][0]["available"] is True
    assert body["items"][0]["product"]["name"] == "Desk Lamp"


def test_adding_same_product_increments_quantity(client, user_headers):
    product = make_product()
    add(client, user_headers, product, quantity=1)
    body = add(client, user_headers, product, quantity=2).json()

    assert len(body["items"]) == 1
    assert body["items"][0]["quantity"] == 3


def test_add_item_rejects_quantity_over_stock(client, user_headers):
    product = make_product(stock=3)
    add(client, user_headers, product, quantity=2)

    res = add(client, user_headers, product, quantity=2)
    assert res.status_code == 400
    assert res.json()["field"] == "quantity"


def test_add_item_rejects_non_positive_quantity(client, user_headers):
    product = make_product()
    res = add(client, user_headers, product, quantity=0)
    assert res.status_code == 400
    assert res.json()["field"] == "quantity"


def test_add_unknown_or_inactive_product(client, user_headers):
    product = make_product(is_active=False)
    res = add(client, user_headers, product)
    assert res.status_code == 400
    assert res.json()["field"] == "product_id"

    res = client.post(
        "/api/cart/items",
        json={"product_id": "00000000-0000-0000-0000-000000000000"},
        headers=user_headers,
    )
    assert res.status_code == 404


def test_update_quantity_and_remove_with_zero(client, user_headers):
    lamp = make_product(price=10)
    rug = make_product(name="Rug", price=40)
    add(client, user_headers, lamp)
    add(client, user_headers, rug)

    res = client.patch(f"/api/cart/items/{lamp.id}", json={"quantity": 4}, headers=user_headers)
    assert res.status_code == 200
    assert res.json()["subtotal"] == 80

    res = client.patch(f"/api/cart/items/{rug.id}", json={"quantity": 0}, headers=user_headers)
    body = res.json()
    assert [i["product_id"] for i in body["items"]] == [str(lamp.id)]
    assert body["subtotal"] == 40


def test_update_quantity_of_missing_item_is_not_found(client, user_headers):
    product = make_product()
    res = client.patch(f"/api/cart/items/{product.id}", json={"quantity": 2}, headers=user_headers)
    assert res.status_code == 404
    assert res.json()["field"] == "product_id"


def test_remove_item(client, user_headers):
    product = make_product()
    add(client, user_headers, product)

    res = client.delete(f"/api/cart/items/{product.id}", headers=user_headers)
    assert res.status_code == 200
    assert res.json()["items"] == []

    # removing again is harmless
    res = client.delete(f"/api/cart/items/{product.id}", headers=user_headers)
    assert res.status_code == 200


def test_coupon_and_clear(client, user_headers):
    product = make_product(price=20)
    add(client, user_headers, product, quantity=2)

    res = client.post(
        "/api/cart/coupon",
        json={"code": " SPRING ", "discount_amount": 15},
        headers=user_headers,
    )
    assert res.status_code == 200
    assert res.json() == {
        "total_items": 2,
        "subtotal": 40,
        "tax": 0,
        "shipping": 0,
        "discount": 15,
        "total": 25,
        "coupon_code": "SPRING",
    }

    res = client.post(
        "/api/cart/coupon",
        json={"code": "HUGE", "discount_amount": 100},
        headers=user_headers,
    )
    assert res.json()["total"] == 0

    res = client.delete("/api/cart/coupon", headers=user_headers)
    assert res.json()["total"] == 40
    assert res.json()["coupon_code"] is None

    client.post("/api/cart/coupon", json={"code": "X", "discount_amount": 5}, headers=user_headers)
    res = client.delete("/api/cart", headers=user_headers)
    body = res.json()
    assert body["items"] == []
    assert body["discount"] == 0
    assert body["coupon_code"] is None


def test_summary(client, user_headers):
    add(client, user_headers, make_product(price=3), quantity=3)

    res = client.get("/api/cart/summary", headers=user_headers)
    assert res.status_code == 200
    assert res.json()["subtotal"] == 9
    assert "items" not in res.json()


def test_details_require_an_existing_cart(client, user_headers):
    res = client.get("/api/cart/details", headers=user_headers)
    assert res.status_code == 404


def test_details_flag_unavailable_products(client, user_headers):
    kept = make_product(name="Kept", price=5)
    retired = make_product(name="Retired", price=7)
    add(client, user_headers, kept)
    add(client, user_headers, retired)

    with Session(engine) as s:
        row = s.get(Product, retired.id)
        row.is_active = False
        s.add(row)
        s.commit()

    res = client.get("/api/cart/details", headers=user_headers)
    assert res.status_code == 200
    items = {i["product_id"]: i for i in res.json()["items"]}

    assert items[str(kept.id)]["available"] is True
    assert items[str(kept.id)]["product"]["category"] == "lighting"
    assert items[str(retired.id)]["available"] is False
    assert items[str(retired.id)]["product"] is None
    # still part of the totals
    assert res.json()["subtotal"] == 12


def test_carts_are_per_user(client, user_headers, admin_headers):
    add(client, user_headers, make_product())

    assert client.get("/api/cart", headers=admin_headers).json()["items"] == []


# -------- Concurrent first access --------


class RacingCartRepository(CartRepository):
    """Misses the first lookup, as if another request created the cart meanwhile."""

    def __init__(self, lookups_to_miss: int = 1):
        self.lookups_to_miss = lookups_to_miss

    def get_active_for_user(self, session, user_id):
        if self.lookups_to_miss > 0:
            self.lookups_to_miss -= 1
            return None
        return super().get_active_for_user(session, user_id)


def test_racing_cart_creation_returns_existing_cart(user):
    with Session(engine) as s:
        existing = CartRepository().save(s, Cart(user_id=user.id))
        existing_id = existing.id

    service = CartService(RacingCartRepository(), ProductRepository())
    with Session(engine) as s:
        cart = service.get_or_create_cart(s, user.id)

    assert cart.id == existing_id
    with Session(engine) as s:
        assert len(s.exec(select(Cart).where(Cart.user_id == user.id)).all()) == 1


def test_racing_cart_creation_gives_up_after_second_miss(user):
    with Session(engine) as s:
        CartRepository().save(s, Cart(user_id=user.id))

    service = CartService(RacingCartRepository(lookups_to_miss=2), ProductRepository())
    with Session(engine) as s:
        with pytest.raises(Conflict):
            service.get_or_create_cart(s, user.id)
