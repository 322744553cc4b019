# tests/test_cart_model.py
import uuid

import pytest

from storefront.core.errors import NotFound
from storefront.models.cart import Cart


def new_cart(**fields) -> Cart:
    return Cart(user_id=uuid.uuid4(), **fields)


def test_totals_are_derived_and_clamped_at_zero():
    product_id = uuid.uuid4()
    cart = new_cart(tax=2, shipping=5)
    cart.add_item(product_id, quantity=3, price=10)
    cart.apply_coupon("BIG", 40)
    cart.recompute_totals()

    assert cart.subtotal == 30
    assert cart.total_items == 3
    assert cart.total == 0
    assert cart.get_items()[0].total_price == 30


def test_total_includes_tax_and_shipping():
    cart = new_cart(tax=2.5, shipping=5)
    cart.add_item(uuid.uuid4(), quantity=2, price=10)
    cart.add_item(uuid.uuid4(), quantity=1, price=4.25)
    cart.apply_coupon("SAVE5", 5)
    cart.recompute_totals()

    assert cart.subtotal == 24.25
    assert cart.total_items == 3
    assert cart.total == 26.75
    assert cart.formatted_total == "26.75"
    assert cart.formatted_subtotal == "24.25"


def test_add_item_increments_existing_line_and_replaces_price():
    product_id = uuid.uuid4()
    cart = new_cart()
    cart.add_item(product_id, quantity=1, price=10)
    cart.add_item(product_id, quantity=2, price=12)
    cart.recompute_totals()

    items = cart.get_items()
    assert len(items) == 1
    assert items[0].quantity == 3
    assert items[0].price == 12
    assert cart.subtotal == 36


def test_update_quantity_to_zero_removes_line():
    keep, drop = uuid.uuid4(), uuid.uuid4()
    cart = new_cart()
    cart.add_item(keep, quantity=1, price=5)
    cart.add_item(drop, quantity=4, price=5)

    cart.update_item_quantity(drop, 0)
    cart.update_item_quantity(keep, 6)
    cart.recompute_totals()

    assert [i.product_id for i in cart.get_items()] == [keep]
    assert cart.total_items == 6
    assert cart.subtotal == 30


def test_update_quantity_of_absent_product_raises_not_found():
    cart = new_cart()
    cart.add_item(uuid.uuid4(), quantity=1, price=5)

    with pytest.raises(NotFound) as exc_info:
        cart.update_item_quantity(uuid.uuid4(), 2)

    assert exc_info.value.status_code == 404
    assert exc_info.value.field == "product_id"


def test_remove_absent_item_is_a_no_op():
    product_id = uuid.uuid4()
    cart = new_cart()
    cart.add_item(product_id, quantity=2, price=5)

    cart.remove_item(uuid.uuid4())
    cart.recompute_totals()

    assert cart.total_items == 2
    assert cart.find_item(product_id) is not None


def test_clear_cart_drops_items_and_coupon():
    cart = new_cart()
    cart.add_item(uuid.uuid4(), quantity=2, price=5)
    cart.apply_coupon("TEN", 10)

    cart.clear_cart()
    cart.recompute_totals()

    assert cart.items == []
    assert cart.coupon_code is None
    assert cart.discount == 0
    assert cart.total == 0


def test_remove_coupon_restores_total():
    cart = new_cart()
    cart.add_item(uuid.uuid4(), quantity=1, price=50)
    cart.apply_coupon("TEN", 10)
    cart.recompute_totals()
    assert cart.total == 40

    cart.remove_coupon()
    cart.recompute_totals()

    assert cart.total == 50
    assert cart.get_summary()["coupon_code"] is None


def test_item_list_is_reassigned_on_change():
    cart = new_cart()
    before = cart.items
    cart.add_item(uuid.uuid4(), quantity=1, price=1)

    assert cart.items is not before
