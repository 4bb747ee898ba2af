"""
Tests for cart arithmetic
"""

import pytest

from app.schemas.product import ProductResponse
from app.services.cart import Cart

MOUSE = ProductResponse(id=2, name="Wireless Mouse", price=29.99, description="2.4GHz")
SSD = ProductResponse(id=5, name="External SSD", price=129.99)

class TestCart:

    def test_adding_same_product_increments_quantity(self):
        cart = Cart()
        cart.add_product(MOUSE)
        cart.add_product(MOUSE)
        cart.add_product(SSD)

        assert len(cart.lines) == 2
        assert cart.lines[0].quantity == 2
        assert cart.total_items == 3
        assert cart.subtotal == pytest.approx(189.97)

    def test_quantity_never_drops_below_one(self):
        cart = Cart()
        cart.add_product(MOUSE)

        cart.update_quantity(MOUSE.id, -1)
        assert cart.lines[0].quantity == 1

        cart.update_quantity(MOUSE.id, 4)
        assert cart.lines[0].quantity == 5

    def test_update_unknown_product(self):
        assert Cart().update_quantity(99, 1) is None

    def test_remove_and_clear(self):
        cart = Cart()
        cart.add_product(MOUSE)
        cart.add_product(SSD)

        assert cart.remove_product(MOUSE.id) is True
        assert cart.remove_product(MOUSE.id) is False
        assert [line.product_id for line in cart.lines] == [SSD.id]

        cart.clear()
        assert cart.lines == []
        assert cart.subtotal == 0

    def test_order_items_carry_line_totals(self):
        cart = Cart()
        cart.add_product(SSD)
        cart.update_quantity(SSD.id, 2)

        items = cart.to_order_items()
        assert len(items) == 1
        assert items[0].product_name == "External SSD"
        assert items[0].quantity == 3
        assert items[0].total == pytest.approx(389.97)
