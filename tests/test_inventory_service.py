"""Tests for stock validation, the conditioned decrement and restocking."""

import pytest

from marketplace.errors import InsufficientStock, ProductNotFound
from marketplace.models.product import Product
from marketplace.schemas.checkout_schemas import CartLine, CartProduct
from marketplace.services.inventory_service import (
    check_availability,
    decrement_stock,
    requested_quantities,
    restock_product,
    validate_inventory,
)


def line_for(product, quantity, name=None):
    return CartLine(
        product_id=product.id,
        quantity=quantity,
        product=CartProduct(name=name or product.name, price=product.price, discount=product.discount),
    )


class TestRequestedQuantities:
    def test_aggregates_repeated_products(self):
        lines = [
            CartLine(product_id=7, quantity=1),
            CartLine(product_id=3, quantity=2),
            CartLine(product_id=7, quantity=4),
        ]

        assert requested_quantities(lines) == {3: 2, 7: 5}

    def test_orders_by_product_id(self):
        lines = [CartLine(product_id=9, quantity=1), CartLine(product_id=2, quantity=1)]

        assert list(requested_quantities(lines)) == [2, 9]


class TestValidateInventory:
    def test_returns_live_products(self, session, make_product):
        oil = make_product(available_quantity=5)

        products = validate_inventory(session, [line_for(oil, 5)])

        assert products[oil.id].available_quantity == 5

    def test_insufficient_stock_names_product(self, session, make_product):
        oil = make_product(name="Argan Hair Oil", available_quantity=1)

        with pytest.raises(InsufficientStock) as exc:
            validate_inventory(session, [line_for(oil, 2)])

        assert exc.value.message == "Insufficient stock for Argan Hair Oil. 1 available, 2 requested"
        assert exc.value.available == 1
        assert exc.value.requested == 2

    def test_repeated_lines_are_checked_together(self, session, make_product):
        oil = make_product(available_quantity=3)

        with pytest.raises(InsufficientStock) as exc:
            validate_inventory(session, [line_for(oil, 2), line_for(oil, 2)])

        assert "3 available, 4 requested" in exc.value.message

    def test_missing_product_uses_snapshot_name(self, session):
        line = CartLine(product_id=404, quantity=1, product=CartProduct(name="Keratin Mask", price=900))

        with pytest.raises(ProductNotFound) as exc:
            validate_inventory(session, [line])

        assert exc.value.message == "Product not found: Keratin Mask"

    def test_missing_product_without_snapshot_uses_id(self, session):
        with pytest.raises(ProductNotFound) as exc:
            validate_inventory(session, [CartLine(product_id=404, quantity=1)])

        assert exc.value.message == "Product not found: 404"


class TestDecrementStock:
    def test_subtracts_quantity(self, session, make_product):
        oil = make_product(available_quantity=5)

        decrement_stock(session, oil.id, 2)
        session.commit()
        session.refresh(oil)

        assert oil.available_quantity == 3

    def test_can_reach_zero(self, session, make_product):
        oil = make_product(available_quantity=2)

        decrement_stock(session, oil.id, 2)
        session.commit()
        session.refresh(oil)

        assert oil.available_quantity == 0

    def test_refuses_to_go_negative(self, session, make_product):
        oil = make_product(available_quantity=1)

        with pytest.raises(InsufficientStock) as exc:
            decrement_stock(session, oil.id, 2)
        session.rollback()
        session.refresh(oil)

        assert exc.value.available == 1
        assert oil.available_quantity == 1

    def test_sees_stock_changed_after_read(self, engine, session, make_product):
        from sqlmodel import Session

        oil = make_product(available_quantity=2)
        validate_inventory(session, [line_for(oil, 2)])

        with Session(engine) as other:
            other.get(Product, oil.id).available_quantity = 0
            other.commit()

        with pytest.raises(InsufficientStock) as exc:
            decrement_stock(session, oil.id, 2)

        assert exc.value.available == 0

    def test_unknown_product(self, session):
        with pytest.raises(ProductNotFound):
            decrement_stock(session, 404, 1)


class TestRestockProduct:
    def test_adds_quantity(self, session, make_product):
        oil = make_product(available_quantity=0)

        available = restock_product(session, oil.id, 10)
        session.commit()
        session.refresh(oil)

        assert available == 10
        assert oil.available_quantity == 10

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_rejects_non_positive_quantity(self, session, make_product, quantity):
        oil = make_product()

        with pytest.raises(ValueError):
            restock_product(session, oil.id, quantity)

    def test_unknown_product(self, session):
        with pytest.raises(ProductNotFound):
            restock_product(session, 404, 5)


class TestCheckAvailability:
    def test_all_available(self, session, make_product):
        oil = make_product(available_quantity=5)

        available, issues = check_availability(session, [line_for(oil, 5)])

        assert available is True
        assert issues == []

    def test_reports_every_shortfall(self, session, make_product):
        oil = make_product(name="Argan Hair Oil", available_quantity=1)
        serum = make_product(name="Repair Serum", available_quantity=0)
        line = CartLine(product_id=404, quantity=1, product=CartProduct(name="Keratin Mask", price=900))

        available, issues = check_availability(
            session, [line_for(oil, 2), line_for(serum, 1), line]
        )

        assert available is False
        assert issues == [
            'Only 1 units of "Argan Hair Oil" are available (you requested 2)',
            'Only 0 units of "Repair Serum" are available (you requested 1)',
            'Product "Keratin Mask" is no longer available',
        ]

    def test_writes_nothing(self, session, make_product):
        oil = make_product(available_quantity=1)

        check_availability(session, [line_for(oil, 3)])
        session.refresh(oil)

        assert oil.available_quantity == 1
