"""Tests for table definitions shared by every model."""

from datetime import timezone

import pytest
from sqlmodel import SQLModel

from marketplace.models import CartItem, Order, OrderEvent, Product, User


TIMESTAMP_COLUMNS = [
    (table.name, column.name)
    for table in SQLModel.metadata.sorted_tables
    for column in table.columns
    if column.name in ("created_at", "updated_at")
]


class TestTimestamps:
    @pytest.mark.parametrize(
        "row",
        [
            Product(name="Argan Hair Oil", price=1000),
            CartItem(user_id=1, product_id=1, quantity=1),
            User(first_name="Nimali", last_name="Perera", email="nimali@example.com"),
            OrderEvent(order_id="o-1", event_type="order_placed", label="Order placed"),
        ],
        ids=lambda row: type(row).__name__,
    )
    def test_defaults_are_utc_aware(self, row):
        assert row.created_at.tzinfo is timezone.utc

    @pytest.mark.parametrize("table, column", TIMESTAMP_COLUMNS)
    def test_columns_keep_timezone(self, table, column):
        assert SQLModel.metadata.tables[table].c[column].type.timezone is True

    def test_every_timestamped_table_is_covered(self):
        assert {table for table, _ in TIMESTAMP_COLUMNS} == {
            "user", "product", "cart_item", "order", "order_event",
        }

    def test_rows_insert_with_aware_timestamps(self, session, make_product):
        oil = make_product()

        assert oil.id is not None
        assert session.get(Product, oil.id).updated_at is not None

    def test_committed_order_keeps_aware_created_at(
        self, engine, customer, make_product, add_to_cart, session
    ):
        from marketplace.services.cart_service import load_cart_lines
        from marketplace.services.checkout_service import CheckoutCoordinator

        from conftest import StubAuthorizer, make_request

        add_to_cart(customer, make_product(), 1)
        coordinator = CheckoutCoordinator(engine, StubAuthorizer(), otp_required_methods=[])

        confirmation = coordinator.process(customer.id, make_request(load_cart_lines(session, customer.id)))

        assert confirmation.created_at.tzinfo is not None
        assert session.get(Order, confirmation.order_id) is not None
