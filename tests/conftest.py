"""Pytest fixtures for checkout tests."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from marketplace.database import build_engine, create_db_and_tables, get_engine
from marketplace.models.cart import CartItem
from marketplace.models.product import Product
from marketplace.models.salon import Salon
from marketplace.models.user import User
from marketplace.schemas.checkout_schemas import (
    CheckoutRequest,
    CustomerDetails,
    DeliveryAddress,
    PaymentDetails,
    PaymentMethod,
)
from marketplace.services.payment_service import AuthorizationResult, PaymentAuthorizer, get_authorizer
from marketplace.utils.token import create_access_token


class StubAuthorizer(PaymentAuthorizer):
    """Returns a fixed result and records every call. ``hook`` runs before answering."""

    def __init__(self, result=None, hook=None):
        self.result = result or AuthorizationResult.approved("TXN_TEST_1")
        self.hook = hook
        self.calls = []

    def authorize(self, details, amount):
        self.calls.append((details.method.type.value, amount))
        if self.hook:
            self.hook()
        return self.result


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'checkout.db'}")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def salon(session):
    salon = Salon(name="Glow Studio")
    session.add(salon)
    session.commit()
    session.refresh(salon)
    return salon


@pytest.fixture
def customer(session):
    user = User(
        first_name="Nimali",
        last_name="Perera",
        email="nimali@example.com",
        contact_number="+94 77 123 4567",
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def make_product(session, salon):
    def _make(name="Argan Hair Oil", price=1000, discount=0, available_quantity=5):
        product = Product(
            name=name,
            price=price,
            discount=discount,
            available_quantity=available_quantity,
            salon_id=salon.id,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def add_to_cart(session):
    def _add(user, product, quantity):
        item = CartItem(user_id=user.id, product_id=product.id, quantity=quantity)
        session.add(item)
        session.commit()
        return item

    return _add


def card_payment(method="credit_card", **overrides):
    fields = dict(
        card_number="4242 4242 4242 4242",
        card_holder_name="Nimali Perera",
        expiry_month="12",
        expiry_year="2030",
        cvv="123",
    )
    fields.update(overrides)
    return PaymentDetails(method=PaymentMethod(type=method), **fields)


def make_request(lines, payment=None, **overrides):
    fields = dict(
        customer_details=CustomerDetails(
            first_name="Nimali",
            last_name="Perera",
            email="nimali@example.com",
            contact_number="+94 77 123 4567",
        ),
        delivery_address=DeliveryAddress(
            address_line1="12 Galle Road",
            city="Colombo",
            state="Western",
            postal_code="00300",
            country="LK",
        ),
        payment_details=payment or card_payment(),
        cart_items=lines,
    )
    fields.update(overrides)
    return CheckoutRequest(**fields)


@pytest.fixture
def authorizer():
    return StubAuthorizer()


@pytest.fixture
def client(engine, authorizer):
    from marketplace.main import app

    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_authorizer] = lambda: authorizer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token(user.id)
        return {"Authorization": f"Bearer {token}"}

    return _headers
