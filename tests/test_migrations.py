"""Tests for the Alembic environment and the checkout schema revision."""

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from marketplace.config import settings
from marketplace.database import build_engine
from marketplace.models.product import Product
from marketplace.models.salon import Salon

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def migrated_engine(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    monkeypatch.setattr(settings, "DATABASE_URL", url)

    config = Config()
    config.set_main_option("script_location", str(ROOT / "alembic"))
    command.upgrade(config, "head")

    engine = build_engine(url)
    yield engine
    engine.dispose()


class TestCheckoutRevision:
    def test_creates_every_table(self, migrated_engine):
        tables = set(inspect(migrated_engine).get_table_names())

        assert {"user", "salon", "product", "cart_item", "order", "order_item", "order_event"} <= tables

    def test_models_write_to_migrated_schema(self, migrated_engine):
        with Session(migrated_engine) as session:
            salon = Salon(name="Glow Studio")
            session.add(salon)
            session.flush()
            session.add(Product(name="Argan Hair Oil", price=1000, available_quantity=2, salon_id=salon.id))
            session.commit()

    def test_stock_cannot_go_negative(self, migrated_engine):
        with Session(migrated_engine) as session:
            session.add(Product(name="Argan Hair Oil", price=1000, available_quantity=-1))
            with pytest.raises(IntegrityError):
                session.commit()
