from fastapi import Depends
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session
from marketplace.config import settings


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # request handlers run in a thread pool
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,      # checks dead connections
        pool_recycle=1800        # refresh every 30 min
    )


engine = build_engine(settings.database_url)


def create_db_and_tables(bind: Engine = None):
    from marketplace.models import user, salon, product, cart, order, order_item, order_event
    SQLModel.metadata.create_all(bind or engine)


def get_engine() -> Engine:
    return engine


def get_session(bind: Engine = Depends(get_engine)):
    with Session(bind) as session:
        yield session
