from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from marketplace.models.base import timestamp_field


class OrderEvent(SQLModel, table=True):
    """Timeline entry written in the same transaction as the order change."""

    __tablename__ = "order_event"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: str = Field(foreign_key="order.id", index=True)

    # order_placed | payment_confirmed
    event_type: str = Field(index=True)
    label: str
    meta: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = timestamp_field()
