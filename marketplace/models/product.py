from sqlalchemy import CheckConstraint
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from marketplace.models.base import timestamp_field


class Product(SQLModel, table=True):
    __table_args__ = (
        CheckConstraint(
            "available_quantity >= 0",
            name="ck_product_available_quantity_non_negative",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str

    # minor currency units
    price: int
    # percent, None or 0 means no discount
    discount: Optional[int] = Field(default=None)
    available_quantity: int = Field(default=0)

    salon_id: Optional[int] = Field(default=None, foreign_key="salon.id")

    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
