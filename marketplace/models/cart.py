from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from marketplace.models.base import timestamp_field


class CartItem(SQLModel, table=True):
    __tablename__ = "cart_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    product_id: int = Field(foreign_key="product.id")
    quantity: int = 1
    created_at: datetime = timestamp_field()
