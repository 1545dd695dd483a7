from sqlmodel import SQLModel, Field
from typing import Optional


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: str = Field(foreign_key="order.id", index=True)
    product_id: int = Field(foreign_key="product.id")

    product_name: str
    salon_name: Optional[str] = None
    quantity: int
    unit_price: int  # price at purchase
    discount: int = 0  # percent at purchase
