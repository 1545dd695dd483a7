from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import uuid4

from marketplace.constants.order_status import OrderStatus
from marketplace.models.base import timestamp_field


class Order(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)

    description: str
    payment_type: str

    # OrderSummary breakdown, minor currency units
    subtotal: int
    discount: int
    delivery_fee: int
    processing_fee: int
    tax: int
    amount: int
    item_count: int

    is_paid: bool = Field(default=False)
    status: str = Field(default=OrderStatus.CONFIRMED)
    transaction_reference: Optional[str] = None

    estimated_delivery: Optional[str] = None
    tracking_number: Optional[str] = None
    idempotency_key: Optional[str] = Field(default=None, unique=True, index=True)

    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
