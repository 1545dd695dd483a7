# marketplace/schemas/checkout_schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from marketplace.constants.payment_methods import PaymentMethodType


class CustomerDetails(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    contact_number: str = ""


class DeliveryAddress(BaseModel):
    address_line1: str = ""
    address_line2: Optional[str] = None
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""


class PaymentMethod(BaseModel):
    type: PaymentMethodType
    name: Optional[str] = None
    description: Optional[str] = None
    processing_fee: int = 0   # minor units
    is_available: bool = True


class PaymentDetails(BaseModel):
    method: PaymentMethod
    # card data is only forwarded to the authorizer, never stored or logged
    card_number: Optional[str] = Field(default=None, repr=False)
    card_holder_name: Optional[str] = Field(default=None, repr=False)
    expiry_month: Optional[str] = Field(default=None, repr=False)
    expiry_year: Optional[str] = Field(default=None, repr=False)
    cvv: Optional[str] = Field(default=None, repr=False)


class CartProduct(BaseModel):
    name: str
    price: int            # minor units, read-time copy
    discount: Optional[int] = None  # percent
    salon_name: Optional[str] = None
    available_quantity: Optional[int] = None


class CartLine(BaseModel):
    product_id: int
    quantity: int
    product: Optional[CartProduct] = None


class OrderSummary(BaseModel):
    subtotal: int
    discount: int
    delivery_fee: int
    processing_fee: int
    tax: int
    total: int
    item_count: int
    estimated_delivery: str


class CheckoutRequest(BaseModel):
    customer_details: Optional[CustomerDetails] = None
    delivery_address: Optional[DeliveryAddress] = None
    payment_details: Optional[PaymentDetails] = None
    cart_items: Optional[List[CartLine]] = None
    order_summary: Optional[OrderSummary] = None
    delivery_notes: Optional[str] = None
    delivery_time_preference: str = "anytime"   # morning | afternoon | evening | anytime

    # OTP gate, verified upstream
    otp_verified: bool = False
    otp_session_id: Optional[str] = None

    # client generated, one per logical checkout
    idempotency_key: Optional[str] = None


class ConfirmationItem(BaseModel):
    id: int
    product_id: int
    product_name: str
    salon_name: Optional[str] = None
    quantity: int
    unit_price: int
    discount: int
    total_price: int


class OrderConfirmation(BaseModel):
    order_id: str
    order_number: str
    status: str
    payment_status: str
    payment_type: str
    created_at: datetime
    estimated_delivery: str
    tracking_number: Optional[str] = None
    transaction_reference: Optional[str] = None
    invoice_url: str
    customer_details: Optional[CustomerDetails] = None
    delivery_address: Optional[DeliveryAddress] = None
    order_summary: OrderSummary
    items: List[ConfirmationItem]


class InventoryCheckRequest(BaseModel):
    items: List[CartLine]


class InventoryCheckResponse(BaseModel):
    available: bool
    issues: List[str]


class SummaryRequest(BaseModel):
    items: List[CartLine]
    payment_method: Optional[PaymentMethodType] = None
