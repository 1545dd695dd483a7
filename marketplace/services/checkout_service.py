"""
Order checkout.

Turns a cart snapshot into a committed order. One checkout is one database
transaction: inventory is re-validated, payment is authorized, the order and
its items are written, stock is decremented with a conditioned UPDATE and the
cart is cleared. Any failure rolls all of it back.
"""
import logging
import re
from enum import Enum
from typing import Iterable, List, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from marketplace.config import settings
from marketplace.constants.order_status import OrderStatus, PaymentStatus
from marketplace.constants.payment_methods import (
    CARD_METHODS,
    DEFERRED_PAYMENT_METHODS,
    PAYMENT_METHODS,
    PaymentMethodType,
)
from marketplace.errors import (
    CheckoutError,
    CheckoutTransactionError,
    CheckoutValidationError,
    PaymentDeclined,
    PaymentNetworkError,
)
from marketplace.models.order import Order
from marketplace.models.order_item import OrderItem
from marketplace.models.product import Product
from marketplace.schemas.checkout_schemas import (
    CartLine,
    CheckoutRequest,
    ConfirmationItem,
    CustomerDetails,
    DeliveryAddress,
    OrderConfirmation,
    OrderSummary,
    PaymentMethod,
)
from marketplace.services import order_event_service
from marketplace.services.cart_service import clear_cart
from marketplace.services.inventory_service import decrement_stock, validate_inventory
from marketplace.services.payment_service import NETWORK_ERROR, PaymentAuthorizer
from marketplace.services.pricing import PricingPolicy, calculate_order_summary, discounted_unit_price
from marketplace.utils import order_refs

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
PHONE_RE = re.compile(r"^\+?[\d\s\-()]+$")
CARD_NUMBER_RE = re.compile(r"^\d{16}$")
CVV_RE = re.compile(r"^\d{3,4}$")


class CheckoutStage(str, Enum):
    STARTED = "started"
    INVENTORY_CHECKED = "inventory_checked"
    PAYMENT_AUTHORIZED = "payment_authorized"
    PERSISTED = "persisted"
    CART_CLEARED = "cart_cleared"
    COMMITTED = "committed"
    ABORTED = "aborted"


def resolve_payment_method(method_type: PaymentMethodType) -> PaymentMethod:
    """Catalog entry for a method type; fees always come from the catalog."""
    entry = PAYMENT_METHODS[method_type]
    return PaymentMethod(type=method_type, **entry)


def list_payment_methods() -> List[PaymentMethod]:
    return [resolve_payment_method(t) for t in PAYMENT_METHODS]


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def validate_checkout_request(
    request: CheckoutRequest,
    otp_required_methods: Iterable[str] = (),
) -> PaymentMethod:
    """
    Reject incomplete requests before any transaction is opened.

    Returns the catalog payment method the checkout will be charged with.
    """
    if (
        request.customer_details is None
        or request.delivery_address is None
        or request.payment_details is None
        or not request.cart_items
    ):
        raise CheckoutValidationError("Missing required checkout data")

    errors: List[str] = []

    customer = request.customer_details
    if _blank(customer.first_name):
        errors.append("First name is required")
    if _blank(customer.last_name):
        errors.append("Last name is required")
    if _blank(customer.email):
        errors.append("Email is required")
    elif not EMAIL_RE.search(customer.email):
        errors.append("Please enter a valid email address")
    if _blank(customer.contact_number):
        errors.append("Contact number is required")
    elif not PHONE_RE.match(customer.contact_number):
        errors.append("Please enter a valid contact number")

    address = request.delivery_address
    for field, label in (
        ("address_line1", "Address line 1"),
        ("city", "City"),
        ("state", "State"),
        ("postal_code", "Postal code"),
        ("country", "Country"),
    ):
        if _blank(getattr(address, field)):
            errors.append(f"{label} is required")

    details = request.payment_details
    method = resolve_payment_method(details.method.type)
    if not method.is_available:
        errors.append(f"{method.name} is currently unavailable")

    if method.type in CARD_METHODS:
        card_number = (details.card_number or "").replace(" ", "")
        if not card_number:
            errors.append("Card number is required")
        elif not CARD_NUMBER_RE.match(card_number):
            errors.append("Please enter a valid 16-digit card number")
        if _blank(details.card_holder_name):
            errors.append("Cardholder name is required")
        if _blank(details.expiry_month) or _blank(details.expiry_year):
            errors.append("Expiry date is required")
        if _blank(details.cvv):
            errors.append("CVV is required")
        elif not CVV_RE.match(details.cvv):
            errors.append("Please enter a valid CVV")

    if method.type.value in otp_required_methods:
        if not request.otp_verified or _blank(request.otp_session_id):
            errors.append("Phone verification is required for this payment method")

    for line in request.cart_items:
        if line.quantity <= 0:
            errors.append(f"Invalid quantity for product {line.product_id}")
        if line.product is None:
            errors.append("Product information missing for cart item")

    if errors:
        raise CheckoutValidationError("; ".join(errors))

    return method


def _check_prices(lines: List[CartLine], products: dict):
    for line in lines:
        live = products[line.product_id]
        if line.product.price != live.price or (line.product.discount or 0) != (live.discount or 0):
            raise CheckoutValidationError(
                f"The price of {live.name} has changed. Please review your cart and try again."
            )


def _describe(customer: CustomerDetails, notes: Optional[str]) -> str:
    description = f"Order for {customer.first_name} {customer.last_name}"
    if notes:
        description = f"{description} - {notes}"
    return description


def order_summary_of(order: Order) -> OrderSummary:
    return OrderSummary(
        subtotal=order.subtotal,
        discount=order.discount,
        delivery_fee=order.delivery_fee,
        processing_fee=order.processing_fee,
        tax=order.tax,
        total=order.amount,
        item_count=order.item_count,
        estimated_delivery=order.estimated_delivery or "",
    )


def build_confirmation(
    order: Order,
    items: List[OrderItem],
    customer_details: Optional[CustomerDetails] = None,
    delivery_address: Optional[DeliveryAddress] = None,
) -> OrderConfirmation:
    return OrderConfirmation(
        order_id=order.id,
        order_number=order_refs.order_number(order.id),
        status=order.status,
        payment_status=PaymentStatus.COMPLETED if order.is_paid else PaymentStatus.PENDING,
        payment_type=order.payment_type,
        created_at=order.created_at,
        estimated_delivery=order.estimated_delivery or "",
        tracking_number=order.tracking_number,
        transaction_reference=order.transaction_reference,
        invoice_url=order_refs.invoice_url(order.id),
        customer_details=customer_details,
        delivery_address=delivery_address,
        order_summary=order_summary_of(order),
        items=[
            ConfirmationItem(
                id=i.id,
                product_id=i.product_id,
                product_name=i.product_name,
                salon_name=i.salon_name,
                quantity=i.quantity,
                unit_price=i.unit_price,
                discount=i.discount,
                total_price=discounted_unit_price(i.unit_price, i.discount) * i.quantity,
            )
            for i in items
        ],
    )


class CheckoutCoordinator:
    """
    Runs one checkout attempt.

    Build one per request: ``stage`` tracks how far the attempt got.
    """

    def __init__(
        self,
        engine: Engine,
        authorizer: PaymentAuthorizer,
        policy: Optional[PricingPolicy] = None,
        otp_required_methods: Optional[Iterable[str]] = None,
    ):
        self.engine = engine
        self.authorizer = authorizer
        self.policy = policy or PricingPolicy.from_settings()
        self.otp_required_methods = set(
            settings.OTP_REQUIRED_METHODS if otp_required_methods is None else otp_required_methods
        )
        self.stage = CheckoutStage.STARTED

    def _advance(self, stage: CheckoutStage, user_id: int):
        self.stage = stage
        logger.debug(f"Checkout for user {user_id}: {stage.value}")

    def process(self, user_id: int, request: CheckoutRequest) -> OrderConfirmation:
        self.stage = CheckoutStage.STARTED

        try:
            method = validate_checkout_request(request, self.otp_required_methods)
        except CheckoutValidationError as e:
            self.stage = CheckoutStage.ABORTED
            logger.info(f"Checkout rejected for user {user_id}: {e.message}")
            raise

        lines = request.cart_items
        summary = calculate_order_summary(lines, method, policy=self.policy)

        if request.order_summary is not None and request.order_summary.total != summary.total:
            self.stage = CheckoutStage.ABORTED
            logger.info(
                f"Checkout rejected for user {user_id}: client total "
                f"{request.order_summary.total} != {summary.total}"
            )
            raise CheckoutValidationError(
                "Order total has changed. Please review your order and try again."
            )

        try:
            return self._run_transaction(user_id, request, method, summary)
        except CheckoutError as e:
            self.stage = CheckoutStage.ABORTED
            logger.warning(f"Checkout aborted for user {user_id}: {e.message}")
            raise
        except IntegrityError:
            self.stage = CheckoutStage.ABORTED
            replay = self._replay(user_id, request)
            if replay is not None:
                return replay
            logger.exception(f"Checkout transaction failed for user {user_id}")
            raise CheckoutTransactionError()
        except Exception:
            self.stage = CheckoutStage.ABORTED
            logger.exception(f"Checkout transaction failed for user {user_id}")
            raise CheckoutTransactionError()

    def _find_existing(self, session: Session, user_id: int, key: str):
        order = session.exec(select(Order).where(Order.idempotency_key == key)).first()
        if order is None:
            return None
        if order.user_id != user_id:
            raise CheckoutValidationError("Idempotency key has already been used")
        items = session.exec(
            select(OrderItem).where(OrderItem.order_id == order.id).order_by(OrderItem.id)
        ).all()
        return order, items

    def _replay(self, user_id: int, request: CheckoutRequest) -> Optional[OrderConfirmation]:
        """A concurrent attempt with the same key committed first."""
        if not request.idempotency_key:
            return None
        with Session(self.engine) as session:
            existing = self._find_existing(session, user_id, request.idempotency_key)
        if existing is None:
            return None
        logger.info(f"Checkout replayed for user {user_id}, order {existing[0].id}")
        return build_confirmation(
            *existing,
            customer_details=request.customer_details,
            delivery_address=request.delivery_address,
        )

    def _run_transaction(
        self,
        user_id: int,
        request: CheckoutRequest,
        method: PaymentMethod,
        summary: OrderSummary,
    ) -> OrderConfirmation:
        lines = request.cart_items

        with Session(self.engine, expire_on_commit=False) as session:
            with session.begin():
                if request.idempotency_key:
                    existing = self._find_existing(session, user_id, request.idempotency_key)
                    if existing is not None:
                        logger.info(f"Checkout replayed for user {user_id}, order {existing[0].id}")
                        self.stage = CheckoutStage.COMMITTED
                        return build_confirmation(
                            *existing,
                            customer_details=request.customer_details,
                            delivery_address=request.delivery_address,
                        )

                products = validate_inventory(session, lines)
                _check_prices(lines, products)
                self._advance(CheckoutStage.INVENTORY_CHECKED, user_id)

                result = self.authorizer.authorize(request.payment_details, summary.total)
                if not result.success:
                    if result.failure == NETWORK_ERROR:
                        raise PaymentNetworkError(result.reason)
                    raise PaymentDeclined(result.reason)
                self._advance(CheckoutStage.PAYMENT_AUTHORIZED, user_id)

                is_paid = method.type not in DEFERRED_PAYMENT_METHODS
                order = Order(
                    user_id=user_id,
                    description=_describe(request.customer_details, request.delivery_notes),
                    payment_type=method.type.value,
                    subtotal=summary.subtotal,
                    discount=summary.discount,
                    delivery_fee=summary.delivery_fee,
                    processing_fee=summary.processing_fee,
                    tax=summary.tax,
                    amount=summary.total,
                    item_count=summary.item_count,
                    is_paid=is_paid,
                    status=OrderStatus.CONFIRMED,
                    transaction_reference=result.transaction_reference,
                    estimated_delivery=order_refs.estimated_delivery(request.delivery_time_preference),
                    tracking_number=order_refs.tracking_number(),
                    idempotency_key=request.idempotency_key,
                )
                session.add(order)
                session.flush()

                items: List[OrderItem] = []
                for line in lines:
                    product: Product = products[line.product_id]
                    item = OrderItem(
                        order_id=order.id,
                        product_id=line.product_id,
                        product_name=product.name,
                        salon_name=line.product.salon_name,
                        quantity=line.quantity,
                        unit_price=line.product.price,
                        discount=line.product.discount or 0,
                    )
                    session.add(item)
                    items.append(item)
                    decrement_stock(session, line.product_id, line.quantity)

                order_event_service.log_order_event(
                    session,
                    order.id,
                    order_event_service.ORDER_PLACED,
                    "Order placed",
                    meta={"amount": order.amount, "items": order.item_count},
                )
                if is_paid:
                    order_event_service.log_order_event(
                        session,
                        order.id,
                        order_event_service.PAYMENT_CONFIRMED,
                        "Payment confirmed",
                        meta={"payment_type": order.payment_type},
                    )
                session.flush()
                self._advance(CheckoutStage.PERSISTED, user_id)

                cleared = clear_cart(session, user_id)
                self._advance(CheckoutStage.CART_CLEARED, user_id)

            self._advance(CheckoutStage.COMMITTED, user_id)
            logger.info(
                f"Order {order.id} committed for user {user_id}: "
                f"{len(items)} lines, amount {order.amount}, {cleared} cart rows cleared"
            )

            return build_confirmation(
                order,
                items,
                customer_details=request.customer_details,
                delivery_address=request.delivery_address,
            )
