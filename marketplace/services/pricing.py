from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from marketplace.config import settings
from marketplace.schemas.checkout_schemas import CartLine, OrderSummary, PaymentMethod


@dataclass(frozen=True)
class PricingPolicy:
    free_shipping_threshold: int = 10000
    delivery_fee: int = 500
    tax_rate: Decimal = Decimal("0.02")
    delivery_days: int = 3

    @classmethod
    def from_settings(cls, conf=settings) -> "PricingPolicy":
        return cls(
            free_shipping_threshold=conf.FREE_SHIPPING_THRESHOLD,
            delivery_fee=conf.DELIVERY_FEE,
            tax_rate=Decimal(str(conf.TAX_RATE)),
            delivery_days=conf.DELIVERY_DAYS,
        )


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def unit_discount(price: int, discount: Optional[int]) -> int:
    """Discount on one unit, in minor units."""
    if not discount or discount <= 0:
        return 0
    return round_half_up(Decimal(price) * Decimal(discount) / 100)


def discounted_unit_price(price: int, discount: Optional[int]) -> int:
    return price - unit_discount(price, discount)


def calculate_order_summary(
    lines: Iterable[CartLine],
    payment_method: Optional[PaymentMethod] = None,
    *,
    policy: Optional[PricingPolicy] = None,
    today: Optional[date] = None,
) -> OrderSummary:
    """
    Price a cart snapshot.

    Discounts are per line (percent of each unit price), not a percentage of
    the subtotal. Lines without product data contribute nothing.
    """
    policy = policy or PricingPolicy.from_settings()
    today = today or date.today()

    subtotal = 0
    discount = 0
    item_count = 0

    for line in lines:
        item_count += line.quantity
        if line.product is None:
            continue
        subtotal += line.product.price * line.quantity
        discount += unit_discount(line.product.price, line.product.discount) * line.quantity

    delivery_fee = 0 if subtotal > policy.free_shipping_threshold else policy.delivery_fee
    processing_fee = payment_method.processing_fee if payment_method else 0
    tax = round_half_up(Decimal(subtotal - discount) * policy.tax_rate)
    total = subtotal - discount + delivery_fee + processing_fee + tax

    return OrderSummary(
        subtotal=subtotal,
        discount=discount,
        delivery_fee=delivery_fee,
        processing_fee=processing_fee,
        tax=tax,
        total=total,
        item_count=item_count,
        estimated_delivery=(today + timedelta(days=policy.delivery_days)).isoformat(),
    )
