import logging
from typing import Dict, Iterable, List, Tuple

from sqlalchemy import update
from sqlmodel import Session, select

from marketplace.errors import InsufficientStock, ProductNotFound
from marketplace.models.base import utc_now
from marketplace.models.product import Product
from marketplace.schemas.checkout_schemas import CartLine

logger = logging.getLogger(__name__)


def requested_quantities(lines: Iterable[CartLine]) -> Dict[int, int]:
    """Total requested units per product, in product id order."""
    totals: Dict[int, int] = {}
    for line in lines:
        totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
    return dict(sorted(totals.items()))


def _snapshot_names(lines: Iterable[CartLine]) -> Dict[int, str]:
    return {l.product_id: l.product.name for l in lines if l.product}


def validate_inventory(session: Session, lines: List[CartLine]) -> Dict[int, Product]:
    """
    Check every line against the live available_quantity.

    Must run inside the checkout transaction. Rows are locked where the
    database supports SELECT ... FOR UPDATE; products are visited in id order
    so two checkouts lock in the same order.
    """
    names = _snapshot_names(lines)
    products: Dict[int, Product] = {}

    for product_id, quantity in requested_quantities(lines).items():
        product = session.exec(
            select(Product).where(Product.id == product_id).with_for_update()
        ).first()

        if not product:
            raise ProductNotFound(product_id, names.get(product_id))

        if product.available_quantity < quantity:
            logger.info(
                f"Stock check failed for product {product_id}: "
                f"{product.available_quantity} available, {quantity} requested"
            )
            raise InsufficientStock(product.name, product.available_quantity, quantity)

        products[product_id] = product

    return products


def decrement_stock(session: Session, product_id: int, quantity: int) -> None:
    """Subtract quantity only if enough stock is left at write time."""
    result = session.exec(
        update(Product)
        .where(Product.id == product_id)
        .where(Product.available_quantity >= quantity)
        .values(
            available_quantity=Product.available_quantity - quantity,
            updated_at=utc_now(),
        )
    )

    if result.rowcount == 1:
        return

    row = session.exec(
        select(Product.name, Product.available_quantity).where(Product.id == product_id)
    ).first()
    if row is None:
        raise ProductNotFound(product_id)

    name, available = row
    logger.warning(
        f"Conditioned decrement missed for product {product_id}: "
        f"{available} available, {quantity} requested"
    )
    raise InsufficientStock(name, available, quantity)


def restock_product(session: Session, product_id: int, quantity: int) -> int:
    """Explicit stock increase. Returns the new available_quantity; caller commits."""
    if quantity <= 0:
        raise ValueError("Restock quantity must be positive")

    result = session.exec(
        update(Product)
        .where(Product.id == product_id)
        .values(
            available_quantity=Product.available_quantity + quantity,
            updated_at=utc_now(),
        )
    )
    if result.rowcount != 1:
        raise ProductNotFound(product_id)

    available = session.exec(
        select(Product.available_quantity).where(Product.id == product_id)
    ).one()
    logger.info(f"Restocked product {product_id} by {quantity}, now {available}")
    return available


def check_availability(session: Session, lines: List[CartLine]) -> Tuple[bool, List[str]]:
    """Advisory check for the cart page. Takes no locks and writes nothing."""
    issues: List[str] = []
    names = _snapshot_names(lines)

    for product_id, quantity in requested_quantities(lines).items():
        product = session.get(Product, product_id)
        if not product:
            issues.append(f'Product "{names.get(product_id, product_id)}" is no longer available')
            continue

        if product.available_quantity < quantity:
            issues.append(
                f'Only {product.available_quantity} units of "{product.name}" '
                f"are available (you requested {quantity})"
            )

    return len(issues) == 0, issues
