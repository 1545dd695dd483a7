from typing import List

from sqlalchemy import delete
from sqlmodel import Session, select

from marketplace.models.cart import CartItem
from marketplace.models.product import Product
from marketplace.models.salon import Salon
from marketplace.schemas.checkout_schemas import CartLine, CartProduct


def load_cart_lines(session: Session, user_id: int) -> List[CartLine]:
    """Cart snapshot with the product data as it reads right now."""
    rows = session.exec(
        select(CartItem, Product, Salon)
        .join(Product, CartItem.product_id == Product.id)
        .join(Salon, Product.salon_id == Salon.id, isouter=True)
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.created_at, CartItem.id)
    ).all()

    return [
        CartLine(
            product_id=product.id,
            quantity=item.quantity,
            product=CartProduct(
                name=product.name,
                price=product.price,
                discount=product.discount,
                salon_name=salon.name if salon else None,
                available_quantity=product.available_quantity,
            ),
        )
        for item, product, salon in rows
    ]


def clear_cart(session: Session, user_id: int) -> int:
    """
    Delete every cart row of the user.

    Does not commit: during checkout this is the last write of the order
    transaction.
    """
    result = session.exec(delete(CartItem).where(CartItem.user_id == user_id))
    return result.rowcount
