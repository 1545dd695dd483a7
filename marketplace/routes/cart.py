from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from marketplace.constants.payment_methods import PaymentMethodType
from marketplace.database import get_session
from marketplace.models.cart import CartItem
from marketplace.models.product import Product
from marketplace.models.user import User
from marketplace.schemas.cart_schemas import CartAddRequest
from marketplace.services.cart_service import load_cart_lines
from marketplace.services.checkout_service import resolve_payment_method
from marketplace.services.pricing import calculate_order_summary
from marketplace.utils.token import get_current_user


router = APIRouter()

# View Cart

@router.get("/")
def get_cart(
    payment_method: Optional[PaymentMethodType] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    lines = load_cart_lines(session, current_user.id)
    method = resolve_payment_method(payment_method) if payment_method else None

    return {
        "items": lines,
        "summary": calculate_order_summary(lines, method),
    }

# Add to Cart

@router.post("/add")
def add_to_cart(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    if data.quantity <= 0:
        raise HTTPException(400, "Quantity must be at least 1")

    product = session.get(Product, data.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    existing_item = session.exec(
        select(CartItem).where(
            CartItem.user_id == current_user.id,
            CartItem.product_id == data.product_id
        )
    ).first()

    if existing_item:
        existing_item.quantity += data.quantity
        session.add(existing_item)
        session.commit()
        session.refresh(existing_item)
        return {"message": "Cart updated", "item": existing_item}

    new_item = CartItem(
        user_id=current_user.id,
        product_id=product.id,
        quantity=data.quantity,
    )

    session.add(new_item)
    session.commit()
    session.refresh(new_item)

    return {"message": "Added to cart", "item": new_item}

# Remove Cart

@router.delete("/remove/{item_id}")
def remove_item(
    item_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    item = session.get(CartItem, item_id)

    if not item or item.user_id != current_user.id:
        raise HTTPException(404, "Item not found")

    session.delete(item)
    session.commit()

    return {"message": "Item removed from cart"}
