from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from marketplace.database import get_session
from marketplace.errors import ProductNotFound
from marketplace.models.user import User
from marketplace.schemas.cart_schemas import RestockRequest
from marketplace.services.inventory_service import restock_product
from marketplace.utils.token import get_current_admin

router = APIRouter()


@router.post("/{product_id}/restock")
def restock(
    product_id: int,
    data: RestockRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin),
):
    try:
        available = restock_product(session, product_id, data.quantity)
    except ValueError as e:
        raise HTTPException(400, str(e))
    except ProductNotFound:
        raise HTTPException(404, "Product not found")

    session.commit()

    return {
        "product_id": product_id,
        "available_quantity": available,
    }
