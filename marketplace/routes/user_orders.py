from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from marketplace.constants.order_status import OrderStatus, PaymentStatus
from marketplace.database import get_session
from marketplace.models.order import Order
from marketplace.models.order_item import OrderItem
from marketplace.models.user import User
from marketplace.schemas.checkout_schemas import CustomerDetails, OrderConfirmation
from marketplace.services.checkout_service import build_confirmation, order_summary_of
from marketplace.services.order_event_service import PAYMENT_CONFIRMED, list_order_events
from marketplace.services.pricing import discounted_unit_price
from marketplace.utils.order_refs import order_number
from marketplace.utils.token import get_current_user

router = APIRouter()


def _get_own_order(session: Session, order_id: str, user: User) -> Order:
    order = session.get(Order, order_id)

    if not order or order.user_id != user.id:
        raise HTTPException(404, "Order not found")

    return order


def _items(session: Session, order_id: str):
    return session.exec(
        select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)
    ).all()


@router.get("/{order_id}", response_model=OrderConfirmation)
def get_order_confirmation(
    order_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = _get_own_order(session, order_id, current_user)

    customer = CustomerDetails(
        first_name=current_user.first_name,
        last_name=current_user.last_name,
        email=current_user.email,
        contact_number=current_user.contact_number or "",
    )
    return build_confirmation(order, _items(session, order.id), customer_details=customer)


#View Invoice
@router.get("/{order_id}/invoice")
def get_invoice(
    order_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = _get_own_order(session, order_id, current_user)
    items = _items(session, order.id)

    return {
        "invoice_id": f"INV-{order.id[:8].upper()}",
        "order_id": order.id,
        "order_number": order_number(order.id),
        "customer": {
            "name": f"{current_user.first_name} {current_user.last_name}",
            "email": current_user.email,
        },
        "date": order.created_at,
        "payment_type": order.payment_type,
        "payment_status": PaymentStatus.COMPLETED if order.is_paid else PaymentStatus.PENDING,
        "txn_id": order.transaction_reference,
        "items": [
            {
                "title": i.product_name,
                "salon": i.salon_name,
                "price": i.unit_price,
                "discount": i.discount,
                "qty": i.quantity,
                "total": discounted_unit_price(i.unit_price, i.discount) * i.quantity
            }
            for i in items
        ],
        "summary": order_summary_of(order),
    }


# Track Orders
@router.get("/{order_id}/tracking")
def track_order(
    order_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = _get_own_order(session, order_id, current_user)
    events = list_order_events(session, order.id)
    paid_at = next((e.created_at for e in events if e.event_type == PAYMENT_CONFIRMED), None)

    timeline = [
        {
            "status": "Order Placed",
            "description": "Your order has been placed and confirmed",
            "timestamp": order.created_at,
            "completed": True,
        },
        {
            "status": "Payment Confirmed",
            "description": "Payment has been confirmed" if order.is_paid else "Payment will be collected on delivery",
            "timestamp": paid_at,
            "completed": order.is_paid,
        },
        {
            "status": "Processing",
            "description": "Your order is being prepared",
            "timestamp": None,
            "completed": order.status in (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED),
        },
        {
            "status": "Shipped",
            "description": "Your order has been shipped",
            "timestamp": None,
            "completed": order.status in (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
        },
        {
            "status": "Delivered",
            "description": f"Estimated delivery: {order.estimated_delivery}",
            "timestamp": None,
            "completed": order.status == OrderStatus.DELIVERED,
        },
    ]

    return {
        "order_id": order.id,
        "order_number": order_number(order.id),
        "status": order.status,
        "payment_status": PaymentStatus.COMPLETED if order.is_paid else PaymentStatus.PENDING,
        "tracking_number": order.tracking_number,
        "estimated_delivery": order.estimated_delivery,
        "timeline": timeline,
    }
