from typing import List, Optional

from sqlmodel import Session, select

from marketplace.models.order_event import OrderEvent

ORDER_PLACED = "order_placed"
PAYMENT_CONFIRMED = "payment_confirmed"


def log_order_event(
    session: Session,
    order_id: str,
    event_type: str,
    label: str,
    meta: Optional[dict] = None,
) -> OrderEvent:
    """Add a timeline entry to the caller's transaction. Never commits."""
    event = OrderEvent(order_id=order_id, event_type=event_type, label=label, meta=meta)
    session.add(event)
    return event


def list_order_events(session: Session, order_id: str) -> List[OrderEvent]:
    return session.exec(
        select(OrderEvent)
        .where(OrderEvent.order_id == order_id)
        .order_by(OrderEvent.created_at, OrderEvent.id)
    ).all()
