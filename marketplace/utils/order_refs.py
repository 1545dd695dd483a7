import time
from datetime import date, timedelta
from typing import Optional

# deliveries booked into a time slot are dispatched a day earlier
SLOT_PREFERENCES = {"morning", "afternoon", "evening"}


def order_number(order_id: str) -> str:
    return f"ORD-{order_id[:8].upper()}"


def tracking_number() -> str:
    return f"TRK-{int(time.time() * 1000)}"


def invoice_url(order_id: str) -> str:
    return f"/orders/{order_id}/invoice"


def estimated_delivery(preference: Optional[str], today: Optional[date] = None) -> str:
    today = today or date.today()
    days = 2 if preference in SLOT_PREFERENCES else 3
    return (today + timedelta(days=days)).isoformat()
