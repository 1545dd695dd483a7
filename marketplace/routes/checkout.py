from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine
from sqlmodel import Session

from marketplace.database import get_engine, get_session
from marketplace.models.user import User
from marketplace.schemas.checkout_schemas import (
    CheckoutRequest,
    InventoryCheckRequest,
    InventoryCheckResponse,
    OrderConfirmation,
    OrderSummary,
    PaymentMethod,
    SummaryRequest,
)
from marketplace.services.checkout_service import (
    CheckoutCoordinator,
    list_payment_methods,
    resolve_payment_method,
)
from marketplace.services.inventory_service import check_availability
from marketplace.services.payment_service import PaymentAuthorizer, get_authorizer
from marketplace.services.pricing import calculate_order_summary
from marketplace.utils.token import get_current_user

router = APIRouter()


def get_checkout_coordinator(
    engine: Engine = Depends(get_engine),
    authorizer: PaymentAuthorizer = Depends(get_authorizer),
) -> CheckoutCoordinator:
    return CheckoutCoordinator(engine, authorizer)


@router.get("/payment-methods", response_model=List[PaymentMethod])
def payment_methods():
    return list_payment_methods()


@router.post("/summary", response_model=OrderSummary)
def order_summary(data: SummaryRequest):
    method = resolve_payment_method(data.payment_method) if data.payment_method else None
    return calculate_order_summary(data.items, method)


@router.post("/validate-inventory", response_model=InventoryCheckResponse)
def validate_inventory(
    data: InventoryCheckRequest,
    session: Session = Depends(get_session),
):
    available, issues = check_availability(session, data.items)
    return InventoryCheckResponse(available=available, issues=issues)


@router.post("/process", response_model=OrderConfirmation)
def process_checkout(
    data: CheckoutRequest,
    current_user: User = Depends(get_current_user),
    coordinator: CheckoutCoordinator = Depends(get_checkout_coordinator),
):
    # CheckoutError subclasses are rendered by the handler in main.py
    return coordinator.process(current_user.id, data)
