import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from marketplace.database import create_db_and_tables
from marketplace.config import settings
from marketplace.errors import CheckoutError
from marketplace.routes import (
    cart,
    checkout,
    health,
    inventory,
    user_orders,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Salon Marketplace Checkout API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CheckoutError)
async def checkout_error_handler(request: Request, exc: CheckoutError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    logger.info(f"Rejected malformed request to {request.url.path}: {location} {message}")
    return JSONResponse(
        status_code=400,
        content={"error": f"{location}: {message}" if location else message},
    )


app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
app.include_router(user_orders.router, prefix="/orders", tags=["Orders"])
app.include_router(inventory.router, prefix="/admin/inventory", tags=["Admin Inventory"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "checkout_endpoints": [
            "/checkout/payment-methods", "/checkout/summary",
            "/checkout/validate-inventory", "/checkout/process"
        ],
        "order_endpoints": [
            "/orders/{order_id}", "/orders/{order_id}/invoice",
            "/orders/{order_id}/tracking"
        ],
        "cart": [
            "/cart", "/cart/add", "/cart/remove/{id}"
        ],
        "admin_inventory": [
            "/admin/inventory/{product_id}/restock"
        ]
    }
