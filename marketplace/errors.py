"""Checkout failure taxonomy.

Every failure of a checkout attempt is raised as one of these, after the
transaction (if any) has been rolled back. ``status_code`` is what the HTTP
layer answers with.
"""


class CheckoutError(Exception):
    """Base exception for all checkout errors."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CheckoutValidationError(CheckoutError):
    """Raised when the request is incomplete. No transaction was opened."""


class ProductNotFound(CheckoutError):
    """Raised when a cart line points at a product that no longer exists."""

    def __init__(self, product_id: int, name: str | None = None):
        self.product_id = product_id
        super().__init__(f"Product not found: {name or product_id}")


class InsufficientStock(CheckoutError):
    """Raised when a line asks for more units than are available."""

    def __init__(self, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"{available} available, {requested} requested"
        )


class PaymentDeclined(CheckoutError):
    """Raised when the payment provider refused the charge."""


class PaymentNetworkError(CheckoutError):
    """Raised when the payment provider could not be reached or timed out."""


class CheckoutTransactionError(CheckoutError):
    """Raised on unexpected database failures. Details are only logged."""

    status_code = 500

    def __init__(self, message: str = "Failed to process order"):
        super().__init__(message)
