from enum import Enum


class PaymentMethodType(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"
    CASH_ON_DELIVERY = "cash_on_delivery"


CARD_METHODS = {PaymentMethodType.CREDIT_CARD, PaymentMethodType.DEBIT_CARD}

# Payment is collected by the courier, the order stays unpaid until delivery.
DEFERRED_PAYMENT_METHODS = {PaymentMethodType.CASH_ON_DELIVERY}


# processing_fee is in minor currency units
PAYMENT_METHODS = {
    PaymentMethodType.CREDIT_CARD: {
        "name": "Credit Card",
        "description": "Visa, MasterCard, American Express",
        "processing_fee": 0,
        "is_available": True,
    },
    PaymentMethodType.DEBIT_CARD: {
        "name": "Debit Card",
        "description": "Pay directly from your bank account",
        "processing_fee": 0,
        "is_available": True,
    },
    PaymentMethodType.PAYPAL: {
        "name": "PayPal",
        "description": "Fast and secure payments",
        "processing_fee": 250,
        "is_available": True,
    },
    PaymentMethodType.BANK_TRANSFER: {
        "name": "Bank Transfer",
        "description": "Direct bank transfer",
        "processing_fee": 0,
        "is_available": True,
    },
    PaymentMethodType.CASH_ON_DELIVERY: {
        "name": "Cash on Delivery",
        "description": "Pay when you receive your order",
        "processing_fee": 500,
        "is_available": True,
    },
}
