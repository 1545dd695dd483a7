import logging
import random
import string
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from marketplace.config import settings
from marketplace.constants.payment_methods import PaymentMethodType
from marketplace.schemas.checkout_schemas import PaymentDetails

logger = logging.getLogger(__name__)

DECLINED = "declined"
NETWORK_ERROR = "network_error"

DECLINE_MESSAGE = "Payment declined. Please check your payment details and try again."
NETWORK_ERROR_MESSAGE = "Network error. Please try again."
TIMEOUT_MESSAGE = "Payment request timed out. Please try again."


@dataclass(frozen=True)
class AuthorizationResult:
    success: bool
    transaction_reference: Optional[str] = None
    reason: Optional[str] = None
    failure: Optional[str] = None   # declined | network_error

    @classmethod
    def approved(cls, reference: str) -> "AuthorizationResult":
        return cls(success=True, transaction_reference=reference)

    @classmethod
    def declined(cls, reason: str = DECLINE_MESSAGE) -> "AuthorizationResult":
        return cls(success=False, reason=reason, failure=DECLINED)

    @classmethod
    def network_error(cls, reason: str = NETWORK_ERROR_MESSAGE) -> "AuthorizationResult":
        return cls(success=False, reason=reason, failure=NETWORK_ERROR)


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class PaymentAuthorizer(ABC):
    """Accept/decline decision for one charge. Never captures or settles."""

    @abstractmethod
    def authorize(self, details: PaymentDetails, amount: int) -> AuthorizationResult:
        ...


class SimulatedPaymentAuthorizer(PaymentAuthorizer):
    """
    Stand-in gateway.

    Cash on delivery is approved at once. Everything else waits ``latency``
    seconds, then fails with a network error with probability
    ``network_error_rate``, is declined with probability ``decline_rate`` and
    is approved otherwise. A latency beyond ``timeout`` counts as a network
    error.
    """

    def __init__(
        self,
        latency: float = 1.5,
        decline_rate: float = 0.05,
        network_error_rate: float = 0.02,
        timeout: float = 10.0,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.latency = latency
        self.decline_rate = decline_rate
        self.network_error_rate = network_error_rate
        self.timeout = timeout
        self.rng = rng or random.Random()
        self.sleep = sleep

    def authorize(self, details: PaymentDetails, amount: int) -> AuthorizationResult:
        if details.method.type == PaymentMethodType.CASH_ON_DELIVERY:
            return AuthorizationResult.approved(f"COD_{_epoch_ms()}")

        if self.latency > self.timeout:
            self.sleep(self.timeout)
            logger.warning(f"Simulated payment of {amount} timed out after {self.timeout}s")
            return AuthorizationResult.network_error(TIMEOUT_MESSAGE)

        self.sleep(self.latency)

        roll = self.rng.random()
        if roll < self.network_error_rate:
            return AuthorizationResult.network_error()
        if roll < self.network_error_rate + self.decline_rate:
            return AuthorizationResult.declined()

        suffix = "".join(self.rng.choice(string.ascii_lowercase + string.digits) for _ in range(9))
        return AuthorizationResult.approved(f"TXN_{_epoch_ms()}_{suffix}")


class GatewayPaymentAuthorizer(PaymentAuthorizer):
    """HTTP adapter for a card/wallet gateway exposing POST /authorizations."""

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0, http=None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.http = http or requests.Session()

    def authorize(self, details: PaymentDetails, amount: int) -> AuthorizationResult:
        if details.method.type == PaymentMethodType.CASH_ON_DELIVERY:
            return AuthorizationResult.approved(f"COD_{_epoch_ms()}")

        payload = {
            "amount": amount,
            "method": details.method.type.value,
            "card": {
                "number": details.card_number,
                "holder": details.card_holder_name,
                "expiry_month": details.expiry_month,
                "expiry_year": details.expiry_year,
                "cvv": details.cvv,
            } if details.card_number else None,
        }

        try:
            resp = self.http.post(
                f"{self.base_url}/authorizations",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.Timeout:
            logger.warning(f"Payment gateway timed out after {self.timeout}s")
            return AuthorizationResult.network_error(TIMEOUT_MESSAGE)
        except requests.RequestException as e:
            logger.warning(f"Payment gateway unreachable: {e.__class__.__name__}")
            return AuthorizationResult.network_error()

        if resp.status_code >= 500:
            logger.warning(f"Payment gateway answered {resp.status_code}")
            return AuthorizationResult.network_error()

        try:
            body = resp.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            logger.warning(f"Payment gateway answered {resp.status_code} with an unreadable body")
            return AuthorizationResult.network_error()

        if resp.status_code == 200 and body.get("status") == "approved":
            reference = body.get("reference")
            if not reference:
                logger.warning("Payment gateway approved without a reference")
                return AuthorizationResult.network_error()
            return AuthorizationResult.approved(str(reference))

        return AuthorizationResult.declined(body.get("message") or DECLINE_MESSAGE)


def get_payment_authorizer(conf=settings) -> PaymentAuthorizer:
    if conf.PAYMENT_AUTHORIZER == "gateway":
        return GatewayPaymentAuthorizer(
            conf.PAYMENT_GATEWAY_URL,
            conf.PAYMENT_GATEWAY_KEY,
            timeout=conf.PAYMENT_TIMEOUT_SECONDS,
        )
    if conf.PAYMENT_AUTHORIZER == "simulated":
        return SimulatedPaymentAuthorizer(
            latency=conf.PAYMENT_LATENCY_SECONDS,
            decline_rate=conf.PAYMENT_DECLINE_RATE,
            network_error_rate=conf.PAYMENT_NETWORK_ERROR_RATE,
            timeout=conf.PAYMENT_TIMEOUT_SECONDS,
        )
    raise ValueError(f"Unknown payment authorizer: {conf.PAYMENT_AUTHORIZER}")


_authorizer: Optional[PaymentAuthorizer] = None


def get_authorizer() -> PaymentAuthorizer:
    global _authorizer
    if _authorizer is None:
        _authorizer = get_payment_authorizer()
    return _authorizer
