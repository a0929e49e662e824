"""Payment provider integrations."""
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import urlencode

from gringotts.config import get_settings
from gringotts.models.customer import PaymentMethod
from gringotts.models.invoice import Payment

logger = logging.getLogger(__name__)

PAYMENT_STATUSES = {"pending", "paid", "failed"}


@dataclass(frozen=True)
class WebhookPayload:
    """Normalized payment status update sent by a provider."""

    payment_id: str
    status: str
    paid_at: datetime | None = None


class PaymentProvider(ABC):
    """Interface every payment provider integration implements."""

    name: str

    @abstractmethod
    def create_checkout(self, payment: Payment, redirect_url: str) -> str:
        """Register a foreground payment and return the checkout URL."""

    @abstractmethod
    def charge_background(self, payment: Payment, payment_method: PaymentMethod) -> None:
        """Charge a verified payment method without customer interaction."""

    @abstractmethod
    def parse_webhook(self, payload: dict) -> WebhookPayload:
        """Turn a provider callback body into a ``WebhookPayload``."""


class MockPaymentProvider(PaymentProvider):
    """Provider that never leaves the process; status arrives via webhook.

    For development only. Its webhook is unauthenticated and accepts any
    status for any known payment id, so anyone who can reach
    /api/payment/webhook can mark a payment as paid.
    """

    name = "mock"

    def __init__(self, public_url: str):
        self.public_url = public_url.rstrip("/")

    def create_checkout(self, payment: Payment, redirect_url: str) -> str:
        payment.provider_id = f"mock_{uuid.uuid4().hex}"
        logger.info(f"Created mock checkout for payment {payment.id}")
        query = urlencode({"payment_id": payment.id, "redirect_url": redirect_url})
        return f"{self.public_url}/mock/checkout?{query}"

    def charge_background(self, payment: Payment, payment_method: PaymentMethod) -> None:
        payment.provider_id = f"mock_{uuid.uuid4().hex}"
        payment.payment_method_id = payment_method.id
        logger.info(f"Queued mock charge for payment {payment.id} using method {payment_method.id}")

    def parse_webhook(self, payload: dict) -> WebhookPayload:
        payment_id = payload.get("payment_id")
        status = payload.get("status")
        if not payment_id or status not in PAYMENT_STATUSES:
            raise ValueError("Invalid webhook payload")

        paid_at = None
        if status == "paid":
            raw_paid_at = payload.get("paid_at")
            paid_at = datetime.fromisoformat(raw_paid_at) if raw_paid_at else datetime.utcnow()

        return WebhookPayload(payment_id=payment_id, status=status, paid_at=paid_at)


def get_payment_provider(name: str | None = None) -> PaymentProvider | None:
    """Get the configured payment provider, or None if not configured."""
    settings = get_settings()
    if name is None:
        name = settings.payment_provider

    if name == "mock":
        if not settings.debug:
            logger.warning("Mock payment provider is in use outside debug mode; payments are not verified")
        return MockPaymentProvider(settings.public_url)

    if name:
        logger.warning(f"Unknown payment provider: {name}")
    return None
