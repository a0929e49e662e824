"""Subscription billing service.

Subscriptions are billed in arrears: the payment scheduled on
``next_payment`` covers the period that ended the day before it.
"""
import logging
from datetime import date, datetime

from sqlalchemy.orm import Session

from gringotts.models.customer import Customer, PaymentMethod
from gringotts.models.invoice import Invoice, Payment
from gringotts.models.project import Project
from gringotts.models.subscription import Subscription
from gringotts.services.billing_periods import (
    Period,
    get_active_until_date,
    get_next_payment_date,
    get_period_from_anchor_date,
    get_previous_period,
    start_of_day,
)
from gringotts.services.payment_providers import PaymentProvider, get_payment_provider

logger = logging.getLogger(__name__)


def create_subscription(
    db: Session,
    project: Project,
    customer: Customer,
    anchor_date: date,
    amount: float,
    currency: str = "EUR",
    description: str | None = None,
) -> Subscription:
    """Create a subscription whose cycle recurs on ``anchor_date``'s day-of-month."""
    anchor = start_of_day(anchor_date)
    subscription = Subscription(
        project_id=project.id,
        customer_id=customer.id,
        anchor_date=anchor,
        next_payment=get_next_payment_date(anchor, anchor),
        active_until=get_active_until_date(anchor, anchor),
        amount=amount,
        currency=currency,
        description=description,
        status="active",
    )
    db.add(subscription)
    db.flush()
    logger.info(f"Created subscription {subscription.id} anchored on day {anchor.day}")
    return subscription


def get_current_period(subscription: Subscription, reference_date: date | None = None) -> Period:
    """Get the billing period of a subscription containing ``reference_date``."""
    if reference_date is None:
        reference_date = date.today()
    return get_period_from_anchor_date(reference_date, subscription.anchor_date)


def get_chargeable_subscriptions(db: Session, now: datetime) -> list[Subscription]:
    """Get active subscriptions whose next payment is due."""
    return db.query(Subscription).filter(
        Subscription.status == "active",
        Subscription.next_payment <= now,
    ).order_by(Subscription.next_payment).all()


def _get_verified_payment_method(db: Session, customer_id: str) -> PaymentMethod | None:
    return db.query(PaymentMethod).filter(
        PaymentMethod.customer_id == customer_id,
        PaymentMethod.verified == 1,
    ).order_by(PaymentMethod.created_at.desc()).first()


def charge_subscription(
    db: Session,
    subscription: Subscription,
    provider: PaymentProvider | None,
) -> Payment:
    """Invoice the elapsed period and start a payment for it.

    Advances ``next_payment`` by one cycle. The subscription's
    ``active_until`` only moves once the payment is reported as paid.
    """
    period = get_previous_period(subscription.next_payment, subscription.anchor_date)

    invoice = Invoice(
        project_id=subscription.project_id,
        customer_id=subscription.customer_id,
        subscription_id=subscription.id,
        period_start=period.start,
        period_end=period.end,
        amount=subscription.amount,
        currency=subscription.currency,
        status="pending",
    )
    db.add(invoice)
    db.flush()

    payment = Payment(
        project_id=subscription.project_id,
        customer_id=subscription.customer_id,
        subscription_id=subscription.id,
        invoice_id=invoice.id,
        amount=subscription.amount,
        currency=subscription.currency,
        description=f"Subscription {period.start:%Y-%m-%d} - {period.end:%Y-%m-%d}",
        status="pending",
    )
    db.add(payment)
    db.flush()

    payment_method = _get_verified_payment_method(db, subscription.customer_id)
    if provider and payment_method:
        provider.charge_background(payment, payment_method)
    else:
        logger.warning(f"Subscription {subscription.id} has no chargeable payment method")

    subscription.next_payment = get_next_payment_date(subscription.next_payment, subscription.anchor_date)
    logger.info(
        f"Charged subscription {subscription.id} for {period.start:%Y-%m-%d} - {period.end:%Y-%m-%d}, "
        f"next payment {subscription.next_payment:%Y-%m-%d}"
    )
    return payment


def apply_payment_status(
    db: Session,
    payment: Payment,
    status: str,
    paid_at: datetime | None = None,
) -> Payment:
    """Record a payment status reported by the provider."""
    if payment.status == "paid":
        logger.info(f"Payment {payment.id} already paid, ignoring status {status}")
        return payment

    payment.status = status
    invoice = payment.invoice

    if status == "paid":
        payment.paid_at = paid_at or datetime.utcnow()
        if invoice:
            invoice.status = "paid"

        subscription = payment.subscription
        if subscription:
            subscription.last_payment = payment.paid_at
            subscription.active_until = get_active_until_date(subscription.active_until, subscription.anchor_date)
            logger.info(f"Subscription {subscription.id} active until {subscription.active_until.isoformat()}")
        elif payment.payment_method:
            payment.payment_method.verified = 1
            logger.info(f"Payment method {payment.payment_method.id} verified")

    elif status == "failed" and invoice:
        invoice.status = "failed"

    db.flush()
    return payment


def run_billing_cycle(
    db: Session,
    provider: PaymentProvider | None = None,
    now: datetime | None = None,
) -> int:
    """Charge every subscription that is due. Returns number of charges.

    Without an explicit provider, each subscription is charged through its
    project's configured provider.
    """
    if now is None:
        now = datetime.utcnow()

    subscriptions = get_chargeable_subscriptions(db, now)
    for subscription in subscriptions:
        charge_subscription(
            db,
            subscription,
            provider or get_payment_provider(subscription.project.payment_provider),
        )

    logger.info(f"Billing cycle charged {len(subscriptions)} subscriptions")
    return len(subscriptions)
