import os
import sys
from datetime import date, datetime

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault("DATABASE_URL", "sqlite:///./data/gringotts.db")
os.environ.setdefault("SECRET_KEY", "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef")

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from gringotts.database import Base
from gringotts.models.customer import Customer, PaymentMethod
from gringotts.models.invoice import Invoice, Payment
from gringotts.models.project import Project
from gringotts.services.billing import (
    apply_payment_status,
    charge_subscription,
    create_subscription,
    get_chargeable_subscriptions,
    get_current_period,
    run_billing_cycle,
)
from gringotts.services.billing_periods import end_of_day, start_of_day
from gringotts.services.payment_providers import MockPaymentProvider


def _build_session():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine)()

    project = Project(id="test-project", name="Test Project", api_key_hash="hashed")
    session.add(project)
    session.flush()

    customer = Customer(project_id=project.id, email="tester@example.com", name="Tester")
    session.add(customer)
    session.flush()

    return session, project, customer


def _add_verified_payment_method(session, project, customer):
    payment_method = PaymentMethod(
        project_id=project.id,
        customer_id=customer.id,
        type="card",
        verified=1,
    )
    session.add(payment_method)
    session.flush()
    return payment_method


def test_create_subscription_sets_first_cycle():
    session, project, customer = _build_session()

    subscription = create_subscription(session, project, customer, date(2022, 1, 31), amount=10.0)
    session.commit()

    assert subscription.anchor_date == datetime(2022, 1, 31)
    assert subscription.next_payment == datetime(2022, 2, 28)
    assert subscription.active_until == end_of_day(date(2022, 2, 27))
    assert subscription.last_payment is None
    assert subscription.status == "active"


def test_get_current_period_uses_anchor_date():
    session, project, customer = _build_session()
    subscription = create_subscription(session, project, customer, date(2022, 1, 30), amount=10.0)

    period = get_current_period(subscription, date(2022, 3, 15))

    assert period.start == start_of_day(date(2022, 2, 28))
    assert period.end == end_of_day(date(2022, 3, 29))


def test_get_chargeable_subscriptions_only_returns_due_active():
    session, project, customer = _build_session()
    due = create_subscription(session, project, customer, date(2022, 1, 15), amount=10.0)
    not_due = create_subscription(session, project, customer, date(2022, 1, 20), amount=10.0)
    canceled = create_subscription(session, project, customer, date(2022, 1, 1), amount=10.0)
    canceled.status = "canceled"
    session.commit()

    chargeable = get_chargeable_subscriptions(session, datetime(2022, 2, 16))

    assert [s.id for s in chargeable] == [due.id]
    assert not_due not in chargeable


def test_charge_subscription_invoices_elapsed_period_and_advances():
    session, project, customer = _build_session()
    payment_method = _add_verified_payment_method(session, project, customer)
    subscription = create_subscription(session, project, customer, date(2022, 1, 31), amount=25.0)

    payment = charge_subscription(session, subscription, MockPaymentProvider("http://localhost:3000"))
    session.commit()

    invoice = session.query(Invoice).filter_by(subscription_id=subscription.id).one()
    assert invoice.period_start == datetime(2022, 1, 31)
    assert invoice.period_end == end_of_day(date(2022, 2, 27))
    assert invoice.amount == 25.0
    assert invoice.status == "pending"

    assert payment.invoice_id == invoice.id
    assert payment.status == "pending"
    assert payment.payment_method_id == payment_method.id
    assert payment.provider_id.startswith("mock_")

    assert subscription.next_payment == datetime(2022, 3, 31)
    # Paid-through date only moves once the payment succeeds
    assert subscription.active_until == end_of_day(date(2022, 2, 27))


def test_charge_without_payment_method_still_invoices():
    session, project, customer = _build_session()
    subscription = create_subscription(session, project, customer, date(2022, 1, 15), amount=5.0)

    payment = charge_subscription(session, subscription, MockPaymentProvider("http://localhost:3000"))

    assert payment.provider_id is None
    assert payment.payment_method_id is None
    assert subscription.next_payment == datetime(2022, 3, 15)


def test_paid_payment_extends_active_until():
    session, project, customer = _build_session()
    _add_verified_payment_method(session, project, customer)
    subscription = create_subscription(session, project, customer, date(2022, 1, 31), amount=25.0)
    payment = charge_subscription(session, subscription, MockPaymentProvider("http://localhost:3000"))

    apply_payment_status(session, payment, "paid", datetime(2022, 2, 28, 9, 30))
    session.commit()

    assert payment.status == "paid"
    assert payment.invoice.status == "paid"
    assert subscription.last_payment == datetime(2022, 2, 28, 9, 30)
    assert subscription.active_until == end_of_day(date(2022, 3, 30))


def test_paid_status_is_applied_once():
    session, project, customer = _build_session()
    subscription = create_subscription(session, project, customer, date(2022, 1, 15), amount=25.0)
    payment = charge_subscription(session, subscription, None)

    apply_payment_status(session, payment, "paid", datetime(2022, 2, 15))
    apply_payment_status(session, payment, "paid", datetime(2022, 2, 16))
    apply_payment_status(session, payment, "failed")

    assert payment.status == "paid"
    assert subscription.active_until == end_of_day(date(2022, 3, 14))
    assert subscription.last_payment == datetime(2022, 2, 15)


def test_failed_payment_keeps_active_until():
    session, project, customer = _build_session()
    subscription = create_subscription(session, project, customer, date(2022, 1, 15), amount=25.0)
    payment = charge_subscription(session, subscription, None)

    apply_payment_status(session, payment, "failed")

    assert payment.status == "failed"
    assert payment.invoice.status == "failed"
    assert subscription.active_until == end_of_day(date(2022, 2, 14))
    assert subscription.last_payment is None


def test_verification_payment_verifies_payment_method():
    session, project, customer = _build_session()
    payment_method = PaymentMethod(project_id=project.id, customer_id=customer.id, verified=0)
    session.add(payment_method)
    session.flush()
    payment = Payment(
        project_id=project.id,
        customer_id=customer.id,
        payment_method_id=payment_method.id,
        amount=1.0,
        status="pending",
    )
    session.add(payment)
    session.flush()

    apply_payment_status(session, payment, "paid")

    assert payment_method.verified == 1
    assert payment.paid_at is not None


def test_run_billing_cycle_charges_due_subscriptions_once():
    session, project, customer = _build_session()
    create_subscription(session, project, customer, date(2022, 1, 15), amount=10.0)
    create_subscription(session, project, customer, date(2022, 1, 31), amount=20.0)
    session.commit()

    charged = run_billing_cycle(session, now=datetime(2022, 2, 20))
    charged_again = run_billing_cycle(session, now=datetime(2022, 2, 20))
    session.commit()

    assert charged == 1
    assert charged_again == 0
    assert session.query(Invoice).count() == 1
    assert session.query(Payment).count() == 1


def test_billing_cycle_sequence_never_drifts():
    session, project, customer = _build_session()
    subscription = create_subscription(session, project, customer, date(2022, 1, 31), amount=10.0)

    for _ in range(12):
        payment = charge_subscription(session, subscription, None)
        apply_payment_status(session, payment, "paid", payment.invoice.period_end)

    invoices = session.query(Invoice).order_by(Invoice.period_start).all()
    starts = [invoice.period_start.date() for invoice in invoices]
    assert starts[:5] == [
        date(2022, 1, 31),
        date(2022, 2, 28),
        date(2022, 3, 31),
        date(2022, 4, 30),
        date(2022, 5, 31),
    ]
    for previous, following in zip(invoices, invoices[1:]):
        assert (following.period_start - previous.period_end).total_seconds() == 0.001
    assert invoices[-1].period_start == datetime(2022, 12, 31)
    assert subscription.next_payment == datetime(2023, 2, 28)
    assert subscription.active_until == end_of_day(date(2023, 2, 27))


def test_paid_payments_extend_active_until_for_anchor_on_first_of_month():
    session, project, customer = _build_session()
    subscription = create_subscription(session, project, customer, date(2022, 1, 1), amount=10.0)
    assert subscription.active_until == end_of_day(date(2022, 1, 31))

    first = charge_subscription(session, subscription, None)
    apply_payment_status(session, first, "paid", datetime(2022, 2, 1, 6, 0))
    assert first.invoice.period_start == datetime(2022, 1, 1)
    assert subscription.active_until == end_of_day(date(2022, 2, 28))

    second = charge_subscription(session, subscription, None)
    apply_payment_status(session, second, "paid", datetime(2022, 3, 1, 6, 0))
    assert subscription.active_until == end_of_day(date(2022, 3, 31))
    assert subscription.next_payment == datetime(2022, 4, 1)
