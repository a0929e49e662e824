"""Subscriptions API endpoints."""
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from gringotts.api.customers import get_project_customer
from gringotts.api.deps import get_current_project, get_db
from gringotts.models.project import Project
from gringotts.models.subscription import Subscription
from gringotts.schemas.subscription import (
    PaymentResponse,
    PeriodResponse,
    SubscriptionCreate,
    SubscriptionResponse,
    SubscriptionUpdate,
)
from gringotts.services.billing import charge_subscription, create_subscription, get_current_period
from gringotts.services.payment_providers import get_payment_provider

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


def get_project_subscription(db: Session, project: Project, subscription_id: str) -> Subscription:
    """Load a subscription of the project or raise 404."""
    subscription = db.query(Subscription).filter(
        Subscription.id == subscription_id,
        Subscription.project_id == project.id,
    ).first()

    if not subscription:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subscription not found",
        )
    return subscription


@router.post("", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
def add_subscription(
    subscription_data: SubscriptionCreate,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Create a subscription for a customer."""
    customer = get_project_customer(db, project, subscription_data.customer_id)

    subscription = create_subscription(
        db,
        project,
        customer,
        anchor_date=subscription_data.anchor_date or date.today(),
        amount=subscription_data.amount,
        currency=subscription_data.currency,
        description=subscription_data.description,
    )
    db.commit()
    db.refresh(subscription)

    return subscription


@router.get("", response_model=list[SubscriptionResponse])
def list_subscriptions(
    customer_id: str | None = Query(None, description="Filter by customer"),
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """List the project's subscriptions."""
    query = db.query(Subscription).filter(Subscription.project_id == project.id)
    if customer_id:
        query = query.filter(Subscription.customer_id == customer_id)
    return query.order_by(Subscription.created_at).all()


@router.get("/{subscription_id}", response_model=SubscriptionResponse)
def get_subscription(
    subscription_id: str,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Get a subscription."""
    return get_project_subscription(db, project, subscription_id)


@router.patch("/{subscription_id}", response_model=SubscriptionResponse)
def update_subscription(
    subscription_id: str,
    subscription_data: SubscriptionUpdate,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Update pricing, description or status of a subscription."""
    subscription = get_project_subscription(db, project, subscription_id)

    if subscription_data.amount is not None:
        subscription.amount = subscription_data.amount
    if subscription_data.description is not None:
        subscription.description = subscription_data.description
    if subscription_data.status is not None:
        subscription.status = subscription_data.status

    db.commit()
    db.refresh(subscription)

    return subscription


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subscription(
    subscription_id: str,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Delete a subscription. Its invoices and payments are kept."""
    subscription = get_project_subscription(db, project, subscription_id)
    db.delete(subscription)
    db.commit()


@router.get("/{subscription_id}/period", response_model=PeriodResponse)
def get_subscription_period(
    subscription_id: str,
    reference_date: date | None = Query(None, alias="date", description="Date inside the period (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Get the billing period containing a date (defaults to today)."""
    subscription = get_project_subscription(db, project, subscription_id)
    period = get_current_period(subscription, reference_date)
    return PeriodResponse(start=period.start, end=period.end)


@router.post("/{subscription_id}/charge", response_model=PaymentResponse)
def charge_subscription_now(
    subscription_id: str,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Charge a subscription whose next payment is due."""
    subscription = get_project_subscription(db, project, subscription_id)

    if subscription.status != "active":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Subscription is not active",
        )
    if subscription.next_payment > datetime.utcnow():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Subscription is not due before {subscription.next_payment:%Y-%m-%d}",
        )

    payment = charge_subscription(db, subscription, get_payment_provider(project.payment_provider))
    db.commit()
    db.refresh(payment)

    return payment
