"""Payment method API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gringotts.api.customers import get_project_customer
from gringotts.api.deps import get_current_project, get_db
from gringotts.models.customer import PaymentMethod
from gringotts.models.invoice import Payment
from gringotts.models.project import Project
from gringotts.schemas.auth import MessageResponse
from gringotts.schemas.customer import (
    PaymentMethodCheckoutResponse,
    PaymentMethodCreate,
    PaymentMethodResponse,
)
from gringotts.services.payment_providers import get_payment_provider

router = APIRouter(prefix="/payment-method", tags=["payment-method"])

# Smallest amount the provider accepts for a verification charge
VERIFICATION_AMOUNT = 1.0


def get_project_payment_method(db: Session, project: Project, payment_method_id: str) -> PaymentMethod:
    """Load a payment method of the project or raise 404."""
    payment_method = db.query(PaymentMethod).filter(
        PaymentMethod.id == payment_method_id,
        PaymentMethod.project_id == project.id,
    ).first()

    if not payment_method:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment-method not found",
        )
    return payment_method


@router.post("", response_model=PaymentMethodCheckoutResponse)
def create_payment_method(
    request: PaymentMethodCreate,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Create a payment method and start its verification checkout."""
    customer = get_project_customer(db, project, request.customer_id)

    payment_provider = get_payment_provider(project.payment_provider)
    if not payment_provider:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Payment provider not configured",
        )

    payment_method = PaymentMethod(
        project_id=project.id,
        customer_id=customer.id,
        type="card",
        verified=0,
    )
    db.add(payment_method)
    db.flush()

    payment = Payment(
        project_id=project.id,
        customer_id=customer.id,
        payment_method_id=payment_method.id,
        amount=VERIFICATION_AMOUNT,
        currency="EUR",
        description="Payment method verification",
        status="pending",
    )
    db.add(payment)
    db.flush()

    checkout_url = payment_provider.create_checkout(payment, request.redirect_url)
    db.commit()

    return PaymentMethodCheckoutResponse(
        payment_method_id=payment_method.id,
        checkout_url=checkout_url,
    )


@router.get("/{payment_method_id}", response_model=PaymentMethodResponse)
def get_payment_method(
    payment_method_id: str,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Get a payment method."""
    return get_project_payment_method(db, project, payment_method_id)


@router.delete("/{payment_method_id}", response_model=MessageResponse)
def delete_payment_method(
    payment_method_id: str,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Delete a payment method."""
    payment_method = get_project_payment_method(db, project, payment_method_id)
    db.delete(payment_method)
    db.commit()
    return MessageResponse(message="Payment-method deleted")
