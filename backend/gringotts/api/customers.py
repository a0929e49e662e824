"""Customers API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gringotts.api.deps import get_current_project, get_db
from gringotts.models.customer import Customer
from gringotts.models.project import Project
from gringotts.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate

router = APIRouter(prefix="/customers", tags=["customers"])


def get_project_customer(db: Session, project: Project, customer_id: str) -> Customer:
    """Load a customer of the project or raise 404."""
    customer = db.query(Customer).filter(
        Customer.id == customer_id,
        Customer.project_id == project.id,
    ).first()

    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found",
        )
    return customer


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    customer_data: CustomerCreate,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Create a customer."""
    existing = db.query(Customer).filter(
        Customer.project_id == project.id,
        Customer.email == customer_data.email,
    ).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Customer with this email already exists",
        )

    customer = Customer(project_id=project.id, **customer_data.model_dump())
    db.add(customer)
    db.commit()
    db.refresh(customer)

    return customer


@router.get("", response_model=list[CustomerResponse])
def list_customers(
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """List the project's customers."""
    return db.query(Customer).filter(Customer.project_id == project.id).order_by(Customer.created_at).all()


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: str,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Get a customer."""
    return get_project_customer(db, project, customer_id)


@router.patch("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: str,
    customer_data: CustomerUpdate,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Update a customer."""
    customer = get_project_customer(db, project, customer_id)

    for field, value in customer_data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(customer, field, value)

    db.commit()
    db.refresh(customer)

    return customer


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: str,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Delete a customer with their subscriptions and invoices."""
    customer = get_project_customer(db, project, customer_id)
    db.delete(customer)
    db.commit()
