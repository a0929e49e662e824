"""Invoices API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from gringotts.api.deps import get_current_project, get_db
from gringotts.models.invoice import Invoice
from gringotts.models.project import Project
from gringotts.schemas.subscription import InvoiceResponse

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get("", response_model=list[InvoiceResponse])
def list_invoices(
    customer_id: str | None = Query(None, description="Filter by customer"),
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """List invoices, newest period first."""
    query = db.query(Invoice).filter(Invoice.project_id == project.id)
    if customer_id:
        query = query.filter(Invoice.customer_id == customer_id)
    return query.order_by(Invoice.period_start.desc()).all()


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: str,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Get an invoice."""
    invoice = db.query(Invoice).filter(
        Invoice.id == invoice_id,
        Invoice.project_id == project.id,
    ).first()

    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice
