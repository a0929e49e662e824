"""Payment provider webhook endpoint."""
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from gringotts.api.auth import create_webhook_token
from gringotts.api.deps import get_db
from gringotts.models.invoice import Payment
from gringotts.models.project import Project
from gringotts.schemas.auth import MessageResponse
from gringotts.services.billing import apply_payment_status
from gringotts.services.payment_providers import get_payment_provider
from gringotts.services.webhook import trigger_webhook

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payment", tags=["payment"])


@router.post("/webhook", response_model=MessageResponse, include_in_schema=False)
async def payment_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Receive payment status updates from the payment provider."""
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid webhook payload")

    payment = None
    if isinstance(body, dict) and body.get("payment_id"):
        payment = db.query(Payment).filter(Payment.id == body["payment_id"]).first()
    if not payment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")

    project = db.query(Project).filter(Project.id == payment.project_id).first()
    payment_provider = get_payment_provider(project.payment_provider if project else None)
    if not payment_provider:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Payment provider not configured",
        )

    try:
        payload = payment_provider.parse_webhook(body)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    apply_payment_status(db, payment, payload.status, payload.paid_at)
    db.commit()
    logger.info(f"Payment {payment.id} is {payment.status}")

    if payment.subscription_id:
        token = create_webhook_token(payment.subscription_id)
        background_tasks.add_task(
            trigger_webhook,
            project.webhook_url if project else None,
            {"subscription_id": payment.subscription_id},
            token,
        )

    return MessageResponse(message="ok")
