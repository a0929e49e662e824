"""Subscription, invoice and period schemas."""
from datetime import date, datetime

from pydantic import BaseModel, Field


class PeriodResponse(BaseModel):
    """Billing period boundaries."""

    start: datetime
    end: datetime


class SubscriptionCreate(BaseModel):
    """Request to create a subscription."""

    customer_id: str
    anchor_date: date | None = Field(
        None,
        description="Day the billing cycle is pinned to (defaults to today)",
    )
    amount: float = Field(..., ge=0)
    currency: str = Field("EUR", min_length=3, max_length=3)
    description: str | None = None


class SubscriptionUpdate(BaseModel):
    """Request to update a subscription."""

    amount: float | None = Field(None, ge=0)
    description: str | None = None
    status: str | None = Field(None, pattern="^(active|canceled)$")


class SubscriptionResponse(BaseModel):
    """Subscription response."""

    id: str
    customer_id: str
    anchor_date: datetime
    next_payment: datetime
    last_payment: datetime | None
    active_until: datetime
    amount: float
    currency: str
    description: str | None
    status: str
    created_at: str

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    """Invoice response."""

    id: str
    customer_id: str
    subscription_id: str | None
    period_start: datetime
    period_end: datetime
    amount: float
    currency: str
    status: str
    created_at: str

    class Config:
        from_attributes = True


class PaymentResponse(BaseModel):
    """Payment response."""

    id: str
    subscription_id: str | None
    invoice_id: str | None
    amount: float
    currency: str
    status: str
    paid_at: datetime | None

    class Config:
        from_attributes = True
