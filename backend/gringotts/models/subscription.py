"""Subscription model."""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from gringotts.database import Base


class Subscription(Base):
    """Recurring monthly subscription pinned to an anchor day-of-month."""

    __tablename__ = "subscriptions"
    __table_args__ = (
        Index("ix_subscriptions_chargeable", "status", "next_payment"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)

    # Billing cycle
    anchor_date = Column(DateTime, nullable=False)  # Only the day-of-month matters
    next_payment = Column(DateTime, nullable=False)
    last_payment = Column(DateTime)
    active_until = Column(DateTime, nullable=False)

    # Pricing, stored verbatim
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="EUR")
    description = Column(Text)

    status = Column(String(20), default="active")  # active, canceled
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    updated_at = Column(String(26), default=lambda: datetime.utcnow().isoformat(), onupdate=lambda: datetime.utcnow().isoformat())

    # Relationships
    project = relationship("Project", back_populates="subscriptions")
    customer = relationship("Customer", back_populates="subscriptions")
    invoices = relationship("Invoice", back_populates="subscription")
    payments = relationship("Payment", back_populates="subscription")
