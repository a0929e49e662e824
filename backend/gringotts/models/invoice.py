"""Invoice and payment models."""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from gringotts.database import Base


class Invoice(Base):
    """Invoice covering one billing period of a subscription."""

    __tablename__ = "invoices"
    __table_args__ = (
        Index("ix_invoices_customer", "customer_id", "period_start"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    subscription_id = Column(String(36), ForeignKey("subscriptions.id", ondelete="SET NULL"))

    # Period boundaries
    period_start = Column(DateTime, nullable=False)
    period_end = Column(DateTime, nullable=False)

    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="EUR")
    status = Column(String(20), default="pending")  # pending, paid, failed
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())

    # Relationships
    customer = relationship("Customer", back_populates="invoices")
    subscription = relationship("Subscription", back_populates="invoices")
    payments = relationship("Payment", back_populates="invoice")


class Payment(Base):
    """Single charge attempt at the payment provider."""

    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    subscription_id = Column(String(36), ForeignKey("subscriptions.id", ondelete="SET NULL"))
    invoice_id = Column(String(36), ForeignKey("invoices.id", ondelete="SET NULL"))
    payment_method_id = Column(String(36), ForeignKey("payment_methods.id", ondelete="SET NULL"))

    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="EUR")
    description = Column(Text)
    status = Column(String(20), default="pending")  # pending, paid, failed
    provider_id = Column(String(100))
    paid_at = Column(DateTime)
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())

    # Relationships
    subscription = relationship("Subscription", back_populates="payments")
    invoice = relationship("Invoice", back_populates="payments")
    payment_method = relationship("PaymentMethod")
