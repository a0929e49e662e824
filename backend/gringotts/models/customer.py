"""Customer-related models."""
import uuid
from datetime import datetime

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from gringotts.database import Base


class Customer(Base):
    """Billable customer of a project."""

    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("project_id", "email", name="uq_customer_email"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    address_line = Column(String(255))
    city = Column(String(100))
    zip_code = Column(String(20))
    country = Column(String(2))  # ISO 3166-1 alpha-2
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    updated_at = Column(String(26), default=lambda: datetime.utcnow().isoformat(), onupdate=lambda: datetime.utcnow().isoformat())

    # Relationships
    project = relationship("Project", back_populates="customers")
    subscriptions = relationship("Subscription", back_populates="customer", cascade="all, delete-orphan")
    payment_methods = relationship("PaymentMethod", back_populates="customer", cascade="all, delete-orphan")
    invoices = relationship("Invoice", back_populates="customer", cascade="all, delete-orphan")


class PaymentMethod(Base):
    """Payment method verified through the payment provider."""

    __tablename__ = "payment_methods"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(50), default="card")
    name = Column(String(100))
    provider_id = Column(String(100))  # Mandate/customer id at the payment provider
    verified = Column(Integer, default=0)  # SQLite boolean
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())

    # Relationships
    customer = relationship("Customer", back_populates="payment_methods")
