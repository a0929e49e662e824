"""Project (API tenant) model."""
import uuid
from datetime import datetime

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from gringotts.database import Base


class Project(Base):
    """API tenant owning customers, subscriptions and payments."""

    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    api_key_hash = Column(String(255), nullable=False)
    webhook_url = Column(String(255))  # Called after payment status changes
    payment_provider = Column(String(50), default="mock")
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())

    # Relationships
    customers = relationship("Customer", back_populates="project", cascade="all, delete-orphan")
    subscriptions = relationship("Subscription", back_populates="project", cascade="all, delete-orphan")
