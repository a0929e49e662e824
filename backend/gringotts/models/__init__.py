"""SQLAlchemy models package."""
from gringotts.models.project import Project
from gringotts.models.customer import Customer, PaymentMethod
from gringotts.models.subscription import Subscription
from gringotts.models.invoice import Invoice, Payment

__all__ = [
    "Project",
    "Customer",
    "PaymentMethod",
    "Subscription",
    "Invoice",
    "Payment",
]
