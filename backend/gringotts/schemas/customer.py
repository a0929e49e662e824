"""Customer and payment method schemas."""
from pydantic import BaseModel, EmailStr, Field


class CustomerCreate(BaseModel):
    """Request to create a customer."""

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    address_line: str | None = None
    city: str | None = None
    zip_code: str | None = None
    country: str | None = Field(None, min_length=2, max_length=2)


class CustomerUpdate(BaseModel):
    """Request to update a customer."""

    email: EmailStr | None = None
    name: str | None = Field(None, min_length=1, max_length=100)
    address_line: str | None = None
    city: str | None = None
    zip_code: str | None = None
    country: str | None = Field(None, min_length=2, max_length=2)


class CustomerResponse(BaseModel):
    """Customer response."""

    id: str
    email: str
    name: str
    address_line: str | None = None
    city: str | None = None
    zip_code: str | None = None
    country: str | None = None
    created_at: str

    class Config:
        from_attributes = True


class PaymentMethodCreate(BaseModel):
    """Request to create and verify a payment method."""

    customer_id: str
    redirect_url: str


class PaymentMethodCheckoutResponse(BaseModel):
    """Checkout the customer completes to verify the payment method."""

    payment_method_id: str
    checkout_url: str


class PaymentMethodResponse(BaseModel):
    """Payment method response."""

    id: str
    customer_id: str
    type: str
    name: str | None
    verified: bool
    created_at: str

    class Config:
        from_attributes = True
