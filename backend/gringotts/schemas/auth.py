"""Authentication schemas."""
from pydantic import BaseModel


class TokenRequest(BaseModel):
    """Exchange a project API key for an access token."""

    project_id: str
    api_key: str


class Token(BaseModel):
    """Token response."""

    access_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
