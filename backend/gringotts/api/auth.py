"""Authentication API endpoints."""
from datetime import datetime, timedelta

import bcrypt
from fastapi import APIRouter, Depends, HTTPException, status
from jose import jwt
from sqlalchemy.orm import Session

from gringotts.api.deps import get_db
from gringotts.config import get_settings
from gringotts.models.project import Project
from gringotts.schemas.auth import Token, TokenRequest

router = APIRouter(prefix="/auth", tags=["auth"])


def verify_api_key(plain_api_key: str, hashed_api_key: str) -> bool:
    """Verify an API key against its hash."""
    return bcrypt.checkpw(
        plain_api_key.encode("utf-8"),
        hashed_api_key.encode("utf-8"),
    )


def get_api_key_hash(api_key: str) -> str:
    """Hash an API key."""
    return bcrypt.hashpw(
        api_key.encode("utf-8"),
        bcrypt.gensalt(),
    ).decode("utf-8")


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_webhook_token(subscription_id: str) -> str:
    """Create the JWT sent along with outbound project webhooks."""
    settings = get_settings()
    expire = datetime.utcnow() + timedelta(hours=settings.webhook_token_expire_hours)
    to_encode = {"subscription_id": subscription_id, "exp": expire, "type": "webhook"}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


@router.post("/token", response_model=Token)
def issue_token(token_request: TokenRequest, db: Session = Depends(get_db)):
    """Exchange a project API key for an access token."""
    project = db.query(Project).filter(Project.id == token_request.project_id).first()

    if not project or not verify_api_key(token_request.api_key, project.api_key_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect project id or API key",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Token(access_token=create_access_token({"sub": project.id}))
