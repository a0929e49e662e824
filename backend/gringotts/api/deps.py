"""Shared API dependencies."""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from gringotts.config import get_settings
from gringotts.database import get_db
from gringotts.models.project import Project

bearer_scheme = HTTPBearer(auto_error=False)

__all__ = ["get_db", "get_current_project"]


def get_current_project(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Project:
    """Resolve the project from a bearer access token."""
    settings = get_settings()
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
    except JWTError:
        raise credentials_exception

    if payload.get("type") != "access":
        raise credentials_exception

    project_id: str | None = payload.get("sub")
    if project_id is None:
        raise credentials_exception

    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise credentials_exception
    return project
