"""FastAPI dependencies for authentication."""

import hmac
import os
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from quiethours.database.database import get_db
from quiethours.database.models import UserDB
from quiethours.auth.jwt import get_user_id_from_token
from quiethours.models.user import User

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from JWT token.

    Raises:
        HTTPException: If token is missing, invalid, or the user does not exist
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = get_user_id_from_token(credentials.credentials)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_db = db.query(UserDB).filter(UserDB.id == user_id).first()
    if not user_db:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user_db.to_pydantic()


def get_cron_secret() -> Optional[str]:
    return os.getenv("CRON_SECRET") or None


def cron_secret_matches(bearer_token: Optional[str], body_token: Optional[str] = None) -> bool:
    """Check a caller-provided secret against CRON_SECRET.

    When CRON_SECRET is not configured, every caller is accepted.
    """
    secret = get_cron_secret()
    if secret is None:
        return True
    for candidate in (bearer_token, body_token):
        if candidate and hmac.compare_digest(candidate.encode("utf-8"), secret.encode("utf-8")):
            return True
    return False
