"""
FastAPI dependency functions.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import logging

from database import get_db
from models import User, Profile
from utils.security import decode_token

logger = logging.getLogger(__name__)

# Security scheme for JWT bearer tokens
security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def _user_id_from_token(token: str) -> Optional[UUID]:
    """Extract the user UUID from a verified token, or None."""
    payload = decode_token(token)
    if payload is None:
        return None

    user_id_str = payload.get("sub")
    if not isinstance(user_id_str, str):
        return None

    try:
        return UUID(user_id_str)
    except ValueError:
        return None


def get_or_create_user(db: Session, user_id: UUID, email: Optional[str] = None) -> User:
    """
    Return the local user for an auth identity, creating it on first sight.

    New users get an empty profile flagged for onboarding.
    """
    user = db.query(User).filter(User.id == user_id).first()
    if user is not None:
        return user

    user = User(id=user_id, email=email)
    db.add(user)
    db.flush()

    db.add(Profile(id=user.id, needs_onboarding=True))
    db.commit()
    db.refresh(user)

    logger.info(f"Registered new user {user.id}")
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Dependency to get the current authenticated user from JWT token.

    Raises:
        HTTPException: If token is invalid
    """
    payload = decode_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    sub = payload.get("sub")
    try:
        user_id = UUID(sub) if isinstance(sub, str) else None
    except ValueError:
        user_id = None

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID in token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return get_or_create_user(db, user_id, payload.get("email"))


def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Dependency to optionally get the current authenticated user from JWT token.
    Returns None if no token is provided or if token is invalid.

    This allows public stats endpoints to be accessed anonymously.
    """
    if credentials is None:
        return None

    user_id = _user_id_from_token(credentials.credentials)
    if user_id is None:
        return None

    return db.query(User).filter(User.id == user_id).first()
