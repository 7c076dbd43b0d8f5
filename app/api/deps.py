# File: app/api/deps.py

import logging
from collections.abc import Generator
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ForbiddenError, UnauthorizedError
from app.core.security import decode_access_token
from app.db.session import SessionLocal
from app.models.user import User
from app.services.email_service import EmailSender
from app.services.media_service import ImageHost

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a SQLAlchemy session.

    Usage in route functions:
        db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache
def get_email_sender() -> EmailSender:
    return EmailSender.from_settings(settings)


@lru_cache
def get_image_host() -> ImageHost:
    return ImageHost.from_settings(settings)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the bearer token to a live user.

    Rejects a missing header, a bad signature or expiry, a deleted user, and
    a token issued before the user's last password or role change.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authorization token is required")

    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")

    user_id = payload.get("userId")
    if user_id is None:
        raise UnauthorizedError("Invalid or expired token")

    user = db.get(User, user_id)
    if user is None:
        raise UnauthorizedError("User not found")

    if payload.get("ver", 0) != user.token_version:
        logger.warning("Rejected revoked token for user id=%s", user.id)
        raise UnauthorizedError("Invalid or expired token")

    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise ForbiddenError("Access denied. Admins only.")
    return current_user
