"""
Database initialization helpers.

Models are imported here so their tables get registered on Base.metadata
before create_all runs.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import Settings, settings as default_settings
from app.core.security import get_password_hash
from app.db.session import engine
from app.models.base import Base
from app.models.task import Task  # noqa: F401
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


def init_db() -> None:
    """
    Create all tables based on SQLAlchemy models.
    """
    Base.metadata.create_all(bind=engine)


def ensure_default_admin(db: Session, settings: Optional[Settings] = None) -> Optional[User]:
    """
    Create the configured admin account unless some admin already exists.

    Returns the new admin, or None when nothing had to be created.
    """
    settings = settings or default_settings

    existing = db.scalar(select(User).where(User.role == UserRole.ADMIN).limit(1))
    if existing is not None:
        logger.info("Default admin exists (id=%s)", existing.id)
        return None

    admin = User(
        first_name=settings.default_admin_first_name,
        last_name=settings.default_admin_last_name,
        email=settings.default_admin_email.strip().lower(),
        hashed_password=get_password_hash(settings.default_admin_password),
        mobile_number=settings.default_admin_mobile,
        role=UserRole.ADMIN,
        verified=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)

    logger.info("Default admin created: %s", admin.email)
    return admin


def seed_initial_data(db: Session) -> None:
    """
    Startup seeding. A failure here is logged and never stops the app.
    """
    try:
        ensure_default_admin(db)
    except Exception:
        db.rollback()
        logger.exception("Error creating default admin")
