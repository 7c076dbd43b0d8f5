# File: app/services/user_service.py

"""
Admin-side user management.

Accounts created here skip OTP verification: the admin vouches for them.
Changing a user's password or role bumps their token_version, which
invalidates every session token issued before the change.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError
from app.core.security import get_password_hash
from app.db.session import storage_errors
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserUpdate
from app.services.auth_service import get_user_by_email, get_user_by_mobile

logger = logging.getLogger(__name__)

# request field -> column
_UPDATABLE = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "mobileNumber": "mobile_number",
    "city": "city",
    "gender": "gender",
    "role": "role",
    "verified": "verified",
}


def _commit_unique(db: Session, action: str) -> None:
    with storage_errors(db, action):
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("User already exists")


def create_user(db: Session, payload: UserCreate) -> User:
    if get_user_by_email(db, payload.email):
        raise ConflictError("User already exists")
    if get_user_by_mobile(db, payload.mobileNumber):
        raise ConflictError("Mobile number already registered")

    user = User(
        first_name=payload.firstName,
        last_name=payload.lastName,
        email=payload.email,
        hashed_password=get_password_hash(payload.password),
        mobile_number=payload.mobileNumber,
        city=payload.city,
        gender=payload.gender,
        role=payload.role,
        verified=True,
    )
    db.add(user)
    _commit_unique(db, "creating user")
    db.refresh(user)

    logger.info("Admin created user id=%s email=%s role=%s", user.id, user.email, user.role.value)
    return user


def list_users(db: Session) -> list[User]:
    """Regular accounts only; admins are not listed."""
    with storage_errors(db, "listing users"):
        return list(
            db.scalars(select(User).where(User.role == UserRole.USER).order_by(User.id))
        )


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def update_user(db: Session, user_id: int, patch: UserUpdate) -> User:
    user = get_user(db, user_id)
    changes = patch.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in changes and changes["email"] != user.email:
        if get_user_by_email(db, changes["email"]):
            raise ConflictError("User already exists")
    if "mobileNumber" in changes and changes["mobileNumber"] != user.mobile_number:
        if get_user_by_mobile(db, changes["mobileNumber"]):
            raise ConflictError("Mobile number already registered")

    revoke = False
    password = changes.pop("password", None)
    if password is not None:
        user.hashed_password = get_password_hash(password)
        revoke = True
    if "role" in changes and changes["role"] != user.role:
        revoke = True

    for field, value in changes.items():
        setattr(user, _UPDATABLE[field], value)
    if revoke:
        user.token_version += 1

    _commit_unique(db, "updating user")
    db.refresh(user)

    logger.info(
        "Admin updated user id=%s (%s)%s",
        user.id,
        ", ".join(sorted(changes) + (["password"] if password is not None else [])) or "no changes",
        "; sessions revoked" if revoke else "",
    )
    return user


def delete_user(db: Session, user_id: int) -> None:
    user = get_user(db, user_id)
    with storage_errors(db, "deleting user"):
        db.delete(user)
        db.commit()
    logger.info("Admin deleted user id=%s", user_id)
