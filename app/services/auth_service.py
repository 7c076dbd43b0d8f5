# File: app/services/auth_service.py

"""
Authentication service.

Covers the whole account lifecycle up to a session token:
  - registration with an emailed one-time code (OTP)
  - OTP verification / re-issue
  - login
  - password reset through an emailed single-use token

Both two-step flows are redeemed with one conditional UPDATE that matches
the code (or token hash) and the expiry and clears the pending fields in
the same statement. A redemption only succeeds if that statement changed a
row, so a code or token can never be used twice.
"""

import logging
from datetime import timedelta
from typing import Optional
from urllib.parse import urlencode

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    TooManyAttemptsError,
    UnauthorizedError,
    ValidationError,
)
from app.core.security import (
    create_access_token,
    generate_otp,
    generate_reset_token,
    get_password_hash,
    hash_reset_token,
    utcnow,
    verify_password,
)
from app.db.session import storage_errors
from app.models.user import User
from app.schemas.user import RegisterRequest
from app.services.email_service import (
    EmailSender,
    send_otp_email,
    send_password_reset_email,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_OTP = "Invalid or expired OTP"
INVALID_RESET_TOKEN = "Invalid or expired reset token."


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.scalar(select(User).where(User.email == email.strip().lower()))


def get_user_by_mobile(db: Session, mobile_number: str) -> Optional[User]:
    return db.scalar(select(User).where(User.mobile_number == mobile_number))


# ---------------------------------------------------------------------------
# Registration / OTP
# ---------------------------------------------------------------------------


def register_user(
    db: Session,
    payload: RegisterRequest,
    *,
    email_sender: EmailSender,
) -> User:
    """
    Create an unverified account and email it a one-time code.

    Nothing is stored if the code cannot be delivered.
    """
    if get_user_by_email(db, payload.email):
        raise ConflictError("User already exists")
    if get_user_by_mobile(db, payload.mobileNumber):
        raise ConflictError("Mobile number already registered")

    hashed_password = get_password_hash(payload.password)

    otp = generate_otp()
    if not send_otp_email(
        email_sender, payload.email, otp, valid_minutes=settings.otp_expire_minutes
    ):
        raise DependencyError("Failed to send OTP email. Please try again.")

    user = User(
        first_name=payload.firstName,
        last_name=payload.lastName,
        email=payload.email,
        hashed_password=hashed_password,
        gender=payload.gender,
        mobile_number=payload.mobileNumber,
        verified=False,
        otp=otp,
        otp_expires_at=utcnow() + timedelta(minutes=settings.otp_expire_minutes),
        otp_attempts=0,
    )

    with storage_errors(db, "registering user"):
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # lost a race with a concurrent registration
            db.rollback()
            raise ConflictError("User already exists")
        db.refresh(user)

    logger.info("Registered user id=%s email=%s (pending OTP)", user.id, user.email)
    return user


def verify_otp(db: Session, *, email: str, otp: str) -> User:
    user = get_user_by_email(db, email)
    if user is None:
        raise NotFoundError("User not found")
    if user.otp is None:
        if not user.verified and user.otp_attempts >= settings.otp_max_attempts:
            raise TooManyAttemptsError("Too many invalid attempts. Please request a new OTP.")
        raise ValidationError(INVALID_OTP)

    with storage_errors(db, "verifying OTP"):
        result = db.execute(
            update(User)
            .where(
                User.id == user.id,
                User.otp == otp,
                User.otp_expires_at > utcnow(),
            )
            .values(verified=True, otp=None, otp_expires_at=None, otp_attempts=0)
        )
        db.commit()

    if result.rowcount == 1:
        db.refresh(user)
        logger.info("OTP verified for user id=%s", user.id)
        return user

    _record_failed_otp(db, user)
    raise ValidationError(INVALID_OTP)


def _record_failed_otp(db: Session, user: User) -> None:
    with storage_errors(db, "recording failed OTP"):
        db.execute(
            update(User)
            .where(User.id == user.id, User.otp.is_not(None))
            .values(otp_attempts=User.otp_attempts + 1)
        )
        db.commit()
        db.refresh(user)

    logger.warning(
        "Invalid OTP for user id=%s (attempt %s/%s)",
        user.id,
        user.otp_attempts,
        settings.otp_max_attempts,
    )

    if user.otp is not None and user.otp_attempts >= settings.otp_max_attempts:
        with storage_errors(db, "discarding locked OTP"):
            user.otp = None
            user.otp_expires_at = None
            db.commit()
        logger.warning("OTP discarded for user id=%s after too many attempts", user.id)
        raise TooManyAttemptsError("Too many invalid attempts. Please request a new OTP.")


def resend_otp(db: Session, *, email: str, email_sender: EmailSender) -> User:
    """Issue a fresh code for an account that has not been verified yet."""
    user = get_user_by_email(db, email)
    if user is None:
        raise NotFoundError("User not found")
    if user.verified:
        raise ValidationError("User is already verified")

    otp = generate_otp()
    if not send_otp_email(email_sender, user.email, otp, valid_minutes=settings.otp_expire_minutes):
        raise DependencyError("Failed to send OTP email. Please try again.")

    with storage_errors(db, "re-issuing OTP"):
        user.otp = otp
        user.otp_expires_at = utcnow() + timedelta(minutes=settings.otp_expire_minutes)
        user.otp_attempts = 0
        db.commit()
        db.refresh(user)

    logger.info("Re-issued OTP for user id=%s", user.id)
    return user


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


def authenticate_user(
    db: Session,
    *,
    email: str,
    password: str,
) -> Optional[User]:
    """Return the user if the email exists and the password matches."""
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


def create_session_token(user: User) -> str:
    return create_access_token(
        {"userId": user.id, "email": user.email, "ver": user.token_version}
    )


def login(db: Session, *, email: str, password: str) -> tuple[str, User]:
    user = authenticate_user(db, email=email, password=password)
    if user is None:
        logger.warning("Failed login for %s", email)
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if not user.verified:
        raise UnauthorizedError("User is not verified. Please complete OTP verification.")

    token = create_session_token(user)
    logger.info("User id=%s logged in", user.id)
    return token, user


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


def build_reset_url(raw_token: str) -> str:
    base = settings.reset_password_url
    sep = "&" if "?" in base else "?"
    return f"{base}{sep}{urlencode({'reset-token': raw_token})}"


def request_password_reset(db: Session, *, email: str, email_sender: EmailSender) -> None:
    """
    Store the hash of a fresh reset token and email the raw token.

    The raw token only ever exists in the email. If delivery fails the
    pending reset is withdrawn.
    """
    user = get_user_by_email(db, email)
    if user is None:
        raise NotFoundError("User not found!")

    raw_token = generate_reset_token()
    with storage_errors(db, "storing reset token"):
        user.password_reset_token_hash = hash_reset_token(raw_token)
        user.password_reset_expires_at = utcnow() + timedelta(
            minutes=settings.password_reset_expire_minutes
        )
        db.commit()

    if not send_password_reset_email(email_sender, user.email, build_reset_url(raw_token)):
        with storage_errors(db, "withdrawing reset token"):
            user.password_reset_token_hash = None
            user.password_reset_expires_at = None
            db.commit()
        raise DependencyError("Failed to send reset email. Please try again.")

    logger.info("Password reset requested for user id=%s", user.id)


def reset_password(db: Session, *, raw_token: str, new_password: str) -> None:
    new_hash = get_password_hash(new_password)

    with storage_errors(db, "resetting password"):
        result = db.execute(
            update(User)
            .where(
                User.password_reset_token_hash == hash_reset_token(raw_token),
                User.password_reset_expires_at > utcnow(),
            )
            .values(
                hashed_password=new_hash,
                password_reset_token_hash=None,
                password_reset_expires_at=None,
                token_version=User.token_version + 1,
            )
        )
        db.commit()

    if result.rowcount != 1:
        logger.warning("Rejected invalid or expired reset token")
        raise ValidationError(INVALID_RESET_TOKEN)

    logger.info("Password reset completed")
