# File: app/api/v1/routes_auth.py

"""
Auth API routes: registration + OTP, login, password reset.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, get_email_sender
from app.models.user import User
from app.schemas.user import (
    EmailRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UserProfile,
    UserRead,
    VerifyOtpRequest,
)
from app.services import auth_service
from app.services.email_service import EmailSender

router = APIRouter(tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Register and email an OTP")
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    email_sender: EmailSender = Depends(get_email_sender),
):
    auth_service.register_user(db, payload, email_sender=email_sender)
    return {
        "success": True,
        "message": "User registered successfully. OTP sent to email.",
    }


@router.post("/verify-otp", summary="Confirm the emailed OTP")
def verify_otp(payload: VerifyOtpRequest, db: Session = Depends(get_db)):
    auth_service.verify_otp(db, email=payload.email, otp=payload.otp)
    return {"success": True, "message": "OTP verified successfully"}


@router.post("/resend-otp", summary="Issue a fresh OTP for an unverified account")
def resend_otp(
    payload: EmailRequest,
    db: Session = Depends(get_db),
    email_sender: EmailSender = Depends(get_email_sender),
):
    auth_service.resend_otp(db, email=payload.email, email_sender=email_sender)
    return {"success": True, "message": "A new OTP has been sent to your email."}


@router.post("/login", summary="Exchange credentials for a session token")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    token, user = auth_service.login(db, email=payload.email, password=payload.password)
    return {
        "success": True,
        "message": "Login successfully!",
        "token": token,
        "user": UserProfile.model_validate(user).model_dump(mode="json"),
    }


@router.post("/forgot-password", summary="Email a password reset link")
def forgot_password(
    payload: EmailRequest,
    db: Session = Depends(get_db),
    email_sender: EmailSender = Depends(get_email_sender),
):
    auth_service.request_password_reset(db, email=payload.email, email_sender=email_sender)
    return {"success": True, "message": "Password reset email sent successfully!"}


@router.post("/reset-password", summary="Set a new password with a reset token")
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    auth_service.reset_password(db, raw_token=payload.resetToken, new_password=payload.newPassword)
    return {"success": True, "message": "Password has been successfully reset!"}


@router.get("/me", summary="Current user's profile")
def me(current_user: User = Depends(get_current_user)):
    return {
        "success": True,
        "message": "User found successfully!",
        "user": UserRead.model_validate(current_user).model_dump(mode="json"),
    }
