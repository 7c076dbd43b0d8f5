# File: app/schemas/user.py

from datetime import datetime
from typing import Annotated, Optional

from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
)

from app.models.user import Gender, UserRole

# bcrypt only looks at the first 72 bytes
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 72


def _strip(v):
    if isinstance(v, str):
        return v.strip()
    return v


def _lower(v):
    if isinstance(v, str):
        return v.strip().lower()
    return v


def _fits_bcrypt(v: str) -> str:
    if len(v.encode("utf-8")) > PASSWORD_MAX_LENGTH:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_LENGTH} bytes")
    return v


Email = Annotated[EmailStr, BeforeValidator(_lower)]
Name = Annotated[str, BeforeValidator(_strip), Field(min_length=1, max_length=100)]
Mobile = Annotated[str, BeforeValidator(_strip), Field(min_length=1, max_length=32)]
Password = Annotated[str, Field(min_length=PASSWORD_MIN_LENGTH), AfterValidator(_fits_bcrypt)]


# -----------------------------
# Auth requests
# -----------------------------

class RegisterRequest(BaseModel):
    firstName: Name
    lastName: Name
    email: Email
    password: Password
    gender: Gender
    mobileNumber: Mobile


class VerifyOtpRequest(BaseModel):
    email: Email
    otp: str = Field(min_length=1, max_length=6)

    @field_validator("otp", mode="before")
    @classmethod
    def coerce_otp(cls, v):
        # clients send the code as a number as often as a string
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return _strip(v)


class EmailRequest(BaseModel):
    """Body for resend-otp and forgot-password."""

    email: Email


class LoginRequest(BaseModel):
    email: Email
    password: str = Field(min_length=1)


class ResetPasswordRequest(BaseModel):
    resetToken: str = Field(min_length=1)
    newPassword: Password


# -----------------------------
# Admin user management
# -----------------------------

class UserCreate(BaseModel):
    firstName: Name
    lastName: Name
    email: Email
    password: Password
    mobileNumber: Mobile
    city: Name
    gender: Optional[Gender] = None
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    model_config = ConfigDict(extra="ignore")

    firstName: Optional[Name] = None
    lastName: Optional[Name] = None
    email: Optional[Email] = None
    password: Optional[Password] = None
    mobileNumber: Optional[Mobile] = None
    city: Optional[str] = Field(default=None, max_length=100)
    gender: Optional[Gender] = None
    role: Optional[UserRole] = None
    verified: Optional[bool] = None


# -----------------------------
# Read models
# -----------------------------

class UserProfile(BaseModel):
    """Shallow profile returned by login."""

    model_config = ConfigDict(from_attributes=True)

    firstName: str = Field(validation_alias=AliasChoices("firstName", "first_name"))
    lastName: str = Field(validation_alias=AliasChoices("lastName", "last_name"))
    email: str
    role: UserRole


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    firstName: str = Field(validation_alias=AliasChoices("firstName", "first_name"))
    lastName: str = Field(validation_alias=AliasChoices("lastName", "last_name"))
    email: str
    gender: Optional[Gender] = None
    mobileNumber: str = Field(validation_alias=AliasChoices("mobileNumber", "mobile_number"))
    city: Optional[str] = None
    role: UserRole
    verified: bool
    createdAt: datetime = Field(validation_alias=AliasChoices("createdAt", "created_at"))
