# File: app/core/config.py

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Settings(BaseModel):
    # env values land in defaults, so defaults must pass through the validators
    model_config = ConfigDict(validate_default=True)

    # Basic app info
    PROJECT_NAME: str = "Task Manager API"
    VERSION: str = "1.0.0"

    api_prefix: str = os.getenv("API_PREFIX", "/api")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS
    backend_cors_origins: List[str] = os.getenv(
        "BACKEND_CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
    )

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./taskmanager.db")

    # Security / auth
    secret_key: str = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION")
    algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

    # OTP / password reset
    otp_expire_minutes: int = int(os.getenv("OTP_EXPIRE_MINUTES", "5"))
    otp_max_attempts: int = int(os.getenv("OTP_MAX_ATTEMPTS", "5"))
    password_reset_expire_minutes: int = int(os.getenv("PASSWORD_RESET_EXPIRE_MINUTES", "15"))
    reset_password_url: str = os.getenv(
        "RESET_PASSWORD_URL", "http://localhost:3000/reset-password/"
    )

    # Outbound email (SMTP)
    smtp_host: Optional[str] = os.getenv("SMTP_HOST") or None
    smtp_port: int = int(os.getenv("SMTP_PORT", "587"))
    smtp_user: Optional[str] = os.getenv("SMTP_USER") or None
    smtp_password: Optional[str] = os.getenv("SMTP_PASS") or None
    smtp_from: Optional[str] = os.getenv("SMTP_FROM") or None
    smtp_use_tls: bool = os.getenv("SMTP_USE_TLS", "true").lower() in ("1", "true", "yes")

    # Image hosting (Cloudinary)
    cloudinary_cloud_name: Optional[str] = os.getenv("CLOUDINARY_CLOUD_NAME") or None
    cloudinary_api_key: Optional[str] = os.getenv("CLOUDINARY_API_KEY") or None
    cloudinary_api_secret: Optional[str] = os.getenv("CLOUDINARY_API_SECRET") or None
    cloudinary_folder: str = os.getenv("CLOUDINARY_FOLDER", "images")

    # Seeded on startup when no admin account exists
    default_admin_email: str = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@example.com")
    default_admin_password: str = os.getenv("DEFAULT_ADMIN_PASSWORD", "Admin@1234")
    default_admin_first_name: str = os.getenv("DEFAULT_ADMIN_FIRST_NAME", "Default")
    default_admin_last_name: str = os.getenv("DEFAULT_ADMIN_LAST_NAME", "Admin")
    default_admin_mobile: str = os.getenv("DEFAULT_ADMIN_MOBILE", "0000000000")

    @field_validator("backend_cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, list):
            return v
        return []


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
