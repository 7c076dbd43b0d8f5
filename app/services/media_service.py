# File: app/services/media_service.py

"""
Image hosting via Cloudinary.

Takes a local file path, returns the durable https URL of the hosted copy.
"""

import logging
from typing import Optional

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from app.core.config import Settings
from app.core.errors import DependencyError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")


class ImageHost:
    def __init__(
        self,
        *,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        folder: str = "images",
    ):
        self.folder = folder
        self.configured = bool(cloud_name and api_key and api_secret)
        if self.configured:
            cloudinary.config(
                cloud_name=cloud_name,
                api_key=api_key,
                api_secret=api_secret,
                secure=True,
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageHost":
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
        )

    def upload(self, file_path: str) -> str:
        if not self.configured:
            raise DependencyError("Image hosting is not configured")

        try:
            result = cloudinary.uploader.upload(file_path, folder=self.folder)
        except CloudinaryError as exc:
            logger.exception("Cloudinary upload failed for %s", file_path)
            raise DependencyError("Something went wrong", error=str(exc)) from exc

        url = result.get("secure_url") or result.get("url")
        if not url:
            raise DependencyError("Image host returned no URL")
        return url


def is_allowed_image(filename: Optional[str]) -> bool:
    return bool(filename) and filename.lower().endswith(ALLOWED_IMAGE_EXTENSIONS)
