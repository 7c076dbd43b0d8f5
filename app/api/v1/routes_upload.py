# app/api/v1/routes_upload.py

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool

from app.api.deps import get_image_host
from app.core.errors import ValidationError
from app.services.media_service import ImageHost, is_allowed_image

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])


def _stage_and_upload(image_host: ImageHost, data_bytes: bytes, suffix: str) -> str:
    # the image host takes a path, so stage the upload on disk first
    fd, tmp_path = tempfile.mkstemp(suffix=suffix)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data_bytes)
        return image_host.upload(tmp_path)
    finally:
        os.unlink(tmp_path)


@router.post("/upload-image", summary="Upload a jpg/jpeg/png image to the image host")
async def upload_image(
    image: Optional[UploadFile] = File(None),
    image_host: ImageHost = Depends(get_image_host),
):
    """
    Returns: {"success": true, "url": <hosted-url>}
    """
    if image is None or not image.filename:
        raise ValidationError("No file uploaded")

    if not is_allowed_image(image.filename):
        raise ValidationError("Only images are allowed")

    suffix = Path(image.filename).suffix.lower()
    data_bytes = await image.read()
    url = await run_in_threadpool(_stage_and_upload, image_host, data_bytes, suffix)

    logger.info("Uploaded image %s -> %s", image.filename, url)
    return {"success": True, "message": "Image uploaded successfully", "url": url}
