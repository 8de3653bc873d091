"""Disk storage for uploaded course and topic images."""

import logging
import os
import shutil
import time
import uuid

from fastapi import HTTPException, UploadFile, status

from elearning.core.config import settings

logger = logging.getLogger(__name__)


def is_image_upload(upload: UploadFile) -> bool:
    return bool(upload.content_type and upload.content_type.startswith("image"))


def build_upload_filename(original_filename: str | None) -> str:
    _, extension = os.path.splitext(original_filename or "")
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{extension.lower()}"


def save_image(upload: UploadFile | None, upload_dir: str | None = None) -> str | None:
    """Write an uploaded image to disk and return its stored path.

    Returns None when no file was sent. The path is relative to the working
    directory, e.g. ``uploads/1718030000000.png``, and is what the static
    ``/uploads`` mount serves.
    """
    if upload is None or not upload.filename:
        return None

    if not is_image_upload(upload):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Not an image! Please upload only images.",
        )

    target_dir = upload_dir or settings.upload_dir
    os.makedirs(target_dir, exist_ok=True)
    path = os.path.join(target_dir, build_upload_filename(upload.filename))

    upload.file.seek(0)
    with open(path, "wb") as destination:
        shutil.copyfileobj(upload.file, destination)

    logger.info("Stored uploaded image %s as %s", upload.filename, path)
    return path.replace(os.sep, "/")


def discard_image(path: str | None) -> None:
    """Remove a stored image whose entity write did not go through."""
    if not path:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    logger.info("Removed unreferenced upload %s", path)
