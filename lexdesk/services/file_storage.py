import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from lexdesk.config import UPLOAD_DIR, PROFILE_IMAGE_MAX_BYTES
from lexdesk.responses import APIError

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"
PROFILE_IMAGE_FOLDER = "profile-images"
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}


def profile_image_dir() -> Path:
    return Path(UPLOAD_DIR) / PROFILE_IMAGE_FOLDER


def _upload_error(reason: str) -> APIError:
    return APIError(400, "File upload error", {"profile_image": reason})


def validate_image(file: UploadFile) -> None:
    """Validate an uploaded profile image's type."""
    if not file.filename:
        raise _upload_error("No file provided")
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise _upload_error("Invalid file type. Only JPG, PNG and GIF files are allowed")


async def save_profile_image(file: UploadFile) -> str:
    """Save an uploaded profile image and return its public URL."""
    validate_image(file)

    content = await file.read()
    if len(content) > PROFILE_IMAGE_MAX_BYTES:
        raise _upload_error(f"File too large. Maximum size is {PROFILE_IMAGE_MAX_BYTES // (1024 * 1024)}MB")

    directory = profile_image_dir()
    os.makedirs(directory, exist_ok=True)

    filename = f"profile-{uuid.uuid4()}{Path(file.filename).suffix.lower()}"
    async with aiofiles.open(directory / filename, "wb") as f:
        await f.write(content)

    logger.info("Saved profile image %s (%d bytes)", filename, len(content))
    return f"{UPLOAD_URL_PREFIX}/{PROFILE_IMAGE_FOLDER}/{filename}"


def path_for_url(url: Optional[str]) -> Optional[Path]:
    """Map a public profile image URL back onto the upload directory."""
    if not url or not url.startswith(f"{UPLOAD_URL_PREFIX}/{PROFILE_IMAGE_FOLDER}/"):
        return None
    # Only the final component is trusted
    return profile_image_dir() / Path(url).name


async def delete_upload(url: Optional[str]) -> bool:
    """Remove a stored profile image; failures are logged and do not propagate."""
    path = path_for_url(url)
    if path is None or not await aiofiles.os.path.exists(path):
        return False
    try:
        await aiofiles.os.remove(path)
    except OSError:
        logger.exception("Could not delete upload %s", path)
        return False
    return True
