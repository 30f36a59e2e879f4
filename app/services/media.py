import logging
import os
import uuid
from typing import Optional

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

from ..config import settings

logger = logging.getLogger(__name__)

LOCAL_UPLOAD_DIR = "app/static/uploads"

# Folders images may be filed under
FOLDERS = ("properties", "rooms", "beds", "testimonials", "maintenance", "documents")


def sniff_image_type(data: bytes) -> str | None:
    """Return a lowercase extension if bytes look like a common image, else None."""
    if not data or len(data) < 12:
        return None
    if data.startswith(b"\xFF\xD8\xFF"):
        return "jpg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "png"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "gif"
    if data.startswith(b"RIFF") and data[8:12] == b"WEBP":
        return "webp"
    return None


def cloudinary_configured() -> bool:
    if not settings.CLOUDINARY_URL:
        return False
    cloudinary.config(cloudinary_url=settings.CLOUDINARY_URL)
    return True


def save_image(file_bytes: bytes, original_filename: str | None = None, folder: str = "properties") -> Optional[str]:
    """Store an image on Cloudinary, or under static/uploads when it is not configured.

    Returns the public URL, or None if the bytes are not an image.
    """
    kind = sniff_image_type(file_bytes)
    if not kind:
        return None
    folder = folder if folder in FOLDERS else "misc"

    if cloudinary_configured():
        try:
            upload_res = cloudinary.uploader.upload(
                file_bytes,
                folder=f"pgmanager/{folder}",
                public_id=uuid.uuid4().hex,
                resource_type="image",
                overwrite=True,
            )
            url = upload_res.get("secure_url") or upload_res.get("url")
            if url:
                return url
        except cloudinary.exceptions.Error as e:
            logger.error(f"Cloudinary upload of {original_filename or 'image'} failed, storing locally: {e}")

    target_dir = os.path.join(LOCAL_UPLOAD_DIR, folder)
    os.makedirs(target_dir, exist_ok=True)
    fname = f"{uuid.uuid4().hex}.{kind}"
    with open(os.path.join(target_dir, fname), "wb") as f:
        f.write(file_bytes)
    return f"/static/uploads/{folder}/{fname}"
