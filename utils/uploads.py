import logging
import os
import uuid

from flask import current_app
from werkzeug.utils import secure_filename

from domain.errors import ValidationFailed

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
ALLOWED_MIMETYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}


def _max_bytes() -> int:
    return int(current_app.config.get("MAX_UPLOAD_BYTES", 5 * 1024 * 1024))


def _read_image(file_storage) -> tuple:
    name = secure_filename(file_storage.filename or "")
    ext = os.path.splitext(name)[1].lower()
    if ext not in ALLOWED_EXTENSIONS or file_storage.mimetype not in ALLOWED_MIMETYPES:
        raise ValidationFailed("Only image files (JPEG, JPG, PNG, GIF, WEBP) are allowed!")

    data = file_storage.read()
    if len(data) > _max_bytes():
        raise ValidationFailed(f"File too large. Maximum size is {_max_bytes() // (1024 * 1024)}MB.")
    if not data:
        raise ValidationFailed("Uploaded file is empty")
    return ext, data


def save_images(files, *parts, prefix: str = "image", max_files: int = None) -> list:
    """
    Validate every file first, then write them under UPLOAD_FOLDER/<parts...>.
    Returns the public URLs in upload order.
    """
    files = [f for f in files if f and f.filename]
    if not files:
        raise ValidationFailed("No images uploaded")
    if max_files is not None and len(files) > max_files:
        raise ValidationFailed(f"Too many files. Maximum is {max_files} files.")

    checked = [_read_image(f) for f in files]

    relative_dir = "/".join(str(p) for p in parts)
    target_dir = os.path.join(current_app.config["UPLOAD_FOLDER"], *[str(p) for p in parts])
    os.makedirs(target_dir, exist_ok=True)

    urls = []
    for ext, data in checked:
        filename = f"{prefix}-{uuid.uuid4().hex}{ext}"
        with open(os.path.join(target_dir, filename), "wb") as fh:
            fh.write(data)
        urls.append(f"/uploads/{relative_dir}/{filename}")

    logger.info("Stored %d image(s) under %s", len(urls), relative_dir)
    return urls


def save_image(file_storage, *parts, prefix: str = "image") -> str:
    return save_images([file_storage], *parts, prefix=prefix, max_files=1)[0]
