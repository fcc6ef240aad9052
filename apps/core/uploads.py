"""
Upload service for avatars, identity documents and refund receipts.
Supports both AWS S3 and local storage based on configuration.
"""
import logging
import os
import uuid
from typing import Dict

from django.conf import settings
from django.core.files.uploadedfile import UploadedFile

from .errors import ValidationFailed

logger = logging.getLogger(__name__)

MB = 1024 * 1024

IMAGE_TYPES: Dict[str, str] = {
    'image/jpeg': '.jpg',
    'image/jpg': '.jpg',
    'image/png': '.png',
    'image/webp': '.webp',
}

DOCUMENT_TYPES: Dict[str, str] = {
    'image/jpeg': '.jpg',
    'image/png': '.png',
    'application/pdf': '.pdf',
}

RECEIPT_TYPES: Dict[str, str] = {
    **IMAGE_TYPES,
    'application/pdf': '.pdf',
}

AVATAR_MAX_SIZE = 5 * MB
DOCUMENT_MAX_SIZE = 10 * MB
RECEIPT_MAX_SIZE = 5 * MB


def validate_upload(file: UploadedFile, allowed_types: Dict[str, str], max_size: int) -> None:
    """
    Validate size and MIME type of an uploaded file.

    Raises:
        ValidationFailed: If the file is too large or of a disallowed type
    """
    if file.size > max_size:
        raise ValidationFailed("uploads.fileTooLarge", max_mb=max_size // MB)

    if file.content_type not in allowed_types:
        allowed = ", ".join(sorted({ext.lstrip('.').upper() for ext in allowed_types.values()}))
        raise ValidationFailed(
            "uploads.invalidFileType", content_type=file.content_type, allowed=allowed
        )


def store_upload(
    file: UploadedFile,
    folder: str,
    allowed_types: Dict[str, str],
    max_size: int,
) -> str:
    """
    Validate and store an uploaded file under `folder`.
    Uses S3 if configured, otherwise local storage.

    Returns:
        URL of the stored file (signed when served from private S3)
    """
    validate_upload(file, allowed_types, max_size)

    extension = os.path.splitext(file.name or '')[1].lower() or allowed_types[file.content_type]
    path = f"{folder}/{uuid.uuid4().hex}{extension}"

    if getattr(settings, 'USE_S3_STORAGE', False):
        return _upload_to_s3(file, path)
    return _upload_to_local(file, path)


def _upload_to_s3(file: UploadedFile, path: str) -> str:
    """Upload file to AWS S3."""
    from storages.backends.s3 import S3Storage

    storage = S3Storage()
    try:
        saved_path = storage.save(path, file)
    except Exception as e:
        logger.error(f"S3 upload failed for {path}: {e}")
        raise
    return storage.url(saved_path)


def _upload_to_local(file: UploadedFile, path: str) -> str:
    """Upload file to local storage."""
    from django.core.files.storage import default_storage

    saved_path = default_storage.save(path, file)

    media_url = getattr(settings, 'MEDIA_URL', '/media/')
    return f"{media_url}{saved_path}"
