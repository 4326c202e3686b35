"""
Image Upload Service

Validates logo/side images and returns them as data URLs, which the editor
stores straight into ``logoUrl``/``imageUrl``.
"""

import base64
import logging
from typing import Any, Dict, Iterable

from werkzeug.utils import secure_filename

from ..utils.exceptions import UploadError

logger = logging.getLogger(__name__)

UPLOAD_TYPES = ('logo', 'image')

DEFAULT_MAX_BYTES = 2 * 1024 * 1024
DEFAULT_ALLOWED_TYPES = ('image/jpeg', 'image/jpg', 'image/png', 'image/gif')


def file_size(file) -> int:
    """Size of an uploaded file stream, leaving it rewound."""
    file.seek(0, 2)
    size = file.tell()
    file.seek(0)
    return size


def process_upload(
    file,
    upload_type: str,
    max_bytes: int = DEFAULT_MAX_BYTES,
    allowed_types: Iterable[str] = DEFAULT_ALLOWED_TYPES,
) -> Dict[str, Any]:
    """
    Validate an uploaded image and encode it.

    Args:
        file: werkzeug FileStorage (or None when the field was missing)
        upload_type: 'logo' or 'image'
        max_bytes: Largest accepted payload
        allowed_types: Accepted MIME types

    Returns:
        {'success', 'url', 'filename', 'size', 'type', 'uploadType'}

    Raises:
        UploadError: with a message the merchant can act on
    """
    if file is None or not file.filename:
        raise UploadError("No file provided", "MISSING_FIELD")

    if upload_type not in UPLOAD_TYPES:
        raise UploadError("Upload type must be 'logo' or 'image'", "INVALID_FIELD")

    mimetype = (file.mimetype or '').lower()
    if mimetype not in allowed_types:
        raise UploadError(
            "Invalid file type. Only JPG, PNG, and GIF files are allowed.",
            "INVALID_FILE_TYPE",
        )

    size = file_size(file)
    if size > max_bytes:
        raise UploadError(
            f"File size must be less than {max_bytes // (1024 * 1024)}MB",
            "FILE_TOO_LARGE",
        )

    encoded = base64.b64encode(file.read()).decode('ascii')
    filename = secure_filename(file.filename) or 'upload'

    logger.info(f"Accepted {upload_type} upload {filename} ({size} bytes, {mimetype})")

    return {
        'success': True,
        'url': f'data:{mimetype};base64,{encoded}',
        'filename': filename,
        'size': size,
        'type': mimetype,
        'uploadType': upload_type,
    }
