"""
Image Upload API

Accepts logo and side images for the popup editor and returns them as data
URLs that the editor stores in logoUrl/imageUrl.
"""

import logging
from flask import Blueprint, request, jsonify, current_app

from ..middleware.shopify_auth import require_shopify_auth
from ..services.upload_service import process_upload
from ..utils.errors import ErrorCode, error_response
from ..utils.exceptions import UploadError

logger = logging.getLogger(__name__)

upload_bp = Blueprint('upload', __name__)


@upload_bp.route('/upload', methods=['POST'])
@require_shopify_auth
def upload_image():
    """
    Upload an image.

    Accepts multipart/form-data with:
    - file: jpeg, png or gif, at most 2MB
    - type: 'logo' or 'image'

    Returns:
        {
            "success": true,
            "url": "data:image/png;base64,...",
            "filename": "logo.png",
            "size": 12345,
            "type": "image/png",
            "uploadType": "logo"
        }
    """
    try:
        result = process_upload(
            request.files.get('file'),
            request.form.get('type', 'image'),
            max_bytes=current_app.config['UPLOAD_MAX_BYTES'],
            allowed_types=current_app.config['UPLOAD_ALLOWED_TYPES'],
        )
    except UploadError as e:
        return error_response(e.message, e.code, e.status_code, log_error=False)
    except OSError as e:
        logger.error(f'Failed to read upload: {e}')
        return error_response('Failed to upload file', ErrorCode.UPLOAD_FAILED, 500)

    return jsonify(result)
