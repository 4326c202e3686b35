"""
App lifecycle webhook handlers.
Handles app uninstallation for shops using the popup builder.
"""
import hmac
import hashlib
import base64
import logging
from datetime import datetime
from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Tenant
from ..utils.errors import ErrorCode, error_response, unauthorized

logger = logging.getLogger(__name__)

app_lifecycle_bp = Blueprint('app_lifecycle', __name__)


def verify_shopify_webhook(data: bytes, hmac_header: str, secret: str) -> bool:
    """Verify Shopify webhook HMAC signature."""
    if not secret or not hmac_header:
        return False
    computed_hmac = base64.b64encode(
        hmac.new(secret.encode('utf-8'), data, hashlib.sha256).digest()
    ).decode()
    return hmac.compare_digest(computed_hmac, hmac_header)


@app_lifecycle_bp.route('/app/uninstalled', methods=['POST'])
def handle_app_uninstalled():
    """
    Handle APP_UNINSTALLED webhook.

    Marks the tenant inactive and clears its access token. Popups are kept
    so a reinstall picks up where the merchant left off.
    """
    shop_domain = request.headers.get('X-Shopify-Shop-Domain', '')
    logger.info(f'App uninstalled by {shop_domain}')

    tenant = Tenant.query.filter_by(shopify_domain=shop_domain).first()
    if not tenant:
        return jsonify({'success': True, 'message': 'Tenant not found'})

    hmac_header = request.headers.get('X-Shopify-Hmac-SHA256', '')
    secret = tenant.webhook_secret or current_app.config.get('SHOPIFY_API_SECRET')
    if not verify_shopify_webhook(request.get_data(), hmac_header, secret):
        return unauthorized('Invalid signature', ErrorCode.INVALID_SIGNATURE)

    tenant.is_active = False
    tenant.uninstalled_at = datetime.utcnow()

    # Clear sensitive data
    tenant.shopify_access_token = None
    tenant.webhook_secret = None

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f'Error processing app uninstalled webhook for {shop_domain}: {e}')
        return error_response('Failed to process webhook', ErrorCode.DATABASE_ERROR, 500)

    logger.info(f'Tenant {shop_domain} marked as uninstalled')

    return jsonify({
        'success': True,
        'shop': shop_domain,
        'action': 'marked_uninstalled'
    })
