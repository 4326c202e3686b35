"""
Shopify Session Token Authentication Middleware.

Verifies Shopify session tokens (JWT) from the embedded admin to
authenticate requests. In development and testing it falls back to the
shop query param or the X-Shop-Domain header.

Session tokens are issued by Shopify App Bridge and contain:
- iss: Shop domain (https://shop.myshopify.com/admin)
- dest: Shop domain
- aud: API key
- sub: Staff member GID
- exp: Expiration time
"""
import logging
from functools import wraps
from typing import Optional

import jwt
from flask import current_app, g, request

from ..extensions import db
from ..models import Tenant
from ..utils.errors import ErrorCode, forbidden, not_found, unauthorized

logger = logging.getLogger(__name__)


def is_dev_mode() -> bool:
    """Dev mode relaxes token checks and auto-creates tenants."""
    return bool(current_app.config.get('SHOPIFY_AUTH_DEV_MODE'))


def decode_session_token(token: str) -> Optional[dict]:
    """
    Decode and verify a Shopify session token.

    Args:
        token: JWT session token from App Bridge

    Returns:
        Decoded token payload or None if invalid
    """
    if not token:
        return None

    api_key = current_app.config.get('SHOPIFY_API_KEY', '')
    api_secret = current_app.config.get('SHOPIFY_API_SECRET', '')

    try:
        # Shopify session tokens are signed with the app's API secret
        return jwt.decode(
            token,
            api_secret,
            algorithms=['HS256'],
            audience=api_key or None,
            options={
                'verify_aud': bool(api_key),
                'verify_exp': True,
            }
        )
    except jwt.ExpiredSignatureError:
        logger.info('Session token expired')
        return None
    except jwt.InvalidAudienceError:
        logger.warning('Invalid token audience')
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f'Invalid session token: {e}')
        return None


def _domain(url: str) -> Optional[str]:
    if not url:
        return None
    url = url.replace('https://', '').replace('http://', '')
    return url.split('/')[0] or None


def get_shop_from_token(payload: dict) -> Optional[str]:
    """
    Extract shop domain from session token payload.

    ``dest`` holds https://shop.myshopify.com/admin; ``iss`` is the fallback.
    """
    return _domain(payload.get('dest', '')) or _domain(payload.get('iss', ''))


def get_shop_from_request() -> tuple:
    """
    Resolve the requesting shop.

    Priority:
    1. Session token in Authorization header
    2. shop query parameter (dev mode only)
    3. X-Shop-Domain header (dev mode only)

    Returns:
        (shop, staff_id, auth_method); shop is None when unauthenticated
    """
    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        payload = decode_session_token(auth_header.split(' ', 1)[1])
        if payload:
            shop = get_shop_from_token(payload)
            if shop:
                return shop, payload.get('sub'), 'session_token'

    if is_dev_mode():
        shop = request.args.get('shop')
        if shop:
            return shop, None, 'query_param'
        shop = request.headers.get('X-Shop-Domain')
        if shop:
            return shop, None, 'header'

    return None, None, None


def _create_dev_tenant(shop: str) -> Tenant:
    shop_slug = shop.replace('.myshopify.com', '').lower()
    tenant = Tenant(
        shop_name=shop_slug.title(),
        shop_slug=shop_slug,
        shopify_domain=shop,
        is_active=True,
    )
    db.session.add(tenant)
    db.session.commit()
    logger.info(f'Auto-created dev tenant for {shop}')
    return tenant


def require_shopify_auth(f):
    """
    Decorator to require Shopify authentication.

    Sets g.tenant, g.tenant_id, g.shop, g.staff_id and g.auth_method.

    Usage:
        @require_shopify_auth
        def my_endpoint():
            shop = g.shop
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        shop, staff_id, authenticated_via = get_shop_from_request()

        if not shop:
            return unauthorized('Missing shop domain or session token')

        tenant = Tenant.query.filter_by(shopify_domain=shop).first()

        if not tenant:
            if is_dev_mode():
                tenant = _create_dev_tenant(shop)
            else:
                return not_found('This shop has not installed the app', ErrorCode.SHOP_NOT_FOUND)

        if not tenant.is_active:
            return forbidden("This shop's access has been disabled")

        g.tenant = tenant
        g.tenant_id = tenant.id
        g.shop = shop
        g.staff_id = staff_id
        g.auth_method = authenticated_via

        return f(*args, **kwargs)

    return decorated_function
