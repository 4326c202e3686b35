"""
Tests for Shopify session token authentication.
"""
import time

import jwt

from optin.extensions import db
from optin.models import Tenant
from optin.middleware.shopify_auth import get_shop_from_token

API_KEY = 'test-api-key'
API_SECRET = 'test-api-secret'


def session_token(shop='token-shop.myshopify.com', secret=API_SECRET, audience=API_KEY, expires_in=60):
    now = int(time.time())
    return jwt.encode(
        {
            'iss': f'https://{shop}/admin',
            'dest': f'https://{shop}',
            'aud': audience,
            'sub': 'gid://shopify/StaffMember/1',
            'exp': now + expires_in,
            'nbf': now - 5,
            'iat': now,
        },
        secret,
        algorithm='HS256',
    )


class TestShopFromToken:
    """Tests for get_shop_from_token."""

    def test_dest(self):
        assert get_shop_from_token({'dest': 'https://a.myshopify.com/admin'}) == 'a.myshopify.com'

    def test_iss_fallback(self):
        assert get_shop_from_token({'iss': 'https://b.myshopify.com/admin'}) == 'b.myshopify.com'

    def test_missing(self):
        assert get_shop_from_token({}) is None


class TestRequireShopifyAuth:
    """Tests for the require_shopify_auth decorator."""

    def test_session_token(self, client, sample_tenant):
        token = session_token(shop=sample_tenant.shopify_domain)

        response = client.get('/api/popups', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 200

    def test_invalid_token_without_fallback(self, client):
        token = session_token(secret='wrong-secret')

        response = client.get('/api/popups', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 401

    def test_expired_token(self, client, sample_tenant):
        token = session_token(shop=sample_tenant.shopify_domain, expires_in=-120)

        response = client.get('/api/popups', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 401
        assert response.get_json()['error']['code'] == 'AUTH_REQUIRED'

    def test_wrong_audience(self, client, sample_tenant):
        token = session_token(shop=sample_tenant.shopify_domain, audience='another-app')

        response = client.get('/api/popups', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 401

    def test_dev_mode_auto_creates_tenant(self, client):
        response = client.get('/api/popups', headers={'X-Shop-Domain': 'brand-new.myshopify.com'})

        assert response.status_code == 200
        tenant = Tenant.query.filter_by(shopify_domain='brand-new.myshopify.com').first()
        assert tenant is not None
        assert tenant.shop_slug == 'brand-new'

    def test_shop_query_param(self, client, sample_tenant):
        response = client.get(f'/api/popups?shop={sample_tenant.shopify_domain}')

        assert response.status_code == 200

    def test_unknown_shop_outside_dev_mode(self, app, client):
        app.config['SHOPIFY_AUTH_DEV_MODE'] = False
        token = session_token(shop='stranger.myshopify.com')

        response = client.get('/api/popups', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 404
        assert response.get_json()['error']['code'] == 'SHOP_NOT_FOUND'

    def test_header_ignored_outside_dev_mode(self, app, client, sample_tenant):
        app.config['SHOPIFY_AUTH_DEV_MODE'] = False

        response = client.get('/api/popups', headers={'X-Shop-Domain': sample_tenant.shopify_domain})

        assert response.status_code == 401

    def test_inactive_shop(self, client, sample_tenant, auth_headers):
        sample_tenant.is_active = False
        db.session.commit()

        response = client.get('/api/popups', headers=auth_headers)

        assert response.status_code == 403
