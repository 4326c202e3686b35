"""
Tests for the app/uninstalled webhook.
"""
import json
import hmac
import hashlib
import base64

from optin.extensions import db
from optin.models import Popup, Tenant
from optin.webhooks.app_lifecycle import verify_shopify_webhook

TEST_SECRET = 'test-api-secret'


def generate_hmac_signature(payload: bytes, secret: str) -> str:
    """Generate Shopify-compatible HMAC signature."""
    return base64.b64encode(
        hmac.new(secret.encode('utf-8'), payload, hashlib.sha256).digest()
    ).decode('utf-8')


class TestVerifyWebhook:
    """Tests for verify_shopify_webhook."""

    def test_valid_signature(self):
        payload = b'{"id": 1}'
        assert verify_shopify_webhook(payload, generate_hmac_signature(payload, 'abc'), 'abc')

    def test_invalid_signature(self):
        assert not verify_shopify_webhook(b'{}', 'bogus', 'abc')

    def test_missing_secret_or_header(self):
        assert not verify_shopify_webhook(b'{}', '', 'abc')
        assert not verify_shopify_webhook(b'{}', 'bogus', '')


class TestAppUninstalled:
    """Tests for POST /webhook/app/uninstalled."""

    def post(self, client, shop, payload: bytes, signature: str = None):
        headers = {
            'X-Shopify-Shop-Domain': shop,
            'Content-Type': 'application/json',
        }
        if signature is not None:
            headers['X-Shopify-Hmac-SHA256'] = signature
        return client.post('/webhook/app/uninstalled', headers=headers, data=payload)

    def test_uninstall_deactivates_tenant(self, client, sample_tenant, sample_popup):
        payload = json.dumps({'domain': sample_tenant.shopify_domain}).encode('utf-8')

        response = self.post(client, sample_tenant.shopify_domain, payload, generate_hmac_signature(payload, TEST_SECRET))

        assert response.status_code == 200
        assert response.get_json()['action'] == 'marked_uninstalled'

        tenant = db.session.get(Tenant, sample_tenant.id)
        assert tenant.is_active is False
        assert tenant.shopify_access_token is None
        assert tenant.uninstalled_at is not None

        # Popups survive for a reinstall
        assert Popup.query.filter_by(shop=sample_tenant.shopify_domain).count() == 1

    def test_uninstalled_shop_loses_api_access(self, client, sample_tenant, auth_headers):
        payload = b'{}'
        self.post(client, sample_tenant.shopify_domain, payload, generate_hmac_signature(payload, TEST_SECRET))

        response = client.get('/api/popups', headers=auth_headers)

        assert response.status_code == 403
        assert response.get_json()['error']['code'] == 'SHOP_INACTIVE'

    def test_invalid_signature_rejected(self, client, sample_tenant):
        response = self.post(client, sample_tenant.shopify_domain, b'{}', 'invalid_signature')

        assert response.status_code == 401
        assert db.session.get(Tenant, sample_tenant.id).is_active is True

    def test_missing_signature_rejected(self, client, sample_tenant):
        response = self.post(client, sample_tenant.shopify_domain, b'{}')

        assert response.status_code == 401

    def test_unknown_shop(self, client):
        response = self.post(client, 'nobody.myshopify.com', b'{}', 'whatever')

        assert response.status_code == 200
        assert response.get_json()['message'] == 'Tenant not found'
