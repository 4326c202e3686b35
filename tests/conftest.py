"""
Shared pytest fixtures.

The app runs on the testing config: in-memory SQLite and dev-mode auth,
so requests authenticate with the X-Shop-Domain header.
"""
import pytest

from optin import create_app
from optin.extensions import db
from optin.models import Popup, Tenant
from optin.services.popup_service import PopupService


@pytest.fixture
def app():
    """Create application for testing."""
    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Test client."""
    return app.test_client()


@pytest.fixture
def sample_tenant(app):
    """An installed shop."""
    tenant = Tenant(
        shop_name='Test Shop',
        shop_slug='test-shop',
        shopify_domain='test-shop.myshopify.com',
        shopify_access_token='shpat_test',
        is_active=True,
    )
    db.session.add(tenant)
    db.session.commit()
    return tenant


@pytest.fixture
def other_tenant(app):
    """A second shop, for isolation checks."""
    tenant = Tenant(
        shop_name='Other Shop',
        shop_slug='other-shop',
        shopify_domain='other-shop.myshopify.com',
        shopify_access_token='shpat_other',
        is_active=True,
    )
    db.session.add(tenant)
    db.session.commit()
    return tenant


@pytest.fixture
def auth_headers(sample_tenant):
    """Headers authenticating as sample_tenant."""
    return {
        'X-Shop-Domain': sample_tenant.shopify_domain,
        'Content-Type': 'application/json',
    }


@pytest.fixture
def sample_popup(sample_tenant):
    """A freshly created popup owned by sample_tenant."""
    draft = PopupService(sample_tenant.shopify_domain).create_popup('Spring Sale')
    return db.session.get(Popup, draft['id'])
