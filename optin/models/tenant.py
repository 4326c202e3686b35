"""
Tenant model: one row per installed Shopify shop.
"""
from datetime import datetime
from ..extensions import db


class Tenant(db.Model):
    """
    Shop that installed the popup app.
    Global table - shared across all tenants.
    """
    __tablename__ = 'tenants'

    id = db.Column(db.Integer, primary_key=True)
    shop_name = db.Column(db.String(255), nullable=False)
    shop_slug = db.Column(db.String(100), unique=True, nullable=False)

    # Shopify integration
    shopify_domain = db.Column(db.String(255), unique=True, index=True)
    shopify_access_token = db.Column(db.Text)
    webhook_secret = db.Column(db.String(100))

    is_active = db.Column(db.Boolean, default=True)
    uninstalled_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<Tenant {self.shop_slug}>'

