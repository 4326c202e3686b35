"""
Shopify webhook handlers.
"""
from .app_lifecycle import app_lifecycle_bp, verify_shopify_webhook
