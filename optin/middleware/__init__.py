"""
Middleware package for Opt-in Popups.
"""
from .shopify_auth import require_shopify_auth, get_shop_from_request
