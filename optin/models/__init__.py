"""
Database models for the Optin popup builder.
Shops and their email/SMS capture popups.
"""
from .tenant import Tenant
from .popup import Popup, DRAFT_COLUMNS, JSON_COLUMNS

__all__ = [
    'Tenant',
    'Popup',
    'DRAFT_COLUMNS',
    'JSON_COLUMNS',
]
