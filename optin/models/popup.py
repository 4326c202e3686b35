"""
Popup Model

One merchant-configured on-site popup. Columns are snake_case; the editor
works on a camelCase draft (see ``services.popup_draft``), and
``to_draft``/``apply_draft`` translate between the two. ``sections`` and
``custom_buttons`` hold JSON text.
"""

from datetime import datetime
from typing import Any, Dict

from ..extensions import db
from ..services.popup_draft import decode_list, encode_list, normalize_popup


# Draft key -> column name, for every plain (non-JSON) field
DRAFT_COLUMNS = {
    'name': 'name',
    'isActive': 'is_active',
    'isMultiStep': 'is_multi_step',

    # Legacy single-step content
    'heading': 'heading',
    'description': 'description',
    'emailPlaceholder': 'email_placeholder',
    'enablePhoneField': 'enable_phone_field',
    'phoneRequired': 'phone_required',
    'phonePlaceholder': 'phone_placeholder',
    'footerText': 'footer_text',

    # Global design
    'logoUrl': 'logo_url',
    'logoWidth': 'logo_width',
    'imageUrl': 'image_url',
    'imagePosition': 'image_position',
    'displaySize': 'display_size',
    'cornerRadius': 'corner_radius',
    'alignment': 'alignment',
    'hideOnMobile': 'hide_on_mobile',
    'backgroundOnMobile': 'background_on_mobile',
    'popupBackground': 'popup_background',
    'textHeading': 'text_heading',
    'textDescription': 'text_description',
    'textInput': 'text_input',
    'textConsent': 'text_consent',
    'textError': 'text_error',
    'textLabel': 'text_label',
    'textFooter': 'text_footer',
    'primaryBtnBg': 'primary_btn_bg',
    'primaryBtnText': 'primary_btn_text',
    'secondaryBtnText': 'secondary_btn_text',
    'customBtnBg': 'custom_btn_bg',
    'customBtnText': 'custom_btn_text',

    # Discount (opaque pass-through)
    'discountType': 'discount_type',
    'discountValue': 'discount_value',
    'discountCode': 'discount_code',
}

JSON_COLUMNS = {
    'sections': 'sections',
    'customButtons': 'custom_buttons',
}


class Popup(db.Model):
    """
    Popup configuration for a shop.

    All reads and writes are scoped by ``shop``.
    """
    __tablename__ = 'popups'

    id = db.Column(db.Integer, primary_key=True)
    shop = db.Column(db.String(255), nullable=False, index=True)
    name = db.Column(db.String(50), nullable=False)
    is_active = db.Column(db.Boolean, default=False, nullable=False)
    is_multi_step = db.Column(db.Boolean, default=False, nullable=False)

    # JSON text blobs
    sections = db.Column(db.Text)
    custom_buttons = db.Column(db.Text)

    # Legacy single-step content
    heading = db.Column(db.String(255))
    description = db.Column(db.Text)
    email_placeholder = db.Column(db.String(255))
    enable_phone_field = db.Column(db.Boolean, default=False)
    phone_required = db.Column(db.Boolean, default=False)
    phone_placeholder = db.Column(db.String(255))
    footer_text = db.Column(db.Text)

    # Global design (images may be data URLs)
    logo_url = db.Column(db.Text)
    logo_width = db.Column(db.Integer)
    image_url = db.Column(db.Text)
    image_position = db.Column(db.String(20))
    display_size = db.Column(db.String(20))
    corner_radius = db.Column(db.String(20))
    alignment = db.Column(db.String(20))
    hide_on_mobile = db.Column(db.Boolean, default=False)
    background_on_mobile = db.Column(db.Boolean, default=False)

    popup_background = db.Column(db.String(20))
    text_heading = db.Column(db.String(20))
    text_description = db.Column(db.String(20))
    text_input = db.Column(db.String(20))
    text_consent = db.Column(db.String(20))
    text_error = db.Column(db.String(20))
    text_label = db.Column(db.String(20))
    text_footer = db.Column(db.String(20))
    primary_btn_bg = db.Column(db.String(20))
    primary_btn_text = db.Column(db.String(20))
    secondary_btn_text = db.Column(db.String(20))
    custom_btn_bg = db.Column(db.String(20))
    custom_btn_text = db.Column(db.String(20))

    # Discount
    discount_type = db.Column(db.String(50))
    discount_value = db.Column(db.Float)
    discount_code = db.Column(db.String(100))

    # Counters maintained by the storefront side
    views = db.Column(db.Integer, default=0, nullable=False)
    subscribers = db.Column(db.Integer, default=0, nullable=False)
    conversion_rate = db.Column(db.Float, default=0.0, nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<Popup {self.id} {self.name!r} shop={self.shop}>'

    def to_summary(self) -> Dict[str, Any]:
        """Row for the popup list view."""
        return {
            'id': self.id,
            'name': self.name,
            'isActive': self.is_active,
            'views': self.views or 0,
            'subscribers': self.subscribers or 0,
            'conversionRate': self.conversion_rate or 0.0,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_draft(self) -> Dict[str, Any]:
        """Decode and normalize into an editor draft."""
        draft = {'id': self.id}
        for key, column in DRAFT_COLUMNS.items():
            draft[key] = getattr(self, column)
        draft['sections'] = decode_list(self.sections, f'sections of popup {self.id}')
        draft['customButtons'] = decode_list(self.custom_buttons, f'customButtons of popup {self.id}')

        draft = normalize_popup(draft)
        draft['createdAt'] = self.created_at.isoformat() if self.created_at else None
        draft['updatedAt'] = self.updated_at.isoformat() if self.updated_at else None
        return draft

    def apply_draft(self, fields: Dict[str, Any]) -> None:
        """
        Copy draft fields onto columns. Unknown keys are ignored.

        Args:
            fields: Partial or full draft
        """
        for key, value in fields.items():
            if key in JSON_COLUMNS:
                setattr(self, JSON_COLUMNS[key], encode_list(value))
            elif key in DRAFT_COLUMNS:
                setattr(self, DRAFT_COLUMNS[key], value)
        self.updated_at = datetime.utcnow()

    @classmethod
    def get_for_shop(cls, popup_id, shop: str) -> 'Popup':
        """Get a popup by id, only if owned by ``shop``."""
        return cls.query.filter_by(id=popup_id, shop=shop).first()

    @classmethod
    def get_all_for_shop(cls, shop: str) -> list:
        """All popups of a shop, most recently saved first."""
        return cls.query.filter_by(shop=shop).order_by(cls.updated_at.desc(), cls.id.desc()).all()
