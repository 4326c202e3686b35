"""
Popup Service

Persistence for popup drafts, scoped to one shop. Validation of incoming
save payloads lives here too, so both JSON and form submissions go through
the same checks before anything reaches the database.
"""

import json
import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models.popup import DRAFT_COLUMNS, JSON_COLUMNS, Popup
from ..utils.colors import COLOR_FIELDS, is_hex_color, normalize_hex
from ..utils.exceptions import PersistenceError, PopupNotFoundError, ValidationError
from .popup_draft import (
    ALIGNMENTS,
    BUTTON_ACTIONS,
    BUTTON_STYLES,
    CORNER_RADII,
    DISPLAY_SIZES,
    IMAGE_POSITIONS,
    ButtonAction,
    new_popup_draft,
)

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 50

BOOLEAN_FIELDS = (
    'isActive',
    'isMultiStep',
    'enablePhoneField',
    'phoneRequired',
    'hideOnMobile',
    'backgroundOnMobile',
)
INTEGER_FIELDS = ('logoWidth',)
NUMBER_FIELDS = ('discountValue',)

CHOICE_FIELDS = {
    'imagePosition': IMAGE_POSITIONS,
    'displaySize': DISPLAY_SIZES,
    'cornerRadius': CORNER_RADII,
    'alignment': ALIGNMENTS,
}

EDITABLE_FIELDS = set(DRAFT_COLUMNS) | set(JSON_COLUMNS)


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------

def _parse_bool(field: str, value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    raise ValidationError(f"{field} must be true or false", field)


def parse_form_fields(form) -> Dict[str, Any]:
    """
    Convert form-encoded save fields into draft values.

    Booleans arrive as "true"/"false", numbers as strings, and nested
    structures (sections, customButtons) as JSON strings.
    """
    fields = {}
    for key in form.keys():
        if key not in EDITABLE_FIELDS:
            continue
        raw = form.get(key)

        if key in JSON_COLUMNS:
            try:
                fields[key] = json.loads(raw) if raw else []
            except ValueError:
                raise ValidationError(f"{key} must be valid JSON", key)
        elif key in BOOLEAN_FIELDS:
            fields[key] = _parse_bool(key, raw)
        elif key in INTEGER_FIELDS or key in NUMBER_FIELDS:
            if raw in (None, ''):
                fields[key] = None
                continue
            try:
                fields[key] = int(raw) if key in INTEGER_FIELDS else float(raw)
            except ValueError:
                raise ValidationError(f"{key} must be a number", key)
        else:
            fields[key] = raw
    return fields


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_name(name) -> str:
    """Trim and check a popup name."""
    if name is not None and not isinstance(name, str):
        raise ValidationError("Popup name must be text", 'name')
    name = (name or '').strip()
    if not name:
        raise ValidationError("Popup name is required", 'name')
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"Popup name must be {NAME_MAX_LENGTH} characters or less", 'name')
    return name


def _validate_design(design: dict, where: str) -> None:
    """Check colour and choice fields; colours are normalized to #RRGGBB in place."""
    for field in COLOR_FIELDS:
        value = design.get(field)
        if value is None:
            continue
        if not is_hex_color(value):
            raise ValidationError(f"{where}{field} must be a hex colour like #FFFFFF", field)
        design[field] = normalize_hex(value)
    for field, choices in CHOICE_FIELDS.items():
        value = design.get(field)
        if value is not None and value not in choices:
            raise ValidationError(f"{where}{field} must be one of: {', '.join(choices)}", field)


def _validate_buttons(buttons, where: str) -> None:
    if not isinstance(buttons, list):
        raise ValidationError(f"{where}customButtons must be a list", 'customButtons')
    for button in buttons:
        if not isinstance(button, dict):
            raise ValidationError(f"{where}each button must be an object", 'customButtons')
        action = button.get('action')
        if action is not None and action not in BUTTON_ACTIONS:
            raise ValidationError(f"{where}unknown button action: {action}", 'customButtons')
        style = button.get('style')
        if style is not None and style not in BUTTON_STYLES:
            raise ValidationError(f"{where}unknown button style: {style}", 'customButtons')
        url = button.get('url')
        if url is not None and not isinstance(url, str):
            raise ValidationError(f"{where}button url must be text", 'customButtons')
        if action == ButtonAction.LINK.value and not (url or '').strip():
            label = button.get('text') or button.get('id')
            raise ValidationError(f"{where}link button '{label}' needs a URL", 'customButtons')
        button_style = button.get('buttonStyle') or {}
        if not isinstance(button_style, dict):
            raise ValidationError(f"{where}buttonStyle must be an object", 'customButtons')
        for key in ('backgroundColor', 'textColor'):
            value = button_style.get(key)
            if value is not None and not is_hex_color(value):
                raise ValidationError(f"{where}button {key} must be a hex colour", 'customButtons')


def _validate_sections(sections) -> None:
    if not isinstance(sections, list) or not sections:
        raise ValidationError("A popup needs at least one section", 'sections')
    for position, section in enumerate(sections, start=1):
        if not isinstance(section, dict):
            raise ValidationError(f"Section {position} must be an object", 'sections')
        where = f"Section {position}: "
        design = section.get('design') or {}
        if not isinstance(design, dict):
            raise ValidationError(f"{where}design must be an object", 'sections')
        _validate_design(design, where)
        content = section.get('content') or {}
        if not isinstance(content, dict):
            raise ValidationError(f"{where}content must be an object", 'sections')
        _validate_buttons(content.get('customButtons') or [], where)
        primary_style = content.get('primaryButtonStyle') or {}
        if not isinstance(primary_style, dict):
            raise ValidationError(f"{where}primaryButtonStyle must be an object", 'sections')
        for key in ('backgroundColor', 'textColor'):
            value = primary_style.get(key)
            if value is not None and not is_hex_color(value):
                raise ValidationError(f"{where}primary button {key} must be a hex colour", 'sections')


def validate_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check a (partial) save payload and return the fields to persist.

    Unknown keys are dropped.

    Raises:
        ValidationError: on the first invalid value
    """
    if not isinstance(fields, dict):
        raise ValidationError("Request body must be an object")

    cleaned = {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}

    if 'name' in cleaned:
        cleaned['name'] = validate_name(cleaned['name'])

    for field in BOOLEAN_FIELDS:
        if field in cleaned:
            cleaned[field] = _parse_bool(field, cleaned[field])

    for field in INTEGER_FIELDS + NUMBER_FIELDS:
        value = cleaned.get(field)
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise ValidationError(f"{field} must be a number", field)

    _validate_design(cleaned, '')

    if 'sections' in cleaned:
        _validate_sections(cleaned['sections'])
    if 'customButtons' in cleaned:
        _validate_buttons(cleaned['customButtons'], '')

    return cleaned


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class PopupService:
    """
    Popup CRUD for one shop.

    Usage:
        service = PopupService(g.shop)
        draft = service.get_draft(popup_id)
    """

    def __init__(self, shop: str):
        self.shop = shop

    def _commit(self, failure_message: str) -> None:
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"{failure_message} for {self.shop}: {e}")
            raise PersistenceError(failure_message, e)

    def list_popups(self) -> List[Dict[str, Any]]:
        return [popup.to_summary() for popup in Popup.get_all_for_shop(self.shop)]

    def get_popup(self, popup_id) -> Popup:
        popup = Popup.get_for_shop(popup_id, self.shop)
        if popup is None:
            raise PopupNotFoundError(popup_id)
        return popup

    def get_draft(self, popup_id) -> Dict[str, Any]:
        """Load a popup as a normalized editor draft."""
        return self.get_popup(popup_id).to_draft()

    def create_popup(self, name) -> Dict[str, Any]:
        """
        Create a popup with seeded defaults.

        Returns:
            The new popup's draft
        """
        name = validate_name(name)
        popup = Popup(shop=self.shop)
        popup.apply_draft(new_popup_draft(name))
        db.session.add(popup)
        self._commit("Failed to create popup")

        logger.info(f"Created popup {popup.id} for {self.shop}")
        return popup.to_draft()

    def save_draft(self, popup_id, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Persist the supplied draft fields.

        Only keys present in ``fields`` change. On a database failure the
        session is rolled back and PersistenceError is raised; the caller
        keeps its draft for a retry.
        """
        popup = self.get_popup(popup_id)
        cleaned = validate_fields(fields)
        popup.apply_draft(cleaned)
        self._commit("Failed to update popup")
        return popup.to_draft()

    def delete_popup(self, popup_id) -> None:
        popup = self.get_popup(popup_id)
        db.session.delete(popup)
        self._commit("Failed to delete popup")
        logger.info(f"Deleted popup {popup_id} for {self.shop}")

    def toggle_active(self, popup_id) -> Dict[str, Any]:
        """Flip ``isActive`` and return the list row."""
        popup = self.get_popup(popup_id)
        popup.is_active = not popup.is_active
        self._commit("Failed to update popup")
        return popup.to_summary()
