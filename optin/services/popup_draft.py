"""
Popup draft schema, codec and legacy normalization.

A draft is a plain JSON-serializable dict keyed by the persisted camelCase
names (``isMultiStep``, ``sections``, ``popupBackground`` ...). Nested
``sections`` and ``customButtons`` are stored as JSON text blobs and are
decoded here at the persistence boundary.

Older records use per-type sections (``intro``, ``email_capture``,
``custom``) and keep their content on the popup row itself. ``normalize_popup``
turns any of those shapes into the canonical ``universal`` form once, at
load time, so nothing downstream branches on section type.
"""

import copy
import json
import logging
import time
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class SectionType(str, Enum):
    """Section type tags, canonical first."""
    UNIVERSAL = 'universal'
    INTRO = 'intro'
    EMAIL_CAPTURE = 'email_capture'
    CUSTOM = 'custom'


LEGACY_SECTION_TYPES = {SectionType.INTRO.value, SectionType.EMAIL_CAPTURE.value, SectionType.CUSTOM.value}


class ButtonAction(str, Enum):
    """Button click actions."""
    LINK = 'link'
    CLOSE_POPUP = 'close_popup'
    CLOSE = 'close'
    SUBMIT = 'submit'
    NAVIGATE = 'navigate'
    CONTINUE = 'continue'
    CUSTOM = 'custom'


class ButtonStyle(str, Enum):
    """Button visual variants."""
    FILLED = 'filled'
    OUTLINE = 'outline'
    PLAIN = 'plain'


BUTTON_ACTIONS = {a.value for a in ButtonAction}
BUTTON_STYLES = {s.value for s in ButtonStyle}

IMAGE_POSITIONS = ('none', 'left', 'right', 'top', 'background')
DISPLAY_SIZES = ('standard', 'large', 'small')
CORNER_RADII = ('standard', 'rounded', 'square')
ALIGNMENTS = ('center', 'left', 'right')

# Global design values seeded on new popups and sections. Every design field
# falls back to one of these when nothing else is set.
DEFAULT_DESIGN = {
    'logoUrl': '',
    'logoWidth': 35,
    'displaySize': 'standard',
    'alignment': 'center',
    'cornerRadius': 'standard',
    'imagePosition': 'none',
    'hideOnMobile': False,
    'backgroundOnMobile': False,
    'imageUrl': '',
    'popupBackground': '#FFFFFF',
    'textHeading': '#000000',
    'textDescription': '#666666',
    'textInput': '#000000',
    'textConsent': '#666666',
    'textError': '#FF0000',
    'textLabel': '#000000',
    'textFooter': '#999999',
    'primaryBtnBg': '#000000',
    'primaryBtnText': '#FFFFFF',
    'secondaryBtnText': '#666666',
    'customBtnBg': '#E5E5E5',
    'customBtnText': '#000000',
}

DESIGN_FIELDS = tuple(DEFAULT_DESIGN)

DEFAULT_HEADING = 'Get 10% OFF your order'
DEFAULT_DESCRIPTION = 'Sign up and unlock your instant discount.'
DEFAULT_EMAIL_PLACEHOLDER = 'Email address'
DEFAULT_PHONE_PLACEHOLDER = 'Phone number'
DEFAULT_FOOTER_TEXT = (
    'You are signing up to receive communication via email '
    'and can unsubscribe at any time.'
)

# Content keys every normalized section carries
DEFAULT_CONTENT = {
    'heading': '',
    'description': '',
    'enableEmailCapture': False,
    'emailPlaceholder': DEFAULT_EMAIL_PLACEHOLDER,
    'enablePhoneCapture': False,
    'phonePlaceholder': DEFAULT_PHONE_PLACEHOLDER,
    'phoneRequired': False,
    'customButtons': [],
    'footerText': '',
}

DEFAULT_BUTTON_ID = 'default'

# Popup-level (non-design) defaults for a fresh record
DEFAULT_POPUP_FIELDS = {
    'isActive': False,
    'isMultiStep': False,
    'heading': DEFAULT_HEADING,
    'description': DEFAULT_DESCRIPTION,
    'emailPlaceholder': DEFAULT_EMAIL_PLACEHOLDER,
    'enablePhoneField': False,
    'phoneRequired': False,
    'phonePlaceholder': DEFAULT_PHONE_PLACEHOLDER,
    'footerText': DEFAULT_FOOTER_TEXT,
    'customButtons': [],
    'discountType': 'percentage',
    'discountValue': 10,
    'discountCode': None,
}


def same_id(a, b) -> bool:
    """Ids arrive as ints from storage and as strings from URLs and forms."""
    if a is None or b is None:
        return False
    return str(a) == str(b)


def _next_id(existing_ids) -> int:
    """
    Millisecond clock id, bumped past every numeric id already in use.

    Two calls inside the same millisecond still get distinct values as long
    as the first result is part of ``existing_ids`` for the second call.
    """
    candidate = int(time.time() * 1000)
    numeric = [int(i) for i in existing_ids if isinstance(i, int) or (isinstance(i, str) and i.isdigit())]
    if numeric:
        candidate = max(candidate, max(numeric) + 1)
    return candidate


def next_section_id(sections: List[dict]) -> int:
    """Generate a section id unique within ``sections``."""
    return _next_id(s.get('id') for s in sections)


def next_button_id(buttons: List[dict]) -> int:
    """Generate a button id unique within ``buttons``."""
    return _next_id(b.get('id') for b in buttons)


def default_button(text: str = 'New Button') -> dict:
    """The close button every new section starts with."""
    return {
        'id': DEFAULT_BUTTON_ID,
        'text': text,
        'action': ButtonAction.CLOSE_POPUP.value,
        'style': ButtonStyle.OUTLINE.value,
    }


def new_link_button(button_id, background: str = None, text_color: str = None) -> dict:
    """A freshly added custom button (link action, outline style)."""
    return {
        'id': button_id,
        'text': 'New Button',
        'action': ButtonAction.LINK.value,
        'url': '',
        'style': ButtonStyle.OUTLINE.value,
        'buttonStyle': {
            'backgroundColor': background or DEFAULT_DESIGN['customBtnBg'],
            'textColor': text_color or DEFAULT_DESIGN['customBtnText'],
            'style': ButtonStyle.OUTLINE.value,
        },
    }


def new_section(section_id, position: int) -> dict:
    """
    Build a blank universal section.

    Args:
        section_id: Id for the new section
        position: Zero-based index the section will occupy
    """
    number = position + 1
    content = copy.deepcopy(DEFAULT_CONTENT)
    content.update({
        'heading': f'Section {number}',
        'description': 'Add your content here',
        'customButtons': [default_button()],
    })
    return {
        'id': section_id,
        'type': SectionType.UNIVERSAL.value,
        'title': f'Section {number}',
        'order': position,
        'content': content,
        'design': dict(DEFAULT_DESIGN),
    }


def new_popup_draft(name: str) -> dict:
    """
    Seeded draft for a brand-new popup.

    One universal email-capture section with a single close button.
    """
    draft = copy.deepcopy(DEFAULT_POPUP_FIELDS)
    draft.update(DEFAULT_DESIGN)
    draft['name'] = name

    content = copy.deepcopy(DEFAULT_CONTENT)
    content.update({
        'heading': DEFAULT_HEADING,
        'description': DEFAULT_DESCRIPTION,
        'enableEmailCapture': True,
        'customButtons': [default_button('Join Now')],
        'footerText': DEFAULT_FOOTER_TEXT,
    })
    draft['sections'] = [{
        'id': next_section_id([]),
        'type': SectionType.UNIVERSAL.value,
        'title': 'Email Capture',
        'order': 0,
        'content': content,
        'design': dict(DEFAULT_DESIGN),
    }]
    return draft


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

def encode_list(value: Optional[List[Any]]) -> str:
    """Serialize a nested list (sections, buttons) for a text column."""
    return json.dumps(value if value is not None else [])


def decode_list(raw: Optional[str], field: str = 'value') -> List[Any]:
    """
    Parse a stored JSON list.

    Malformed or non-list content degrades to an empty list and is logged;
    it never raises.
    """
    if raw is None or raw == '':
        return []
    if isinstance(raw, list):
        return raw
    try:
        value = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Could not decode stored {field}: {e}")
        return []
    if not isinstance(value, list):
        logger.warning(f"Stored {field} is {type(value).__name__}, expected list")
        return []
    return value


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def _legacy_buttons(section_type: str, content: dict) -> List[dict]:
    """Translate per-type button labels into universal buttons."""
    buttons = []

    primary = content.pop('primaryButton', None)
    secondary = content.pop('secondaryButton', None)
    button_text = content.pop('buttonText', None)

    if primary:
        action = ButtonAction.SUBMIT if section_type == SectionType.EMAIL_CAPTURE.value else ButtonAction.CONTINUE
        buttons.append({
            'id': 'legacy-primary',
            'text': primary,
            'action': action.value,
            'style': ButtonStyle.FILLED.value,
        })
    if button_text:
        buttons.append({
            'id': 'legacy-continue',
            'text': button_text,
            'action': ButtonAction.CONTINUE.value,
            'style': ButtonStyle.FILLED.value,
        })
    if secondary:
        buttons.append({
            'id': 'legacy-secondary',
            'text': secondary,
            'action': ButtonAction.CLOSE.value,
            'style': ButtonStyle.PLAIN.value,
        })
    return buttons


def normalize_button(button: dict) -> dict:
    """Fill missing button keys; unknown keys are kept."""
    button = dict(button)
    button.setdefault('text', 'New Button')
    button.setdefault('action', ButtonAction.CLOSE_POPUP.value)
    button.setdefault('style', ButtonStyle.OUTLINE.value)
    if button['action'] == ButtonAction.LINK.value:
        button.setdefault('url', '')
    if not isinstance(button.get('buttonStyle'), dict):
        button.pop('buttonStyle', None)
    return button


def normalize_section(section: dict, position: int, taken_ids: List = None) -> dict:
    """
    Convert one stored section into the canonical universal shape.

    Args:
        section: Section as stored (any schema generation)
        position: Index in the section list; becomes ``order``
        taken_ids: Ids already used by earlier sections
    """
    section = copy.deepcopy(section) if isinstance(section, dict) else {}
    taken_ids = taken_ids or []

    if section.get('id') is None or any(same_id(section['id'], t) for t in taken_ids):
        section['id'] = _next_id(list(taken_ids))

    section_type = section.get('type') or SectionType.UNIVERSAL.value
    content = section.get('content')
    content = dict(content) if isinstance(content, dict) else {}

    if section_type in LEGACY_SECTION_TYPES:
        migrated = _legacy_buttons(section_type, content)
        if migrated:
            content['customButtons'] = list(content.get('customButtons') or []) + migrated
        if section_type == SectionType.EMAIL_CAPTURE.value:
            content['enableEmailCapture'] = True

    for key, value in DEFAULT_CONTENT.items():
        if content.get(key) is None:
            content[key] = copy.deepcopy(value)

    if not isinstance(content.get('primaryButtonStyle'), dict):
        content.pop('primaryButtonStyle', None)

    buttons = content['customButtons'] if isinstance(content['customButtons'], list) else []
    content['customButtons'] = [normalize_button(b) for b in buttons if isinstance(b, dict)]

    design = section.get('design')
    section['design'] = dict(design) if isinstance(design, dict) else {}

    section['type'] = SectionType.UNIVERSAL.value
    section['content'] = content
    section['order'] = position
    section.setdefault('title', f'Section {position + 1}')
    return section


def _seed_section_from_record(draft: dict) -> dict:
    """First section for records saved before sections existed."""
    legacy_buttons = [b for b in draft.get('customButtons') or [] if isinstance(b, dict)]

    content = copy.deepcopy(DEFAULT_CONTENT)
    content.update({
        'heading': draft.get('heading') or DEFAULT_HEADING,
        'description': draft.get('description') or DEFAULT_DESCRIPTION,
        'enableEmailCapture': True,
        'emailPlaceholder': draft.get('emailPlaceholder') or DEFAULT_EMAIL_PLACEHOLDER,
        'enablePhoneCapture': bool(draft.get('enablePhoneField')),
        'phonePlaceholder': draft.get('phonePlaceholder') or DEFAULT_PHONE_PLACEHOLDER,
        'phoneRequired': bool(draft.get('phoneRequired')),
        'customButtons': copy.deepcopy(legacy_buttons) or [default_button()],
        'footerText': draft.get('footerText') or DEFAULT_FOOTER_TEXT,
    })
    return {
        'id': 1,
        'type': SectionType.UNIVERSAL.value,
        'title': 'Email Capture',
        'order': 0,
        'content': content,
        # Snapshot of the record's own design so the migration is invisible
        'design': {field: draft.get(field) for field in DESIGN_FIELDS},
    }


def normalize_popup(draft: dict) -> dict:
    """
    Return a canonical copy of a popup draft.

    - Global design fields are filled with their defaults when unset.
    - Legacy section types become ``universal``.
    - A record without sections gets one seeded from its legacy columns.
    - ``order`` is rewritten to match list position.
    """
    draft = copy.deepcopy(draft)

    for field, value in DEFAULT_DESIGN.items():
        if draft.get(field) is None:
            draft[field] = value

    if not isinstance(draft.get('customButtons'), list):
        draft['customButtons'] = []
    draft['isMultiStep'] = bool(draft.get('isMultiStep'))

    raw_sections = draft.get('sections')
    raw_sections = [s for s in raw_sections if isinstance(s, dict)] if isinstance(raw_sections, list) else []

    if not raw_sections:
        draft['sections'] = [normalize_section(_seed_section_from_record(draft), 0)]
        return draft

    sections = []
    for position, section in enumerate(raw_sections):
        sections.append(normalize_section(section, position, [s['id'] for s in sections]))
    draft['sections'] = sections
    return draft


def section_orders(draft: Dict[str, Any]) -> List[int]:
    """The ``order`` values of a draft's sections, in list order."""
    return [s.get('order') for s in draft.get('sections') or []]
