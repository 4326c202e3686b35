"""
Style Resolver

Single place that decides which design values apply to a section or button.

Fallback order, per key:
    section design override -> popup global field -> hardcoded default
    button style override   -> popup button-class colour -> hardcoded default

For the ``style`` variant of a custom button, the button's own ``style`` key
is consulted before the class default (outline).

A key counts as overridden when its value is not None; an override never
replaces the whole object.
"""

from typing import Any, Dict, Optional, Tuple

from .popup_draft import DEFAULT_DESIGN, DESIGN_FIELDS, ButtonStyle, same_id

PRIMARY_BUTTON_KEY = 'primary'
CUSTOM_BUTTON_PREFIX = 'custom-'

BUTTON_STYLE_FIELDS = ('backgroundColor', 'textColor', 'style')

# Popup field backing each style field, per button class
BUTTON_CLASS_FIELDS = {
    PRIMARY_BUTTON_KEY: {
        'backgroundColor': 'primaryBtnBg',
        'textColor': 'primaryBtnText',
    },
    'custom': {
        'backgroundColor': 'customBtnBg',
        'textColor': 'customBtnText',
    },
}

BUTTON_CLASS_VARIANT = {
    PRIMARY_BUTTON_KEY: ButtonStyle.FILLED.value,
    'custom': ButtonStyle.OUTLINE.value,
}


def _coalesce(*values):
    for value in values:
        if value is not None:
            return value
    return None


def find_section(popup: dict, section_id) -> Optional[dict]:
    """Look up a section by id; None when absent."""
    for section in popup.get('sections') or []:
        if same_id(section.get('id'), section_id):
            return section
    return None


def global_design(popup: dict) -> Dict[str, Any]:
    """Popup-level design values with hardcoded defaults behind them."""
    return {field: _coalesce(popup.get(field), DEFAULT_DESIGN[field]) for field in DESIGN_FIELDS}


def effective_design(popup: dict, section: Optional[dict] = None) -> Dict[str, Any]:
    """
    Overlay a section's design overrides on the popup's global design.

    Args:
        popup: Popup draft
        section: Section whose ``design`` overrides apply, or None for global
    """
    design = global_design(popup)
    overrides = (section or {}).get('design') or {}
    for field in DESIGN_FIELDS:
        value = overrides.get(field)
        if value is not None:
            design[field] = value
    return design


def resolve_design(popup: dict, selected_section_id=None) -> Dict[str, Any]:
    """
    Effective design for the design tab and preview.

    - A selected section that exists: its overrides over the globals.
    - Nothing selected, single-step popup: the first section's overrides.
    - Nothing selected, multi-step popup: the globals unmodified.

    A selected id that matches no section resolves to the globals.
    """
    sections = popup.get('sections') or []

    if selected_section_id is not None:
        return effective_design(popup, find_section(popup, selected_section_id))

    if not popup.get('isMultiStep') and sections:
        return effective_design(popup, sections[0])

    return effective_design(popup)


def parse_button_key(button_key: str) -> Tuple[str, Optional[str]]:
    """
    Split a style-selection key.

    Returns:
        ('primary', None) or ('custom', '<button id>')

    Raises:
        ValueError: for any other key
    """
    if button_key == PRIMARY_BUTTON_KEY:
        return PRIMARY_BUTTON_KEY, None
    if isinstance(button_key, str) and button_key.startswith(CUSTOM_BUTTON_PREFIX):
        button_id = button_key[len(CUSTOM_BUTTON_PREFIX):]
        if button_id:
            return 'custom', button_id
    raise ValueError(f"Unknown button key: {button_key!r}")


def custom_button_key(button_id) -> str:
    """Selection key for a custom button."""
    return f'{CUSTOM_BUTTON_PREFIX}{button_id}'


def find_button(section: Optional[dict], button_id) -> Optional[dict]:
    """Find a custom button inside a section's content."""
    for button in ((section or {}).get('content') or {}).get('customButtons') or []:
        if same_id(button.get('id'), button_id):
            return button
    return None


def button_class_default(popup: dict, button_class: str, style_field: str):
    """Default for a style field when the button has no override."""
    if style_field == 'style':
        return BUTTON_CLASS_VARIANT[button_class]
    popup_field = BUTTON_CLASS_FIELDS[button_class][style_field]
    return _coalesce(popup.get(popup_field), DEFAULT_DESIGN[popup_field])


def resolve_button_style(popup: dict, section: Optional[dict], button_key: str, style_field: str):
    """
    Effective value of one style field for a button.

    Args:
        popup: Popup draft (supplies the class defaults)
        section: Section owning the button, or None
        button_key: 'primary' or 'custom-<id>'
        style_field: backgroundColor, textColor or style

    Raises:
        ValueError: on an unknown button key or style field
    """
    if style_field not in BUTTON_STYLE_FIELDS:
        raise ValueError(f"Unknown button style field: {style_field!r}")

    button_class, button_id = parse_button_key(button_key)

    if button_class == PRIMARY_BUTTON_KEY:
        overrides = ((section or {}).get('content') or {}).get('primaryButtonStyle') or {}
        own_style = None
    else:
        button = find_button(section, button_id) or {}
        overrides = button.get('buttonStyle') or {}
        # The button's own variant sits between its override and the class default
        own_style = button.get('style') if style_field == 'style' else None

    return _coalesce(
        overrides.get(style_field),
        own_style,
        button_class_default(popup, button_class, style_field),
    )


def resolve_button_styles(popup: dict, section: Optional[dict], button_key: str) -> Dict[str, Any]:
    """All style fields for a button."""
    return {
        field: resolve_button_style(popup, section, button_key, field)
        for field in BUTTON_STYLE_FIELDS
    }


def design_target_section(popup: dict, selected_section_id=None) -> Optional[dict]:
    """Section the design tab edits buttons on: the selected one, else the first."""
    if selected_section_id is not None:
        return find_section(popup, selected_section_id)
    sections = popup.get('sections') or []
    return sections[0] if sections else None
