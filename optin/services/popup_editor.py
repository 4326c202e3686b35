"""
Popup Editor Service

In-memory editing of a popup draft. Every operation builds a new draft from
the current one and returns it; a draft handed out earlier is never changed,
so a failed save can always be retried with what the merchant last saw.

Nothing here touches the database. ``PopupService.save_draft`` persists.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from .popup_draft import (
    DEFAULT_CONTENT,
    DESIGN_FIELDS,
    new_link_button,
    new_section,
    next_button_id,
    next_section_id,
    same_id,
)
from .style_resolver import (
    BUTTON_STYLE_FIELDS,
    PRIMARY_BUTTON_KEY,
    design_target_section,
    find_section,
    parse_button_key,
    resolve_button_styles,
)

logger = logging.getLogger(__name__)

SECTION_FIELDS = ('title',)
BUTTON_FIELDS = ('text', 'action', 'url', 'style')
DIRECTIONS = ('up', 'down')

# Popup fields the button style shim mirrors into, per button class
LEGACY_BUTTON_FIELDS = {
    PRIMARY_BUTTON_KEY: {'backgroundColor': 'primaryBtnBg', 'textColor': 'primaryBtnText'},
    'custom': {'backgroundColor': 'customBtnBg', 'textColor': 'customBtnText'},
}

# Operations reachable through ``apply_operation``
OPERATIONS = (
    'set_multi_step',
    'update_field',
    'add_section',
    'remove_section',
    'move_section',
    'update_section',
    'update_section_content',
    'update_section_design',
    'update_design_field',
    'remove_logo',
    'remove_image',
    'add_section_custom_button',
    'update_section_custom_button',
    'remove_section_custom_button',
    'add_custom_button',
    'update_custom_button',
    'remove_custom_button',
    'update_button_style',
)


def _reorder(sections: List[dict]) -> List[dict]:
    for index, section in enumerate(sections):
        section['order'] = index
    return sections


class PopupEditor:
    """
    Editor form controller over one popup draft.

    Usage:
        editor = PopupEditor(popup.to_draft())
        editor.add_section()
        draft = editor.move_section(section_id, 'up')
    """

    def __init__(self, draft: Dict[str, Any]):
        self.draft = copy.deepcopy(draft)
        self.draft.setdefault('sections', [])
        self.draft.setdefault('customButtons', [])

    def _next(self) -> Dict[str, Any]:
        return copy.deepcopy(self.draft)

    def _commit(self, draft: Dict[str, Any]) -> Dict[str, Any]:
        self.draft = draft
        return draft

    def _with_section(self, section_id, mutate) -> Dict[str, Any]:
        """Apply ``mutate(section)`` to one section of a fresh copy."""
        draft = self._next()
        section = find_section(draft, section_id)
        if section is None:
            logger.debug(f"Section {section_id} not found, edit ignored")
            return self.draft
        mutate(section)
        return self._commit(draft)

    # ------------------------------------------------------------------
    # Popup-level fields
    # ------------------------------------------------------------------

    def set_multi_step(self, enabled: bool) -> Dict[str, Any]:
        draft = self._next()
        draft['isMultiStep'] = bool(enabled)
        return self._commit(draft)

    def update_field(self, field: str, value: Any) -> Dict[str, Any]:
        """Set a top-level non-structural field (footerText, discount, ...)."""
        if field in ('id', 'sections', 'customButtons'):
            raise ValueError(f"Field {field!r} cannot be set directly")
        draft = self._next()
        draft[field] = value
        return self._commit(draft)

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def add_section(self) -> Dict[str, Any]:
        """Append a seeded section with one default button."""
        draft = self._next()
        sections = draft['sections']
        sections.append(new_section(next_section_id(sections), len(sections)))
        _reorder(sections)
        return self._commit(draft)

    def remove_section(self, section_id) -> Dict[str, Any]:
        """Remove a section. The last remaining section is never removed."""
        if len(self.draft['sections']) <= 1:
            logger.debug("Refusing to remove the only section")
            return self.draft

        draft = self._next()
        remaining = [s for s in draft['sections'] if not same_id(s.get('id'), section_id)]
        if len(remaining) == len(draft['sections']):
            return self.draft
        draft['sections'] = _reorder(remaining)
        return self._commit(draft)

    def move_section(self, section_id, direction: str) -> Dict[str, Any]:
        """Swap a section with its neighbour; no-op at either end."""
        if direction not in DIRECTIONS:
            raise ValueError(f"Direction must be one of {DIRECTIONS}, got {direction!r}")

        draft = self._next()
        sections = draft['sections']
        index = next((i for i, s in enumerate(sections) if same_id(s.get('id'), section_id)), None)
        if index is None:
            return self.draft

        target = index - 1 if direction == 'up' else index + 1
        if target < 0 or target >= len(sections):
            return self.draft

        sections[index], sections[target] = sections[target], sections[index]
        _reorder(sections)
        return self._commit(draft)

    def update_section(self, section_id, field: str, value: Any) -> Dict[str, Any]:
        if field not in SECTION_FIELDS:
            raise ValueError(f"Section field {field!r} is not editable")
        return self._with_section(section_id, lambda s: s.__setitem__(field, value))

    def update_section_content(self, section_id, field: str, value: Any) -> Dict[str, Any]:
        if field == 'customButtons':
            raise ValueError("Use the section button operations to change buttons")
        if field == 'primaryButtonStyle':
            raise ValueError("Use update_button_style to change the primary button")
        if field not in DEFAULT_CONTENT:
            raise ValueError(f"Unknown content field: {field!r}")

        def mutate(section):
            section.setdefault('content', {})[field] = value

        return self._with_section(section_id, mutate)

    def update_section_design(self, section_id, field: str, value: Any) -> Dict[str, Any]:
        if field not in DESIGN_FIELDS:
            raise ValueError(f"Unknown design field: {field!r}")

        def mutate(section):
            design = section.get('design') or {}
            design[field] = value
            section['design'] = design

        return self._with_section(section_id, mutate)

    def update_design_field(self, field: str, value: Any, selected_section_id=None) -> Dict[str, Any]:
        """
        Design tab edit.

        With a section selected only that section changes. Otherwise the
        global value changes, and a single-step popup mirrors it into its
        first section so the preview and storefront agree.
        """
        if field not in DESIGN_FIELDS:
            raise ValueError(f"Unknown design field: {field!r}")

        if selected_section_id is not None:
            return self.update_section_design(selected_section_id, field, value)

        draft = self._next()
        draft[field] = value
        if not draft.get('isMultiStep') and draft['sections']:
            first = draft['sections'][0]
            design = first.get('design') or {}
            design[field] = value
            first['design'] = design
        return self._commit(draft)

    def remove_logo(self, selected_section_id=None) -> Dict[str, Any]:
        return self.update_design_field('logoUrl', '', selected_section_id)

    def remove_image(self, selected_section_id=None) -> Dict[str, Any]:
        return self.update_design_field('imageUrl', '', selected_section_id)

    # ------------------------------------------------------------------
    # Section buttons
    # ------------------------------------------------------------------

    def add_section_custom_button(self, section_id) -> Dict[str, Any]:
        background = self.draft.get('customBtnBg')
        text_color = self.draft.get('customBtnText')

        def mutate(section):
            content = section.setdefault('content', {})
            buttons = list(content.get('customButtons') or [])
            buttons.append(new_link_button(next_button_id(buttons), background, text_color))
            content['customButtons'] = buttons

        return self._with_section(section_id, mutate)

    def update_section_custom_button(self, section_id, button_id, field: str, value: Any) -> Dict[str, Any]:
        if field not in BUTTON_FIELDS:
            raise ValueError(f"Button field {field!r} is not editable")

        def mutate(section):
            for button in (section.get('content') or {}).get('customButtons') or []:
                if same_id(button.get('id'), button_id):
                    button[field] = value

        return self._with_section(section_id, mutate)

    def remove_section_custom_button(self, section_id, button_id) -> Dict[str, Any]:
        """Remove a button; a section may end up with none."""
        def mutate(section):
            content = section.setdefault('content', {})
            content['customButtons'] = [
                b for b in content.get('customButtons') or []
                if not same_id(b.get('id'), button_id)
            ]

        return self._with_section(section_id, mutate)

    # ------------------------------------------------------------------
    # Legacy popup-level buttons
    # ------------------------------------------------------------------

    def add_custom_button(self) -> Dict[str, Any]:
        draft = self._next()
        buttons = draft['customButtons']
        button = new_link_button(next_button_id(buttons))
        button.pop('buttonStyle')
        buttons.append(button)
        return self._commit(draft)

    def update_custom_button(self, button_id, field: str, value: Any) -> Dict[str, Any]:
        if field not in BUTTON_FIELDS:
            raise ValueError(f"Button field {field!r} is not editable")
        draft = self._next()
        for button in draft['customButtons']:
            if same_id(button.get('id'), button_id):
                button[field] = value
        return self._commit(draft)

    def remove_custom_button(self, button_id) -> Dict[str, Any]:
        draft = self._next()
        draft['customButtons'] = [b for b in draft['customButtons'] if not same_id(b.get('id'), button_id)]
        return self._commit(draft)

    # ------------------------------------------------------------------
    # Button styles
    # ------------------------------------------------------------------

    def update_button_style(self, button_key: str, style_field: str, value: Any, selected_section_id=None) -> Dict[str, Any]:
        """
        Set one style field on the primary or a custom button.

        The override lands on the selected section, or on the first section
        when none is selected. Side effect: with no section selected the
        matching popup-level colour (primaryBtnBg, customBtnText, ...) is
        written too, because single-step records saved before per-section
        styles read their button colours from there.
        """
        if style_field not in BUTTON_STYLE_FIELDS:
            raise ValueError(f"Unknown button style field: {style_field!r}")
        button_class, button_id = parse_button_key(button_key)

        draft = self._next()
        section = design_target_section(draft, selected_section_id)
        if section is None:
            return self.draft

        base = resolve_button_styles(draft, section, button_key)
        content = section.setdefault('content', {})

        if button_class == PRIMARY_BUTTON_KEY:
            content['primaryButtonStyle'] = {**base, **(content.get('primaryButtonStyle') or {}), style_field: value}
        else:
            matched = False
            for button in content.get('customButtons') or []:
                if same_id(button.get('id'), button_id):
                    button['buttonStyle'] = {**base, **(button.get('buttonStyle') or {}), style_field: value}
                    matched = True
            if not matched:
                return self.draft

        if selected_section_id is None:
            legacy_field = LEGACY_BUTTON_FIELDS[button_class].get(style_field)
            if legacy_field:
                draft[legacy_field] = value

        return self._commit(draft)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def apply_operation(self, name: str, args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a named operation with keyword arguments.

        Raises:
            ValueError: for unknown operations or bad arguments
        """
        if name not in OPERATIONS:
            raise ValueError(f"Unknown editor operation: {name!r}")
        try:
            return getattr(self, name)(**(args or {}))
        except TypeError as e:
            raise ValueError(f"Bad arguments for {name}: {e}") from e
