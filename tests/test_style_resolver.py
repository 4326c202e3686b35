"""
Tests for design and button style resolution.
"""
import pytest

from optin.services.popup_draft import DEFAULT_DESIGN, new_popup_draft, normalize_popup
from optin.services.style_resolver import (
    design_target_section,
    effective_design,
    parse_button_key,
    resolve_button_style,
    resolve_button_styles,
    resolve_design,
)


def make_popup(**overrides):
    popup = normalize_popup(new_popup_draft('Resolver'))
    popup.update(overrides)
    return popup


def two_section_popup():
    popup = make_popup()
    popup['sections'] = [
        {'id': 1, 'order': 0, 'content': {'customButtons': []}, 'design': {}},
        {'id': 2, 'order': 1, 'content': {'customButtons': []}, 'design': {'textHeading': '#222222'}},
    ]
    return popup


class TestResolveDesign:
    """Tests for resolve_design and effective_design."""

    def test_single_step_uses_first_section_override(self):
        """Single-step popups show the first section's overrides."""
        popup = make_popup(isMultiStep=False, popupBackground='#FFFFFF')
        popup['sections'][0]['design'] = {'popupBackground': '#112233'}

        assert resolve_design(popup)['popupBackground'] == '#112233'

    def test_override_is_per_key(self):
        """Keys the section does not override fall back to the globals."""
        popup = make_popup(textDescription='#444444')
        popup['sections'][0]['design'] = {'popupBackground': '#112233', 'textDescription': None}

        design = resolve_design(popup, popup['sections'][0]['id'])
        assert design['popupBackground'] == '#112233'
        assert design['textDescription'] == '#444444'

    def test_selected_section_override(self):
        """A selected section's defined keys win."""
        popup = two_section_popup()

        design = resolve_design(popup, 2)
        assert design['textHeading'] == '#222222'
        assert design['popupBackground'] == popup['popupBackground']

    def test_selected_id_as_string(self):
        """Section ids match regardless of int/str form."""
        popup = two_section_popup()

        assert resolve_design(popup, '2')['textHeading'] == '#222222'

    def test_multi_step_without_selection_uses_globals(self):
        """Multi-step popups with nothing selected show the global design."""
        popup = two_section_popup()
        popup['isMultiStep'] = True
        popup['sections'][0]['design'] = {'popupBackground': '#000000'}

        assert resolve_design(popup)['popupBackground'] == popup['popupBackground']

    def test_unknown_selected_section_uses_globals(self):
        """A selected id that matches no section resolves to the globals."""
        popup = two_section_popup()

        assert resolve_design(popup, 999)['textHeading'] == popup['textHeading']

    def test_missing_globals_use_defaults(self):
        """Unset global fields fall back to the hardcoded defaults."""
        design = effective_design({'sections': []})

        assert design == DEFAULT_DESIGN


class TestButtonStyle:
    """Tests for resolve_button_style."""

    def test_primary_defaults_to_global_colours(self):
        """The primary button falls back to primaryBtnBg/primaryBtnText and filled."""
        popup = make_popup(primaryBtnBg='#AA0000', primaryBtnText='#00AA00')
        section = popup['sections'][0]

        assert resolve_button_styles(popup, section, 'primary') == {
            'backgroundColor': '#AA0000',
            'textColor': '#00AA00',
            'style': 'filled',
        }

    def test_primary_override(self):
        """primaryButtonStyle keys override per key."""
        popup = make_popup(primaryBtnBg='#AA0000')
        section = popup['sections'][0]
        section['content']['primaryButtonStyle'] = {'backgroundColor': '#0000AA', 'textColor': None}

        assert resolve_button_style(popup, section, 'primary', 'backgroundColor') == '#0000AA'
        assert resolve_button_style(popup, section, 'primary', 'textColor') == popup['primaryBtnText']

    def test_custom_defaults_to_custom_colours(self):
        """Custom buttons fall back to customBtnBg/customBtnText."""
        popup = make_popup(customBtnBg='#EEEEEE', customBtnText='#111111')
        section = popup['sections'][0]

        styles = resolve_button_styles(popup, section, 'custom-default')
        assert styles['backgroundColor'] == '#EEEEEE'
        assert styles['textColor'] == '#111111'
        assert styles['style'] == 'outline'

    def test_custom_override(self):
        """A custom button's buttonStyle overrides the class default."""
        popup = make_popup()
        section = popup['sections'][0]
        section['content']['customButtons'][0]['buttonStyle'] = {'textColor': '#123123'}

        assert resolve_button_style(popup, section, 'custom-default', 'textColor') == '#123123'
        assert resolve_button_style(popup, section, 'custom-default', 'backgroundColor') == popup['customBtnBg']

    def test_custom_button_own_variant(self):
        """A button's own style is used when buttonStyle has none."""
        popup = make_popup()
        section = popup['sections'][0]
        section['content']['customButtons'][0]['style'] = 'plain'

        assert resolve_button_style(popup, section, 'custom-default', 'style') == 'plain'

    def test_unknown_custom_button_uses_class_default(self):
        """A custom key with no matching button resolves to the class default."""
        popup = make_popup()

        assert resolve_button_style(popup, popup['sections'][0], 'custom-nope', 'backgroundColor') == popup['customBtnBg']

    def test_invalid_style_field(self):
        """Unknown style fields are rejected."""
        popup = make_popup()

        with pytest.raises(ValueError):
            resolve_button_style(popup, popup['sections'][0], 'primary', 'fontSize')

    def test_invalid_button_key(self):
        """Keys other than primary/custom-<id> are rejected."""
        with pytest.raises(ValueError):
            parse_button_key('secondary')
        with pytest.raises(ValueError):
            parse_button_key('custom-')

    def test_parse_button_key(self):
        """Keys split into class and id."""
        assert parse_button_key('primary') == ('primary', None)
        assert parse_button_key('custom-1700000000000') == ('custom', '1700000000000')


class TestDesignTargetSection:
    """Tests for design_target_section."""

    def test_selected_section(self):
        popup = two_section_popup()
        assert design_target_section(popup, 2)['id'] == 2

    def test_defaults_to_first_section(self):
        popup = two_section_popup()
        assert design_target_section(popup)['id'] == 1

    def test_no_sections(self):
        assert design_target_section({'sections': []}) is None
