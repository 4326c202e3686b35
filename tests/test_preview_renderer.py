"""
Tests for the preview layout description and its HTML rendering.
"""
import pytest

from optin.services.popup_draft import new_popup_draft, new_section, normalize_popup
from optin.services.preview_renderer import render_preview, render_preview_html


def make_popup(**overrides):
    popup = normalize_popup(new_popup_draft('Preview'))
    popup.update(overrides)
    # Keep the single-step section in line with the globals
    popup['sections'][0]['design'].update(overrides)
    return popup


class TestDesktopLayout:
    """Tests for the desktop target."""

    def test_default_layout(self):
        popup = make_popup()

        layout = render_preview(popup)

        assert layout['visible'] is True
        assert layout['target'] == 'desktop'
        assert layout['size_class'] == 'optin-popup--standard'
        assert layout['max_width'] == '500px'
        assert layout['corner_radius_class'] == 'optin-popup--radius-standard'
        assert layout['border_radius'] == '8px'
        assert layout['padding'] == '32px'
        assert layout['image'] is None
        assert layout['logo'] is None
        assert layout['heading']['text'] == 'Get 10% OFF your order'
        assert layout['container']['width'] == '90%'

    def test_email_input(self):
        layout = render_preview(make_popup())

        assert [i['type'] for i in layout['inputs']] == ['email']
        assert layout['inputs'][0]['placeholder'] == 'Email address'

    def test_phone_input(self):
        popup = make_popup()
        popup['sections'][0]['content'].update({'enablePhoneCapture': True, 'phoneRequired': True})

        layout = render_preview(popup)

        phone = layout['inputs'][1]
        assert phone['type'] == 'tel'
        assert phone['required'] is True

    def test_default_button_colours(self):
        """The seeded close button uses the custom-button colours, outlined."""
        popup = make_popup(customBtnBg='#DDDDDD', customBtnText='#222222')

        button = render_preview(popup)['buttons'][0]

        assert button['key'] == 'custom-default'
        assert button['text'] == 'Join Now'
        assert button['variant'] == 'outline'
        assert button['background_color'] == '#DDDDDD'
        assert button['text_color'] == '#222222'
        assert button['border'] == '1px solid #DDDDDD'
        assert 'url' not in button

    def test_plain_and_link_buttons(self):
        popup = make_popup()
        popup['sections'][0]['content']['customButtons'] = [
            {'id': 1, 'text': 'Shop', 'action': 'link', 'url': '/collections/all', 'style': 'filled'},
            {'id': 2, 'text': 'No thanks', 'action': 'close', 'style': 'plain'},
        ]

        link, plain = render_preview(popup, selected_button_key='custom-2')['buttons']

        assert link['url'] == '/collections/all'
        assert link['variant'] == 'filled'
        assert link['border'] == 'none'
        assert plain['background_color'] == 'transparent'
        assert plain['text_decoration'] == 'underline'
        assert plain['selected'] is True
        assert link['selected'] is False

    def test_side_image(self):
        popup = make_popup(imageUrl='data:image/png;base64,AAA', imagePosition='left')

        layout = render_preview(popup)

        assert layout['image']['position'] == 'left'
        assert layout['image']['border_radius'] == '8px 0 0 8px'
        assert layout['padding'] == '0'
        assert layout['flex_direction'] == 'row'

    def test_top_image(self):
        popup = make_popup(imageUrl='data:image/png;base64,AAA', imagePosition='top')

        layout = render_preview(popup)

        assert layout['padding'] == '0 32px 32px 32px'
        assert layout['flex_direction'] == 'column'

    def test_image_position_without_url(self):
        """A position with no image behaves like none."""
        layout = render_preview(make_popup(imagePosition='left'))

        assert layout['image'] is None
        assert layout['padding'] == '32px'

    def test_background_image(self):
        """Background images switch text to white."""
        popup = make_popup(imageUrl='data:image/png;base64,AAA', imagePosition='background')

        layout = render_preview(popup)

        assert layout['background']['image_url'] == 'data:image/png;base64,AAA'
        assert layout['heading']['color'] == '#fff'
        assert layout['description']['color'] == '#fff'
        assert layout['image']['position'] == 'background'

    def test_size_and_radius(self):
        popup = make_popup(displaySize='large', cornerRadius='rounded')

        layout = render_preview(popup)

        assert layout['max_width'] == '600px'
        assert layout['border_radius'] == '12px'

    def test_logo(self):
        popup = make_popup(logoUrl='data:image/png;base64,LOGO', logoWidth=50)

        assert render_preview(popup)['logo'] == {'url': 'data:image/png;base64,LOGO', 'max_width': '50%'}

    def test_explicit_design(self):
        """A pre-resolved design is used as given."""
        popup = make_popup()
        design = dict(popup['sections'][0]['design'], textHeading='#ABABAB')

        assert render_preview(popup, design=design)['heading']['color'] == '#ABABAB'

    def test_unknown_target(self):
        with pytest.raises(ValueError):
            render_preview(make_popup(), target='tablet')


class TestMobileLayout:
    """Tests for the mobile device frame."""

    def test_hidden_on_mobile(self):
        """hideOnMobile renders a zero-size hidden description."""
        layout = render_preview(make_popup(hideOnMobile=True), target='mobile')

        assert layout['visible'] is False
        assert layout['width'] == '0'
        assert layout['height'] == '0'
        assert 'buttons' not in layout

    def test_hide_on_mobile_does_not_affect_desktop(self):
        assert render_preview(make_popup(hideOnMobile=True))['visible'] is True

    def test_mobile_container(self):
        layout = render_preview(make_popup(), target='mobile')

        assert layout['container']['width'] == '320px'
        assert layout['padding'] == '20px'
        assert layout['flex_direction'] == 'column'
        assert layout['margin'] == '20px auto'

    def test_side_image_dropped_on_mobile(self):
        popup = make_popup(imageUrl='data:image/png;base64,AAA', imagePosition='right')

        layout = render_preview(popup, target='mobile')

        assert layout['image'] is None
        assert layout['padding'] == '20px'

    def test_background_on_mobile_padding(self):
        popup = make_popup(imageUrl='data:image/png;base64,AAA', imagePosition='top', backgroundOnMobile=True)

        assert render_preview(popup, target='mobile')['padding'] == '20px'


class TestSteps:
    """Tests for multi-step rendering."""

    def multi_step_popup(self):
        popup = make_popup()
        popup['isMultiStep'] = True
        second = new_section(2, 1)
        second['content']['heading'] = 'Second step'
        popup['sections'].append(second)
        return popup

    def test_step_selects_section(self):
        layout = render_preview(self.multi_step_popup(), step=1)

        assert layout['heading']['text'] == 'Second step'
        assert layout['step']['index'] == 1
        assert layout['step']['is_last'] is True
        assert layout['step']['show_navigation'] is True

    def test_out_of_range_step_shows_first(self):
        layout = render_preview(self.multi_step_popup(), step=5)

        assert layout['step']['index'] == 0

    def test_single_step_ignores_step(self):
        popup = self.multi_step_popup()
        popup['isMultiStep'] = False

        layout = render_preview(popup, step=1)

        assert layout['step']['index'] == 0
        assert layout['step']['show_navigation'] is False


class TestPreviewHtml:
    """Tests for render_preview_html."""

    def test_values_escaped(self):
        popup = make_popup()
        popup['sections'][0]['content']['heading'] = '<script>alert(1)</script>'

        html = render_preview_html(render_preview(popup))

        assert '<script>' not in html
        assert '&lt;script&gt;' in html

    def test_hidden_page(self):
        html = render_preview_html(render_preview(make_popup(hideOnMobile=True), target='mobile'))

        assert 'Popup is hidden on mobile' in html
        assert 'optin-popup' not in html.split('</style>')[1]
