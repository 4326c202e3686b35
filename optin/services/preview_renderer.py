"""
Preview Renderer

Turns a popup draft plus the current step into a layout description the
admin front-end paints as-is. The same description serves the desktop
container and the mobile device frame; only container sizing and the
mobile visibility rules differ.
"""

from typing import Any, Dict, List, Optional

from markupsafe import escape

from .popup_draft import (
    ButtonAction,
    ButtonStyle,
    DEFAULT_DESCRIPTION,
    DEFAULT_EMAIL_PLACEHOLDER,
    DEFAULT_HEADING,
    DEFAULT_PHONE_PLACEHOLDER,
)
from .style_resolver import custom_button_key, effective_design, resolve_button_styles

DESKTOP = 'desktop'
MOBILE = 'mobile'
TARGETS = (DESKTOP, MOBILE)

SIZE_MAX_WIDTH = {
    'small': '400px',
    'standard': '500px',
    'large': '600px',
}

CORNER_RADIUS = {
    'square': '0px',
    'standard': '8px',
    'rounded': '12px',
}

# Image corner rounding follows the side the image sits on
IMAGE_RADIUS = {
    'left': {'square': '0', 'standard': '8px 0 0 8px', 'rounded': '12px 0 0 12px'},
    'right': {'square': '0', 'standard': '0 8px 8px 0', 'rounded': '0 12px 12px 0'},
    'top': {'square': '0', 'standard': '8px 8px 0 0', 'rounded': '12px 12px 0 0'},
}

CONTAINERS = {
    DESKTOP: {'width': '90%', 'min_height': '400px'},
    MOBILE: {'width': '320px', 'height': '568px', 'min_height': '600px'},
}

BACKGROUND_TEXT_COLOR = '#fff'


def current_section(popup: dict, step: int = 0) -> Optional[dict]:
    """Section on screen: always the first for single-step popups."""
    sections = popup.get('sections') or []
    if not sections:
        return None
    if not popup.get('isMultiStep'):
        return sections[0]
    if 0 <= step < len(sections):
        return sections[step]
    return sections[0]


def _image_position(design: dict, target: str) -> str:
    position = design.get('imagePosition') or 'none'
    if not design.get('imageUrl'):
        return 'none'
    # Side images have no room in the phone frame
    if target == MOBILE and position in ('left', 'right'):
        return 'none'
    return position


def _padding(position: str, design: dict, target: str) -> str:
    if target == MOBILE:
        if design.get('backgroundOnMobile'):
            return '20px'
        if position in ('left', 'right'):
            return '0'
        if position == 'top':
            return '0 20px 20px 20px'
        return '20px'
    if position in ('left', 'right'):
        return '0'
    if position == 'top':
        return '0 32px 32px 32px'
    return '32px'


def _render_buttons(popup: dict, section: dict, selected_button_key: str = None) -> List[Dict[str, Any]]:
    buttons = []
    for button in (section.get('content') or {}).get('customButtons') or []:
        key = custom_button_key(button.get('id'))
        styles = resolve_button_styles(popup, section, key)
        variant = styles['style']
        rendered = {
            'key': key,
            'id': button.get('id'),
            'text': button.get('text', ''),
            'action': button.get('action'),
            'variant': variant,
            'background_color': 'transparent' if variant == ButtonStyle.PLAIN.value else styles['backgroundColor'],
            'text_color': styles['textColor'],
            'border': f"1px solid {styles['backgroundColor']}" if variant == ButtonStyle.OUTLINE.value else 'none',
            'text_decoration': 'underline' if variant == ButtonStyle.PLAIN.value else 'none',
            'selected': key == selected_button_key,
        }
        if button.get('action') == ButtonAction.LINK.value:
            rendered['url'] = button.get('url', '')
        buttons.append(rendered)
    return buttons


def render_preview(
    popup: dict,
    step: int = 0,
    design: Optional[dict] = None,
    target: str = DESKTOP,
    selected_button_key: str = None,
) -> Dict[str, Any]:
    """
    Build the layout description for one step of a popup.

    Args:
        popup: Normalized popup draft
        step: Current step (ignored for single-step popups)
        design: Pre-resolved design; defaults to the current section's
                effective design
        target: 'desktop' or 'mobile'
        selected_button_key: Button highlighted in the design tab

    Returns:
        Layout dict. On mobile with ``hideOnMobile`` set, a zero-size hidden
        description with no content.
    """
    if target not in TARGETS:
        raise ValueError(f"Unknown preview target: {target!r}")

    sections = popup.get('sections') or []
    section = current_section(popup, step) or {}
    design = design if design is not None else effective_design(popup, section)
    step_index = sections.index(section) if section in sections else 0

    step_info = {
        'index': step_index,
        'total': len(sections),
        'title': section.get('title'),
        'is_first': step_index == 0,
        'is_last': step_index >= len(sections) - 1,
        'show_navigation': bool(popup.get('isMultiStep')) and len(sections) > 1,
    }

    container = dict(CONTAINERS[target])

    if target == MOBILE and design.get('hideOnMobile'):
        return {
            'target': target,
            'visible': False,
            'width': '0',
            'height': '0',
            'container': container,
            'message': 'Popup is hidden on mobile',
            'step': step_info,
        }

    position = _image_position(design, target)
    on_background = position == 'background'
    size = design.get('displaySize') if design.get('displaySize') in SIZE_MAX_WIDTH else 'standard'
    radius = design.get('cornerRadius') if design.get('cornerRadius') in CORNER_RADIUS else 'standard'
    content = section.get('content') or {}

    image = None
    if position != 'none':
        image = {
            'url': design.get('imageUrl'),
            'position': position,
            'border_radius': IMAGE_RADIUS.get(position, {}).get(radius),
        }

    logo = None
    if design.get('logoUrl'):
        width = int(design.get('logoWidth') or 35)
        logo = {'url': design['logoUrl'], 'max_width': f'{width}%'}
        if target == MOBILE:
            logo = {'url': design['logoUrl'], 'max_width': f'{min(width, 60)}%', 'max_height': '40px'}

    inputs = []
    if content.get('enableEmailCapture'):
        inputs.append({
            'type': 'email',
            'placeholder': content.get('emailPlaceholder') or DEFAULT_EMAIL_PLACEHOLDER,
            'required': True,
            'color': design['textInput'],
        })
    if content.get('enablePhoneCapture'):
        inputs.append({
            'type': 'tel',
            'placeholder': content.get('phonePlaceholder') or DEFAULT_PHONE_PLACEHOLDER,
            'required': bool(content.get('phoneRequired')),
            'color': design['textInput'],
        })

    footer = None
    if content.get('footerText'):
        footer = {
            'text': content['footerText'],
            'color': BACKGROUND_TEXT_COLOR if on_background else design['textFooter'],
        }

    layout = {
        'target': target,
        'visible': True,
        'container': container,
        'size_class': f'optin-popup--{size}',
        'max_width': SIZE_MAX_WIDTH[size],
        'corner_radius_class': f'optin-popup--radius-{radius}',
        'border_radius': CORNER_RADIUS[radius],
        'alignment': design.get('alignment') or 'center',
        'padding': _padding(position, design, target),
        'flex_direction': 'column' if target == MOBILE or position == 'top' else 'row',
        'background': {
            'color': design['popupBackground'],
            'image_url': design.get('imageUrl') if on_background else None,
        },
        'close_button_color': BACKGROUND_TEXT_COLOR if on_background else ('#000' if target == MOBILE else '#666'),
        'image': image,
        'logo': logo,
        'heading': {
            'text': content.get('heading') or DEFAULT_HEADING,
            'color': BACKGROUND_TEXT_COLOR if on_background else design['textHeading'],
        },
        'description': {
            'text': content.get('description') or DEFAULT_DESCRIPTION,
            'color': BACKGROUND_TEXT_COLOR if on_background else design['textDescription'],
        },
        'inputs': inputs,
        'buttons': _render_buttons(popup, section, selected_button_key),
        'footer': footer,
        'step': step_info,
    }
    if target == MOBILE:
        layout['margin'] = '20px auto'
    return layout


def render_preview_html(layout: Dict[str, Any]) -> str:
    """
    Render a layout description as a standalone HTML page.

    Every merchant-supplied value is escaped.
    """
    html_parts = [
        '<!DOCTYPE html>',
        '<html lang="en">',
        '<head>',
        '<meta charset="utf-8">',
        '<title>Popup preview</title>',
        '<style>',
        'body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; margin: 0; background: #f5f5f5; }',
        '.optin-stage { display: flex; justify-content: center; align-items: center; padding: 24px; }',
        '.optin-popup { position: relative; display: flex; box-shadow: 0 8px 32px rgba(0,0,0,0.1); overflow: hidden; background-size: cover; background-position: center; }',
        '.optin-popup input { width: 100%; padding: 10px; border: 1px solid #ddd; border-radius: 6px; margin-bottom: 10px; box-sizing: border-box; }',
        '.optin-popup button.optin-btn { width: 100%; padding: 10px 20px; border-radius: 6px; margin-bottom: 10px; font-size: 14px; }',
        '</style>',
        '</head>',
        '<body>',
        f'<div class="optin-stage" style="min-height: {escape(layout["container"]["min_height"])};">',
    ]

    if not layout.get('visible'):
        html_parts.append(f'<p class="optin-hidden">{escape(layout.get("message", ""))}</p>')
        html_parts.extend(['</div>', '</body>', '</html>'])
        return '\n'.join(html_parts)

    background = layout['background']
    style = [
        f'background-color: {escape(background["color"])}',
        f'padding: {escape(layout["padding"])}',
        f'border-radius: {escape(layout["border_radius"])}',
        f'max-width: {escape(layout["max_width"])}',
        f'width: {escape(layout["container"]["width"])}',
        f'text-align: {escape(layout["alignment"])}',
        f'flex-direction: {escape(layout["flex_direction"])}',
    ]
    if background.get('image_url'):
        style.append(f'background-image: url({escape(background["image_url"])})')

    html_parts.append(
        f'<div class="optin-popup {escape(layout["size_class"])} {escape(layout["corner_radius_class"])}" '
        f'style="{"; ".join(style)}">'
    )

    image = layout.get('image')
    if image and image['position'] in ('left', 'top'):
        html_parts.append(f'<img class="optin-image optin-image--{escape(image["position"])}" src="{escape(image["url"])}" alt="">')

    html_parts.append('<div class="optin-body">')
    if layout.get('logo'):
        html_parts.append(
            f'<img class="optin-logo" src="{escape(layout["logo"]["url"])}" alt="Logo" '
            f'style="max-width: {escape(layout["logo"]["max_width"])};">'
        )
    html_parts.append(f'<h2 style="color: {escape(layout["heading"]["color"])};">{escape(layout["heading"]["text"])}</h2>')
    html_parts.append(f'<p style="color: {escape(layout["description"]["color"])};">{escape(layout["description"]["text"])}</p>')

    for field in layout['inputs']:
        required = ' required' if field['required'] else ''
        html_parts.append(
            f'<input type="{escape(field["type"])}" placeholder="{escape(field["placeholder"])}" '
            f'style="color: {escape(field["color"])};"{required}>'
        )

    for button in layout['buttons']:
        html_parts.append(
            f'<button class="optin-btn" style="background-color: {escape(button["background_color"])}; '
            f'color: {escape(button["text_color"])}; border: {escape(button["border"])}; '
            f'text-decoration: {escape(button["text_decoration"])};">{escape(button["text"])}</button>'
        )

    if layout.get('footer'):
        html_parts.append(
            f'<p class="optin-footer" style="color: {escape(layout["footer"]["color"])}; font-size: 10px;">'
            f'{escape(layout["footer"]["text"])}</p>'
        )
    html_parts.append('</div>')

    if image and image['position'] == 'right':
        html_parts.append(f'<img class="optin-image optin-image--right" src="{escape(image["url"])}" alt="">')

    html_parts.extend(['</div>', '</div>', '</body>', '</html>'])
    return '\n'.join(html_parts)
