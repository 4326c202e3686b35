"""
Colour helpers for design fields.

The admin colour picker works in HSB; stored values are hex strings.
"""
import re
from typing import Optional

HEX_COLOR_RE = re.compile(r'^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')

# Design keys holding colours
COLOR_FIELDS = (
    'popupBackground',
    'textHeading',
    'textDescription',
    'textInput',
    'textConsent',
    'textError',
    'textLabel',
    'textFooter',
    'primaryBtnBg',
    'primaryBtnText',
    'secondaryBtnText',
    'customBtnBg',
    'customBtnText',
)


def is_hex_color(value) -> bool:
    """Check for #RGB or #RRGGBB."""
    return isinstance(value, str) and bool(HEX_COLOR_RE.match(value))


def normalize_hex(value: str) -> Optional[str]:
    """
    Expand shorthand and upper-case a hex colour.

    Returns None for anything that is not a hex colour.
    """
    if not is_hex_color(value):
        return None
    digits = value[1:]
    if len(digits) == 3:
        digits = ''.join(ch * 2 for ch in digits)
    return f'#{digits.upper()}'


def hex_to_hsb(value: str) -> dict:
    """Convert a hex colour to {'hue', 'saturation', 'brightness'}."""
    hex_value = normalize_hex(value)
    if hex_value is None:
        raise ValueError(f"Invalid hex colour: {value!r}")

    r = int(hex_value[1:3], 16) / 255
    g = int(hex_value[3:5], 16) / 255
    b = int(hex_value[5:7], 16) / 255

    high = max(r, g, b)
    low = min(r, g, b)
    delta = high - low

    hue = 0.0
    if delta != 0:
        if high == r:
            hue = ((g - b) / delta) % 6
        elif high == g:
            hue = (b - r) / delta + 2
        else:
            hue = (r - g) / delta + 4
    hue = round(hue * 60)
    if hue < 0:
        hue += 360

    saturation = 0 if high == 0 else delta / high

    return {
        'hue': hue,
        'saturation': round(saturation, 2),
        'brightness': round(high, 2),
    }


def hsb_to_hex(hue: float, saturation: float, brightness: float) -> str:
    """Convert HSB (hue in degrees, s/b in 0..1) to #RRGGBB."""
    h = (hue % 360) / 360
    s = saturation
    v = brightness

    i = int(h * 6)
    f = h * 6 - i
    p = v * (1 - s)
    q = v * (1 - f * s)
    t = v * (1 - (1 - f) * s)

    r, g, b = [
        (v, t, p),
        (q, v, p),
        (p, v, t),
        (p, q, v),
        (t, p, v),
        (v, p, q),
    ][i % 6]

    return '#' + ''.join(f'{round(c * 255):02X}' for c in (r, g, b))


def picker_value(value):
    """
    Hex for an HSB dict coming from the colour picker.

    Anything else is returned unchanged.

    Raises:
        ValueError: when an HSB dict holds non-numeric parts
    """
    if not isinstance(value, dict) or not {'hue', 'saturation', 'brightness'} <= set(value):
        return value
    try:
        return hsb_to_hex(float(value['hue']), float(value['saturation']), float(value['brightness']))
    except (TypeError, ValueError):
        raise ValueError(f"Invalid HSB colour: {value!r}")


def picker_colors(values: dict, fields=COLOR_FIELDS) -> dict:
    """HSB form of every valid hex colour in ``values`` among ``fields``."""
    return {
        field: hex_to_hsb(values[field])
        for field in fields
        if is_hex_color(values.get(field))
    }
