"""
Tests for colour validation and HSB conversion.
"""
import pytest

from optin.utils.colors import (
    hex_to_hsb,
    hsb_to_hex,
    is_hex_color,
    normalize_hex,
    picker_colors,
    picker_value,
)


class TestHexValidation:
    """Tests for is_hex_color and normalize_hex."""

    @pytest.mark.parametrize('value', ['#FFF', '#ffffff', '#1a2B3c'])
    def test_valid(self, value):
        assert is_hex_color(value)

    @pytest.mark.parametrize('value', ['FFFFFF', '#FFFF', '#GGGGGG', '', None, 123, 'red'])
    def test_invalid(self, value):
        assert not is_hex_color(value)

    def test_normalize_expands_shorthand(self):
        assert normalize_hex('#abc') == '#AABBCC'

    def test_normalize_uppercases(self):
        assert normalize_hex('#1a2b3c') == '#1A2B3C'

    def test_normalize_invalid(self):
        assert normalize_hex('blue') is None


class TestHsb:
    """Tests for the colour picker conversions."""

    def test_red(self):
        assert hex_to_hsb('#FF0000') == {'hue': 0, 'saturation': 1.0, 'brightness': 1.0}

    def test_blue(self):
        assert hex_to_hsb('#0000FF')['hue'] == 240

    def test_black_and_white(self):
        assert hex_to_hsb('#000000') == {'hue': 0, 'saturation': 0, 'brightness': 0}
        assert hex_to_hsb('#FFFFFF')['saturation'] == 0

    def test_invalid_hex(self):
        with pytest.raises(ValueError):
            hex_to_hsb('#12')

    def test_to_hex(self):
        assert hsb_to_hex(0, 1, 1) == '#FF0000'
        assert hsb_to_hex(240, 1, 1) == '#0000FF'
        assert hsb_to_hex(0, 0, 1) == '#FFFFFF'
        assert hsb_to_hex(0, 0, 0) == '#000000'

    @pytest.mark.parametrize('value', ['#FF0000', '#00FF00', '#FFFFFF', '#000000'])
    def test_pure_colours_survive_conversion(self, value):
        hsb = hex_to_hsb(value)
        assert hsb_to_hex(hsb['hue'], hsb['saturation'], hsb['brightness']) == value


class TestPicker:
    """Tests for picker_value and picker_colors."""

    def test_hsb_dict_becomes_hex(self):
        assert picker_value({'hue': 240, 'saturation': 1, 'brightness': 1}) == '#0000FF'

    def test_other_values_unchanged(self):
        assert picker_value('#abc') == '#abc'
        assert picker_value({'hue': 1}) == {'hue': 1}

    def test_non_numeric_hsb(self):
        with pytest.raises(ValueError):
            picker_value({'hue': 'red', 'saturation': 1, 'brightness': 1})

    def test_picker_colors_skips_non_colours(self):
        colours = picker_colors({'popupBackground': '#FF0000', 'textHeading': '', 'logoUrl': '#FFFFFF'})

        assert colours == {'popupBackground': {'hue': 0, 'saturation': 1.0, 'brightness': 1.0}}
