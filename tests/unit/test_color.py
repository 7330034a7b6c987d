"""Unit tests for color conversion and CIEDE2000 distance."""

import pytest

from lint_roller.color import (
    LAB,
    composite_on_white,
    confidence_for_delta_e,
    delta_e_2000,
    delta_e_description,
    find_closest_colors,
    hex_to_lab,
    hex_to_rgb,
    hex_to_rgba,
    rgb_to_hex,
    round_half_up,
)
from lint_roller.document.models import RGBA
from lint_roller.matching.models import ConfidenceTier


class TestHexConversion:
    """Test hex <-> RGBA conversion."""

    def test_opaque_color_has_six_digits(self):
        """Test opaque colors serialize as 6-digit hex."""
        assert rgb_to_hex(RGBA(1, 1, 1)) == "#ffffff"
        assert rgb_to_hex(RGBA(0.2, 1 / 3, 1)) == "#3355ff"

    def test_translucent_color_has_alpha_byte(self):
        """Alpha below 1 is appended as a fourth byte."""
        assert rgb_to_hex(RGBA(1, 1, 1, 0.5)) == "#ffffff80"

    def test_round_half_up(self):
        """Test channel rounding goes half up."""
        assert round_half_up(127.5) == 128
        assert round_half_up(0.49) == 0

    def test_hex_to_rgba_round_trips_channels(self):
        """Test parsing and formatting a hex keeps its channels."""
        color = hex_to_rgba("#3355FF")
        assert color is not None
        assert rgb_to_hex(color) == "#3355ff"

    def test_short_hex_expands(self):
        """Test 3-digit hex expands to full channels."""
        assert hex_to_rgb("#fff") == (255, 255, 255)

    def test_eight_digit_hex_alpha(self):
        """Test the alpha byte of 8-digit hex becomes the alpha channel."""
        color = hex_to_rgba("#00000080")
        assert color is not None
        assert color.a == pytest.approx(128 / 255)

    @pytest.mark.parametrize("bad", ["", "#12", "#gggggg", "#12345"])
    def test_invalid_hex(self, bad):
        """Test malformed hex parses to None."""
        assert hex_to_rgba(bad) is None
        assert hex_to_rgb(bad) is None

    def test_composite_on_white(self):
        """Half-transparent black flattens to mid gray."""
        assert composite_on_white("#00000080") == "#7f7f7f"
        assert composite_on_white("#ABCDEF") == "#abcdef"


class TestDeltaE:
    """Test perceptual distance."""

    def test_identical_colors(self):
        """Test identical colors have zero distance."""
        lab = hex_to_lab("#3355ff")
        assert delta_e_2000(lab, lab) == pytest.approx(0.0)

    def test_reference_pair(self):
        """Published CIEDE2000 test pair (Sharma et al., pair 1)."""
        distance = delta_e_2000(LAB(50.0, 2.6772, -79.7751), LAB(50.0, 0.0, -82.7485))
        assert distance == pytest.approx(2.0425, abs=1e-4)

    def test_black_white_is_far(self):
        """Test black and white are far apart."""
        assert delta_e_2000(hex_to_lab("#000000"), hex_to_lab("#ffffff")) > 90

    def test_find_closest_exact_first(self):
        """Test exact matches sort before near ones."""
        values = {"#3355ff": "color.blue.500", "#3356ff": "color.blue.501", "#ff0000": "color.red"}
        matches = find_closest_colors("#3355ff", values)

        assert matches[0].token_path == "color.blue.500"
        assert matches[0].is_exact
        assert [m.token_path for m in matches] == ["color.blue.500", "color.blue.501"]

    def test_find_closest_ignores_target_alpha(self):
        """Test the target's alpha byte is ignored when comparing."""
        matches = find_closest_colors("#3355ff80", {"#3355ff": "color.blue.500"})
        assert matches and matches[0].is_exact

    def test_descriptions_and_confidence(self):
        """Test distance descriptions and confidence tiers."""
        assert delta_e_description(0) == "exact match"
        assert delta_e_description(1.5) == "barely perceptible difference"
        assert confidence_for_delta_e(0) is ConfidenceTier.EXACT
        assert confidence_for_delta_e(1.5) is ConfidenceTier.CLOSE
        assert confidence_for_delta_e(6) is ConfidenceTier.APPROXIMATE
        assert confidence_for_delta_e(0, has_alpha=True) is ConfidenceTier.APPROXIMATE
