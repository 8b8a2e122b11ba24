"""
test_config.py - Unit tests for TapeConfig validation
"""

import pytest

from tapecalc import DEFAULT_CONFIG, FrameGlyphs, TapeConfig


class TestDefaults:

    def test_values(self):
        config = TapeConfig()
        assert (config.operator_gap, config.description_gap) == (2, 2)
        assert config.tax_rate == "0.08875"
        assert (config.decimal_point, config.thousands_delimiter) == (".", ",")
        assert config.auto_realign and config.careful_strip
        assert not config.draw_frames and not config.verbose
        assert DEFAULT_CONFIG == config

    def test_frozen(self):
        with pytest.raises(Exception):
            TapeConfig().verbose = True

    def test_with_overrides_validates(self):
        assert TapeConfig().with_overrides(draw_frames=True).draw_frames
        with pytest.raises(ValueError):
            TapeConfig().with_overrides(tax_rate="2")


class TestValidation:

    @pytest.mark.parametrize("gap", [0, -1, 1.5])
    def test_gaps_positive_integers(self, gap):
        with pytest.raises(ValueError):
            TapeConfig(operator_gap=gap)
        with pytest.raises(ValueError):
            TapeConfig(description_gap=gap)

    @pytest.mark.parametrize("rate", ["0", "1", "-0.1", "abc", "NaN", "Infinity"])
    def test_tax_rate_range(self, rate):
        with pytest.raises(ValueError):
            TapeConfig(tax_rate=rate)

    @pytest.mark.parametrize("changes", [
        {"decimal_point": ","},
        {"decimal_point": "", "thousands_delimiter": "'"},
        {"decimal_point": "..", "thousands_delimiter": "'"},
        {"thousands_delimiter": "5"},
        {"thousands_delimiter": "e"},
        {"thousands_delimiter": " "},
        {"rule_char": "=="},
    ])
    def test_display_characters(self, changes):
        with pytest.raises(ValueError):
            TapeConfig(**changes)

    def test_apostrophe_delimiter(self):
        assert TapeConfig(thousands_delimiter="'").thousands_delimiter == "'"

    @pytest.mark.parametrize("glyphs", [
        {"vertical": "|", "horizontal": "-"},
        {"top_left": "+"},
        {"bottom_right": "="},
        {"horizontal": ","},
    ])
    def test_glyphs_cannot_collide_with_ledger(self, glyphs):
        with pytest.raises(ValueError):
            TapeConfig(frame_glyphs=FrameGlyphs(**glyphs))

    def test_glyphs_single_characters(self):
        with pytest.raises(ValueError):
            FrameGlyphs(vertical="||")
