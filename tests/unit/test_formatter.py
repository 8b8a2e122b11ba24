"""
test_formatter.py - Unit tests for thousands grouping

Tests:
- delimit_num: grouping of the integer part only
- delimit_num_check: strict group validation
- canonicalize_slack: fallback to the longest valid grouped prefix
"""

import pytest

from tapecalc import MalformedNumber, delimit_num, delimit_num_check, canonicalize_slack
from tapecalc.formatter import group_digits, split_display


class TestDelimit:

    @pytest.mark.parametrize("value,expected", [
        ("1234567", "1,234,567"),
        ("-1234567.891", "-1,234,567.891"),
        ("123", "123"),
        ("1234.5678", "1,234.5678"),
        ("1e5", "1e5"),
        ("12345e-3", "12,345e-3"),
        ("0.5", "0.5"),
    ])
    def test_delimit(self, value, expected):
        assert delimit_num(value) == expected

    def test_display_characters(self):
        assert delimit_num("1234.5", ".", ",") == "1.234,5"

    def test_group_digits(self):
        assert group_digits("1") == "1"
        assert group_digits("123456") == "123,456"
        assert group_digits("1234", " ") == "1 234"

    def test_split_display(self):
        assert split_display("-1234.5") == ("-1,234", ".5")
        assert split_display("7") == ("7", "")
        assert split_display("2e-3") == ("2", "e-3")

    def test_non_canonical_rejected(self):
        with pytest.raises(MalformedNumber):
            delimit_num("1,234")


class TestDelimitCheck:

    @pytest.mark.parametrize("text,expected", [
        ("1,234,567", "1234567"),
        ("-1,234.50", "-1234.50"),
        ("1234", "1234"),
        ("+5", "+5"),
        ("999,999.999", "999999.999"),
    ])
    def test_valid(self, text, expected):
        assert delimit_num_check(text) == expected

    @pytest.mark.parametrize("text", ["1,23", "12,3456", "1234,567", ",123", "abc", "1,,234", ""])
    def test_invalid(self, text):
        with pytest.raises(MalformedNumber):
            delimit_num_check(text)

    def test_decimal_comma(self):
        assert delimit_num_check("1.234,5", ".", ",") == "1234.5"


class TestSlackFallback:
    """A malformed grouped literal falls back to its longest valid prefix."""

    def test_valid_literal_taken_whole(self):
        assert canonicalize_slack("1,234.5") == ("1234.5", 7)

    def test_short_last_group(self):
        assert canonicalize_slack("1,234,56") == ("1234", 5)

    def test_two_digit_group(self):
        assert canonicalize_slack("10,20") == ("10", 2)

    def test_fraction_dropped_with_bad_tail(self):
        assert canonicalize_slack("1,234,56.78") == ("1234", 5)

    def test_sign_kept(self):
        assert canonicalize_slack("-1,23") == ("-1", 2)

    def test_long_leading_group_rejected(self):
        with pytest.raises(MalformedNumber):
            canonicalize_slack("1234,567")
