"""
Round-Trip Conformance Tests

INVARIANT: Display form and canonical form convert losslessly.

    ∀ canonical v, ∀ (delimiter, point):
        delimit_num_check(delimit_num(v)) = v

and the display form groups integer digits in threes from the decimal
point, with a leading group of one to three digits.

This guarantees:
- A value written into a ledger reads back as the same number
- The lexer finds a displayed value again in running text
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from tapecalc import NumberLexer, delimit_num, delimit_num_check
from tapecalc.formatter import split_display


SEPARATORS = [(",", "."), (".", ","), ("'", ".")]


@st.composite
def canonical_values(draw):
    """Canonical NumericValue strings: [-]int[.frac][e[-]exp]."""
    sign = draw(st.sampled_from(["", "-"]))
    integer = str(draw(st.integers(min_value=0, max_value=10 ** 15)))
    text = sign + integer
    if draw(st.booleans()):
        text += "." + draw(st.text(alphabet="0123456789", min_size=1, max_size=6))
    if draw(st.integers(min_value=0, max_value=4)) == 0:
        text += "e" + draw(st.sampled_from(["", "-", "+"])) + str(draw(st.integers(min_value=0, max_value=30)))
    return text


class TestRoundTrip:

    @given(canonical_values(), st.sampled_from(SEPARATORS))
    @settings(max_examples=300)
    def test_delimit_then_check(self, value, separators):
        """
        PROPERTY: delimit_num_check inverts delimit_num.
        """
        delimiter, point = separators
        shown = delimit_num(value, delimiter, point)
        assert delimit_num_check(shown, delimiter, point) == value

    @given(canonical_values(), st.sampled_from(SEPARATORS))
    @settings(max_examples=300)
    def test_groups_of_three(self, value, separators):
        """
        PROPERTY: Integer digits are grouped in threes from the right.
        """
        delimiter, point = separators
        head, _ = split_display(value, delimiter, point)
        groups = head.lstrip("-").split(delimiter)
        assert 1 <= len(groups[0]) <= 3
        assert all(len(g) == 3 for g in groups[1:])
        assert "".join(groups) == value.lstrip("-").split(".")[0].split("e")[0]

    @given(canonical_values(), st.sampled_from(SEPARATORS[:2]))
    @settings(max_examples=200)
    def test_lexer_finds_displayed_value(self, value, separators):
        """
        PROPERTY: A displayed value in running text is found again by the slack lexer.
        """
        delimiter, point = separators
        line = f"paid {delimit_num(value, delimiter, point)} today"
        match = NumberLexer(point, delimiter, slack=True).next_match(line)
        assert match is not None
        assert match.value == value
        assert match.start == 5


class TestExamples:

    def test_known_values(self):
        assert delimit_num("-1234567.891") == "-1,234,567.891"
        assert delimit_num("1234.5", ".", ",") == "1.234,5"
        assert delimit_num("123") == "123"
        assert delimit_num("1e5") == "1e5"
