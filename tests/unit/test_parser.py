"""
test_parser.py - Unit tests for reading ledgers back from text

Tests:
- Line classification (row, separator, rule, total, other)
- parse_ledger from any line of a ledger
- Strict value checking and grammar violations (MalformedLedger)
"""

import pytest

from tapecalc import (
    LedgerGrammar, Row, TextBuffer, TapeConfig, parse_ledger,
    MalformedLedger,
)
from tapecalc.parser import LineKind

from tests.conftest import FOURTEEN_TEXT


def buffer_of(*lines: str) -> TextBuffer:
    return TextBuffer("\n".join(lines))


class TestClassify:

    @pytest.fixture
    def grammar(self, config):
        return LedgerGrammar(config)

    def test_row(self, grammar):
        line = grammar.classify("  +   1,200.50  rent for May")
        assert line.kind is LineKind.ROW
        assert (line.indent, line.operator, line.value_text, line.description) == (2, "+", "1,200.50", "rent for May")

    def test_percent_row(self, grammar):
        assert grammar.classify("%-   10").operator == "%-"

    def test_negative_value_row(self, grammar):
        line = grammar.classify("-   -5")
        assert (line.kind, line.operator, line.value_text) == (LineKind.ROW, "-", "-5")

    def test_separator(self, grammar):
        line = grammar.classify("C   ---  reset")
        assert (line.kind, line.description) == (LineKind.CLEAR, "reset")

    def test_rule_is_not_a_subtraction(self, grammar):
        assert grammar.classify("    ----").kind is LineKind.RULE

    def test_total(self, grammar):
        line = grammar.classify("=   14")
        assert (line.kind, line.value_text) == (LineKind.TOTAL, "14")

    @pytest.mark.parametrize("text", ["hello", "", "+", "=", "+10", "C  reset"])
    def test_other(self, grammar, text):
        assert grammar.classify(text).kind is LineKind.OTHER

    def test_row_from_classified_line(self, grammar):
        row = grammar.row(grammar.classify("-   1,200.50  rent"), 0)
        assert row == Row("-", "1200.50", "1,200.50", "rent")

    def test_separator_row_from_classified_line(self, grammar):
        row = grammar.row(grammar.classify("C   ---  reset"), 0)
        assert (row.operator, row.value, row.description) == ("C", "0", "reset")


class TestParseLedger:

    def test_from_a_row(self):
        buf = TextBuffer("intro\n" + FOURTEEN_TEXT + "\noutro")
        parsed = parse_ledger(buf, 2)
        assert (parsed.region.first_line, parsed.region.total_line, parsed.region.operator_column) == (1, 5, 0)
        assert [(r.operator, r.value) for r in parsed.ledger] == [("+", "10"), ("-", "3"), ("*", "2")]
        assert parsed.ledger.rows[0].description == "apples"
        assert parsed.ledger.sum == "14"
        assert parsed.row_index == 1

    @pytest.mark.parametrize("line,row_index", [(0, 0), (2, 2), (3, 3), (4, 3)])
    def test_row_index(self, fourteen_buffer, line, row_index):
        assert parse_ledger(fourteen_buffer, line).row_index == row_index

    def test_stored_total_not_validated(self):
        buf = TextBuffer(FOURTEEN_TEXT.replace("=   14", "=   99"))
        parsed = parse_ledger(buf, 0)
        assert parsed.stored_total == "99"
        assert parsed.ledger.sum == "14"

    def test_memory_starts_empty(self, fourteen_buffer):
        assert parse_ledger(fourteen_buffer, 0).ledger.memory == "0"

    def test_empty_ledger(self):
        parsed = parse_ledger(buffer_of("    -", "=   0"), 0)
        assert len(parsed.ledger) == 0
        assert parsed.region.line_count == 2

    def test_separator_rows(self):
        parsed = parse_ledger(buffer_of("+   5", "C   -  reset", "+   2", "    -", "=   2"), 0)
        assert [r.operator for r in parsed.ledger] == ["+", "C", "+"]
        assert parsed.ledger.sum == "2"

    def test_indented(self):
        parsed = parse_ledger(buffer_of("notes", "   +   1,234", "   -       1", "       -----", "   =   1,233"), 1)
        assert parsed.region.operator_column == 3
        assert parsed.ledger.rows[0].value == "1234"
        assert parsed.ledger.rows[0].display == "1,234"

    def test_decimal_comma(self, comma_config):
        parsed = parse_ledger(buffer_of("+   1.234,5", "    -------", "=   1.234,5"), 0, comma_config)
        assert parsed.ledger.sum == "1234.5"


class TestMalformed:

    def test_bad_grouping(self):
        with pytest.raises(MalformedLedger):
            parse_ledger(buffer_of("+   1,0", "    ---", "=   10"), 0)

    def test_value_with_junk(self):
        with pytest.raises(MalformedLedger):
            parse_ledger(buffer_of("+   10x", "    ---", "=   10"), 0)

    def test_missing_total(self):
        with pytest.raises(MalformedLedger):
            parse_ledger(buffer_of("+  10", "+  20", "foo"), 0)

    def test_runs_off_the_end(self):
        with pytest.raises(MalformedLedger):
            parse_ledger(buffer_of("+  10", "+  20"), 1)

    def test_not_a_ledger_line(self):
        with pytest.raises(MalformedLedger):
            parse_ledger(buffer_of("hello"), 0)

    def test_mixed_operator_columns(self):
        with pytest.raises(MalformedLedger):
            parse_ledger(buffer_of("  +  10", "+  20", "   --", "=  30"), 0)

    def test_total_at_other_column(self):
        with pytest.raises(MalformedLedger):
            parse_ledger(buffer_of("+  10", "   --", " =  10"), 0)

    def test_rule_without_total(self):
        with pytest.raises(MalformedLedger):
            parse_ledger(buffer_of("+  10", "   --", "text"), 1)

    def test_line_outside_surface(self, fourteen_buffer):
        with pytest.raises(MalformedLedger):
            parse_ledger(fourteen_buffer, 40)
