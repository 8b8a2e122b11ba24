"""
Alignment Conformance Tests

INVARIANT: A written ledger is aligned and reads back as the same ledger.

    ∀ ledger L:
        every value field of render(L) ends on one column
        parse(render(L)) has the rows and sum of L

and a ledger painted row by row during a session is identical to the same
ledger rendered in one go.

This guarantees:
- Decimal points line up in every ledger written
- Edits never depend on anything but the text
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from tapecalc import (
    LayoutEngine, ScriptedInput, TapeConfig, TapeController, TextBuffer, delimit_num, parse_ledger,
)

from tests.conftest import make_ledger


@st.composite
def values(draw):
    integer = str(draw(st.integers(min_value=0, max_value=10 ** 7)))
    if draw(st.booleans()):
        integer += "." + draw(st.text(alphabet="0123456789", min_size=1, max_size=3))
    return integer


descriptions = st.text(alphabet="abcxyz ", max_size=12).map(lambda s: " ".join(s.split()))
rows_strategy = st.lists(
    st.tuples(st.sampled_from(["+", "-", "*", "%+", "%-"]), values(), descriptions),
    min_size=1, max_size=6,
)
configs = st.sampled_from([
    TapeConfig(),
    TapeConfig(decimal_point=",", thousands_delimiter="."),
    TapeConfig(operator_gap=1, description_gap=3),
])


class TestAlignmentProperties:

    @given(rows_strategy, configs, st.integers(min_value=0, max_value=5))
    @settings(max_examples=200)
    def test_integer_digits_end_on_one_column(self, rows, config, column):
        """
        PROPERTY: The last integer digit of every value, and of the total, is on one column.
        """
        ledger = make_ledger(rows, config, column)
        layout = LayoutEngine(config)
        lines = layout.render(ledger)
        metrics = layout.metrics_for(ledger)
        start = layout.value_start(metrics)
        int_end = start + metrics.max_int_len
        field_lines = lines[:-2] + lines[-1:]
        for line in field_lines:
            assert line[int_end - 1].isdigit()
            if len(line) > int_end:
                assert not line[int_end].isdigit()
        assert lines[-2].strip() == config.rule_char * LayoutEngine.field_width(metrics)
        assert lines[-2].index(config.rule_char) == start

    @given(rows_strategy, configs, st.integers(min_value=0, max_value=5))
    @settings(max_examples=200)
    def test_descriptions_start_on_one_column(self, rows, config, column):
        """
        PROPERTY: Every description starts on the same column.
        """
        ledger = make_ledger(rows, config, column)
        layout = LayoutEngine(config)
        lines = layout.render(ledger)
        expected = layout.description_start(layout.metrics_for(ledger))
        for line, (_, _, description) in zip(lines, rows):
            if description:
                assert line.index(description, expected - 1) == expected

    @given(rows_strategy, configs, st.integers(min_value=0, max_value=5))
    @settings(max_examples=200)
    def test_parse_reads_back(self, rows, config, column):
        """
        PROPERTY: Parsing a rendered ledger gives back its rows and sum.
        """
        ledger = make_ledger(rows, config, column)
        buf = TextBuffer("\n".join(LayoutEngine(config).render(ledger)))
        parsed = parse_ledger(buf, 0, config)
        assert [(r.operator, r.value, r.description) for r in parsed.ledger] == \
            [(r.operator, r.value, r.description) for r in ledger]
        assert parsed.ledger.sum == ledger.sum
        assert parsed.stored_total == ledger.sum
        assert parsed.region.operator_column == column

    @given(st.lists(values(), min_size=0, max_size=6), configs)
    @settings(max_examples=100)
    def test_session_paint_matches_render(self, inputs, config):
        """
        PROPERTY: A ledger built row by row is the ledger rendered in one go.
        """
        buf = TextBuffer("")
        shown = [delimit_num(value, config.thousands_delimiter, config.decimal_point) for value in inputs]
        TapeController(buf, config, ScriptedInput(shown)).build_ledger()
        reference = make_ledger([("+", value) for value in inputs], config)
        assert buf.text == "\n".join(LayoutEngine(config).render(reference))


class TestRepaint:

    def test_widening_row_repaints_all(self):
        buf = TextBuffer("")
        TapeController(buf, input_source=ScriptedInput(["5", "12345.67"])).build_ledger()
        assert buf.lines == [
            "+        5",
            "+   12,345.67",
            "    ---------",
            "=   12,350.67",
        ]
