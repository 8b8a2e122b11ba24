"""
Frame Inverse Conformance Tests

INVARIANT: Stripping a frame is the inverse of drawing it.

    ∀ text T, ∀ ledger L in T with operator column ≥ 1:
        strip(draw(T, L)) = T

for both the careful and the sloppy strip strategy. Border lines that were
inserted are removed again; border lines that were written over existing
text give that text back.

This guarantees:
- Framing is purely decorative
- Edit and delete can unframe, rewrite and reframe without drift
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from tapecalc import (
    FrameRenderer, LayoutEngine, Position, ScriptedInput, TapeConfig, TapeController, TextBuffer,
)

from tests.conftest import make_ledger


surrounding = st.one_of(
    st.just(""),
    st.text(alphabet="ab ", max_size=3).map(str.rstrip),
    st.text(alphabet="ab ", max_size=30).map(str.rstrip),
)
amounts = st.lists(
    st.tuples(st.sampled_from(["+", "-", "*"]), st.integers(min_value=0, max_value=99999).map(str)),
    min_size=0, max_size=5,
)


def ledger_text(rows, column):
    return LayoutEngine().render(make_ledger(rows, column=column))


class TestFrameInverseProperties:

    @given(amounts, st.integers(min_value=1, max_value=6), surrounding, surrounding, st.booleans())
    @settings(max_examples=300)
    def test_strip_undoes_draw(self, rows, column, above, below, careful):
        """
        PROPERTY: draw then strip gives back the exact text.
        """
        body = ledger_text(rows, column)
        buf = TextBuffer("\n".join([above] + body + [below]))
        before = buf.text
        renderer = FrameRenderer()
        box = renderer.draw(buf, 1, len(body), column - 1, LayoutEngine.width(body))
        renderer.strip(buf, Position(box.first_content_line, column), careful=careful)
        assert buf.text == before

    @given(amounts, st.integers(min_value=1, max_value=6), surrounding, surrounding)
    @settings(max_examples=200)
    def test_controller_round_trip(self, rows, column, above, below):
        """
        PROPERTY: draw_frame then strip_frame through the controller restores the text.
        """
        body = ledger_text(rows, column)
        text = "\n".join([above] + body + [below])
        buf = TextBuffer(text, Position(1, column))
        tape = TapeController(buf)
        tape.draw_frame()
        tape.strip_frame()
        assert buf.text == text

    @given(amounts, st.integers(min_value=1, max_value=6), st.booleans())
    @settings(max_examples=100)
    def test_edit_keeps_single_frame(self, rows, column, careful):
        """
        PROPERTY: Editing a framed ledger leaves exactly one frame around it.
        """
        config = TapeConfig(careful_strip=careful)
        body = ledger_text(rows, column)
        buf = TextBuffer("\n".join(body), Position(0, column))
        TapeController(buf, config).draw_frame()
        buf.move_cursor(Position(1, column))
        TapeController(buf, config, ScriptedInput(["7"])).edit_ledger()
        corners = sum(line.count("┌") for line in buf.lines)
        assert corners == 1
        assert buf.line(0).lstrip().startswith("┌")
        assert buf.line(buf.line_count() - 1).lstrip().startswith("└")
