"""
controller.py - Tape operations on a text surface

TapeController is the entry point for every user-facing operation:

    controller = TapeController(buffer, config, input_source)
    controller.scan_and_sum()      # total a column of numbers near the cursor
    controller.build_ledger()      # prompt for rows and write a new ledger
    controller.edit_ledger()       # prompt for rows to insert before the cursor row
    controller.delete_rows(2)      # remove two rows starting at the cursor row
    controller.draw_frame()        # box the ledger under the cursor
    controller.strip_frame()       # remove the box under the cursor

Each operation runs inside one surface.atomic() bracket. If anything raises,
every edit the operation made is rolled back before the error reaches the
caller, so a failed operation leaves the text exactly as it was.

Existing ledgers are never trusted: edit and delete re-parse the text,
mutate a transient Ledger, and write the whole ledger back.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .config import DEFAULT_CONFIG, TapeConfig
from .core import (
    InputSession, InputSource, NumericValue, Position, Row, TextSurface, OP_ADD,
    FramingGeometryError, RangeExceedsLedger, TapeError,
)
from .frame import FrameBox, FrameRenderer
from .layout import LayoutEngine
from .ledger import Ledger
from .lexer import NumberLexer
from .operators import OperatorInterpreter
from .parser import LedgerRegion, parse_ledger
from .session import (
    Abort, AppendRow, Phase, RejectInput, TapeState,
    prompt_context, transition,
)
from .surface import insert_lines, replace_lines


@dataclass(frozen=True, slots=True)
class TapeResult:
    """
    Outcome of one controller operation.

    Attributes:
        operation: Name of the operation.
        sum: Total of the ledger written (None for strip_frame).
        rows: Number of ledger rows on the surface afterwards.
        region: Where the ledger now sits (None when no ledger was written).
        frame: The frame drawn or stripped, if any.
    """
    operation: str
    sum: Optional[NumericValue]
    rows: int
    region: Optional[LedgerRegion] = None
    frame: Optional[FrameBox] = None


class LedgerWriter:
    """
    Keeps one ledger's lines on the surface in step with the Ledger.

    paint() rewrites the lines the writer owns. replace_lines() leaves lines
    that did not change alone, so appending a row that keeps the metrics
    inserts one line, while a row that widens a column repaints every row.
    """

    def __init__(self, surface: TextSurface, layout: LayoutEngine, first_line: int, owned: int):
        self.surface = surface
        self.layout = layout
        self.first_line = first_line
        self.owned = owned

    def paint(self, ledger: Ledger, with_total: bool) -> LedgerRegion:
        lines = self.layout.render(ledger, with_total) or [""]
        replace_lines(self.surface, self.first_line, self.owned, lines)
        self.owned = len(lines)
        return LedgerRegion(self.first_line, self.first_line + self.owned - 1, ledger.operator_column)


class TapeController:
    """
    Runs tape operations against one text surface.

    Args:
        surface: Text surface holding the ledgers.
        config: Read-only configuration, captured for the controller's lifetime.
        input_source: Where build and edit get values and descriptions.
    """

    def __init__(
        self,
        surface: TextSurface,
        config: TapeConfig = DEFAULT_CONFIG,
        input_source: Optional[InputSource] = None,
    ):
        self.surface = surface
        self.config = config
        self.input_source = input_source
        self.layout = LayoutEngine(config)
        self.frames = FrameRenderer(config.frame_glyphs)
        self.interpreter = OperatorInterpreter.for_config(config)
        self.lexer = NumberLexer.for_config(config, slack=True)

    # ========================================================================
    # PLUMBING
    # ========================================================================

    def _run(self, name: str, operation: Callable[[], TapeResult]) -> TapeResult:
        try:
            with self.surface.atomic():
                result = operation()
        except TapeError as e:
            if self.config.verbose:
                print(f"✗ REJECTED: {name}: {e}")
            raise
        if self.config.verbose:
            total = "-" if result.sum is None else self.interpreter.display(result.sum)
            print(f"✓ APPLIED: {name} sum={total} rows={result.rows}")
        return result

    def _frame(self, region: LedgerRegion) -> FrameBox:
        lines = [self.surface.line(i) for i in range(region.first_line, region.total_line + 1)]
        right = self.layout.width(lines)
        return self.frames.draw(
            self.surface, region.first_line, region.total_line, region.operator_column - 1, right
        )

    def _shifted(self, region: LedgerRegion, box: Optional[FrameBox]) -> LedgerRegion:
        if box is None or not box.inserted_top:
            return region
        return LedgerRegion(region.first_line + 1, region.total_line + 1, region.operator_column)

    def _finish(
        self,
        name: str,
        ledger: Ledger,
        region: LedgerRegion,
        framed: bool,
        cursor_row: int,
    ) -> TapeResult:
        box = self._frame(region) if framed else None
        region = self._shifted(region, box)
        line = min(region.first_line + cursor_row, region.total_line)
        self.surface.move_cursor(Position(line, region.operator_column))
        return TapeResult(name, ledger.sum, len(ledger), region, box)

    def _find_frame(self, position: Position) -> Optional[FrameBox]:
        try:
            return self.frames.find(self.surface, position)
        except FramingGeometryError:
            return None

    def _unframe(self) -> Tuple[int, Optional[FrameBox]]:
        """
        Strip the frame under the cursor, if there is one.

        Returns:
            (line of the cursor inside the unframed ledger, stripped box or None)
        """
        cursor = self.surface.cursor
        if self._find_frame(cursor) is None:
            return cursor.line, None
        box = self.frames.strip(self.surface, cursor, careful=self.config.careful_strip)
        first = box.top if box.inserted_top else box.top + 1
        last = first + (box.bottom - box.top - 2)
        line = cursor.line - 1 if box.inserted_top else cursor.line
        return min(max(line, first), last), box

    def _prompt(
        self,
        start_sum: NumericValue,
        on_row: Callable[[AppendRow], None],
        first_row: int,
    ) -> TapeState:
        """Drive the session state machine until it finishes."""
        if self.input_source is None:
            raise TapeError("No input source configured")
        session = InputSession()
        state = TapeState.start(start_sum)
        while not state.finished:
            context = prompt_context(state, self.interpreter, session, first_row)
            if state.phase is Phase.AWAITING_VALUE:
                text = self.input_source.request_value(context)
                session.remember_value(text)
            else:
                text = self.input_source.request_description(context, state.pending.description)
                session.remember_description(text)
            state, effects = transition(state, text, self.interpreter)
            for effect in effects:
                if isinstance(effect, AppendRow):
                    on_row(effect)
                elif isinstance(effect, RejectInput) and self.config.verbose:
                    print(f"✗ REJECTED: input {effect.text!r}: {effect.reason}")
                elif isinstance(effect, Abort):
                    raise effect.error
        return state

    # ========================================================================
    # OPERATIONS
    # ========================================================================

    def scan_and_sum(self) -> TapeResult:
        """
        Total the column of numbers around the cursor.

        The block is every contiguous line around the cursor line that holds
        a number; on each line the number nearest the cursor column is used.

        Raises:
            TapeError: If the cursor line holds no number.
        """
        return self._run("scan_and_sum", self._scan_and_sum)

    def _scan_and_sum(self) -> TapeResult:
        cursor = self.surface.cursor
        if self.lexer.closest(self.surface.line(cursor.line), cursor.column) is None:
            raise TapeError(f"No number near the cursor on line {cursor.line + 1}")

        first = cursor.line
        while first > 0 and self.lexer.closest(self.surface.line(first - 1), cursor.column) is not None:
            first -= 1
        last = cursor.line
        while last + 1 < self.surface.line_count() and self.lexer.closest(self.surface.line(last + 1), cursor.column) is not None:
            last += 1

        texts = [self.surface.line(i) for i in range(first, last + 1)]
        found = [self.lexer.closest(text, cursor.column) for text in texts]

        indent = min(len(text) - len(text.lstrip(" ")) for text in texts)
        if self.config.draw_frames:
            indent = max(indent, 1)
        ledger = Ledger(self.config, indent)
        for text, match in zip(texts, found):
            description = " ".join((text[:match.start] + " " + text[match.end:]).split())
            ledger.append_row(OP_ADD, match.value, description)

        if not self.config.auto_realign:
            self._append_total(last, found, ledger.sum)
            self.surface.move_cursor(Position(last + 2, 0))
            return TapeResult("scan_and_sum", ledger.sum, len(ledger))

        writer = LedgerWriter(self.surface, self.layout, first, len(texts))
        region = writer.paint(ledger, with_total=True)
        return self._finish("scan_and_sum", ledger, region, self.config.draw_frames, len(ledger) + 1)

    def _append_total(self, last: int, found: List, total: NumericValue) -> None:
        """Write a rule and a total under an untouched column of numbers."""
        value = self.interpreter.display(total)
        width = max([len(value)] + [len(m.text) for m in found])
        right = max([m.end for m in found] + [width + 2])
        rule = " " * (right - width) + self.config.rule_char * width
        total_line = "=" + value.rjust(right - 1)
        insert_lines(self.surface, last + 1, [rule, total_line])

    def build_ledger(self) -> TapeResult:
        """
        Prompt for rows and write a new ledger at the cursor.

        A blank cursor line is replaced; otherwise the ledger starts on a new
        line below it. Rows are painted as they are accepted and the rule and
        total are written when the session ends.

        Raises:
            DivisionByZero: If an input divides by zero. Nothing is written.
        """
        return self._run("build_ledger", self._build_ledger)

    def _build_ledger(self) -> TapeResult:
        cursor = self.surface.cursor
        column = cursor.column
        if self.config.draw_frames:
            column = max(column, 1)
        first = cursor.line
        if self.surface.line(first).strip():
            first += 1
            insert_lines(self.surface, first, [""])
        elif self.surface.line(first):
            replace_lines(self.surface, first, 1, [""])

        ledger = Ledger(self.config, column)
        writer = LedgerWriter(self.surface, self.layout, first, 1)

        def on_row(effect: AppendRow) -> None:
            ledger.append_step(effect.step, effect.description)
            writer.paint(ledger, with_total=False)

        self._prompt(ledger.sum, on_row, first_row=1)
        region = writer.paint(ledger, with_total=True)
        return self._finish("build_ledger", ledger, region, self.config.draw_frames, len(ledger) + 1)

    def edit_ledger(self) -> TapeResult:
        """
        Prompt for rows and insert them before the cursor row.

        With the cursor on the rule or total line, rows are appended. A frame
        around the ledger is removed first and drawn again afterwards.

        Raises:
            MalformedLedger: If the cursor is not on a well-formed ledger.
            DivisionByZero: If an input divides by zero. Nothing is changed.
        """
        return self._run("edit_ledger", self._edit_ledger)

    def _edit_ledger(self) -> TapeResult:
        line, box = self._unframe()
        parsed = parse_ledger(self.surface, line, self.config)
        ledger, index = parsed.ledger, parsed.row_index
        writer = LedgerWriter(self.surface, self.layout, parsed.region.first_line, parsed.region.line_count)
        inserted = []

        def on_row(effect: AppendRow) -> None:
            row = Row(effect.step.row.operator, effect.step.row.value, "", effect.description)
            ledger.insert_rows(index + len(inserted), [row])
            inserted.append(row)
            writer.paint(ledger, with_total=True)

        self._prompt(ledger.fold_to(index), on_row, first_row=index + 1)
        region = writer.paint(ledger, with_total=True)
        return self._finish("edit_ledger", ledger, region, box is not None, index + len(inserted))

    def delete_rows(self, count: int) -> TapeResult:
        """
        Remove count rows starting at the cursor row and rewrite the ledger.

        Raises:
            RangeExceedsLedger: If fewer than count rows remain above the
                total line. The surface is left unchanged.
            MalformedLedger: If the cursor is not on a well-formed ledger.
        """
        return self._run("delete_rows", lambda: self._delete_rows(count))

    def _delete_rows(self, count: int) -> TapeResult:
        line, box = self._unframe()
        parsed = parse_ledger(self.surface, line, self.config)
        ledger, index = parsed.ledger, parsed.row_index
        if index >= len(ledger):
            raise RangeExceedsLedger("The cursor is on the total, not on a row")
        ledger.delete_rows(index, count)
        writer = LedgerWriter(self.surface, self.layout, parsed.region.first_line, parsed.region.line_count)
        region = writer.paint(ledger, with_total=True)
        return self._finish("delete_rows", ledger, region, box is not None, index)

    def draw_frame(self) -> TapeResult:
        """
        Box the ledger under the cursor.

        Raises:
            FramingGeometryError: If the ledger is already framed, starts at
                column 0, or the frame would overwrite text.
            MalformedLedger: If the cursor is not on a well-formed ledger.
        """
        return self._run("draw_frame", self._draw_frame)

    def _draw_frame(self) -> TapeResult:
        cursor = self.surface.cursor
        if self._find_frame(cursor) is not None:
            raise FramingGeometryError(f"Line {cursor.line + 1} is already framed")
        parsed = parse_ledger(self.surface, cursor.line, self.config)
        if parsed.region.operator_column == 0:
            raise FramingGeometryError("No room for the left edge: the ledger starts at column 0")
        return self._finish(
            "draw_frame", parsed.ledger, parsed.region, True, cursor.line - parsed.region.first_line
        )

    def strip_frame(self) -> TapeResult:
        """
        Remove the frame under the cursor.

        Raises:
            FramingGeometryError: If no frame is found.
        """
        return self._run("strip_frame", self._strip_frame)

    def _strip_frame(self) -> TapeResult:
        cursor = self.surface.cursor
        box = self.frames.strip(self.surface, cursor, careful=self.config.careful_strip)
        line = cursor.line - 1 if box.inserted_top and cursor.line > box.top else cursor.line
        self.surface.move_cursor(Position(min(line, self.surface.line_count() - 1), cursor.column))
        rows = box.bottom - box.top - 3
        return TapeResult("strip_frame", None, max(rows, 0), None, box)
