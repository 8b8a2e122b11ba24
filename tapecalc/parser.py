"""
parser.py - Reading a ledger back from text

A ledger on the surface is a run of lines sharing one operator column:

    row        <indent><op> <gap> <value> [<gap> <description>]
    separator  <indent>C <gap> <rule chars> [<gap> <description>]
    rule       <spaces><rule chars>
    total      <indent>= <gap> <value>

LedgerGrammar compiles these four line shapes with named fields.
parse_ledger() finds the ledger around a line, checks every line between its
first row and its total against the grammar, and rebuilds a transient Ledger.
Values are de-grouped with delimit_num_check and must then be a single strict
literal; anything else is MalformedLedger.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple
import re

from .config import DEFAULT_CONFIG, TapeConfig
from .core import (
    NumericValue, Row, TextSurface, ZERO, OP_CLEAR, TOTAL_GLYPH,
    MalformedLedger, MalformedNumber,
)
from .formatter import delimit_num_check
from .ledger import Ledger
from .lexer import NumberLexer


class LineKind(Enum):
    """Shape of one line of text relative to the ledger grammar."""
    ROW = "row"
    CLEAR = "clear"
    RULE = "rule"
    TOTAL = "total"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class LedgerLine:
    """One classified line. indent is None for rule and other lines."""
    kind: LineKind
    indent: Optional[int] = None
    operator: str = ""
    value_text: str = ""
    description: str = ""


@dataclass(frozen=True, slots=True)
class LedgerRegion:
    """
    Where a ledger sits on the surface.

    Attributes:
        first_line: Line of the first row (the rule line for an empty ledger).
        total_line: Line of the total.
        operator_column: Column of the operator glyphs.
    """
    first_line: int
    total_line: int
    operator_column: int

    @property
    def rule_line(self) -> int:
        return self.total_line - 1

    @property
    def line_count(self) -> int:
        return self.total_line - self.first_line + 1

    def contains(self, line: int) -> bool:
        return self.first_line <= line <= self.total_line


@dataclass
class ParsedLedger:
    """
    Result of parse_ledger().

    Attributes:
        ledger: The rebuilt Ledger (sum recomputed from the rows).
        region: Where it was found.
        stored_total: The total as written on the surface (not validated).
        row_index: Row under the anchor line; len(rows) on the rule or total.
    """
    ledger: Ledger
    region: LedgerRegion
    stored_total: NumericValue
    row_index: int


class LedgerGrammar:
    """The four ledger line shapes, compiled for one configuration."""

    def __init__(self, config: TapeConfig = DEFAULT_CONFIG):
        self.config = config
        rule = re.escape(config.rule_char)
        self.row_pattern = re.compile(
            r"(?P<indent> *)(?P<op>%[-+*]?|[-+*/])(?P<gap> +)(?P<value>\S+)(?: +(?P<desc>\S.*?))? *"
        )
        self.clear_pattern = re.compile(
            rf"(?P<indent> *){OP_CLEAR}(?P<gap> +)(?P<rule>{rule}+)(?: +(?P<desc>\S.*?))? *"
        )
        self.rule_pattern = re.compile(rf" *(?P<rule>{rule}+) *")
        self.total_pattern = re.compile(rf"(?P<indent> *){re.escape(TOTAL_GLYPH)}(?P<gap> +)(?P<value>\S+) *")
        self._strict = NumberLexer(slack=False)

    def classify(self, text: str) -> LedgerLine:
        """Classify one line. Order matters: a rule of "-" must not read as a row."""
        m = self.rule_pattern.fullmatch(text)
        if m:
            return LedgerLine(LineKind.RULE)
        m = self.total_pattern.fullmatch(text)
        if m:
            return LedgerLine(LineKind.TOTAL, len(m.group("indent")), TOTAL_GLYPH, m.group("value"))
        m = self.clear_pattern.fullmatch(text)
        if m:
            return LedgerLine(LineKind.CLEAR, len(m.group("indent")), OP_CLEAR, "", m.group("desc") or "")
        m = self.row_pattern.fullmatch(text)
        if m:
            return LedgerLine(
                LineKind.ROW, len(m.group("indent")), m.group("op"), m.group("value"), m.group("desc") or ""
            )
        return LedgerLine(LineKind.OTHER)

    def value(self, text: str, line: int) -> NumericValue:
        """
        De-group a value field and check it is one strict literal.

        Raises:
            MalformedLedger: If it is not.
        """
        try:
            canonical = delimit_num_check(text, self.config.thousands_delimiter, self.config.decimal_point)
        except MalformedNumber as e:
            raise MalformedLedger(f"Line {line + 1}: {e}") from None
        if self._strict.fullmatch(canonical) is None:
            raise MalformedLedger(f"Line {line + 1}: {text!r} is not a plain number")
        return canonical

    def row(self, parsed: LedgerLine, line: int) -> Row:
        """Turn a classified row or separator line into a Row."""
        if parsed.kind is LineKind.CLEAR:
            return Row(OP_CLEAR, ZERO, "", parsed.description)
        value = self.value(parsed.value_text, line)
        return Row(parsed.operator, value, parsed.value_text, parsed.description)


def _is_row(parsed: LedgerLine, column: int) -> bool:
    return parsed.kind in (LineKind.ROW, LineKind.CLEAR) and parsed.indent == column


def locate(
    get_line: Callable[[int], str],
    line_count: int,
    anchor: int,
    grammar: LedgerGrammar,
) -> Tuple[LedgerRegion, List[LedgerLine]]:
    """
    Find the ledger containing line anchor.

    Returns:
        The region and the classified lines from first row to total.

    Raises:
        MalformedLedger: If anchor is not on a ledger, or the ledger is not
            closed by a rule and a total at the same operator column.
    """
    if not 0 <= anchor < line_count:
        raise MalformedLedger(f"Line {anchor + 1} is outside the text")
    here = grammar.classify(get_line(anchor))

    if here.kind is LineKind.RULE:
        below = grammar.classify(get_line(anchor + 1)) if anchor + 1 < line_count else LedgerLine(LineKind.OTHER)
        if below.kind is not LineKind.TOTAL:
            raise MalformedLedger(f"Line {anchor + 1}: rule line is not followed by a total")
        column, first = below.indent, anchor
    elif here.kind is LineKind.TOTAL:
        above = grammar.classify(get_line(anchor - 1)) if anchor > 0 else LedgerLine(LineKind.OTHER)
        if above.kind is not LineKind.RULE:
            raise MalformedLedger(f"Line {anchor + 1}: total line has no rule above it")
        column, first = here.indent, anchor - 1
    elif here.kind in (LineKind.ROW, LineKind.CLEAR):
        column, first = here.indent, anchor
    else:
        raise MalformedLedger(f"Line {anchor + 1} is not part of a ledger")

    while first > 0 and _is_row(grammar.classify(get_line(first - 1)), column):
        first -= 1

    parsed: List[LedgerLine] = []
    index = first
    while True:
        if index >= line_count:
            raise MalformedLedger(f"Ledger starting at line {first + 1} has no total line")
        current = grammar.classify(get_line(index))
        if current.kind is LineKind.RULE:
            total = grammar.classify(get_line(index + 1)) if index + 1 < line_count else LedgerLine(LineKind.OTHER)
            if total.kind is not LineKind.TOTAL or total.indent != column:
                raise MalformedLedger(f"Line {index + 2}: expected the total line")
            parsed.append(current)
            parsed.append(total)
            return LedgerRegion(first, index + 1, column), parsed
        if not _is_row(current, column):
            raise MalformedLedger(f"Line {index + 1}: expected a ledger row at column {column}")
        parsed.append(current)
        index += 1


def parse_ledger(
    surface: TextSurface,
    line: int,
    config: TapeConfig = DEFAULT_CONFIG,
) -> ParsedLedger:
    """
    Re-parse the ledger around a line into a transient Ledger.

    Args:
        surface: Text surface holding the ledger (unframed).
        line: Any line of the ledger.
        config: Display characters and rule character the ledger was written with.

    Returns:
        ParsedLedger with the rebuilt ledger and its region.

    Raises:
        MalformedLedger: If the text does not match the ledger grammar.
    """
    grammar = LedgerGrammar(config)
    region, lines = locate(surface.line, surface.line_count(), line, grammar)
    rows = [grammar.row(parsed, region.first_line + i) for i, parsed in enumerate(lines[:-2])]
    stored_total = grammar.value(lines[-1].value_text, region.total_line)

    ledger = Ledger(config, region.operator_column)
    ledger.load(rows)
    row_index = min(line - region.first_line, len(rows))
    return ParsedLedger(ledger, region, stored_total, row_index)
