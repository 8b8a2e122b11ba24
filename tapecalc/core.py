"""
Core types and protocols for the tape calculator.

This module provides the foundational data structures and protocols:
1. Constants: operator glyphs, control tokens, layout widths
2. Type aliases: NumericValue, DisplayValue
3. Protocols: TextSurface (the host text grid) and InputSource (the prompter)
4. Exceptions: TapeError and the domain-specific error types
5. Immutable data structures: Position, Row, Metrics, PromptContext, InputSession

Nothing in this module touches a text surface. Mutation happens only in
ledger.py (the in-memory tape) and controller.py (the text surface).
"""

from __future__ import annotations
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, runtime_checkable


# ============================================================================
# CONSTANTS
# ============================================================================

# Canonical characters used inside NumericValue strings, whatever the
# configured display characters are.
CANONICAL_POINT = "."
CANONICAL_EXPONENT = "e"
ZERO = "0"

# Width of the operator field. Every operator glyph fits in two columns.
OP_WIDTH = 2

# Operators a stored row may carry.
OP_ADD = "+"
OP_SUB = "-"
OP_MUL = "*"
OP_DIV = "/"
OP_PERCENT = "%"
OP_PERCENT_ADD = "%+"
OP_PERCENT_SUB = "%-"
OP_PERCENT_MUL = "%*"
OP_CLEAR = "C"

ROW_OPERATORS = frozenset({
    OP_ADD, OP_SUB, OP_MUL, OP_DIV,
    OP_PERCENT, OP_PERCENT_ADD, OP_PERCENT_SUB, OP_PERCENT_MUL,
    OP_CLEAR,
})

# Input-only operators. They normalize to "+" when the row is stored.
OP_TOTAL = "="
OP_TAX = "T"

# Glyph written in the operator field of the total line.
TOTAL_GLYPH = OP_TOTAL

# Control tokens (matched case-insensitively).
CONTROL_TOKENS = frozenset({
    "C",
    "MC",
    "M", "M+", "M-", "M*", "M/",
    "MR", "MR+", "MR-", "MR*", "MR/",
    "MS",
    OP_TAX,
})


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Canonical decimal string: [sign]digits[.digits][e[sign]digits], no delimiters.
NumericValue = str

# NumericValue with thousands delimiters and the display decimal point.
DisplayValue = str


# ============================================================================
# EXCEPTIONS
# ============================================================================

class TapeError(Exception):
    """Base exception for all tape calculator errors."""
    pass


class MalformedNumber(TapeError):
    """Raised when a numeric candidate fails canonicalization."""
    pass


class MalformedLedger(TapeError):
    """Raised when text that should be a ledger does not match the ledger grammar."""
    pass


class RangeExceedsLedger(TapeError):
    """Raised when a delete request reaches past the last row of a ledger."""
    pass


class DivisionByZero(TapeError, ZeroDivisionError):
    """Raised when an operation divides by a canonical zero value."""
    pass


class NumberOutOfRange(TapeError):
    """Raised when a result overflows or needs too many digits to hold exactly."""
    pass


class FramingGeometryError(TapeError):
    """Raised when a frame cannot be drawn or its glyphs cannot be found."""
    pass


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True, order=True)
class Position:
    """A (line, column) address on a text surface. Both are zero-based."""
    line: int
    column: int

    def __post_init__(self):
        if self.line < 0 or self.column < 0:
            raise ValueError(f"Position must be non-negative, got {self.line}:{self.column}")

    def __repr__(self) -> str:
        return f"Position({self.line}:{self.column})"


@dataclass(frozen=True, slots=True)
class Row:
    """
    One line of a ledger.

    Attributes:
        operator: Stored operator glyph (one of ROW_OPERATORS).
        value: Canonical NumericValue the operator applies.
        display: Display form of value as last rendered ("" for clear rows).
        description: Free text shown after the value column.

    Rows are immutable; a re-layout produces a new Row with a fresh display.
    """
    operator: str
    value: NumericValue
    display: DisplayValue = ""
    description: str = ""

    def __post_init__(self):
        if self.operator not in ROW_OPERATORS:
            raise ValueError(f"Row operator must be one of {sorted(ROW_OPERATORS)}, got {self.operator!r}")
        if not self.value:
            raise ValueError("Row value cannot be empty")
        if "\n" in self.description:
            raise ValueError("Row description cannot span lines")

    @property
    def is_clear(self) -> bool:
        return self.operator == OP_CLEAR

    def __repr__(self) -> str:
        return f"Row({self.operator} {self.value} {self.description!r})"


@dataclass(frozen=True, slots=True)
class Metrics:
    """
    Layout metrics of a ledger.

    Attributes:
        max_int_len: Widest integer head (sign and delimiters included).
        max_dec_len: Widest fraction+exponent tail, decimal point excluded.
        operator_column: Column of the operator glyph on every line.
        max_desc_len: Longest description.
        has_tail: True when any value carries a fraction or exponent.
    """
    max_int_len: int = 1
    max_dec_len: int = 0
    operator_column: int = 0
    max_desc_len: int = 0
    has_tail: bool = False

    def widen(
        self,
        int_len: int,
        tail_len: int,
        desc_len: int = 0,
    ) -> Metrics:
        """Return metrics grown to cover one more value. Never shrinks."""
        return Metrics(
            max_int_len=max(self.max_int_len, int_len),
            max_dec_len=max(self.max_dec_len, tail_len - 1 if tail_len else 0),
            operator_column=self.operator_column,
            max_desc_len=max(self.max_desc_len, desc_len),
            has_tail=self.has_tail or tail_len > 0,
        )

    @property
    def tail_width(self) -> int:
        """Width of the tail slot: decimal point plus fraction, or nothing."""
        return self.max_dec_len + 1 if self.has_tail else 0


@dataclass(eq=False)
class InputSession:
    """
    Per-session input history.

    One instance is created per build/edit operation and handed to the input
    source through PromptContext, so separate ledgers never share history.
    Sessions compare by identity, so input sources can key state on them.
    """
    value_history: List[str] = field(default_factory=list)
    description_history: List[str] = field(default_factory=list)

    def remember_value(self, text: str) -> None:
        if text:
            self.value_history.append(text)

    def remember_description(self, text: str) -> None:
        if text:
            self.description_history.append(text)


@dataclass(frozen=True, slots=True)
class PromptContext:
    """
    What an input source may show while prompting. All numbers are in display form.

    Attributes:
        sum: Running sum before the pending row.
        value: Value of the pending row ("" while a value is being requested).
        memory: Memory register.
        tax_rate: Configured tax rate as a percentage.
        row_number: 1-based number of the row being entered.
        session: History carried by this session.
    """
    sum: DisplayValue
    value: DisplayValue
    memory: DisplayValue
    tax_rate: DisplayValue
    row_number: int
    session: Optional[InputSession] = None


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class TextSurface(Protocol):
    """
    The host text grid a ledger lives on.

    Lines are addressed from 0; columns count characters from 0. Text passed
    to insert() may contain newlines. Every mutation between entering and
    leaving atomic() is undone if the block raises.
    """

    @property
    def cursor(self) -> Position:
        """Return the current cursor position."""
        ...

    def move_cursor(self, position: Position) -> None:
        """Place the cursor at position (clamped to the surface)."""
        ...

    def line_count(self) -> int:
        """Return the number of lines on the surface."""
        ...

    def line(self, index: int) -> str:
        """Return the text of line index, without its newline."""
        ...

    def insert(self, position: Position, text: str) -> None:
        """Insert text at position. The column may not exceed the line length."""
        ...

    def delete(self, start: Position, end: Position) -> str:
        """Delete the text in [start, end) and return it."""
        ...

    def atomic(self) -> AbstractContextManager:
        """Open an edit bracket that rolls back on error."""
        ...


@runtime_checkable
class InputSource(Protocol):
    """
    Where build and edit sessions get their values and descriptions.

    An empty response to request_value() ends the session.
    """

    def request_value(self, context: PromptContext) -> str:
        """Return the next value, operator-suffixed value, or control token."""
        ...

    def request_description(self, context: PromptContext, suggested: str) -> str:
        """Return the description for the pending row; suggested is the default."""
        ...
