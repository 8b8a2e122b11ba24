"""
config.py - Read-only configuration for tape operations

TapeConfig is captured once at the start of an operation and never mutated.
Every field is validated in __post_init__, so an operation never starts with
glyphs or separators that would make the written ledger unreadable.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation

from .core import ROW_OPERATORS, TOTAL_GLYPH


# ============================================================================
# DEFAULTS
# ============================================================================

DEFAULT_OPERATOR_GAP = 2
DEFAULT_DESCRIPTION_GAP = 2
DEFAULT_TAX_RATE = "0.08875"
DEFAULT_TAX_DESCRIPTION = "Sales tax"
DEFAULT_DECIMAL_POINT = "."
DEFAULT_THOUSANDS_DELIMITER = ","
DEFAULT_RULE_CHAR = "-"

# Characters that appear on ledger lines and so can never be frame glyphs.
_LEDGER_CHARS = frozenset("0123456789eE " + TOTAL_GLYPH + "".join(ROW_OPERATORS))


def _check_single_char(name: str, value: str) -> None:
    if not isinstance(value, str) or len(value) != 1:
        raise ValueError(f"{name} must be exactly one character, got {value!r}")
    if value.isspace():
        raise ValueError(f"{name} cannot be whitespace")


@dataclass(frozen=True, slots=True)
class FrameGlyphs:
    """
    The six characters a frame is drawn with.

    Attributes:
        vertical: Left and right edges.
        horizontal: Top and bottom edges.
        top_left, top_right, bottom_left, bottom_right: Corners.
    """
    vertical: str = "│"
    horizontal: str = "─"
    top_left: str = "┌"
    top_right: str = "┐"
    bottom_left: str = "└"
    bottom_right: str = "┘"

    def __post_init__(self):
        for name in ("vertical", "horizontal", "top_left", "top_right", "bottom_left", "bottom_right"):
            _check_single_char(name, getattr(self, name))

    @property
    def all(self) -> frozenset:
        return frozenset({
            self.vertical, self.horizontal,
            self.top_left, self.top_right, self.bottom_left, self.bottom_right,
        })


@dataclass(frozen=True, slots=True)
class TapeConfig:
    """
    Configuration surface for every tape operation.

    Attributes:
        operator_gap: Blank columns between the operator field and the value field.
        description_gap: Blank columns between the value field and the description.
        tax_rate: Decimal fraction strictly between 0 and 1, as a string.
        tax_description: Label used in the default description of tax rows.
        decimal_point: Display decimal-point character.
        thousands_delimiter: Display thousands-delimiter character.
        draw_frames: Frame ledgers written by scan/build/edit.
        frame_glyphs: Characters frames are drawn with.
        auto_realign: Rewrite scanned columns as an aligned ledger.
        rule_char: Character of the rule line above the total.
        careful_strip: Strip frames with the careful algorithm (else sloppy first).
        verbose: Print a one-line outcome for each operation.
    """
    operator_gap: int = DEFAULT_OPERATOR_GAP
    description_gap: int = DEFAULT_DESCRIPTION_GAP
    tax_rate: str = DEFAULT_TAX_RATE
    tax_description: str = DEFAULT_TAX_DESCRIPTION
    decimal_point: str = DEFAULT_DECIMAL_POINT
    thousands_delimiter: str = DEFAULT_THOUSANDS_DELIMITER
    draw_frames: bool = False
    frame_glyphs: FrameGlyphs = field(default_factory=FrameGlyphs)
    auto_realign: bool = True
    rule_char: str = DEFAULT_RULE_CHAR
    careful_strip: bool = True
    verbose: bool = False

    def __post_init__(self):
        if not isinstance(self.operator_gap, int) or self.operator_gap < 1:
            raise ValueError(f"operator_gap must be a positive integer, got {self.operator_gap!r}")
        if not isinstance(self.description_gap, int) or self.description_gap < 1:
            raise ValueError(f"description_gap must be a positive integer, got {self.description_gap!r}")

        try:
            rate = Decimal(self.tax_rate)
        except (InvalidOperation, TypeError):
            raise ValueError(f"tax_rate must be a decimal string, got {self.tax_rate!r}") from None
        if not rate.is_finite() or not (Decimal("0") < rate < Decimal("1")):
            raise ValueError(f"tax_rate must be strictly between 0 and 1, got {self.tax_rate}")

        _check_single_char("decimal_point", self.decimal_point)
        _check_single_char("thousands_delimiter", self.thousands_delimiter)
        _check_single_char("rule_char", self.rule_char)
        if self.decimal_point == self.thousands_delimiter:
            raise ValueError("decimal_point and thousands_delimiter must differ")
        for name in ("decimal_point", "thousands_delimiter"):
            ch = getattr(self, name)
            if ch.isdigit() or ch in "+-eE":
                raise ValueError(f"{name} cannot be a digit, sign or exponent marker, got {ch!r}")

        reserved = _LEDGER_CHARS | {self.decimal_point, self.thousands_delimiter, self.rule_char}
        clash = self.frame_glyphs.all & reserved
        if clash:
            raise ValueError(f"frame glyphs collide with ledger characters: {sorted(clash)}")

    def with_overrides(self, **changes) -> TapeConfig:
        """Return a validated copy with some fields replaced."""
        return replace(self, **changes)


DEFAULT_CONFIG = TapeConfig()
