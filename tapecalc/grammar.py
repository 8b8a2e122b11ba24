"""
grammar.py - The numeric literal grammar

    number   := [sign] int [point frac] [exp [exp_sign] exp_digits]
    int      := digits                          (strict)
              | digits (delimiter digits)*      (slack)

Strict and slack are two variants of one pattern. Both expose the same
named fields, so every caller reads a match the same way through
NumberParts regardless of which variant produced it.
"""

from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
import re

from .core import NumericValue, CANONICAL_POINT, CANONICAL_EXPONENT


_DIGITS = r"[0-9]+"


@lru_cache(maxsize=None)
def number_pattern(decimal_point: str = CANONICAL_POINT, delimiter: str = ",", slack: bool = False) -> re.Pattern:
    """
    Compile the numeric grammar for one pair of display characters.

    Args:
        decimal_point: Character separating integer and fraction.
        delimiter: Thousands delimiter (only used when slack is True).
        slack: Allow delimiters between digit runs of the integer part.

    Returns:
        Pattern with groups sign, int, point, frac, exp, exp_sign, exp_digits.
    """
    point = re.escape(decimal_point)
    if slack:
        integer = rf"{_DIGITS}(?:{re.escape(delimiter)}{_DIGITS})*"
    else:
        integer = _DIGITS
    # never start inside a word or right after a decimal point
    guard = rf"(?<![0-9A-Za-z_{point}])"
    return re.compile(
        guard
        + r"(?P<sign>[+-])?"
        + rf"(?P<int>{integer})"
        + rf"(?:(?P<point>{point})(?P<frac>{_DIGITS}))?"
        + rf"(?:(?P<exp>[eE])(?P<exp_sign>[+-])?(?P<exp_digits>{_DIGITS}))?"
    )


@dataclass(frozen=True, slots=True)
class NumberParts:
    """
    A numeric literal split into its grammar fields.

    Attributes:
        sign: "", "+" or "-".
        integer: Integer digits, delimiters still in place for slack matches.
        fraction: Fraction digits, or None when there is no decimal point.
        exponent: Signed exponent digits ("-7", "+3", "12"), or None.
    """
    sign: str
    integer: str
    fraction: Optional[str] = None
    exponent: Optional[str] = None

    @classmethod
    def from_match(cls, m: re.Match) -> NumberParts:
        exponent = None
        if m.group("exp"):
            exponent = (m.group("exp_sign") or "") + m.group("exp_digits")
        return cls(
            sign=m.group("sign") or "",
            integer=m.group("int"),
            fraction=m.group("frac"),
            exponent=exponent,
        )

    def canonical(self) -> NumericValue:
        """Join the fields with the canonical point and exponent marker."""
        text = self.sign + self.integer
        if self.fraction is not None:
            text += CANONICAL_POINT + self.fraction
        if self.exponent is not None:
            text += CANONICAL_EXPONENT + self.exponent
        return text

    def tail(self, decimal_point: str = CANONICAL_POINT) -> str:
        """Everything after the integer digits: point, fraction and exponent."""
        text = ""
        if self.fraction is not None:
            text += decimal_point + self.fraction
        if self.exponent is not None:
            text += CANONICAL_EXPONENT + self.exponent
        return text


CANONICAL_PATTERN = number_pattern()


def parse_canonical(value: NumericValue) -> Optional[NumberParts]:
    """Split a canonical NumericValue into parts, or None if it is not one."""
    m = CANONICAL_PATTERN.fullmatch(value)
    if m is None or m.group("exp") == "E":
        return None
    return NumberParts.from_match(m)
