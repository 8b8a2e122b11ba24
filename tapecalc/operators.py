"""
operators.py - Row operators and control tokens

Two layers:

1. apply_operator(): the fold step. Given the running sum and one stored row,
   return the next sum. Ledger.sum is always the left fold of this function
   over the rows, starting from "0".

2. OperatorInterpreter: turns one piece of user input ("12.5", "3*",
   "10%-", "T", "MR-", ...) into a Step: the row to store, the new sum and
   memory, and a suggested description. Input-only operators are normalized
   here, so stored rows never carry "=", "T" or an empty operator.

Row operators:

    +, none, =   sum + value
    -            sum - value
    *            sum * value
    /            sum / value
    %+, %        sum + sum * value / 100
    %-           sum - sum * value / 100
    %*           sum * value / 100
    T            sum + round(rate * sum, 2)     stored as "+ <tax>"
    C            0                              stored as a separator row

Control tokens (case-insensitive):

    MC           memory := 0                    "+ 0"
    M, M+        memory := memory + sum         "+ 0"
    M-, M*, M/   memory := memory op sum        "+ 0"
    MR, MR+      sum := sum + memory            "+ memory"
    MR-, MR*, MR/                               "op memory"
    MS           swap sum and memory            "+ (memory - sum)"
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional

from . import decimal_engine as de
from .core import (
    NumericValue, Row, ZERO,
    OP_ADD, OP_SUB, OP_MUL, OP_DIV,
    OP_PERCENT, OP_PERCENT_ADD, OP_PERCENT_SUB, OP_PERCENT_MUL,
    OP_CLEAR, OP_TOTAL, OP_TAX, CONTROL_TOKENS,
    MalformedNumber,
)
from .formatter import DEFAULT_DELIMITER, delimit_num, delimit_num_check


# Fraction digits of a tax amount.
TAX_PLACES = 2

# Operator suffixes accepted on value input, longest first.
_INPUT_SUFFIXES = (
    OP_PERCENT_ADD, OP_PERCENT_SUB, OP_PERCENT_MUL,
    OP_PERCENT, OP_ADD, OP_SUB, OP_MUL, OP_DIV, OP_TOTAL,
)

_DESCRIPTIONS: Dict[str, str] = {
    "C": "Clear (was {sum})",
    "MC": "Memory clear (was {memory})",
    "M+": "Memory + {sum} = {new_memory}",
    "M-": "Memory - {sum} = {new_memory}",
    "M*": "Memory * {sum} = {new_memory}",
    "M/": "Memory / {sum} = {new_memory}",
    "MR+": "Recall memory",
    "MR-": "Recall memory, subtract",
    "MR*": "Recall memory, multiply",
    "MR/": "Recall memory, divide",
    "MS": "Swap sum {sum} with memory {memory}",
    "T": "{tax_description} {rate}% on {sum}",
}

_ALIASES = {"M": "M+", "MR": "MR+"}


def apply_operator(total: NumericValue, operator: str, value: NumericValue) -> NumericValue:
    """
    Apply one stored row to the running sum.

    Args:
        total: Running sum before the row.
        operator: Stored row operator.
        value: Row value.

    Returns:
        Running sum after the row.

    Raises:
        DivisionByZero: If operator is "/" and value is zero.
        ValueError: If operator is not a stored row operator.
    """
    if operator == OP_ADD:
        return de.add(total, value)
    if operator == OP_SUB:
        return de.sub(total, value)
    if operator == OP_MUL:
        return de.mul(total, value)
    if operator == OP_DIV:
        return de.div(total, value)
    if operator in (OP_PERCENT, OP_PERCENT_ADD):
        return de.add(total, de.percent_of(total, value))
    if operator == OP_PERCENT_SUB:
        return de.sub(total, de.percent_of(total, value))
    if operator == OP_PERCENT_MUL:
        return de.percent_of(total, value)
    if operator == OP_CLEAR:
        return ZERO
    raise ValueError(f"Unknown row operator: {operator!r}")


@dataclass(frozen=True, slots=True)
class Step:
    """
    Outcome of interpreting one input.

    Attributes:
        row: Row to store (display not yet rendered).
        sum: Running sum after the row.
        memory: Memory register after the row.
        description: Suggested description, overridable by the user.
        terminal: True when the input ends the session ("=").
    """
    row: Row
    sum: NumericValue
    memory: NumericValue
    description: str = ""
    terminal: bool = False


class OperatorInterpreter:
    """
    State machine step over (sum, memory), one input at a time.

    The interpreter holds no state of its own; callers pass the current sum
    and memory in and keep the ones returned in the Step.

    Example:
        interp = OperatorInterpreter(tax_rate="0.08875")
        step = interp.interpret("100", ZERO, ZERO)       # + 100
        step = interp.interpret("T", step.sum, ZERO)     # + 8.88
        step.sum                                         # "108.88"
    """

    def __init__(
        self,
        tax_rate: NumericValue = "0.08875",
        tax_description: str = "Sales tax",
        delimiter: str = DEFAULT_DELIMITER,
        decimal_point: str = ".",
    ):
        self.tax_rate = de.normalize(tax_rate)
        self.tax_description = tax_description
        self.delimiter = delimiter
        self.decimal_point = decimal_point

    @classmethod
    def for_config(cls, config) -> OperatorInterpreter:
        return cls(
            tax_rate=config.tax_rate,
            tax_description=config.tax_description,
            delimiter=config.thousands_delimiter,
            decimal_point=config.decimal_point,
        )

    # ------------------------------------------------------------------------
    # Display helpers
    # ------------------------------------------------------------------------

    def display(self, value: NumericValue) -> str:
        return delimit_num(value, self.delimiter, self.decimal_point)

    @property
    def tax_percent(self) -> str:
        return self.display(de.as_percent(self.tax_rate))

    # ------------------------------------------------------------------------
    # Input parsing
    # ------------------------------------------------------------------------

    @staticmethod
    def control_token(text: str) -> Optional[str]:
        """Return the canonical control token for text, or None."""
        token = text.strip().upper()
        if token not in CONTROL_TOKENS:
            return None
        return _ALIASES.get(token, token)

    def parse_value(self, text: str):
        """
        Split value input into (operator, canonical value).

        A trailing operator glyph selects the operator; without one the
        operator is "+". A leading sign belongs to the value.

        Raises:
            MalformedNumber: If what remains is not a number.
        """
        text = text.strip()
        operator = OP_ADD
        for suffix in _INPUT_SUFFIXES:
            if len(text) > len(suffix) and text.endswith(suffix):
                operator = suffix
                text = text[: -len(suffix)].rstrip()
                break
        return operator, delimit_num_check(text, self.delimiter, self.decimal_point)

    def interpret(self, text: str, total: NumericValue, memory: NumericValue) -> Step:
        """
        Interpret one value input or control token.

        Raises:
            MalformedNumber: If text is neither a token nor a number.
            DivisionByZero: If the input divides by zero.
        """
        token = self.control_token(text)
        if token is not None:
            return self.control(token, total, memory)
        operator, value = self.parse_value(text)
        return self.step(total, memory, operator, value)

    # ------------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------------

    def step(self, total: NumericValue, memory: NumericValue, operator: str, value: NumericValue) -> Step:
        """Apply a row operator (input operators included) to the running sum."""
        if operator == OP_TAX:
            return self.control(OP_TAX, total, memory)
        terminal = operator == OP_TOTAL
        if terminal:
            operator = OP_ADD
        new_total = apply_operator(total, operator, value)
        return Step(Row(operator, value), new_total, memory, "", terminal)

    def control(self, token: str, total: NumericValue, memory: NumericValue) -> Step:
        """
        Apply a control token.

        Raises:
            MalformedNumber: If token is not a control token.
            DivisionByZero: For M/ with a zero sum or MR/ with a zero memory.
        """
        token = _ALIASES.get(token.upper(), token.upper())
        new_total, new_memory = total, memory

        if token == OP_CLEAR:
            row = Row(OP_CLEAR, ZERO)
            new_total = ZERO
        elif token == "MC":
            row = Row(OP_ADD, ZERO)
            new_memory = ZERO
        elif token == "M+":
            row = Row(OP_ADD, ZERO)
            new_memory = de.add(memory, total)
        elif token == "M-":
            row = Row(OP_ADD, ZERO)
            new_memory = de.sub(memory, total)
        elif token == "M*":
            row = Row(OP_ADD, ZERO)
            new_memory = de.mul(memory, total)
        elif token == "M/":
            row = Row(OP_ADD, ZERO)
            new_memory = de.div(memory, total)
        elif token in ("MR+", "MR-", "MR*", "MR/"):
            row = Row(token[2], memory)
            new_total = apply_operator(total, row.operator, memory)
        elif token == "MS":
            # the stored delta keeps the fold of the rows equal to the new sum
            row = Row(OP_ADD, de.sub(memory, total))
            new_total, new_memory = memory, total
        elif token == OP_TAX:
            tax = de.round_half_up(de.mul(self.tax_rate, total), TAX_PLACES)
            row = Row(OP_ADD, tax)
            new_total = de.add(total, tax)
        else:
            raise MalformedNumber(f"Not a control token: {token!r}")

        description = _DESCRIPTIONS[token].format(
            sum=self.display(total),
            memory=self.display(memory),
            new_memory=self.display(new_memory),
            value=self.display(row.value),
            rate=self.tax_percent,
            tax_description=self.tax_description,
        )
        return Step(row, new_total, new_memory, description)
