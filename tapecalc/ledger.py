"""
ledger.py - The in-memory tape

The Ledger class is the only place rows, the running sum, the memory
register and the layout metrics change. It never touches a text surface:
the controller re-parses a ledger from text, mutates a Ledger, and writes it
back through the layout engine.

Key responsibilities:
    - Keeps sum equal to the left fold of its rows, starting from "0"
    - Grows metrics incrementally on append/insert
    - Recomputes sum and metrics from scratch after a delete
    - Re-validates rows during recomputation, so drift surfaces as MalformedLedger
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .config import DEFAULT_CONFIG, TapeConfig
from .core import (
    Metrics, NumericValue, Row, ZERO, OP_CLEAR,
    MalformedLedger, MalformedNumber, RangeExceedsLedger,
)
from .formatter import delimit_num, delimit_num_check, split_display
from .grammar import parse_canonical
from .operators import Step, apply_operator


class Ledger:
    """
    Ordered rows plus their running sum, memory register and metrics.

    Row order is computation order. Metrics are the maxima over the current
    rows; the layout engine widens them for the total line when it renders one.

    Thread Safety:
        Not thread-safe. A Ledger lives for one operation on one surface.

    Example:
        ledger = Ledger(operator_column=4)
        ledger.append_row("+", "10", "apples")
        ledger.append_row("-", "3")
        ledger.append_row("*", "2")
        ledger.sum                    # "14"
    """

    def __init__(
        self,
        config: TapeConfig = DEFAULT_CONFIG,
        operator_column: int = 0,
        memory: NumericValue = ZERO,
    ):
        """
        Create an empty ledger.

        Args:
            config: Supplies the display characters used to measure values.
            operator_column: Column of the operator glyph on every line.
            memory: Initial memory register.
        """
        if operator_column < 0:
            raise ValueError(f"operator_column must be non-negative, got {operator_column}")
        self.config = config
        self.rows: List[Row] = []
        self.sum: NumericValue = ZERO
        self.memory: NumericValue = memory
        self.metrics = Metrics(operator_column=operator_column)

    # ========================================================================
    # READ-ONLY ACCESS
    # ========================================================================

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def __getitem__(self, index: int) -> Row:
        return self.rows[index]

    @property
    def operator_column(self) -> int:
        return self.metrics.operator_column

    def display(self, value: NumericValue) -> str:
        """Display form of a canonical value under this ledger's config."""
        return delimit_num(value, self.config.thousands_delimiter, self.config.decimal_point)

    def fold_to(self, index: int) -> NumericValue:
        """
        Running sum before row index (the fold of rows[:index]).

        Raises:
            DivisionByZero: If a row divides by zero.
        """
        total = ZERO
        for row in self.rows[:index]:
            total = apply_operator(total, row.operator, row.value)
        return total

    def verify_fold(self) -> Dict[str, Any]:
        """
        Check that the stored sum equals the fold of the rows.

        Returns:
            Dict with keys 'valid', 'sum' (stored) and 'fold' (recomputed).
        """
        fold = self.fold_to(len(self.rows))
        return {'valid': fold == self.sum, 'sum': self.sum, 'fold': fold}

    # ========================================================================
    # METRICS
    # ========================================================================

    def _widen_for_value(self, value: NumericValue, description: str = "") -> None:
        head, tail = split_display(value, self.config.thousands_delimiter, self.config.decimal_point)
        self.metrics = self.metrics.widen(len(head), len(tail), len(description))

    def _widen_for_row(self, row: Row) -> None:
        if row.is_clear:
            self.metrics = self.metrics.widen(1, 0, len(row.description))
        else:
            self._widen_for_value(row.value, row.description)

    def recompute_metrics(self) -> Metrics:
        """Rebuild metrics from the current rows."""
        self.metrics = Metrics(operator_column=self.metrics.operator_column)
        for row in self.rows:
            self._widen_for_row(row)
        return self.metrics

    def move_to_column(self, operator_column: int) -> None:
        """Re-anchor the ledger so its operator glyphs sit at operator_column."""
        if operator_column < 0:
            raise ValueError(f"operator_column must be non-negative, got {operator_column}")
        m = self.metrics
        self.metrics = Metrics(m.max_int_len, m.max_dec_len, operator_column, m.max_desc_len, m.has_tail)

    # ========================================================================
    # MUTATION
    # ========================================================================

    def _make_row(self, operator: str, value: NumericValue, description: str) -> Row:
        if parse_canonical(value) is None:
            raise MalformedNumber(f"Not a canonical number: {value!r}")
        display = "" if operator == OP_CLEAR else self.display(value)
        return Row(operator, value, display, description)

    def append_row(self, operator: str, value: NumericValue, description: str = "") -> Row:
        """
        Append a row and fold it into the sum.

        Args:
            operator: Stored row operator.
            value: Canonical value.
            description: Free text for the description column.

        Returns:
            The stored Row (with its display form).

        Raises:
            MalformedNumber: If value is not canonical.
            DivisionByZero: If the row divides by zero. Nothing is appended.
        """
        row = self._make_row(operator, value, description)
        new_sum = apply_operator(self.sum, row.operator, row.value)
        self.rows.append(row)
        self.sum = new_sum
        self._widen_for_row(row)
        return row

    def append_step(self, step: Step, description: str) -> Row:
        """Append the row of an interpreter Step and adopt its memory register."""
        row = self.append_row(step.row.operator, step.row.value, description)
        self.memory = step.memory
        return row

    def insert_rows(self, index: int, rows: Iterable[Row]) -> NumericValue:
        """
        Insert rows before index and recompute the sum from there.

        Metrics only grow, so they are widened rather than rebuilt.

        Returns:
            The new sum.

        Raises:
            IndexError: If index is outside 0..len(self).
            DivisionByZero: If any row from index on divides by zero.
        """
        if not 0 <= index <= len(self.rows):
            raise IndexError(f"Insert index {index} outside ledger of {len(self.rows)} rows")
        new_rows = [self._make_row(r.operator, r.value, r.description) for r in rows]
        before = list(self.rows)
        self.rows[index:index] = new_rows
        try:
            self._refold(index, self.fold_to(index))
        except Exception:
            self.rows = before
            raise
        for row in new_rows:
            self._widen_for_row(row)
        return self.sum

    def delete_rows(self, start: int, count: int) -> NumericValue:
        """
        Remove count consecutive rows starting at start.

        Raises:
            ValueError: If count is less than 1.
            RangeExceedsLedger: If the range reaches past the last row.
                Raised before anything is removed.

        Returns:
            The new sum.
        """
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")
        if start < 0 or start >= len(self.rows) or start + count > len(self.rows):
            raise RangeExceedsLedger(
                f"Cannot delete {count} row(s) from row {start + 1}: "
                f"ledger has {len(self.rows)} row(s) above its total"
            )
        before = list(self.rows)
        del self.rows[start:start + count]
        try:
            return self.recompute_from(start, self.fold_to(start))
        except Exception:
            self.rows = before
            raise

    def load(self, rows: Iterable[Row]) -> NumericValue:
        """Replace all rows (as parsed from text) and recompute everything."""
        self.rows = list(rows)
        return self.recompute_from(0, ZERO)

    # ========================================================================
    # RECOMPUTATION
    # ========================================================================

    def _refold(self, start: int, initial_sum: NumericValue) -> NumericValue:
        total = initial_sum
        for row in self.rows[start:]:
            total = apply_operator(total, row.operator, row.value)
        self.sum = total
        return total

    def recompute_from(self, start: int, initial_sum: NumericValue) -> NumericValue:
        """
        Re-walk rows from start, re-validate them, and rebuild sum and metrics.

        A row is valid when its value is canonical and its display form (if it
        has one) de-groups back to that value. Metrics are rebuilt from all
        rows, since a delete can shrink them.

        Args:
            start: First row to re-walk.
            initial_sum: Running sum before row start.

        Returns:
            The new sum.

        Raises:
            MalformedLedger: If a row no longer matches the ledger grammar.
            DivisionByZero: If a row divides by zero.
        """
        if not 0 <= start <= len(self.rows):
            raise IndexError(f"Row {start} outside ledger of {len(self.rows)} rows")
        for offset, row in enumerate(self.rows[start:]):
            self._validate_row(start + offset, row)
        total = self._refold(start, initial_sum)
        self.recompute_metrics()
        return total

    def _validate_row(self, index: int, row: Row) -> None:
        if parse_canonical(row.value) is None:
            raise MalformedLedger(f"Row {index + 1}: value {row.value!r} is not a number")
        if row.is_clear or not row.display:
            return
        try:
            value = delimit_num_check(row.display, self.config.thousands_delimiter, self.config.decimal_point)
        except MalformedNumber as e:
            raise MalformedLedger(f"Row {index + 1}: {e}") from None
        if value != row.value:
            raise MalformedLedger(
                f"Row {index + 1}: display {row.display!r} does not match value {row.value!r}"
            )

    # ========================================================================
    # COPIES
    # ========================================================================

    def clone(self) -> Ledger:
        """Return an independent copy (rows are immutable and shared)."""
        cloned = Ledger.__new__(Ledger)
        cloned.config = self.config
        cloned.rows = list(self.rows)
        cloned.sum = self.sum
        cloned.memory = self.memory
        cloned.metrics = self.metrics
        return cloned

    def __repr__(self) -> str:
        return f"Ledger({len(self.rows)} rows, sum={self.sum}, memory={self.memory})"


def ledger_from_rows(
    rows: Iterable[Row],
    config: TapeConfig = DEFAULT_CONFIG,
    operator_column: int = 0,
    memory: Optional[NumericValue] = None,
) -> Ledger:
    """Build a ledger from stored rows in one step."""
    ledger = Ledger(config, operator_column, memory or ZERO)
    ledger.load(rows)
    return ledger
