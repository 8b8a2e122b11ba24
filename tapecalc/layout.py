"""
layout.py - Column alignment for ledger lines

Every line of a ledger is laid out on the same grid:

    <indent><op><gap1><value field><gap2><description>
             |                    |
             operator_column      value_end

The value field right-aligns the integer head (sign and grouped digits) to
max_int_len and left-aligns the tail (decimal point, fraction, exponent) to
the tail width, so decimal points line up and every field ends at value_end.
Lines never carry trailing whitespace.
"""

from __future__ import annotations
from typing import List

from .config import DEFAULT_CONFIG, TapeConfig
from .core import Metrics, NumericValue, OP_WIDTH, Row, TOTAL_GLYPH
from .formatter import split_display


class LayoutEngine:
    """
    Renders rows, separators, the rule and the total line as aligned text.

    The engine is stateless; metrics come from the Ledger being rendered.
    """

    def __init__(self, config: TapeConfig = DEFAULT_CONFIG):
        self.config = config

    # ------------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------------

    @staticmethod
    def field_width(metrics: Metrics) -> int:
        return metrics.max_int_len + metrics.tail_width

    def value_start(self, metrics: Metrics) -> int:
        return metrics.operator_column + OP_WIDTH + self.config.operator_gap

    def value_end(self, metrics: Metrics) -> int:
        """Column just past the last character of every value field."""
        return self.value_start(metrics) + self.field_width(metrics)

    def description_start(self, metrics: Metrics) -> int:
        return self.value_end(metrics) + self.config.description_gap

    def metrics_for(self, ledger, with_total: bool = True) -> Metrics:
        """Ledger metrics, widened for the total line when it is rendered."""
        metrics = ledger.metrics
        if with_total:
            head, tail = split_display(ledger.sum, self.config.thousands_delimiter, self.config.decimal_point)
            metrics = metrics.widen(len(head), len(tail))
        return metrics

    # ------------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------------

    def value_field(self, value: NumericValue, metrics: Metrics) -> str:
        head, tail = split_display(value, self.config.thousands_delimiter, self.config.decimal_point)
        return head.rjust(metrics.max_int_len) + tail.ljust(metrics.tail_width)

    def _line(self, glyph: str, field: str, description: str, metrics: Metrics) -> str:
        text = (
            " " * metrics.operator_column
            + glyph.ljust(OP_WIDTH)
            + " " * self.config.operator_gap
            + field
        )
        if description:
            text += " " * self.config.description_gap + description
        return text.rstrip()

    def render_row(self, row: Row, metrics: Metrics) -> str:
        """Render one row (or clear separator) on the metrics grid."""
        if row.is_clear:
            field = self.config.rule_char * self.field_width(metrics)
        else:
            field = self.value_field(row.value, metrics)
        return self._line(row.operator, field, row.description, metrics)

    def render_rule(self, metrics: Metrics) -> str:
        return " " * self.value_start(metrics) + self.config.rule_char * self.field_width(metrics)

    def render_total(self, total: NumericValue, metrics: Metrics) -> str:
        return self._line(TOTAL_GLYPH, self.value_field(total, metrics), "", metrics)

    def render(self, ledger, with_total: bool = True) -> List[str]:
        """
        Render a whole ledger.

        Args:
            ledger: The Ledger to render.
            with_total: Append the rule and total lines.

        Returns:
            One string per line, rows first.
        """
        metrics = self.metrics_for(ledger, with_total)
        lines = [self.render_row(row, metrics) for row in ledger.rows]
        if with_total:
            lines.append(self.render_rule(metrics))
            lines.append(self.render_total(ledger.sum, metrics))
        return lines

    @staticmethod
    def width(lines: List[str]) -> int:
        """Column just past the end of the widest line."""
        return max((len(line) for line in lines), default=0)
