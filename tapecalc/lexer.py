"""
lexer.py - Finding numeric literals inside a line of text

Two modes share one grammar (see grammar.py):

- strict: plain literals only. Used on text the tape wrote itself, after
  the value field has been de-grouped.
- slack: thousands delimiters tolerated between digit runs. Used on
  arbitrary user text. Slack matches are validated by canonicalize_slack();
  candidates it rejects are skipped and the scan carries on past them.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from .core import NumericValue, CANONICAL_POINT, MalformedNumber
from .formatter import DEFAULT_DELIMITER, canonicalize_slack
from .grammar import NumberParts, number_pattern


@dataclass(frozen=True, slots=True)
class NumberMatch:
    """
    A numeric literal found on a line.

    Attributes:
        text: The source characters of the literal.
        value: Its canonical form.
        start: Column of the first character.
        end: Column just past the last character.
        description_length: Length of the stripped text after the literal.
    """
    text: str
    value: NumericValue
    start: int
    end: int
    description_length: int = 0

    def distance(self, column: int) -> int:
        return span_distance(self.start, self.end, column)


def span_distance(start: int, end: int, column: int) -> int:
    """
    Distance from column to the span [start, end).

    Zero when the span contains the column, otherwise the distance to the
    farther span edge: [0, 3) and [10, 13) are 6 and 7 away from column 6.
    """
    if start <= column < end:
        return 0
    # Nearest-edge distance would give 3 and 4 for the example above. Both
    # rules pick [0, 3) there; the farther edge is the one that yields 6 and 7.
    return max(abs(column - start), abs(column - end))


def closest_candidate(candidates: Sequence[NumberMatch], column: int) -> Optional[NumberMatch]:
    """Pick the candidate nearest column. Ties go to the leftmost one."""
    best: Optional[NumberMatch] = None
    for candidate in candidates:
        if best is None or candidate.distance(column) < best.distance(column):
            best = candidate
    return best


class NumberLexer:
    """
    Scanner for numeric literals.

    Example:
        lexer = NumberLexer(slack=True)
        m = lexer.next_match("rent 1,200.50 for May")
        # NumberMatch(text='1,200.50', value='1200.50', start=5, end=13, description_length=7)
    """

    def __init__(
        self,
        decimal_point: str = CANONICAL_POINT,
        delimiter: str = DEFAULT_DELIMITER,
        slack: bool = False,
    ):
        self.decimal_point = decimal_point
        self.delimiter = delimiter
        self.slack = slack
        self._pattern = number_pattern(decimal_point, delimiter, slack)

    @classmethod
    def for_config(cls, config, slack: bool = False) -> NumberLexer:
        return cls(config.decimal_point, config.thousands_delimiter, slack)

    def _canonical(self, text: str) -> NumericValue:
        m = self._pattern.fullmatch(text)
        if m is None:
            raise MalformedNumber(f"Not a number: {text!r}")
        return NumberParts.from_match(m).canonical()

    def next_match(self, line: str, start: int = 0) -> Optional[NumberMatch]:
        """
        Return the first valid literal at or after column start, or None.
        """
        pos = start
        while pos <= len(line):
            m = self._pattern.search(line, pos)
            if m is None:
                return None
            text = m.group()
            try:
                if self.slack:
                    value, consumed = canonicalize_slack(text, self.delimiter, self.decimal_point)
                else:
                    value, consumed = self._canonical(text), len(text)
            except MalformedNumber:
                pos = m.end()
                continue
            end = m.start() + consumed
            return NumberMatch(
                text=line[m.start():end],
                value=value,
                start=m.start(),
                end=end,
                description_length=len(line[end:].strip()),
            )
        return None

    def matches(self, line: str) -> Iterator[NumberMatch]:
        """Yield every valid literal on the line, left to right."""
        pos = 0
        while True:
            found = self.next_match(line, pos)
            if found is None:
                return
            yield found
            pos = found.end

    def candidates(self, line: str) -> List[NumberMatch]:
        return list(self.matches(line))

    def closest(self, line: str, column: int) -> Optional[NumberMatch]:
        """Return the literal on the line nearest column, or None."""
        return closest_candidate(self.candidates(line), column)

    def fullmatch(self, text: str) -> Optional[NumberMatch]:
        """Match text as exactly one literal, or return None."""
        found = self.next_match(text)
        if found is None or found.start != 0 or found.end != len(text):
            return None
        return found

    def __repr__(self) -> str:
        mode = "slack" if self.slack else "strict"
        return f"NumberLexer({mode}, point={self.decimal_point!r}, delimiter={self.delimiter!r})"
