"""
surface.py - In-memory text surface with a transactional edit log

TextBuffer implements the TextSurface protocol over a list of lines. Every
insert and delete is recorded as a TextEdit in an EditLog. atomic() opens an
edit bracket; if the block raises, the edits made inside it are undone in
reverse order and the exception propagates:

    with buffer.atomic():
        buffer.insert(Position(0, 0), "hello ")
        raise DivisionByZero(...)       # buffer is back to its old text

Committed brackets are kept as undo groups, so undo() reverts one whole
operation at a time.

The module also provides line-level helpers (write_at, insert_lines, ...)
that work on any TextSurface, not just TextBuffer.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Sequence

from .core import Position, TextSurface


INSERT = "insert"
DELETE = "delete"


def end_of(position: Position, text: str) -> Position:
    """Position just past text if it were inserted at position."""
    parts = text.split("\n")
    if len(parts) == 1:
        return Position(position.line, position.column + len(text))
    return Position(position.line + len(parts) - 1, len(parts[-1]))


@dataclass(frozen=True, slots=True)
class TextEdit:
    """
    One recorded mutation.

    Attributes:
        kind: INSERT or DELETE.
        position: Where the text was inserted, or where the deleted range began.
        text: The inserted or deleted text.
    """
    kind: str
    position: Position
    text: str

    def __post_init__(self):
        if self.kind not in (INSERT, DELETE):
            raise ValueError(f"TextEdit kind must be {INSERT!r} or {DELETE!r}, got {self.kind!r}")

    @property
    def end(self) -> Position:
        return end_of(self.position, self.text)

    def inverse(self) -> TextEdit:
        return TextEdit(DELETE if self.kind == INSERT else INSERT, self.position, self.text)


class EditLog:
    """Ordered record of the edits made since a bracket opened."""

    def __init__(self):
        self.edits: List[TextEdit] = []

    def __len__(self) -> int:
        return len(self.edits)

    def record(self, edit: TextEdit) -> None:
        self.edits.append(edit)

    def take(self, mark: int) -> List[TextEdit]:
        """Remove and return the edits recorded after mark."""
        taken = self.edits[mark:]
        del self.edits[mark:]
        return taken


class TextBuffer:
    """
    A mutable 2-D character grid.

    Example:
        buf = TextBuffer("10\\n20\\n30", cursor=Position(1, 0))
        buf.line(1)                      # "20"
        buf.insert(Position(1, 2), " apples")
        buf.text                         # "10\\n20 apples\\n30"
    """

    def __init__(self, text: str = "", cursor: Position = Position(0, 0)):
        self._lines: List[str] = text.split("\n")
        self._cursor = Position(0, 0)
        self.log = EditLog()
        self._depth = 0
        self._undo_groups: List[List[TextEdit]] = []
        self.move_cursor(cursor)

    # ========================================================================
    # READ-ONLY ACCESS
    # ========================================================================

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    @property
    def cursor(self) -> Position:
        return self._cursor

    def line_count(self) -> int:
        return len(self._lines)

    def line(self, index: int) -> str:
        if not 0 <= index < len(self._lines):
            raise IndexError(f"Line {index} outside surface of {len(self._lines)} lines")
        return self._lines[index]

    # ========================================================================
    # CURSOR
    # ========================================================================

    def move_cursor(self, position: Position) -> None:
        line = min(position.line, len(self._lines) - 1)
        column = min(position.column, len(self._lines[line]))
        self._cursor = Position(line, column)

    def move_cursor_by(self, lines: int = 0, columns: int = 0) -> None:
        """Move the cursor relative to where it is, clamped to the surface."""
        line = max(0, self._cursor.line + lines)
        column = max(0, self._cursor.column + columns)
        self.move_cursor(Position(line, column))

    # ========================================================================
    # MUTATION
    # ========================================================================

    def _check(self, position: Position) -> None:
        if position.line >= len(self._lines):
            raise IndexError(f"Line {position.line} outside surface of {len(self._lines)} lines")
        if position.column > len(self._lines[position.line]):
            raise IndexError(
                f"Column {position.column} past end of line {position.line} "
                f"({len(self._lines[position.line])} chars)"
            )

    def _apply_insert(self, position: Position, text: str) -> None:
        line = self._lines[position.line]
        before, after = line[:position.column], line[position.column:]
        parts = text.split("\n")
        parts[0] = before + parts[0]
        parts[-1] = parts[-1] + after
        self._lines[position.line:position.line + 1] = parts

    def _extract(self, start: Position, end: Position) -> str:
        if start.line == end.line:
            return self._lines[start.line][start.column:end.column]
        chunks = [self._lines[start.line][start.column:]]
        chunks.extend(self._lines[start.line + 1:end.line])
        chunks.append(self._lines[end.line][:end.column])
        return "\n".join(chunks)

    def _apply_delete(self, start: Position, end: Position) -> str:
        removed = self._extract(start, end)
        joined = self._lines[start.line][:start.column] + self._lines[end.line][end.column:]
        self._lines[start.line:end.line + 1] = [joined]
        return removed

    def insert(self, position: Position, text: str) -> None:
        """
        Insert text at position.

        Raises:
            IndexError: If position is outside the surface.
        """
        self._check(position)
        if not text:
            return
        self._apply_insert(position, text)
        self.log.record(TextEdit(INSERT, position, text))

    def delete(self, start: Position, end: Position) -> str:
        """
        Delete [start, end) and return the removed text.

        Raises:
            IndexError: If either position is outside the surface.
            ValueError: If end comes before start.
        """
        self._check(start)
        self._check(end)
        if end < start:
            raise ValueError(f"Delete range is reversed: {start} > {end}")
        if start == end:
            return ""
        removed = self._apply_delete(start, end)
        self.log.record(TextEdit(DELETE, start, removed))
        return removed

    # ========================================================================
    # TRANSACTIONS
    # ========================================================================

    def _revert(self, edits: Sequence[TextEdit]) -> None:
        for edit in reversed(edits):
            if edit.kind == INSERT:
                self._apply_delete(edit.position, edit.end)
            else:
                self._apply_insert(edit.position, edit.text)

    @contextmanager
    def atomic(self) -> Iterator[TextBuffer]:
        """
        Edit bracket. Nested brackets join the outermost one.

        On an exception every edit made since the outermost bracket opened is
        reverted, the cursor is restored, and the exception is re-raised.
        """
        outermost = self._depth == 0
        mark = len(self.log)
        cursor = self._cursor
        self._depth += 1
        try:
            yield self
        except BaseException:
            if outermost:
                self._revert(self.log.take(mark))
                self._cursor = cursor
            raise
        finally:
            self._depth -= 1
        if outermost:
            group = self.log.take(mark)
            if group:
                self._undo_groups.append(group)

    def undo(self) -> bool:
        """Revert the last committed bracket. Returns False when there is nothing to undo."""
        if not self._undo_groups:
            return False
        self._revert(self._undo_groups.pop())
        self.move_cursor(self._cursor)
        return True

    def __repr__(self) -> str:
        return f"TextBuffer({len(self._lines)} lines, cursor={self._cursor!r})"


# ============================================================================
# LINE HELPERS (any TextSurface)
# ============================================================================

def write_at(surface: TextSurface, line: int, column: int, text: str) -> None:
    """
    Overwrite a line from column on, padding it with blanks if it is short.
    """
    current = surface.line(line)
    if len(current) < column:
        surface.insert(Position(line, len(current)), " " * (column - len(current)))
        current = surface.line(line)
    stop = min(len(current), column + len(text))
    if stop > column:
        surface.delete(Position(line, column), Position(line, stop))
    surface.insert(Position(line, column), text)


def set_line(surface: TextSurface, line: int, text: str) -> None:
    """Replace the whole text of a line."""
    current = surface.line(line)
    if current == text:
        return
    if current:
        surface.delete(Position(line, 0), Position(line, len(current)))
    surface.insert(Position(line, 0), text)


def insert_lines(surface: TextSurface, index: int, lines: Sequence[str]) -> None:
    """Insert lines so the first of them becomes line index."""
    if not lines:
        return
    count = surface.line_count()
    if index < count:
        surface.insert(Position(index, 0), "\n".join(lines) + "\n")
    elif index == count:
        last = count - 1
        surface.insert(Position(last, len(surface.line(last))), "\n" + "\n".join(lines))
    else:
        raise IndexError(f"Cannot insert at line {index} of a {count}-line surface")


def delete_lines(surface: TextSurface, index: int, count: int) -> None:
    """Delete count whole lines starting at index (a surface keeps at least one line)."""
    if count <= 0:
        return
    total = surface.line_count()
    if index < 0 or index + count > total:
        raise IndexError(f"Cannot delete lines {index}..{index + count - 1} of a {total}-line surface")
    stop = index + count
    if stop < total:
        surface.delete(Position(index, 0), Position(stop, 0))
    elif index > 0:
        surface.delete(Position(index - 1, len(surface.line(index - 1))), Position(total - 1, len(surface.line(total - 1))))
    else:
        surface.delete(Position(0, 0), Position(total - 1, len(surface.line(total - 1))))


def replace_lines(surface: TextSurface, index: int, count: int, lines: Sequence[str]) -> None:
    """Replace count lines starting at index with lines, rewriting only what differs."""
    shared = min(count, len(lines))
    for offset in range(shared):
        set_line(surface, index + offset, lines[offset])
    if count > shared:
        delete_lines(surface, index + shared, count - shared)
    elif len(lines) > shared:
        insert_lines(surface, index + shared, lines[shared:])
