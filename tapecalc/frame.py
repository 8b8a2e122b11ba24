"""
frame.py - Drawing and stripping a box around a ledger

A frame is a one-character rectangle. Its left edge sits one column before
the operator column and its right edge one column past the widest ledger
line; its top and bottom borders sit on the lines just above and below the
ledger:

    notes      ┌──────────────┐
               │+   10  apples│
               │-    3        │
               │    --        │
               │=    7        │
               └──────────────┘

A border is written over an existing line only when that line has text
outside the frame columns and nothing inside them (as "notes" above).
Otherwise a fresh line is inserted, so no text is ever overwritten.

Stripping is the inverse of drawing. Two strategies:

- sloppy: find the nearest top-left corner at or above the cursor and the
  nearest bottom-left corner at or below it, then blank every frame glyph on
  the lines between them.
- careful: follow the exact edges from the cursor line outward and remove only
  the glyphs that belong to that rectangle.

Border lines that are empty after stripping are deleted; every touched line
is right-stripped.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .config import FrameGlyphs
from .core import Position, TextSurface, FramingGeometryError
from .surface import delete_lines, insert_lines, set_line, write_at


@dataclass(frozen=True, slots=True)
class FrameBox:
    """
    Geometry of a frame on the surface.

    Attributes:
        top: Line of the top border.
        bottom: Line of the bottom border.
        left: Column of the left edge.
        right: Column of the right edge.
        inserted_top: The top border has (or had) a line of its own.
        inserted_bottom: The bottom border has (or had) a line of its own.
    """
    top: int
    bottom: int
    left: int
    right: int
    inserted_top: bool = False
    inserted_bottom: bool = False

    def __post_init__(self):
        if self.bottom <= self.top or self.right <= self.left:
            raise FramingGeometryError(
                f"Degenerate frame: lines {self.top}..{self.bottom}, columns {self.left}..{self.right}"
            )

    @property
    def first_content_line(self) -> int:
        return self.top + 1

    @property
    def last_content_line(self) -> int:
        return self.bottom - 1

    def contains(self, position: Position) -> bool:
        return self.top <= position.line <= self.bottom and self.left <= position.column <= self.right


def _char(surface: TextSurface, line: int, column: int) -> str:
    if not 0 <= line < surface.line_count() or column < 0:
        return ""
    text = surface.line(line)
    return text[column] if column < len(text) else ""


def _blank_between(text: str, left: int, right: int) -> bool:
    return text[left:right + 1].strip() == ""


class FrameRenderer:
    """
    Draws, finds and strips frames drawn with one set of glyphs.

    Example:
        renderer = FrameRenderer(FrameGlyphs())
        box = renderer.draw(buffer, first=2, last=5, left=3, right=20)
        renderer.strip(buffer, Position(box.top + 1, 5), careful=True)
    """

    def __init__(self, glyphs: Optional[FrameGlyphs] = None):
        self.glyphs = glyphs or FrameGlyphs()

    # ========================================================================
    # DRAW
    # ========================================================================

    def _border(self, left_corner: str, right_corner: str, left: int, right: int) -> str:
        return left_corner + self.glyphs.horizontal * (right - left - 1) + right_corner

    def _can_overlay(self, text: str, left: int, right: int) -> bool:
        outside = text[:left] + text[right + 1:]
        return bool(outside.strip()) and _blank_between(text, left, right)

    def draw(self, surface: TextSurface, first: int, last: int, left: int, right: int) -> FrameBox:
        """
        Frame lines first..last between columns left and right.

        Args:
            surface: Text surface to draw on.
            first: First line inside the frame.
            last: Last line inside the frame.
            left: Column of the left edge (must be blank on every framed line).
            right: Column of the right edge (past the end of every framed line).

        Returns:
            FrameBox with the final border lines.

        Raises:
            FramingGeometryError: If the edges would overwrite text. Checked
                before anything is written.
        """
        if left < 0:
            raise FramingGeometryError("No room for the left edge: the ledger starts at column 0")
        if not 0 <= first <= last < surface.line_count():
            raise FramingGeometryError(f"Lines {first}..{last} are outside the surface")
        for index in range(first, last + 1):
            text = surface.line(index)
            if _char(surface, index, left).strip():
                raise FramingGeometryError(f"Line {index + 1}: column {left + 1} is not blank")
            if len(text.rstrip()) > right:
                raise FramingGeometryError(f"Line {index + 1}: text reaches past column {right + 1}")

        # bottom first, so inserting it leaves the line numbers above unchanged
        bottom_border = self._border(self.glyphs.bottom_left, self.glyphs.bottom_right, left, right)
        below = last + 1
        inserted_bottom = not (below < surface.line_count() and self._can_overlay(surface.line(below), left, right))
        if inserted_bottom:
            insert_lines(surface, below, [" " * left + bottom_border])
        else:
            write_at(surface, below, left, bottom_border)

        for index in range(first, last + 1):
            text = surface.line(index).rstrip()
            set_line(surface, index, text)
            write_at(surface, index, left, self.glyphs.vertical)
            write_at(surface, index, right, self.glyphs.vertical)

        top_border = self._border(self.glyphs.top_left, self.glyphs.top_right, left, right)
        above = first - 1
        inserted_top = not (above >= 0 and self._can_overlay(surface.line(above), left, right))
        if inserted_top:
            insert_lines(surface, first, [" " * left + top_border])
            top = first
        else:
            write_at(surface, above, left, top_border)
            top = above
        bottom = top + (last - first) + 2
        return FrameBox(top, bottom, left, right, inserted_top, inserted_bottom)

    # ========================================================================
    # FIND
    # ========================================================================

    def find(self, surface: TextSurface, position: Position) -> FrameBox:
        """
        Locate the frame around position by following its edges.

        Raises:
            FramingGeometryError: If no complete, well-formed frame encloses
                the position's line.
        """
        g = self.glyphs
        line = position.line
        if not 0 <= line < surface.line_count():
            raise FramingGeometryError(f"Line {line + 1} is outside the surface")
        text = surface.line(line)
        edges = {g.vertical, g.top_left, g.top_right, g.bottom_left, g.bottom_right}

        column = None
        for x in range(min(position.column, len(text) - 1), -1, -1):
            if text[x] in edges:
                column = x
                break
        if column is None:
            column = next((x for x in range(position.column, len(text)) if text[x] in edges), None)
        if column is None:
            raise FramingGeometryError(f"No frame edge on line {line + 1}")

        top = line
        while _char(surface, top, column) not in (g.top_left, g.top_right):
            if _char(surface, top, column) not in (g.vertical, g.bottom_left, g.bottom_right) or top == 0:
                raise FramingGeometryError(f"Frame edge at column {column + 1} has no top corner")
            if top != line and _char(surface, top, column) != g.vertical:
                raise FramingGeometryError(f"Frame edge at column {column + 1} is broken on line {top + 1}")
            top -= 1
        bottom = line
        while _char(surface, bottom, column) not in (g.bottom_left, g.bottom_right):
            if _char(surface, bottom, column) not in (g.vertical, g.top_left, g.top_right):
                raise FramingGeometryError(f"Frame edge at column {column + 1} has no bottom corner")
            if bottom != line and _char(surface, bottom, column) != g.vertical:
                raise FramingGeometryError(f"Frame edge at column {column + 1} is broken on line {bottom + 1}")
            bottom += 1

        if _char(surface, top, column) == g.top_left:
            left = column
            right = left + 1
            while _char(surface, top, right) == g.horizontal:
                right += 1
            if _char(surface, top, right) != g.top_right:
                raise FramingGeometryError(f"Top border on line {top + 1} has no right corner")
        else:
            right = column
            left = right - 1
            while left >= 0 and _char(surface, top, left) == g.horizontal:
                left -= 1
            if _char(surface, top, left) != g.top_left:
                raise FramingGeometryError(f"Top border on line {top + 1} has no left corner")

        box = FrameBox(top, bottom, left, right)
        self._verify(surface, box)
        return box

    def _verify(self, surface: TextSurface, box: FrameBox) -> None:
        g = self.glyphs
        expected_bottom = self._border(g.bottom_left, g.bottom_right, box.left, box.right)
        if surface.line(box.bottom)[box.left:box.right + 1] != expected_bottom:
            raise FramingGeometryError(f"Bottom border on line {box.bottom + 1} does not match the top")
        for index in range(box.first_content_line, box.last_content_line + 1):
            if _char(surface, index, box.left) != g.vertical or _char(surface, index, box.right) != g.vertical:
                raise FramingGeometryError(f"Line {index + 1} is missing a frame edge")

    def find_sloppy(self, surface: TextSurface, position: Position) -> Optional[FrameBox]:
        """
        Nearest top-left corner at or above position and bottom-left corner at
        or below it, or None when either is missing.
        """
        g = self.glyphs
        top = left = None
        for index in range(min(position.line, surface.line_count() - 1), -1, -1):
            text = surface.line(index)
            if g.top_left in text:
                top, left = index, text.index(g.top_left)
                break
        if top is None:
            return None
        bottom = None
        for index in range(max(position.line, top + 1), surface.line_count()):
            if surface.line(index).find(g.bottom_left) == left:
                bottom = index
                break
        right = surface.line(top).find(g.top_right, left + 1)
        if bottom is None or right < 0:
            return None
        return FrameBox(top, bottom, left, right)

    # ========================================================================
    # STRIP
    # ========================================================================

    def _finish_strip(self, surface: TextSurface, box: FrameBox, rewritten: dict) -> FrameBox:
        for index, text in rewritten.items():
            set_line(surface, index, text.rstrip())
        inserted_bottom = surface.line(box.bottom) == ""
        if inserted_bottom:
            delete_lines(surface, box.bottom, 1)
        inserted_top = surface.line(box.top) == ""
        if inserted_top:
            delete_lines(surface, box.top, 1)
        return FrameBox(box.top, box.bottom, box.left, box.right, inserted_top, inserted_bottom)

    def strip_careful(self, surface: TextSurface, position: Position) -> FrameBox:
        """
        Remove exactly the glyphs of the frame around position.

        Raises:
            FramingGeometryError: If no well-formed frame is found.
        """
        box = self.find(surface, position)
        span = box.right - box.left + 1
        rewritten = {}
        for index in range(box.top, box.bottom + 1):
            text = surface.line(index)
            if index in (box.top, box.bottom):
                rewritten[index] = text[:box.left] + " " * span + text[box.right + 1:]
            else:
                rewritten[index] = text[:box.left] + " " + text[box.left + 1:box.right] + " " + text[box.right + 1:]
        return self._finish_strip(surface, box, rewritten)

    def strip_sloppy(self, surface: TextSurface, position: Position) -> Optional[FrameBox]:
        """
        Blank every frame glyph between the nearest corners.

        Returns:
            The stripped box, or None when no corners were found (nothing is
            changed in that case).
        """
        box = self.find_sloppy(surface, position)
        if box is None:
            return None
        glyphs = self.glyphs.all
        rewritten = {}
        for index in range(box.top, box.bottom + 1):
            text = surface.line(index)
            rewritten[index] = "".join(" " if ch in glyphs else ch for ch in text)
        return self._finish_strip(surface, box, rewritten)

    def strip(self, surface: TextSurface, position: Position, careful: bool = True) -> FrameBox:
        """
        Strip the frame around position.

        With careful=False the sloppy strategy runs first and the careful
        one is used when sloppy finds no corners.

        Raises:
            FramingGeometryError: If the careful strategy finds no frame.
        """
        if not careful:
            box = self.strip_sloppy(surface, position)
            if box is not None:
                return box
        return self.strip_careful(surface, position)
