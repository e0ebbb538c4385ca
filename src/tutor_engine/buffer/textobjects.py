"""Pure text-object, word-motion, and bracket-matching algorithms.

Everything here operates on sequences of lines and code-point columns and
never mutates its input. :class:`tutor_engine.buffer.Buffer` applies the
results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .state import Cursor

Span = Tuple[int, int]  # [start, end) columns on one line

BRACKET_PAIRS: dict[str, str] = {"(": ")", "{": "}", "[": "]", "<": ">"}
CLOSING_BRACKETS: dict[str, str] = {close: open_ for open_, close in BRACKET_PAIRS.items()}


def first_non_blank(line: str) -> int:
    for index, char in enumerate(line):
        if not char.isspace():
            return index
    return 0


def word_bounds(line: str, col: int) -> Span:
    """Expand left and right from ``col`` over non-whitespace characters."""

    start = col
    while start > 0 and not line[start - 1].isspace():
        start -= 1
    end = col
    while end < len(line) and not line[end].isspace():
        end += 1
    return start, end


def inner_word(line: str, col: int) -> Optional[Span]:
    if not line or col >= len(line):
        return None
    start, end = word_bounds(line, col)
    if start == end:
        return None
    return start, end


def around_word(line: str, col: int) -> Optional[Span]:
    """Inner word plus the trailing whitespace run, else the leading one."""

    bounds = inner_word(line, col)
    if bounds is None:
        return None
    start, end = bounds
    if end < len(line) and line[end].isspace():
        while end < len(line) and line[end].isspace():
            end += 1
    else:
        while start > 0 and line[start - 1].isspace():
            start -= 1
    return start, end


def next_word_start(lines: Sequence[str], cursor: Cursor) -> Cursor:
    row, col = cursor
    line = lines[row]
    while col < len(line) and not line[col].isspace():
        col += 1
    while col < len(line) and line[col].isspace():
        col += 1
    if col >= len(line) and row + 1 < len(lines):
        row += 1
        col = first_non_blank(lines[row])
    return row, col


def previous_word_start(lines: Sequence[str], cursor: Cursor) -> Cursor:
    """Start of the previous word.

    From column 0 the motion crosses to the end of the previous line once and
    then scans only that line, so it stops on a blank or empty line.
    """

    row, col = cursor
    if col == 0 and row > 0:
        row -= 1
        col = len(lines[row])
    line = lines[row]
    col = max(col - 1, 0)
    while col > 0 and line[col].isspace():
        col -= 1
    while col > 0 and not line[col - 1].isspace():
        col -= 1
    return row, col


@dataclass(slots=True)
class BracketMatcher:
    """Depth counter for one bracket pair; depth starts at 1."""

    open: str
    close: str
    depth: int = 1

    def feed(self, char: str) -> bool:
        """Consume ``char``; return True once the match has been found."""

        if char == self.open:
            self.depth += 1
        elif char == self.close:
            self.depth -= 1
        return self.depth == 0

    def swapped(self) -> "BracketMatcher":
        return BracketMatcher(open=self.close, close=self.open, depth=self.depth)


def match_bracket(lines: Sequence[str], cursor: Cursor) -> Optional[Cursor]:
    """Return the position of the bracket paired with the one under ``cursor``."""

    row, col = cursor
    line = lines[row]
    if col >= len(line):
        return None
    char = line[col]
    if char in BRACKET_PAIRS:
        return _scan_forward(lines, row, col, BracketMatcher(char, BRACKET_PAIRS[char]))
    if char in CLOSING_BRACKETS:
        # walking backwards the closer plays the opener's role
        matcher = BracketMatcher(CLOSING_BRACKETS[char], char).swapped()
        return _scan_backward(lines, row, col, matcher)
    return None


def _scan_forward(
    lines: Sequence[str], row: int, col: int, matcher: BracketMatcher
) -> Optional[Cursor]:
    start = col + 1
    for r in range(row, len(lines)):
        line = lines[r]
        for c in range(start, len(line)):
            if matcher.feed(line[c]):
                return r, c
        start = 0
    return None


def _scan_backward(
    lines: Sequence[str], row: int, col: int, matcher: BracketMatcher
) -> Optional[Cursor]:
    end = col - 1
    for r in range(row, -1, -1):
        line = lines[r]
        for c in range(end, -1, -1):
            if matcher.feed(line[c]):
                return r, c
        if r > 0:
            end = len(lines[r - 1]) - 1
    return None


def selection_text(lines: Sequence[str], start: Cursor, end: Cursor) -> str:
    """Text covered by a normalized selection, inclusive of ``end``."""

    (start_row, start_col), (end_row, end_col) = start, end
    if start_row == end_row:
        return lines[start_row][start_col : end_col + 1]
    parts: List[str] = [lines[start_row][start_col:]]
    parts.extend(lines[start_row + 1 : end_row])
    parts.append(lines[end_row][: end_col + 1])
    return "\n".join(parts)


def remove_selection(lines: Sequence[str], start: Cursor, end: Cursor) -> List[str]:
    """Return the lines with a normalized, end-inclusive selection cut out."""

    (start_row, start_col), (end_row, end_col) = start, end
    result = list(lines)
    head = lines[start_row][:start_col]
    tail = lines[end_row][end_col + 1 :]
    result[start_row : end_row + 1] = [head + tail]
    return result
