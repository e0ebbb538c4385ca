"""Cursor bounds checks for the line buffer.

A cursor is valid when its row indexes an existing line and its column is
at most that line's length (one past the last character is allowed so the
insert position at end of line is representable).
"""

from __future__ import annotations

from .document import BufferDocument
from .state import Cursor
from .sync import BufferValidationError


def cursor_in_bounds(document: BufferDocument, cursor: Cursor) -> bool:
    row, col = cursor
    if not 0 <= row < document.line_count:
        return False
    return 0 <= col <= document.line_length(row)


def ensure_cursor(document: BufferDocument, cursor: Cursor) -> Cursor:
    if not cursor_in_bounds(document, cursor):
        row = cursor[0]
        if 0 <= row < document.line_count:
            limit = f"line {row} has {document.line_length(row)} characters"
        else:
            limit = f"buffer has {document.line_count} lines"
        raise BufferValidationError(f"Cursor {cursor} out of range: {limit}", cursor=cursor)
    return cursor


def clamp_cursor(document: BufferDocument, row: int, col: int) -> Cursor:
    """Nearest valid position to ``(row, col)``."""

    row = min(max(row, 0), document.line_count - 1)
    return (row, min(max(col, 0), document.line_length(row)))
