"""High-level buffer façade combining document, state, register, and undo."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import ContextManager, Optional

from tutor_engine.runtime import telemetry

from . import textobjects
from .document import BufferDocument
from .registers import YankRegister
from .state import BufferState, Cursor
from .sync import BufferMirror
from .undo import Snapshot, SnapshotHistory
from .validation import clamp_cursor, ensure_cursor


class Buffer:
    """Line buffer with cursor, yank register, and bounded undo history.

    Primitive edits (``insert_char``, ``delete_line``...) never record undo
    snapshots themselves; callers open a :class:`Transaction` (or call
    :meth:`save_snapshot`) first.
    """

    def __init__(
        self,
        *,
        name: str = "default",
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        registers: Optional[YankRegister] = None,
        history: Optional[SnapshotHistory] = None,
    ) -> None:
        self.name = name
        self.document = document or BufferDocument()
        self.state = state or BufferState()
        self.registers = registers or YankRegister()
        self.history = history or SnapshotHistory()

    @classmethod
    def from_text(
        cls, text: str, *, name: str = "default", undo_limit: Optional[int] = None
    ) -> "Buffer":
        history = SnapshotHistory(undo_limit) if undo_limit else None
        return cls(name=name, document=BufferDocument.from_text(text), history=history)

    # ------------------------------------------------------------------ views

    def content(self) -> str:
        return self.document.content()

    @property
    def lines(self):
        return self.document.snapshot()

    @property
    def cursor(self) -> Cursor:
        return self.state.cursor

    def current_line(self) -> str:
        return self.document.get_line(self.state.row)

    def char_at_cursor(self) -> Optional[str]:
        row, col = self.state.cursor
        line = self.document.get_line(row)
        return line[col] if col < len(line) else None

    def mirror(self, *, attributes: Optional[dict[str, str]] = None) -> BufferMirror:
        return BufferMirror(
            text=self.content(),
            cursor=self.state.cursor,
            selection=self.state.selection,
            attributes=dict(attributes or {}),
        )

    # ----------------------------------------------------------------- cursor

    def set_cursor(self, row: int, col: int) -> Cursor:
        self.state.cursor = clamp_cursor(self.document, row, col)
        return self.state.cursor

    def move_to(self, cursor: Cursor) -> Cursor:
        """Move to an explicit position, rejecting out-of-range cursors."""

        self.state.cursor = ensure_cursor(self.document, cursor)
        return self.state.cursor

    def clamp(self) -> Cursor:
        return self.set_cursor(*self.state.cursor)

    def move_left(self) -> None:
        row, col = self.state.cursor
        if col > 0:
            self.state.set_cursor(row, col - 1)
        elif row > 0:
            self.state.set_cursor(row - 1, self.document.line_length(row - 1))

    def move_right(self) -> None:
        row, col = self.state.cursor
        if col < self.document.line_length(row):
            self.state.set_cursor(row, col + 1)
        elif row + 1 < self.document.line_count:
            self.state.set_cursor(row + 1, 0)

    def move_up(self) -> None:
        row, col = self.state.cursor
        if row > 0:
            self.set_cursor(row - 1, col)

    def move_down(self) -> None:
        row, col = self.state.cursor
        if row + 1 < self.document.line_count:
            self.set_cursor(row + 1, col)

    def move_to_line_start(self) -> None:
        self.state.set_cursor(self.state.row, 0)

    def move_to_line_end(self) -> None:
        row = self.state.row
        self.state.set_cursor(row, self.document.line_length(row))

    def move_to_first_non_blank(self) -> None:
        row = self.state.row
        self.state.set_cursor(row, textobjects.first_non_blank(self.document.get_line(row)))

    def goto_first_line(self) -> None:
        self.state.set_cursor(0, 0)

    def goto_last_line(self) -> None:
        self.state.set_cursor(self.document.line_count - 1, 0)

    def move_word_forward(self) -> None:
        self.set_cursor(*textobjects.next_word_start(self.lines, self.state.cursor))

    def move_word_backward(self) -> None:
        self.set_cursor(*textobjects.previous_word_start(self.lines, self.state.cursor))

    def jump_to_matching_bracket(self) -> Optional[Cursor]:
        target = textobjects.match_bracket(self.lines, self.state.cursor)
        if target is not None:
            self.state.set_cursor(*target)
        return target

    # ------------------------------------------------------------ text edits

    def insert_char(self, char: str) -> None:
        row, col = self.state.cursor
        line = self.document.get_line(row)
        self.document.set_line(row, line[:col] + char + line[col:])
        self.state.set_cursor(row, col + len(char))

    def insert_text(self, text: str) -> None:
        for index, chunk in enumerate(text.split("\n")):
            if index:
                self.insert_newline()
            if chunk:
                self.insert_char(chunk)

    def insert_newline(self, indent: str = "") -> None:
        row, col = self.state.cursor
        line = self.document.get_line(row)
        self.document.set_line(row, line[:col])
        self.document.insert_line(row + 1, indent + line[col:])
        self.state.set_cursor(row + 1, len(indent))

    def backspace(self) -> None:
        row, col = self.state.cursor
        if col > 0:
            line = self.document.get_line(row)
            self.document.set_line(row, line[: col - 1] + line[col:])
            self.state.set_cursor(row, col - 1)
        elif row > 0:
            previous = self.document.get_line(row - 1)
            current = self.document.pop_line(row)
            self.document.set_line(row - 1, previous + current)
            self.state.set_cursor(row - 1, len(previous))

    def delete(self) -> None:
        row, col = self.state.cursor
        line = self.document.get_line(row)
        if col < len(line):
            self.document.set_line(row, line[:col] + line[col + 1 :])
        elif row + 1 < self.document.line_count:
            following = self.document.pop_line(row + 1)
            self.document.set_line(row, line + following)

    def delete_char(self) -> Optional[str]:
        """Delete the character under the cursor without joining lines."""

        char = self.char_at_cursor()
        if char is None:
            return None
        self.delete()
        self.clamp()
        return char

    def replace_char(self, char: str) -> bool:
        row, col = self.state.cursor
        line = self.document.get_line(row)
        if col >= len(line):
            return False
        self.document.set_line(row, line[:col] + char + line[col + 1 :])
        return True

    # ------------------------------------------------------------ line edits

    def delete_line(self) -> str:
        row = self.state.row
        removed = self.document.pop_line(row)
        self.registers.yank_to(removed, register_type="line")
        self.set_cursor(min(row, self.document.line_count - 1), 0)
        return removed

    def yank_line(self) -> str:
        text = self.current_line()
        self.registers.yank_to(text, register_type="line")
        return text

    def open_line_below(self) -> None:
        row = self.state.row
        self.document.insert_line(row + 1, "")
        self.state.set_cursor(row + 1, 0)

    def open_line_above(self) -> None:
        row = self.state.row
        self.document.insert_line(row, "")
        self.state.set_cursor(row, 0)

    def paste(self) -> bool:
        value = self.registers.get()
        if value is None:
            return False
        if value.type == "line":
            row = self.state.row
            self.document.update_lines(row + 1, row + 1, value.text.split("\n"))
            self.state.set_cursor(row + 1, 0)
        else:
            self.insert_text(value.text)
        return True

    # ---------------------------------------------------------- text objects

    def delete_inner_word(self) -> Optional[str]:
        return self._delete_span(textobjects.inner_word)

    def delete_around_word(self) -> Optional[str]:
        return self._delete_span(textobjects.around_word)

    def _delete_span(self, finder) -> Optional[str]:
        row, col = self.state.cursor
        line = self.document.get_line(row)
        span = finder(line, col)
        if span is None:
            return None
        start, end = span
        removed = line[start:end]
        self.document.set_line(row, line[:start] + line[end:])
        self.registers.yank_to(removed)
        self.set_cursor(row, start)
        return removed

    # ------------------------------------------------------------- selection

    def selection_text(self) -> Optional[str]:
        selection = self.state.selection
        if selection is None:
            return None
        return textobjects.selection_text(self.lines, *selection)

    def yank_selection(self) -> Optional[str]:
        text = self.selection_text()
        if text is not None:
            self.registers.yank_to(text)
        return text

    def delete_selection(self) -> Optional[str]:
        selection = self.state.selection
        if selection is None:
            return None
        start, end = selection
        text = textobjects.selection_text(self.lines, start, end)
        self.registers.yank_to(text)
        self.document.restore(textobjects.remove_selection(self.lines, start, end))
        self.set_cursor(*start)
        return text

    # ---------------------------------------------------------------- history

    def save_snapshot(self) -> None:
        self.history.push(self._capture())

    def undo(self) -> bool:
        snapshot = self.history.undo(self._capture())
        if snapshot is None:
            return False
        self._apply(snapshot)
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo(self._capture())
        if snapshot is None:
            return False
        self._apply(snapshot)
        return True

    def transaction(self, label: str) -> "Transaction":
        return Transaction(self, label)

    def _capture(self) -> Snapshot:
        return Snapshot.capture(self.document.snapshot(), *self.state.cursor)

    def _apply(self, snapshot: Snapshot) -> None:
        self.document.restore(snapshot.lines)
        self.set_cursor(snapshot.row, snapshot.col)


class Transaction(AbstractContextManager["Transaction"]):
    """Record an undo snapshot and trace the wrapped mutation."""

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None
        self._before_version: int = 0

    def __enter__(self) -> "Transaction":
        self.buffer.save_snapshot()
        self._before_version = self.buffer.document.version
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component=True,
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        return self

    @property
    def changed(self) -> bool:
        return self.buffer.document.version != self._before_version

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False
