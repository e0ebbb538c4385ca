"""Core document data structures for tutor_engine buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence


def split_lines(text: str) -> List[str]:
    """Split ``text`` on any line ending, always returning at least one line."""

    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


@dataclass(slots=True)
class BufferDocument:
    """Mutable list-of-lines text storage.

    Lines are plain ``str`` objects, so every column is a code point index and
    multi-byte characters never split. The document is never empty: an empty
    text is a single empty line.
    """

    _lines: List[str] = field(default_factory=lambda: [""])
    version: int = 0

    @classmethod
    def from_text(cls, text: str) -> "BufferDocument":
        return cls(_lines=split_lines(text), version=0)

    def content(self) -> str:
        return "\n".join(self._lines)

    def snapshot(self) -> Sequence[str]:
        """Return the current lines without exposing internal mutability."""

        return tuple(self._lines)

    def restore(self, lines: Iterable[str]) -> None:
        """Replace every line, keeping the non-empty invariant."""

        restored = list(lines)
        self._lines = restored or [""]
        self._touch()

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, index: int) -> str:
        return self._lines[index]

    def line_length(self, index: int) -> int:
        return len(self._lines[index])

    def set_line(self, index: int, text: str) -> None:
        self._lines[index] = text
        self._touch()

    def insert_line(self, index: int, text: str = "") -> None:
        self._lines.insert(index, text)
        self._touch()

    def pop_line(self, index: int) -> str:
        """Remove and return a line; the last remaining line is cleared instead."""

        if len(self._lines) == 1:
            removed = self._lines[0]
            self._lines[0] = ""
        else:
            removed = self._lines.pop(index)
        self._touch()
        return removed

    def update_lines(self, start: int, end: int, new_lines: Iterable[str]) -> None:
        """Replace ``[start:end]`` by ``new_lines``."""

        self._lines[start:end] = list(new_lines)
        if not self._lines:
            self._lines.append("")
        self._touch()

    def _touch(self) -> None:
        self.version += 1
