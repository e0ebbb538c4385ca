"""Bounded snapshot-based undo/redo history."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Sequence

from tutor_engine.config import DEFAULT_UNDO_LIMIT


@dataclass(frozen=True, slots=True)
class Snapshot:
    lines: tuple[str, ...]
    row: int
    col: int

    @classmethod
    def capture(cls, lines: Sequence[str], row: int, col: int) -> "Snapshot":
        return cls(lines=tuple(lines), row=row, col=col)


class SnapshotHistory:
    """Undo stack capped at ``limit`` entries plus an unbounded redo stack.

    Pushing past the cap evicts the oldest snapshot. Any new push clears the
    redo stack.
    """

    def __init__(self, limit: int = DEFAULT_UNDO_LIMIT) -> None:
        if limit <= 0:
            raise ValueError("limit must be positive")
        self.limit = limit
        self._undo: Deque[Snapshot] = deque(maxlen=limit)
        self._redo: List[Snapshot] = []

    def push(self, snapshot: Snapshot) -> None:
        self._undo.append(snapshot)
        self._redo.clear()

    def undo(self, current: Snapshot) -> Optional[Snapshot]:
        """Pop the latest snapshot, parking ``current`` on the redo stack."""

        if not self._undo:
            return None
        snapshot = self._undo.pop()
        self._redo.append(current)
        return snapshot

    def redo(self, current: Snapshot) -> Optional[Snapshot]:
        if not self._redo:
            return None
        snapshot = self._redo.pop()
        self._undo.append(current)
        return snapshot

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def __len__(self) -> int:
        return len(self._undo)
