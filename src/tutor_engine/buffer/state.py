"""Cursor, visual anchor, and pending-key state for buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

Cursor = Tuple[int, int]  # (row, column)
Selection = Tuple[Cursor, Cursor]


def normalize_selection(anchor: Cursor, cursor: Cursor) -> Selection:
    """Order two positions so the earlier one comes first."""

    if anchor <= cursor:
        return anchor, cursor
    return cursor, anchor


@dataclass(slots=True)
class BufferState:
    """Mutable cursor info plus the Normal-mode pending-keys queue."""

    cursor: Cursor = (0, 0)
    anchor: Optional[Cursor] = None
    pending_keys: List[str] = field(default_factory=list)

    @property
    def row(self) -> int:
        return self.cursor[0]

    @property
    def col(self) -> int:
        return self.cursor[1]

    def set_cursor(self, row: int, col: int) -> None:
        self.cursor = (row, col)

    @property
    def selection(self) -> Optional[Selection]:
        """Normalized visual selection, recomputed from anchor and cursor."""

        if self.anchor is None:
            return None
        return normalize_selection(self.anchor, self.cursor)

    def start_selection(self) -> None:
        self.anchor = self.cursor

    def clear_selection(self) -> None:
        self.anchor = None

    def push_pending(self, key: str) -> None:
        self.pending_keys.append(key)

    def clear_pending(self) -> None:
        self.pending_keys.clear()
