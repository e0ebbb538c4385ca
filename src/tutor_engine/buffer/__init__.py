"""Line buffer, cursor motion, text objects, and undo/redo history."""

from .buffer import Buffer, Transaction
from .document import BufferDocument
from .registers import RegisterValue, YankRegister
from .state import BufferState, Cursor, Selection, normalize_selection
from .sync import BufferMirror, BufferValidationError
from .undo import Snapshot, SnapshotHistory
from .validation import clamp_cursor, ensure_cursor

__all__ = [
    "BufferDocument",
    "BufferState",
    "Cursor",
    "Selection",
    "normalize_selection",
    "RegisterValue",
    "YankRegister",
    "Snapshot",
    "SnapshotHistory",
    "Buffer",
    "Transaction",
    "BufferMirror",
    "BufferValidationError",
    "clamp_cursor",
    "ensure_cursor",
]
