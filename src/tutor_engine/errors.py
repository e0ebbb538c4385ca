"""Error kinds raised by the workstation layers."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover - typing only
    from tutor_engine.exercises.models import Exercise


class TutorError(RuntimeError):
    """Base class for every recoverable workstation error."""


class IOFailure(TutorError):
    """Raised when an exercise or state file cannot be read or written."""

    def __init__(self, message: str, *, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class ParseFailure(TutorError):
    """Raised when the session-state file does not follow the expected layout."""

    def __init__(self, message: str, *, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.line = line


class CollaboratorFailure(TutorError):
    """Raised when the checker or another external collaborator fails."""

    def __init__(self, message: str, *, exercise: "Exercise | None" = None) -> None:
        super().__init__(message)
        self.exercise = exercise


class InvalidIndex(TutorError):
    """Raised when an exercise index falls outside the exercise list."""

    def __init__(self, index: int, *, length: int) -> None:
        super().__init__(
            f"Exercise index {index} is out of range for {length} exercises"
        )
        self.index = index
        self.length = length


__all__ = [
    "TutorError",
    "IOFailure",
    "ParseFailure",
    "CollaboratorFailure",
    "InvalidIndex",
]
