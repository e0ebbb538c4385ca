"""Durable session record: current exercise plus the set of done exercises.

Layout::

    DON'T EDIT THIS FILE!
    <blank>
    <current exercise name>
    <blank>
    <done name>
    <done name>

Names, not indexes, are stored so the record survives reordering.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from tutor_engine.config import DEFAULT_STATE_FILE
from tutor_engine.errors import IOFailure, ParseFailure
from tutor_engine.runtime import telemetry

from .models import Exercise

STATE_FILE_HEADER = "DON'T EDIT THIS FILE!\n\n"
HEADER_LINES = 2

logger = telemetry.get_logger("tutor_engine.exercises.state")


class StateFileStatus(str, Enum):
    READ = "read"
    NOT_READ = "not_read"


@dataclass(frozen=True)
class SessionRecord:
    current: str
    done: Tuple[str, ...] = ()


def render_state(record: SessionRecord) -> str:
    parts = [STATE_FILE_HEADER, record.current, "\n"]
    for name in record.done:
        parts.append("\n")
        parts.append(name)
    return "".join(parts)


def parse_state(text: str) -> SessionRecord:
    """Parse a state record, raising ``ParseFailure`` on a malformed body."""

    lines = text.split("\n")[HEADER_LINES:]
    if not lines:
        raise ParseFailure("missing current exercise line", line=HEADER_LINES)
    current = lines[0]
    if not current:
        raise ParseFailure("current exercise name is empty", line=HEADER_LINES)
    if len(lines) < 2:
        raise ParseFailure("missing separator after current exercise", line=HEADER_LINES + 1)

    done: List[str] = []
    for name in lines[2:]:
        if not name:
            break
        done.append(name)
    return SessionRecord(current=current, done=tuple(done))


class StateStore:
    """Reads and rewrites the state file at ``path``."""

    def __init__(self, path: Path | str = DEFAULT_STATE_FILE) -> None:
        self.path = Path(path)

    def load(self, exercises: Sequence[Exercise]) -> Tuple[int, StateFileStatus]:
        """Apply the stored record to ``exercises``; returns (current index, status).

        A missing, unreadable or malformed file leaves every exercise pending
        and yields index 0 with ``NOT_READ``.
        """

        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("state file {} not read: {}", self.path, exc)
            return 0, StateFileStatus.NOT_READ

        try:
            record = parse_state(text)
        except ParseFailure as exc:
            logger.info("ignoring malformed state file {}: {}", self.path, exc)
            return 0, StateFileStatus.NOT_READ

        done = set(record.done)
        current_index = 0
        for index, exercise in enumerate(exercises):
            exercise.done = exercise.name in done
            if exercise.name == record.current:
                current_index = index
        return current_index, StateFileStatus.READ

    def write(self, current: Exercise, exercises: Iterable[Exercise]) -> None:
        record = SessionRecord(
            current=current.name,
            done=tuple(exercise.name for exercise in exercises if exercise.done),
        )
        try:
            self.path.write_text(render_state(record), encoding="utf-8")
        except OSError as exc:
            raise IOFailure(f"Failed to write the state file {self.path}", path=self.path) from exc


__all__ = [
    "STATE_FILE_HEADER",
    "SessionRecord",
    "StateFileStatus",
    "StateStore",
    "parse_state",
    "render_state",
]
