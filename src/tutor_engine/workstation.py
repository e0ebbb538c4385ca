"""Editor session joining one open exercise buffer with the exercise session."""

from __future__ import annotations

import io
from enum import Enum
from pathlib import Path
from typing import Optional

from tutor_engine.actions.command import command_names
from tutor_engine.buffer import Buffer, BufferMirror
from tutor_engine.config import Settings
from tutor_engine.errors import IOFailure
from tutor_engine.exercises import (
    Checker,
    ExerciseResetter,
    ExerciseSession,
    ExercisesProgress,
    ProgressView,
    VerificationScheduler,
)
from tutor_engine.modes import KeyInput, ModeBus, ModeContext, ModeResult
from tutor_engine.modes.mode_manager import ModeManager
from tutor_engine.runtime import telemetry


class View(str, Enum):
    EDITOR = "editor"
    SOLUTION = "solution"
    HELP = "help"


def _on_off(flag: bool) -> str:
    return "ON" if flag else "OFF"


class Workstation:
    """Drives the modal editor for the current exercise.

    Implements the command surface the ``:`` actions call into. Every
    user-visible outcome lands in :attr:`status_message`.
    """

    def __init__(
        self,
        session: ExerciseSession,
        checker: Checker,
        *,
        settings: Optional[Settings] = None,
        scheduler: Optional[VerificationScheduler] = None,
        resetter: Optional[ExerciseResetter] = None,
        progress_view: Optional[ProgressView] = None,
    ) -> None:
        self.session = session
        self.settings = settings or Settings()
        self.scheduler = scheduler or VerificationScheduler(
            checker, workers=self.settings.workers, view=progress_view
        )
        self.resetter = resetter or ExerciseResetter()
        self.auto_advance = self.settings.auto_advance
        self.auto_verify = self.settings.auto_verify
        self.modified = False
        self.status_message = ""
        self.output = ""
        self.view = View.EDITOR
        self.solution_text: Optional[str] = None
        self.last_mtime: Optional[float] = None
        self.logger = telemetry.get_logger("tutor_engine.workstation")

        self.bus = ModeBus()
        self.context = ModeContext(
            buffer=Buffer(),
            bus=self.bus,
            extras={"command_host": self},
        )
        self.modes = ModeManager.standard(self.context)
        self.bus.subscribe("buffer.changed", self._on_buffer_changed)
        self.open_current()

    # ------------------------------------------------------------------ state

    @property
    def buffer(self) -> Buffer:
        return self.context.buffer

    @property
    def path(self) -> Path:
        return self.session.current_exercise.path

    @property
    def mode(self) -> str:
        return self.modes.active_name or "normal"

    def mirror(self) -> BufferMirror:
        exercise = self.session.current_exercise
        command_state = self.context.extras.get("command_state") or {}
        return self.buffer.mirror(
            attributes={
                "mode": self.mode,
                "exercise": exercise.name,
                "path": str(exercise.path),
                "modified": str(self.modified).lower(),
                "progress": f"{self.session.n_done}/{len(self.session)}",
                "status": self.status_message,
                "view": self.view.value,
                "command": str(command_state.get("text", "")),  # type: ignore[union-attr]
            }
        )

    def notify(self, message: str) -> None:
        self.status_message = message
        self.logger.debug("status: {}", message)

    def handle_key(self, key: KeyInput) -> ModeResult:
        return self.modes.handle_key(key)

    # ------------------------------------------------------------------ files

    def open_current(self) -> None:
        """Load the current exercise into a fresh buffer."""

        path = self.path
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise IOFailure(f"Failed to read {path}", path=path) from exc
        self.context.buffer = Buffer.from_text(
            text, name=self.session.current_exercise.name, undo_limit=self.settings.undo_limit
        )
        self.modes.reset()
        self.modified = False
        self.view = View.EDITOR
        self.solution_text = None
        self.last_mtime = self._mtime()
        telemetry.record_event(
            "exercise.open",
            level="debug",
            data={"exercise": self.session.current_exercise.name},
            logger_name="tutor_engine.workstation",
        )

    def save(self) -> None:
        path = self.path
        try:
            path.write_text(self.buffer.content(), encoding="utf-8")
        except OSError as exc:
            raise IOFailure(f"Failed to save {path}", path=path) from exc
        self.modified = False
        self.last_mtime = self._mtime()
        self.notify("File saved!")

    def reload(self) -> None:
        self.open_current()

    def poll_external_change(self) -> bool:
        """Reload when the file changed on disk and the buffer has no edits."""

        current = self._mtime()
        last = self.last_mtime
        if last is not None and current is not None and current > last and not self.modified:
            self.reload()
            self.notify("File changed externally, reloaded!")
            if self.auto_verify:
                self.verify_current()
            return True
        self.last_mtime = current
        return False

    def _mtime(self) -> Optional[float]:
        try:
            return self.path.stat().st_mtime
        except OSError:
            return None

    # ----------------------------------------------------------- verification

    def verify_current(self) -> bool:
        self.save()
        exercise = self.session.current_exercise
        self.notify(f"Checking {exercise.file_name}...")
        sink = io.StringIO()
        passed = self.scheduler.check_one(exercise, sink)
        self.output = sink.getvalue()
        if not passed:
            self.notify(self.output.strip() or f"{exercise.file_name} failed")
            return False

        if self.auto_advance:
            progress = self.session.done_current_exercise(self.scheduler)
            if progress is ExercisesProgress.ALL_DONE:
                self.notify("Congratulations! All exercises complete!")
            else:
                self.open_current()
                self.notify(f"Complete! Auto-advanced to: {self.session.current_exercise.file_name}")
            return True

        self.session.set_status(self.session.current_index, True)
        self.session.write()
        message = "Exercise passed! Press ']' for next."
        solution = self.session.solution_path()
        if solution is not None:
            message += f"\n\nSolution available: {solution}"
        self.notify(message)
        return True

    def check_all(self) -> Optional[int]:
        if self.modified:
            self.save()
        first_pending = self.session.check_all(self.scheduler)
        if first_pending is None:
            self.notify("Congratulations! All exercises complete!")
            return None
        if first_pending != self.session.current_index:
            self.session.set_current_index(first_pending)
            self.open_current()
        self.notify(
            f"{self.session.n_done}/{len(self.session)} exercises done; "
            f"next pending: {self.session.current_exercise.file_name}"
        )
        return first_pending

    # ------------------------------------------------------------- navigation

    def next_exercise(self) -> None:
        index = self.session.current_index
        if index + 1 < len(self.session):
            self.session.set_current_index(index + 1)
            self.open_current()
        self.notify(f"Exercise: {self.session.current_exercise.file_name}")

    def previous_exercise(self) -> None:
        index = self.session.current_index
        if index > 0:
            self.session.set_current_index(index - 1)
            self.open_current()
        self.notify(f"Exercise: {self.session.current_exercise.file_name}")

    def reset_exercise(self) -> None:
        self.session.reset_current_exercise(self.resetter)
        self.open_current()

    # ---------------------------------------------------------------- toggles

    def show_hint(self) -> None:
        self.notify(self.session.current_exercise.hint or "No hint for this exercise")

    def toggle_solution(self) -> None:
        if self.view is View.SOLUTION:
            self.view = View.EDITOR
            self.solution_text = None
            self.notify("Solution hidden")
            return
        path = self.session.solution_path()
        if path is None:
            self.notify("No solution available for this exercise")
            return
        try:
            self.solution_text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            self.logger.warning("could not read solution {}", path)
            self.notify("Could not read solution file")
            return
        self.view = View.SOLUTION
        self.notify(f"Solution loaded: {path}")

    def toggle_help(self) -> None:
        self.view = View.EDITOR if self.view is View.HELP else View.HELP
        self.notify("Help" if self.view is View.HELP else "Help closed")

    def help_lines(self) -> list[str]:
        lines: list[str] = []
        registry = self.modes.keymap_registry
        for mode in ("normal", "insert", "visual", "command"):
            lines.append(f"[{mode}]")
            lines.extend(f"  {keys:<12} {description}" for keys, description in registry.help_entries(mode))
        lines.append("[commands]")
        lines.append("  " + " ".join(f":{name}" for name in command_names()))
        return lines

    def toggle_auto_advance(self) -> bool:
        self.auto_advance = not self.auto_advance
        self.notify(f"Auto-advance: {_on_off(self.auto_advance)}")
        return self.auto_advance

    def toggle_auto_verify(self) -> bool:
        self.auto_verify = not self.auto_verify
        self.notify(f"Auto-verify on file change: {_on_off(self.auto_verify)}")
        return self.auto_verify

    def _on_buffer_changed(self, payload: object) -> None:
        del payload
        self.modified = True


__all__ = ["View", "Workstation"]
