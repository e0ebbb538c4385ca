"""Exercise session: current exercise, done flags and their persistence."""

from __future__ import annotations

import shutil
import subprocess
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from tutor_engine.config import DEFAULT_STATE_FILE
from tutor_engine.errors import CollaboratorFailure, InvalidIndex, TutorError
from tutor_engine.runtime import telemetry

from .models import Exercise
from .progress import CheckProgress
from .state_file import StateFileStatus, StateStore

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .scheduler import VerificationScheduler

logger = telemetry.get_logger("tutor_engine.session")


class ExercisesProgress(str, Enum):
    ALL_DONE = "all_done"
    NEW_PENDING = "new_pending"


class ExerciseResetter:
    """Restores an exercise file to its pristine content.

    With ``pristine_dir`` the file is copied from the mirror tree under that
    directory; otherwise the working copy is stashed with git.
    """

    def __init__(
        self,
        *,
        pristine_dir: Path | str | None = None,
        git: str = "git",
        cwd: Path | str | None = None,
    ) -> None:
        self.pristine_dir = Path(pristine_dir) if pristine_dir is not None else None
        self.git = git
        self.cwd = Path(cwd) if cwd is not None else None

    def pristine_path(self, exercise: Exercise) -> Path:
        if self.pristine_dir is None:
            raise CollaboratorFailure(
                f"No pristine directory configured for {exercise.name}", exercise=exercise
            )
        if exercise.directory:
            return self.pristine_dir / exercise.directory / exercise.file_name
        return self.pristine_dir / exercise.file_name

    def reset(self, exercise: Exercise) -> None:
        if self.pristine_dir is not None:
            source = self.pristine_path(exercise)
            try:
                shutil.copyfile(source, exercise.path)
            except OSError as exc:
                raise CollaboratorFailure(
                    f"Failed to restore {exercise.path} from {source}", exercise=exercise
                ) from exc
            return

        argv = [self.git, "stash", "push", "--", str(exercise.path)]
        try:
            completed = subprocess.run(
                argv,
                cwd=self.cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise CollaboratorFailure(f"Failed to run {self.git}: {exc}", exercise=exercise) from exc
        if completed.returncode != 0:
            raise CollaboratorFailure(
                f"`git stash push -- {exercise.path}` failed: {completed.stderr.strip()}",
                exercise=exercise,
            )


class ExerciseSession:
    """Owns the exercise list, the current index and the state store."""

    def __init__(
        self,
        exercises: Sequence[Exercise],
        *,
        store: Optional[StateStore] = None,
        current_index: int = 0,
    ) -> None:
        if not exercises:
            raise ValueError("an exercise session needs at least one exercise")
        self.exercises: List[Exercise] = list(exercises)
        self.store = store or StateStore(DEFAULT_STATE_FILE)
        if not 0 <= current_index < len(self.exercises):
            raise InvalidIndex(current_index, length=len(self.exercises))
        self._current = current_index
        self._n_done = sum(1 for exercise in self.exercises if exercise.done)

    @classmethod
    def load(
        cls,
        exercises: Sequence[Exercise],
        *,
        state_file: Path | str = DEFAULT_STATE_FILE,
    ) -> Tuple["ExerciseSession", StateFileStatus]:
        store = StateStore(state_file)
        index, status = store.load(exercises)
        logger.debug("state file {} -> {}", store.path, status.value)
        return cls(exercises, store=store, current_index=index), status

    @property
    def current_index(self) -> int:
        return self._current

    @property
    def current_exercise(self) -> Exercise:
        return self.exercises[self._current]

    @property
    def n_done(self) -> int:
        return self._n_done

    @property
    def n_pending(self) -> int:
        return len(self.exercises) - self._n_done

    def __len__(self) -> int:
        return len(self.exercises)

    def write(self) -> None:
        self.store.write(self.current_exercise, self.exercises)

    def set_current_index(self, index: int) -> None:
        if not 0 <= index < len(self.exercises):
            raise InvalidIndex(index, length=len(self.exercises))
        if index == self._current:
            return
        self._current = index
        self.write()

    def set_current_by_name(self, name: str) -> None:
        for index, exercise in enumerate(self.exercises):
            if exercise.name == name:
                self.set_current_index(index)
                return
        raise TutorError(f"No exercise found for '{name}'")

    def set_status(self, index: int, done: bool) -> bool:
        """Update one done flag without persisting; returns whether it changed."""

        exercise = self._exercise(index)
        if exercise.done == done:
            return False
        exercise.done = done
        self._n_done += 1 if done else -1
        return True

    def set_pending(self, index: int) -> None:
        if self.set_status(index, False):
            self.write()

    def next_pending_index(self) -> Optional[int]:
        """First pending exercise after the current one, wrapping to the start."""

        after = range(self._current + 1, len(self.exercises))
        before = range(0, self._current)
        for index in (*after, *before):
            if not self.exercises[index].done:
                return index
        return None

    def done_current_exercise(self, scheduler: "VerificationScheduler") -> ExercisesProgress:
        self.set_status(self._current, True)
        pending = self.next_pending_index()
        if pending is not None:
            self._current = pending
            self.write()
            return ExercisesProgress.NEW_PENDING

        first_pending = self.check_all(scheduler)
        if first_pending is None:
            return ExercisesProgress.ALL_DONE
        self.set_current_index(first_pending)
        return ExercisesProgress.NEW_PENDING

    def check_all(self, scheduler: "VerificationScheduler") -> Optional[int]:
        """Run the bulk pass, apply its outcomes and persist once."""

        report = scheduler.run(self.exercises)
        for index, progress in enumerate(report.progresses):
            self.set_status(index, progress is CheckProgress.PASSED)
        self.write()
        return report.first_pending

    def solution_path(self) -> Optional[Path]:
        path = self.current_exercise.solution_path
        if path is not None and path.exists():
            return path
        return None

    def reset_current_exercise(self, resetter: ExerciseResetter) -> Path:
        self.set_pending(self._current)
        exercise = self.current_exercise
        resetter.reset(exercise)
        logger.info("reset {}", exercise.path)
        return exercise.path

    def _exercise(self, index: int) -> Exercise:
        if not 0 <= index < len(self.exercises):
            raise InvalidIndex(index, length=len(self.exercises))
        return self.exercises[index]


__all__ = ["ExerciseResetter", "ExerciseSession", "ExercisesProgress"]
