"""Parallel verification of the whole exercise list.

Workers only claim indexes and report outcomes over a queue; the status array
belongs to the collector on the calling thread. Checks that raised during the
parallel phase are retried one at a time once every worker has exited.
"""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, TextIO, Tuple, Union

from tutor_engine.config import default_parallelism
from tutor_engine.errors import CollaboratorFailure, TutorError
from tutor_engine.runtime import telemetry

from .checker import Checker
from .models import Exercise
from .progress import CheckProgress, NullProgressView, ProgressView

logger = telemetry.get_logger("tutor_engine.scheduler")


class Outcome(str, Enum):
    CHECKING = "checking"
    PASSED = "passed"
    FAILED = "failed"
    INDETERMINATE = "indeterminate"


# Indeterminate slots read as "not started" until the retry pass settles them.
_OUTCOME_PROGRESS = {
    Outcome.CHECKING: CheckProgress.CHECKING,
    Outcome.PASSED: CheckProgress.PASSED,
    Outcome.FAILED: CheckProgress.FAILED,
    Outcome.INDETERMINATE: CheckProgress.NOT_STARTED,
}

_WORKER_DONE = object()

Event = Union[Tuple[int, Outcome], object]


class WorkCursor:
    """Lock-guarded counter handing out exercise indexes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next = 0

    def claim(self) -> int:
        with self._lock:
            index = self._next
            self._next += 1
            return index


@dataclass
class CheckReport:
    progresses: List[CheckProgress] = field(default_factory=list)
    first_pending: Optional[int] = None
    retried: List[int] = field(default_factory=list)

    @property
    def n_passed(self) -> int:
        return sum(1 for progress in self.progresses if progress is CheckProgress.PASSED)

    @property
    def n_failed(self) -> int:
        return sum(1 for progress in self.progresses if progress is CheckProgress.FAILED)


class VerificationScheduler:
    def __init__(
        self,
        checker: Checker,
        *,
        workers: Optional[int] = None,
        view: Optional[ProgressView] = None,
    ) -> None:
        self.checker = checker
        self.workers = workers if workers and workers > 0 else default_parallelism()
        self.view: ProgressView = view or NullProgressView()
        self.last_report: Optional[CheckReport] = None

    def check_one(self, exercise: Exercise, sink: Optional[TextIO] = None) -> bool:
        """Verify a single exercise; checker errors surface as ``CollaboratorFailure``."""

        with telemetry.span(
            name="scheduler::check_one",
            component="tutor_engine.scheduler",
            metadata={"exercise": exercise.name},
        ):
            try:
                return bool(self.checker.check(exercise, sink))
            except TutorError:
                raise
            except Exception as exc:
                raise CollaboratorFailure(
                    f"Checker failed for {exercise.name}: {exc}", exercise=exercise
                ) from exc

    def check_all(self, exercises: Sequence[Exercise]) -> Optional[int]:
        return self.run(exercises).first_pending

    def run(self, exercises: Sequence[Exercise]) -> CheckReport:
        """Check every exercise and return the settled progress array."""

        total = len(exercises)
        report = CheckReport(progresses=[CheckProgress.NOT_STARTED] * total)
        if total == 0:
            self.last_report = report
            return report

        worker_count = min(self.workers, total)
        with telemetry.span(
            name="scheduler::check_all",
            component="tutor_engine.scheduler",
            metadata={"exercises": total, "workers": worker_count},
        ):
            self.view.start(total)
            try:
                self._parallel_phase(exercises, worker_count, report)
                self._retry_phase(exercises, report)
            finally:
                self.view.finish(report.progresses)

        logger.info(
            "checked {} exercises: {} passed, {} failed, {} retried",
            total,
            report.n_passed,
            report.n_failed,
            len(report.retried),
        )
        self.last_report = report
        return report

    def _parallel_phase(
        self, exercises: Sequence[Exercise], worker_count: int, report: CheckReport
    ) -> None:
        cursor = WorkCursor()
        events: "queue.Queue[Event]" = queue.Queue()
        threads = [
            threading.Thread(
                target=self._worker,
                args=(exercises, cursor, events),
                name=f"tutor-check-{number}",
                daemon=True,
            )
            for number in range(worker_count)
        ]
        for thread in threads:
            thread.start()

        finished = 0
        while finished < worker_count:
            event = events.get()
            if event is _WORKER_DONE:
                finished += 1
                continue
            index, outcome = event  # type: ignore[misc]
            report.progresses[index] = _OUTCOME_PROGRESS[outcome]
            self.view.update(report.progresses)

        for thread in threads:
            thread.join()

    def _worker(
        self,
        exercises: Sequence[Exercise],
        cursor: WorkCursor,
        events: "queue.Queue[Event]",
    ) -> None:
        try:
            while True:
                index = cursor.claim()
                if index >= len(exercises):
                    break
                events.put((index, Outcome.CHECKING))
                events.put((index, self._attempt(exercises[index])))
        finally:
            events.put(_WORKER_DONE)

    def _attempt(self, exercise: Exercise) -> Outcome:
        try:
            passed = self.checker.check(exercise)
        except Exception as exc:  # settled by the sequential retry
            logger.debug("check of {} raised, retrying later: {}", exercise.name, exc)
            return Outcome.INDETERMINATE
        return Outcome.PASSED if passed else Outcome.FAILED

    def _retry_phase(self, exercises: Sequence[Exercise], report: CheckReport) -> None:
        for index, exercise in enumerate(exercises):
            progress = report.progresses[index]
            if progress in (CheckProgress.NOT_STARTED, CheckProgress.CHECKING):
                report.retried.append(index)
                report.progresses[index] = CheckProgress.CHECKING
                self.view.update(report.progresses)
                try:
                    passed = bool(self.checker.check(exercise))
                except Exception as exc:  # a second failure is final
                    logger.warning("check of {} failed on retry: {}", exercise.name, exc)
                    passed = False
                progress = CheckProgress.PASSED if passed else CheckProgress.FAILED
                report.progresses[index] = progress
                self.view.update(report.progresses)
            if progress is CheckProgress.FAILED and report.first_pending is None:
                report.first_pending = index


__all__ = ["CheckReport", "Outcome", "VerificationScheduler", "WorkCursor"]
