from __future__ import annotations

import io
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import pytest

from tutor_engine.errors import CollaboratorFailure
from tutor_engine.exercises import (
    CheckProgress,
    Exercise,
    SubprocessChecker,
    VerificationScheduler,
    WorkCursor,
)


def make_exercises(count: int) -> list[Exercise]:
    return [Exercise(name=f"ex{index}", path=Path(f"ex{index}.py")) for index in range(count)]


class FlakyChecker:
    """Passes everything except ``failing``; ``flaky`` names raise on first call."""

    def __init__(
        self,
        *,
        failing: Iterable[str] = (),
        flaky: Iterable[str] = (),
        broken: Iterable[str] = (),
    ) -> None:
        self.failing = set(failing)
        self.flaky = set(flaky)
        self.broken = set(broken)
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def check(self, exercise: Exercise, sink=None) -> bool:
        with self._lock:
            self.calls.append(exercise.name)
            first_flaky_call = exercise.name in self.flaky
            self.flaky.discard(exercise.name)
        if first_flaky_call or exercise.name in self.broken:
            raise RuntimeError(f"{exercise.name} is busy")
        if sink is not None:
            sink.write(f"checked {exercise.name}\n")
        return exercise.name not in self.failing


class RecordingView:
    def __init__(self) -> None:
        self.total: Optional[int] = None
        self.updates: List[List[CheckProgress]] = []
        self.final: Optional[List[CheckProgress]] = None

    def start(self, total: int) -> None:
        self.total = total

    def update(self, progresses: Sequence[CheckProgress]) -> None:
        self.updates.append(list(progresses))

    def finish(self, progresses: Sequence[CheckProgress]) -> None:
        self.final = list(progresses)


def test_flaky_checks_are_retried_sequentially() -> None:
    checker = FlakyChecker(flaky={"ex3", "ex7"})
    scheduler = VerificationScheduler(checker, workers=4)

    report = scheduler.run(make_exercises(20))

    assert report.progresses == [CheckProgress.PASSED] * 20
    assert report.first_pending is None
    assert report.retried == [3, 7]
    assert checker.calls.count("ex3") == 2
    assert checker.calls.count("ex0") == 1


def test_first_pending_is_lowest_failing_index() -> None:
    checker = FlakyChecker(failing={"ex9", "ex4"})
    scheduler = VerificationScheduler(checker, workers=3)

    assert scheduler.check_all(make_exercises(12)) == 4
    assert scheduler.last_report is not None
    assert scheduler.last_report.n_failed == 2


def test_error_on_retry_counts_as_failed() -> None:
    checker = FlakyChecker(broken={"ex2"})
    scheduler = VerificationScheduler(checker, workers=2)

    report = scheduler.run(make_exercises(5))

    assert report.progresses[2] is CheckProgress.FAILED
    assert report.first_pending == 2
    assert checker.calls.count("ex2") == 2


def test_view_tracks_every_event() -> None:
    view = RecordingView()
    scheduler = VerificationScheduler(FlakyChecker(), workers=2, view=view)

    scheduler.run(make_exercises(3))

    assert view.total == 3
    # one CHECKING and one outcome event per exercise
    assert len(view.updates) == 6
    assert view.final == [CheckProgress.PASSED] * 3


def test_single_worker_and_more_workers_than_exercises() -> None:
    for workers in (1, 16):
        scheduler = VerificationScheduler(FlakyChecker(failing={"ex1"}), workers=workers)

        assert scheduler.check_all(make_exercises(3)) == 1


def test_empty_exercise_list() -> None:
    scheduler = VerificationScheduler(FlakyChecker(), workers=2)

    assert scheduler.check_all([]) is None


def test_check_one_wraps_checker_errors() -> None:
    scheduler = VerificationScheduler(FlakyChecker(broken={"ex0"}), workers=1)
    exercise = make_exercises(1)[0]

    with pytest.raises(CollaboratorFailure) as excinfo:
        scheduler.check_one(exercise)

    assert excinfo.value.exercise is exercise


def test_check_one_writes_to_sink() -> None:
    scheduler = VerificationScheduler(FlakyChecker(), workers=1)
    sink = io.StringIO()

    assert scheduler.check_one(make_exercises(1)[0], sink) is True
    assert sink.getvalue() == "checked ex0\n"


def test_work_cursor_hands_out_unique_indexes() -> None:
    cursor = WorkCursor()
    claimed: List[int] = []
    lock = threading.Lock()

    def claim_many() -> None:
        for _ in range(100):
            index = cursor.claim()
            with lock:
                claimed.append(index)

    threads = [threading.Thread(target=claim_many) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(claimed) == list(range(400))


def test_subprocess_checker_runs_steps(tmp_path: Path) -> None:
    script = tmp_path / "ok.py"
    script.write_text("print('fine')\n", encoding="utf-8")
    exercise = Exercise(name="ok", path=script, requires_test=False)
    checker = SubprocessChecker(["python", "{path}"])

    assert checker.steps(exercise) == [["python", str(script)]]


def test_subprocess_checker_adds_test_and_lint_steps() -> None:
    exercise = Exercise(name="ex1", path=Path("ex1.py"), requires_test=True, requires_lint=True)
    checker = SubprocessChecker(
        ["build", "{path}"], test_argv=["test", "{name}"], lint_argv=["lint", "{path}"]
    )

    assert checker.steps(exercise) == [
        ["build", "ex1.py"],
        ["test", "ex1"],
        ["lint", "ex1.py"],
    ]


def test_subprocess_checker_missing_executable() -> None:
    exercise = Exercise(name="ex1", path=Path("ex1.py"))
    checker = SubprocessChecker(["definitely-not-a-real-binary-xyz", "{path}"])

    with pytest.raises(CollaboratorFailure):
        checker.check(exercise)
