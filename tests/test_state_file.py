from __future__ import annotations

from pathlib import Path

import pytest

from tutor_engine.errors import IOFailure, ParseFailure
from tutor_engine.exercises import Exercise, StateFileStatus, StateStore
from tutor_engine.exercises.state_file import SessionRecord, parse_state, render_state


def make_exercises(count: int = 8) -> list[Exercise]:
    return [Exercise(name=f"ex{index}", path=Path(f"exercises/ex{index}.py")) for index in range(count)]


def test_render_state_layout() -> None:
    text = render_state(SessionRecord(current="ex5", done=("ex1", "ex3")))

    assert text == "DON'T EDIT THIS FILE!\n\nex5\n\nex1\nex3"


def test_round_trip(tmp_path: Path) -> None:
    store = StateStore(tmp_path / ".tutor-state.txt")
    exercises = make_exercises()
    exercises[1].done = True
    exercises[3].done = True

    store.write(exercises[5], exercises)
    reloaded = make_exercises()
    index, status = store.load(reloaded)

    assert status is StateFileStatus.READ
    assert index == 5
    assert {exercise.name for exercise in reloaded if exercise.done} == {"ex1", "ex3"}


def test_write_truncates_previous_content(tmp_path: Path) -> None:
    path = tmp_path / "state"
    store = StateStore(path)
    exercises = make_exercises()
    for exercise in exercises:
        exercise.done = True
    store.write(exercises[0], exercises)

    for exercise in exercises:
        exercise.done = False
    store.write(exercises[2], exercises)

    assert path.read_text(encoding="utf-8") == "DON'T EDIT THIS FILE!\n\nex2\n"


def test_truncated_file_yields_fresh_default(tmp_path: Path) -> None:
    path = tmp_path / "state"
    path.write_text("DON'T EDIT THIS FILE!\n\nex5", encoding="utf-8")
    exercises = make_exercises()

    index, status = StateStore(path).load(exercises)

    assert (index, status) == (0, StateFileStatus.NOT_READ)
    assert not any(exercise.done for exercise in exercises)


def test_missing_file_yields_fresh_default(tmp_path: Path) -> None:
    index, status = StateStore(tmp_path / "absent").load(make_exercises())

    assert (index, status) == (0, StateFileStatus.NOT_READ)


def test_empty_current_name_is_rejected() -> None:
    with pytest.raises(ParseFailure):
        parse_state("DON'T EDIT THIS FILE!\n\n\n\nex1")


def test_done_names_stop_at_first_blank_line() -> None:
    record = parse_state("DON'T EDIT THIS FILE!\n\nex2\n\nex1\n\nex3\n")

    assert record == SessionRecord(current="ex2", done=("ex1",))


def test_unknown_names_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "state"
    path.write_text("DON'T EDIT THIS FILE!\n\nrenamed\n\nex1\ngone\n", encoding="utf-8")
    exercises = make_exercises(3)

    index, status = StateStore(path).load(exercises)

    assert status is StateFileStatus.READ
    assert index == 0
    assert [exercise.done for exercise in exercises] == [False, True, False]


def test_write_failure_raises_io_failure(tmp_path: Path) -> None:
    store = StateStore(tmp_path / "missing-dir" / "state")
    exercises = make_exercises(1)

    with pytest.raises(IOFailure) as excinfo:
        store.write(exercises[0], exercises)

    assert excinfo.value.path == tmp_path / "missing-dir" / "state"
