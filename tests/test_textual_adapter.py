from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List

import pytest

from tutor_engine.adapters.textual import TextualTutorAdapter, TextualUIHooks
from tutor_engine.adapters.textual import app as textual_app
from tutor_engine.buffer import BufferMirror
from tutor_engine.config import Settings
from tutor_engine.exercises import Exercise, ExerciseSession, StateStore
from tutor_engine.modes import CommandSignal
from tutor_engine.runtime import telemetry
from tutor_engine.workstation import Workstation


class AlwaysPass:
    def check(self, exercise: Exercise, sink=None) -> bool:
        return True


def make_workstation(tmp_path: Path, text: str = "hello world\n") -> Workstation:
    path = tmp_path / "intro1.py"
    path.write_text(text, encoding="utf-8")
    session = ExerciseSession(
        [Exercise(name="intro1", path=path)], store=StateStore(tmp_path / "state")
    )
    return Workstation(session, AlwaysPass(), settings=Settings(check_parallelism=1))


def make_adapter(tmp_path: Path, **hooks: Any) -> TextualTutorAdapter:
    hooks.setdefault("update_buffer", lambda mirror: None)
    return TextualTutorAdapter(make_workstation(tmp_path), TextualUIHooks(**hooks))


def test_adapter_updates_buffer_and_status(tmp_path: Path) -> None:
    mirrors: List[BufferMirror] = []
    statuses: List[str] = []
    adapter = make_adapter(
        tmp_path, update_buffer=mirrors.append, update_status=statuses.append
    )

    adapter.handle_textual_key("i")
    adapter.handle_textual_key("a", text="a")
    adapter.handle_textual_key("ESC")

    assert mirrors[0].text == "hello world\n"
    assert mirrors[-1].text == "ahello world\n"
    assert mirrors[-1].attributes["modified"] == "true"
    assert mirrors[-1].attributes["mode"] == "normal"
    assert "enter_insert" in statuses


def test_adapter_relays_command_events(tmp_path: Path) -> None:
    command_lines: List[str] = []
    events: List[tuple[str, object | None]] = []
    adapter = make_adapter(
        tmp_path,
        show_command=command_lines.append,
        handle_event=lambda name, payload: events.append((name, payload)),
    )

    for char in ":hint":
        adapter.handle_textual_key(char, text=char)
    assert command_lines[-1] == "hint"

    adapter.handle_textual_key("ENTER")

    assert command_lines[-1] == ""
    assert ("command.start", None) in events
    assert ("command.submit", "hint") in events
    assert ("mode.switch", "normal") in events


def test_adapter_surfaces_visual_selection_events(tmp_path: Path) -> None:
    events: List[Dict[str, Any]] = []
    mirrors: List[BufferMirror] = []
    adapter = make_adapter(
        tmp_path,
        update_buffer=mirrors.append,
        handle_event=lambda name, payload: events.append({"name": name, "payload": payload}),
    )

    adapter.handle_textual_key("v")
    adapter.handle_textual_key("l")

    selections = [event["payload"] for event in events if event["name"] == "visual.selection"]
    assert selections
    assert selections[-1] == {"anchor": (0, 0), "cursor": (0, 1)}
    assert mirrors[-1].selection == ((0, 0), (0, 1))


def test_adapter_reports_command_errors(tmp_path: Path) -> None:
    statuses: List[str] = []
    events: List[str] = []
    adapter = make_adapter(
        tmp_path,
        update_status=statuses.append,
        handle_event=lambda name, payload: events.append(name),
    )

    for char in ":nope":
        adapter.handle_textual_key(char, text=char)
    adapter.handle_textual_key("ENTER")

    assert statuses[-1] == "Unknown command: nope (try :help)"
    assert "command.error" in events


def test_adapter_signals_exit_on_forced_quit(tmp_path: Path) -> None:
    signals: List[CommandSignal] = []
    adapter = make_adapter(tmp_path, exit=signals.append)

    adapter.handle_textual_key("x", text="x")
    for char in ":q!":
        adapter.handle_textual_key(char, text=char)
    result = adapter.handle_textual_key("ENTER")

    assert result.signal is CommandSignal.CLOSE
    assert signals == [CommandSignal.CLOSE]


def test_adapter_normalizes_modifiers(tmp_path: Path) -> None:
    adapter = make_adapter(tmp_path)
    adapter.handle_textual_key("x", text="x")

    result = adapter.handle_textual_key("u", text="u")
    assert adapter.workstation.buffer.content() == "hello world\n"

    adapter.handle_textual_key("r", modifiers=("CTRL",))
    assert result.consumed is True
    assert adapter.workstation.buffer.content() == "ello world\n"


def test_poll_reloads_external_change(tmp_path: Path) -> None:
    mirrors: List[BufferMirror] = []
    statuses: List[str] = []
    adapter = make_adapter(
        tmp_path, update_buffer=mirrors.append, update_status=statuses.append
    )
    adapter.workstation.auto_verify = False
    path = adapter.workstation.path
    path.write_text("changed\n", encoding="utf-8")
    stat = path.stat()
    os.utime(path, (stat.st_atime + 5, stat.st_mtime + 5))

    assert adapter.poll() is True
    assert statuses[-1] == "File changed externally, reloaded!"
    assert mirrors[-1].text == "changed\n"
    assert adapter.poll() is False


def test_poll_turns_errors_into_status(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    statuses: List[str] = []
    adapter = make_adapter(tmp_path, update_status=statuses.append)
    path = adapter.workstation.path
    stat = path.stat()
    os.utime(path, (stat.st_atime + 5, stat.st_mtime + 5))

    def unreadable(self, *args, **kwargs):
        raise OSError("permission denied")

    monkeypatch.setattr(Path, "read_text", unreadable)

    assert adapter.poll() is True
    assert statuses[-1].startswith("Error: Failed to read")


def test_run_turns_console_logging_off_while_app_runs(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: List[telemetry.LogConfig] = []
    monkeypatch.setattr(
        textual_app.TutorApp, "run", lambda self: seen.append(telemetry.active_config())
    )
    log_file = str(tmp_path / "tutor.log")
    telemetry.configure(config=telemetry.LogConfig(console=True, log_file=log_file))

    try:
        textual_app.run(make_workstation(tmp_path))

        assert seen[0].console is False
        assert seen[0].log_file == log_file
        assert telemetry.active_config().console is True
    finally:
        telemetry.configure()
