"""Textual app that hosts a tutor Workstation."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional, Tuple

try:  # pragma: no cover - imported only when the app is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use tutor_engine.adapters.textual.app"
    ) from exc

from rich.text import Text

from tutor_engine.buffer import BufferMirror
from tutor_engine.config import MODE_CONFIGS, EditorMode
from tutor_engine.modes import CommandSignal
from tutor_engine.runtime import telemetry
from tutor_engine.workstation import View, Workstation

from .controller import TextualTutorAdapter, TextualUIHooks

NAMED_KEYS = {
    "escape": "ESC",
    "enter": "ENTER",
    "return": "ENTER",
    "backspace": "BACKSPACE",
    "delete": "DELETE",
    "tab": "TAB",
    "left": "LEFT",
    "right": "RIGHT",
    "up": "UP",
    "down": "DOWN",
}


def render_buffer(mirror: BufferMirror) -> Text:
    """Buffer text with the cursor cell and visual selection highlighted."""

    lines = mirror.text.split("\n")
    row, col = mirror.cursor
    result = Text()
    selection = mirror.selection
    for index, line in enumerate(lines):
        text = Text(line + " ")
        if selection is not None:
            (start_row, start_col), (end_row, end_col) = selection
            if start_row <= index <= end_row:
                first = start_col if index == start_row else 0
                last = end_col + 1 if index == end_row else len(line)
                text.stylize("reverse blue", first, last)
        if index == row:
            text.stylize("reverse", col, col + 1)
        result.append_text(text)
        if index < len(lines) - 1:
            result.append("\n")
    return result


def normalize_key(event: events.Key) -> Optional[Tuple[str, Optional[str], Tuple[str, ...]]]:
    key = event.key
    if key in {"ctrl+c", "ctrl+q"}:
        return None
    if key in NAMED_KEYS:
        return (NAMED_KEYS[key], None, ())
    if key.startswith("ctrl+"):
        return (key[len("ctrl+") :], None, ("ctrl",))
    if event.character and event.is_printable:
        return (event.character, event.character, ())
    return None


class TutorApp(App[None]):
    """Editor pane, side panel for solution/help, and a status line."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#panes {
		height: 1fr;
	}

	#buffer-view {
		width: 2fr;
		border: round $accent;
		padding: 0 1;
		overflow: auto;
	}

	#side-view {
		width: 1fr;
		border: round $secondary;
		padding: 0 1;
		overflow: auto;
	}

	#status-line {
		height: auto;
		max-height: 6;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#command-line {
		height: 1;
		background: $surface-darken-2;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, workstation: Workstation) -> None:
        super().__init__()
        self.workstation = workstation
        self.adapter: TextualTutorAdapter | None = None
        self._buffer_widget: Static | None = None
        self._side_widget: Static | None = None
        self._status_widget: Static | None = None
        self._command_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="panes"):
            self._buffer_widget = Static("", id="buffer-view")
            self._side_widget = Static("", id="side-view")
            yield self._buffer_widget
            yield self._side_widget
        self._status_widget = Static("", id="status-line")
        self._command_widget = Static("", id="command-line")
        yield self._status_widget
        yield self._command_widget
        yield Footer()

    def on_mount(self) -> None:
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            show_command=self._show_command,
            handle_event=self._handle_event,
            exit=self._on_signal,
        )
        self.adapter = TextualTutorAdapter(self.workstation, hooks)
        interval = self.workstation.settings.poll_interval_ms / 1000
        self.set_interval(interval, self._poll)

    def _poll(self) -> None:
        if self.adapter:
            self.adapter.poll()

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        normalized = normalize_key(event)
        if normalized is None:
            return
        key, text, modifiers = normalized
        self.adapter.handle_textual_key(key, text=text, modifiers=modifiers)
        event.stop()

    def _on_signal(self, signal: CommandSignal) -> None:
        if signal in (CommandSignal.CLOSE, CommandSignal.QUIT):
            self.exit()

    def _update_buffer(self, mirror: BufferMirror) -> None:
        attributes = mirror.attributes
        mode = EditorMode(attributes.get("mode", "normal"))
        config = MODE_CONFIGS[mode]
        modified = " [+]" if attributes.get("modified") == "true" else ""
        self.sub_title = (
            f"{config.label} | {attributes.get('exercise', '')}{modified} "
            f"| {attributes.get('progress', '')}"
        )
        if self._buffer_widget:
            self._buffer_widget.update(render_buffer(mirror))
        if self._side_widget:
            self._side_widget.update(self._side_text())

    def _side_text(self) -> str:
        workstation = self.workstation
        if workstation.view is View.SOLUTION and workstation.solution_text is not None:
            return workstation.solution_text
        if workstation.view is View.HELP:
            return "\n".join(workstation.help_lines())
        return workstation.output

    def _update_status(self, status: str) -> None:
        if self._status_widget:
            self._status_widget.update(Text(status))

    def _show_command(self, command: str) -> None:
        if self._command_widget:
            self._command_widget.update(Text(f":{command}" if command else ""))

    def _handle_event(self, name: str, payload: Any | None) -> None:
        if name == "command.start" and self._command_widget:
            self._command_widget.update(":")


def run(workstation: Workstation) -> None:
    """Run the tutor UI with the console sink off while Textual owns the terminal.

    A configured log file keeps receiving records. The previous sinks come
    back once the app exits.
    """

    previous = telemetry.active_config()
    telemetry.configure(config=replace(previous, console=False))
    try:
        TutorApp(workstation).run()
    finally:
        telemetry.configure(config=previous)


__all__ = ["TutorApp", "normalize_key", "render_buffer", "run"]
