"""``:`` command-line mode.

The typed text lives in ``context.extras["command_state"]["text"]`` so the
submit action and renderers read the same value. Submitted lines are kept in
``command_state["history"]``; ``UP``/``DOWN`` walk back and forth through it.
"""

from __future__ import annotations

from typing import List, MutableMapping, Optional, cast

from tutor_engine.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult
from .keymap_helpers import execute_match, key_to_token, require_keymap_resolver


class CommandMode(Mode):
    """Collects command text; ``ENTER`` hands it to the submit action."""

    name = "command"

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger("tutor_engine.modes.command")
        self._resolver = require_keymap_resolver(context)
        self._typed: List[str] = []
        self._recall: Optional[int] = None

    def on_enter(self, previous: str | None) -> None:
        del previous
        self._set_text("")
        self.context.bus.emit("command.start", None)

    def on_exit(self, next_mode: str | None) -> None:
        del next_mode
        self.context.bus.emit("command.end", self.current_command)
        self._set_text("")

    @property
    def current_command(self) -> str:
        return "".join(self._typed)

    def handle_key(self, key: KeyInput) -> ModeResult:
        result = self._resolver.resolve(self.name, (key_to_token(key),))
        if result.status == "match" and result.match:
            return execute_match(self.context, result.match)

        if key.key == "BACKSPACE":
            if not self._typed:
                return ModeResult(consumed=True, switch_to="normal", message="command_cancel")
            self._typed.pop()
            self._sync()
            if not self._typed:
                return ModeResult(consumed=True, switch_to="normal", message="command_cancel")
            return ModeResult(consumed=True, status="editing")
        if key.key in ("UP", "DOWN"):
            return self._recall_history(older=key.key == "UP")
        if key.text and not key.modifiers:
            self._typed.append(key.text)
            self._recall = None
            self._sync()
            return ModeResult(consumed=True, status="editing")
        return ModeResult(consumed=False, status="miss", message="unhandled")

    def _recall_history(self, *, older: bool) -> ModeResult:
        history = self._history()
        if not history:
            return ModeResult(consumed=True, status="history_empty")
        if self._recall is None:
            index = len(history) - 1 if older else None
        elif older:
            index = max(self._recall - 1, 0)
        else:
            index = self._recall + 1 if self._recall + 1 < len(history) else None
        self._recall = index
        self._typed = list(history[index]) if index is not None else []
        self._sync()
        return ModeResult(consumed=True, status="history")

    def _state(self) -> MutableMapping[str, object]:
        return cast(
            MutableMapping[str, object],
            self.context.extras.setdefault("command_state", {}),
        )

    def _history(self) -> List[str]:
        history = self._state().setdefault("history", [])
        return cast(List[str], history)

    def _set_text(self, text: str) -> None:
        self._typed = list(text)
        self._recall = None
        self._sync()

    def _sync(self) -> None:
        self._state()["text"] = self.current_command
