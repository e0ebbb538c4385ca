"""Visual mode: a fixed anchor plus the live cursor define the selection."""

from __future__ import annotations

from tutor_engine.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult
from .keymap_helpers import execute_match, key_to_token, require_keymap_resolver


class VisualMode(Mode):
    name = "visual"

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger("tutor_engine.modes.visual")
        self._resolver = require_keymap_resolver(context)

    def on_enter(self, previous: str | None) -> None:
        del previous
        state = self.context.buffer.state
        state.start_selection()
        self.context.bus.emit(
            "visual.selection", {"anchor": state.anchor, "cursor": state.cursor}
        )

    def on_exit(self, next_mode: str | None) -> None:
        del next_mode
        self.context.buffer.state.clear_selection()

    def handle_key(self, key: KeyInput) -> ModeResult:
        result = self._resolver.resolve(self.name, (key_to_token(key),))
        if result.status == "match" and result.match:
            return execute_match(self.context, result.match)
        return ModeResult(consumed=False, status="miss")
