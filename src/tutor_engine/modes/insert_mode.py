"""Insert mode: typed characters go into the buffer.

Printable keys reach the buffer through the insert-mode ``<any>`` binding;
named keys (``ENTER``, ``TAB``, arrows...) have bindings of their own.
"""

from __future__ import annotations

from tutor_engine.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult
from .keymap_helpers import execute_match, key_to_token, require_keymap_resolver


class InsertMode(Mode):
    name = "insert"

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger("tutor_engine.modes.insert")
        self._resolver = require_keymap_resolver(context)

    def handle_key(self, key: KeyInput) -> ModeResult:
        token = key_to_token(key)
        result = self._resolver.resolve(self.name, (token,))

        if result.status == "match" and result.match:
            return execute_match(self.context, result.match)

        return ModeResult(consumed=False, status="miss")
