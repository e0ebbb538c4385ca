"""Normal mode: single-key commands plus multi-key sequences like ``dd``."""

from __future__ import annotations

from tutor_engine.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult
from .keymap_helpers import execute_match, key_to_token, require_keymap_resolver


class NormalMode(Mode):
    """Resolve keys through the trie, buffering prefixes in the pending queue.

    The pending keys live on the buffer state. A key that neither completes
    nor extends the queued prefix clears it without side effects.
    """

    name = "normal"

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger("tutor_engine.modes.normal")
        self._resolver = require_keymap_resolver(context)

    @property
    def pending(self) -> tuple[str, ...]:
        return tuple(self.context.buffer.state.pending_keys)

    def on_exit(self, next_mode: str | None) -> None:
        del next_mode
        self.context.buffer.state.clear_pending()

    def handle_key(self, key: KeyInput) -> ModeResult:
        state = self.context.buffer.state
        state.push_pending(key_to_token(key))
        result = self._resolver.resolve(self.name, tuple(state.pending_keys))

        if result.status == "match" and result.match:
            state.clear_pending()
            return execute_match(self.context, result.match)

        if result.status == "pending":
            return ModeResult(consumed=True, status="pending", message="".join(self.pending))

        discarded = "".join(state.pending_keys)
        state.clear_pending()
        self.logger.debug("discarded pending keys {}", discarded)
        return ModeResult(consumed=False, status="miss")
