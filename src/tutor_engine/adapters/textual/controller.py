"""Minimal Textual adapter that wires Workstation events into UI callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from tutor_engine.buffer import BufferMirror
from tutor_engine.errors import TutorError
from tutor_engine.modes import CommandSignal, KeyInput, ModeResult
from tutor_engine.runtime import telemetry
from tutor_engine.workstation import Workstation


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    show_command: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    exit: Callable[[CommandSignal], None] = _noop


class TextualTutorAdapter:
    """Bridges Workstation + bus events to a Textual-friendly surface."""

    def __init__(self, workstation: Workstation, hooks: TextualUIHooks) -> None:
        self.workstation = workstation
        self.hooks = hooks
        self.logger = telemetry.get_logger("tutor_engine.adapters.textual")
        self._subscribe_events()
        self._refresh_buffer()
        self._refresh_command_line()

    def handle_textual_key(
        self,
        key: str,
        *,
        text: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> ModeResult:
        """Translate a Textual key event into a KeyInput and dispatch it."""

        normalized_modifiers = tuple(sorted(str(mod).lower() for mod in modifiers))
        self.logger.debug("key -> {} {}", key, self._state_metadata())
        result = self.workstation.handle_key(
            KeyInput(key=key, text=text, modifiers=normalized_modifiers)
        )
        self._after_mode_result(result)
        self.logger.debug(
            "result <- consumed={} status={} switch_to={}",
            result.consumed,
            result.status,
            result.switch_to,
        )
        if result.signal is not CommandSignal.CONTINUE:
            self.hooks.exit(result.signal)
        return result

    def poll(self) -> bool:
        """Check the open exercise for external edits; errors become status text."""

        try:
            changed = self.workstation.poll_external_change()
        except TutorError as exc:
            self.logger.warning("poll failed: {}", exc)
            self.workstation.notify(f"Error: {exc}")
            changed = True
        if changed:
            self.hooks.update_status(self.workstation.status_message)
            self._refresh_buffer()
        return changed

    def _after_mode_result(self, result: ModeResult) -> None:
        status = self.workstation.status_message or result.message or result.status
        if status:
            self.hooks.update_status(status)
        self._refresh_buffer()
        self._refresh_command_line()

    def _subscribe_events(self) -> None:
        bus = self.workstation.bus
        for event in (
            "visual.selection",
            "visual.yank",
            "visual.delete",
            "command.start",
            "command.end",
            "command.submit",
            "command.error",
            "mode.switch",
        ):
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self.logger.debug("event -> {} payload={!r}", name, payload)
        self.hooks.handle_event(name, payload)
        if name.startswith("command"):
            self._refresh_command_line()
        if name.startswith("visual"):
            self._refresh_buffer()

    def _refresh_buffer(self) -> None:
        self.hooks.update_buffer(self.workstation.mirror())

    def _refresh_command_line(self) -> None:
        state = self.workstation.context.extras.get("command_state")
        if isinstance(state, dict):
            text = str(state.get("text", ""))
        else:
            text = ""
        self.hooks.show_command(text)

    def _state_metadata(self) -> Dict[str, object]:
        buffer = self.workstation.buffer
        return {
            "mode": self.workstation.mode,
            "cursor": buffer.state.cursor,
            "selection": buffer.state.selection,
            "pending": tuple(buffer.state.pending_keys),
            "buffer": buffer.name,
            "buffer_version": buffer.document.version,
        }


__all__ = ["TextualTutorAdapter", "TextualUIHooks"]
