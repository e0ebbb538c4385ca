"""Base classes and shared utilities for editor modes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from tutor_engine.buffer import Buffer


class CommandSignal(str, Enum):
    """What the host should do after a key has been handled."""

    CONTINUE = "continue"
    CLOSE = "close"  # leave the editor
    QUIT = "quit"  # leave the whole program


@dataclass(slots=True)
class KeyInput:
    """Normalized key event passed to modes.

    ``key`` is either the printable character itself or an upper-case name
    such as ``ESC``, ``ENTER``, ``BACKSPACE``, ``DELETE``, ``TAB`` or one of
    the arrow names ``LEFT``/``RIGHT``/``UP``/``DOWN``.
    """

    key: str
    modifiers: Tuple[str, ...] = ()
    text: Optional[str] = None

    @classmethod
    def char(cls, char: str) -> "KeyInput":
        return cls(key=char, text=char)

    @classmethod
    def ctrl(cls, key: str) -> "KeyInput":
        return cls(key=key, modifiers=("ctrl",))


@dataclass(slots=True)
class ModeResult:
    """Result returned from ``Mode.handle_key``."""

    consumed: bool
    switch_to: Optional[str] = None
    status: str = "ok"
    message: Optional[str] = None
    signal: CommandSignal = CommandSignal.CONTINUE


@dataclass(slots=True)
class ModeContext:
    """Shared services every mode can access.

    ``buffer`` is replaced whenever the host opens another exercise; modes
    and actions must always go through the context rather than caching it.
    """

    buffer: Buffer
    bus: "ModeBus"
    extras: Dict[str, object] = field(default_factory=dict)

    @property
    def registers(self):
        return self.buffer.registers


class ModeBus:
    """Minimal event bus letting modes exchange structured signals."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


class Mode:
    """Base class all concrete editor modes inherit from."""

    name: str = "mode"

    def __init__(self, context: ModeContext) -> None:
        self.context = context

    def on_enter(self, previous: Optional[str]) -> None:
        del previous

    def on_exit(self, next_mode: Optional[str]) -> None:
        del next_mode

    def handle_key(
        self, key: KeyInput
    ) -> ModeResult:  # pragma: no cover - abstract override
        raise NotImplementedError
