"""Mode manager coordinating Normal/Insert/Visual/Command pipelines."""

from __future__ import annotations

from typing import Dict, Optional, Type

from tutor_engine.keymaps import KeymapRegistry, KeymapResolver
from tutor_engine.keymaps.defaults import load_default_keymaps
from tutor_engine.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult
from .command_mode import CommandMode
from .insert_mode import InsertMode
from .normal_mode import NormalMode
from .visual_mode import VisualMode

STANDARD_MODES: tuple[Type[Mode], ...] = (NormalMode, InsertMode, VisualMode, CommandMode)


class ModeManager:
    """Owns the active mode, performs switches, and dispatches key events."""

    def __init__(
        self,
        context: ModeContext,
        *,
        keymap_registry: KeymapRegistry | None = None,
        keymap_resolver: KeymapResolver | None = None,
        load_defaults: bool = True,
    ) -> None:
        self.context = context
        self._modes: Dict[str, Mode] = {}
        self._active: Optional[str] = None
        self.logger = telemetry.get_logger("tutor_engine.modes")
        self.keymap_registry = keymap_registry or KeymapRegistry()
        if load_defaults and keymap_registry is None:
            load_default_keymaps(self.keymap_registry)
        self.keymap_resolver = keymap_resolver or KeymapResolver(self.keymap_registry)
        self.context.extras.setdefault("keymap_registry", self.keymap_registry)
        self.context.extras.setdefault("keymap_resolver", self.keymap_resolver)
        self.context.extras.setdefault("mode_manager", self)

    @classmethod
    def standard(cls, context: ModeContext, **kwargs: object) -> "ModeManager":
        """Manager with the four editor modes registered, Normal active."""

        manager = cls(context, **kwargs)
        for mode_cls in STANDARD_MODES:
            manager.register_mode(mode_cls)
        return manager

    @property
    def active_mode(self) -> Optional[Mode]:
        if self._active is None:
            return None
        return self._modes.get(self._active)

    @property
    def active_name(self) -> Optional[str]:
        return self._active

    def register_mode(
        self,
        mode_cls: Type[Mode],
        /,
        *mode_args: object,
        **mode_kwargs: object,
    ) -> Mode:
        mode = mode_cls(self.context, *mode_args, **mode_kwargs)
        if mode.name in self._modes:
            raise ValueError(f"Mode '{mode.name}' already registered")
        self._modes[mode.name] = mode
        if self._active is None:
            self._active = mode.name
            mode.on_enter(None)
        return mode

    def switch_mode(self, name: str) -> None:
        if name not in self._modes:
            raise KeyError(f"Unknown mode '{name}'")
        previous = self.active_mode
        if previous and previous.name == name:
            return
        if previous:
            previous.on_exit(name)
        self._active = name
        self._modes[name].on_enter(previous.name if previous else None)
        telemetry.record_event("mode.switch", level="debug", data={"mode": name})
        self.context.bus.emit("mode.switch", name)

    def reset(self) -> None:
        """Return to Normal mode, e.g. after the host swaps the buffer."""

        if "normal" in self._modes:
            self.switch_mode("normal")
        self.context.buffer.state.clear_pending()

    def handle_key(self, key: KeyInput) -> ModeResult:
        mode = self.active_mode
        if mode is None:
            raise RuntimeError("No active mode registered")
        with telemetry.span(
            name=f"mode::{mode.name}",
            component=True,
            metadata={"key": key.key, "mode": mode.name},
        ):
            result = mode.handle_key(key)
        if result.switch_to:
            self.switch_mode(result.switch_to)
        return result
