"""Keymap registry storing editor actions and their key bindings."""

from __future__ import annotations

from typing import Dict, Iterator, Optional

from tutor_engine.runtime.telemetry import span

from .models import ActionRef, Binding


class KeymapConflictError(RuntimeError):
    """Raised when a binding reuses a key sequence already bound in its mode."""

    def __init__(self, binding: Binding, existing: Binding):
        super().__init__(f"Binding '{binding.id}' conflicts with '{existing.id}'")
        self.binding = binding
        self.existing = existing


class KeymapRegistry:
    """Owns action references and per-mode binding indexes.

    Every mutation bumps :meth:`revision` so resolvers can rebuild their tries
    lazily.
    """

    def __init__(self, *, logger_name: str | None = "tutor_engine.keymaps") -> None:
        self._actions: Dict[str, ActionRef] = {}
        self._bindings: Dict[str, Binding] = {}
        # mode -> key signature -> binding id
        self._by_mode: Dict[str, Dict[str, str]] = {}
        self._logger_name = logger_name
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    def get_action(self, action_id: str) -> ActionRef:
        try:
            return self._actions[action_id]
        except KeyError as exc:
            raise KeyError(f"Action '{action_id}' is not registered") from exc

    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        if not replace and action.id in self._actions:
            raise ValueError(f"Action '{action.id}' already registered")
        self._actions[action.id] = action
        return action

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        with span(
            "keymaps::register_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding.id, "mode": binding.mode},
        ) as handle:
            if binding.action_id not in self._actions:
                handle.add_metadata("missing_action", binding.action_id)
                raise KeyError(
                    f"Binding '{binding.id}' references unknown action '{binding.action_id}'"
                )

            existing = self.find_conflict(binding)
            if existing is not None and not replace:
                raise KeymapConflictError(binding, existing)

            if replace:
                for stale in (existing, self._bindings.get(binding.id)):
                    if stale is not None:
                        self._drop(stale)
            elif binding.id in self._bindings:
                raise ValueError(f"Binding id '{binding.id}' already registered")

            self._bindings[binding.id] = binding
            self._by_mode.setdefault(binding.mode, {})[binding.key_signature] = binding.id
            self._revision += 1
            return binding

    def iter_bindings(self, mode: Optional[str] = None) -> Iterator[Binding]:
        if mode is None:
            yield from self._bindings.values()
            return
        for binding_id in self._by_mode.get(mode, {}).values():
            yield self._bindings[binding_id]

    def help_entries(self, mode: str) -> list[tuple[str, str]]:
        """``(keys, description)`` pairs for a mode, sorted by key signature."""

        entries = {
            binding.key_signature: binding.description
            or self._actions[binding.action_id].description
            for binding in self.iter_bindings(mode)
        }
        return sorted(entries.items())

    def find_conflict(self, binding: Binding) -> Optional[Binding]:
        """Binding already holding ``binding``'s key sequence in its mode."""

        binding_id = self._by_mode.get(binding.mode, {}).get(binding.key_signature)
        return None if binding_id is None else self._bindings[binding_id]

    def _drop(self, binding: Binding) -> None:
        self._bindings.pop(binding.id, None)
        signatures = self._by_mode.get(binding.mode, {})
        if signatures.get(binding.key_signature) == binding.id:
            del signatures[binding.key_signature]
        if not signatures:
            self._by_mode.pop(binding.mode, None)


__all__ = [
    "KeymapRegistry",
    "KeymapConflictError",
]
