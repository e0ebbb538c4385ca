"""Resolve pending key tokens against a per-mode keymap trie.

Each mode gets a trie whose edges are key tokens. A walk follows the exact
edge for a token when one exists and otherwise the :data:`WILDCARD` edge,
which only accepts single printable characters. The walk ends in one of
three states:

``match``
    the tokens spell a complete binding;
``pending``
    the tokens are a strict prefix of at least one binding;
``miss``
    no binding starts with these tokens.

Tries are rebuilt lazily whenever the registry revision moves on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Sequence

from tutor_engine.runtime.telemetry import span

from .models import WILDCARD, ActionRef, Binding, is_printable_token
from .registry import KeymapRegistry

ResolutionStatus = Literal["match", "pending", "miss"]


@dataclass(slots=True)
class _Node:
    terminal: Optional[Binding] = None
    edges: Dict[str, "_Node"] = field(default_factory=dict)

    def follow(self, token: str) -> tuple[Optional["_Node"], bool]:
        """Next node and whether the wildcard edge was taken."""

        if token in self.edges:
            return self.edges[token], False
        if is_printable_token(token) and WILDCARD in self.edges:
            return self.edges[WILDCARD], True
        return None, False


def _build_trie(bindings: Sequence[Binding]) -> _Node:
    root = _Node()
    for binding in bindings:
        node = root
        for token in binding.sequence.tokens:
            node = node.edges.setdefault(token, _Node())
        node.terminal = binding
    return root


@dataclass(frozen=True, slots=True)
class ResolutionMatch:
    """Resolved binding paired with its action and the keys that matched it.

    ``tokens`` carries the concrete keys typed; ``captured`` holds only the
    ones consumed by wildcard steps (``r`` + ``x`` -> ``("x",)``).
    """

    binding: Binding
    action: ActionRef
    tokens: tuple[str, ...] = ()
    captured: tuple[str, ...] = ()

    @property
    def last_token(self) -> Optional[str]:
        return self.tokens[-1] if self.tokens else None


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    status: ResolutionStatus
    match: Optional[ResolutionMatch] = None
    consumed: int = 0


class KeymapResolver:
    """Answers "what do these pending keys mean in this mode?"."""

    def __init__(
        self, registry: KeymapRegistry, *, logger_name: str | None = "tutor_engine.keymaps"
    ) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._tries: Dict[str, _Node] = {}
        self._built_at = -1

    def resolve(self, mode: str, tokens: Sequence[str]) -> ResolutionResult:
        typed = tuple(tokens)
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": mode, "keys": " ".join(typed)},
        ) as handle:
            result = self._walk(self._trie(mode), typed)
            handle.add_metadata("status", result.status)
            if result.match is not None:
                handle.add_metadata("binding_id", result.match.binding.id)
            return result

    def _trie(self, mode: str) -> _Node:
        revision = self._registry.revision()
        if revision != self._built_at:
            self._tries.clear()
            self._built_at = revision
        trie = self._tries.get(mode)
        if trie is None:
            trie = self._tries[mode] = _build_trie(list(self._registry.iter_bindings(mode)))
        return trie

    def _walk(self, root: _Node, typed: tuple[str, ...]) -> ResolutionResult:
        node = root
        captured: list[str] = []
        for consumed, token in enumerate(typed):
            next_node, wildcard = node.follow(token)
            if next_node is None:
                return ResolutionResult(status="miss", consumed=consumed)
            if wildcard:
                captured.append(token)
            node = next_node

        binding = node.terminal
        if binding is not None:
            match = ResolutionMatch(
                binding=binding,
                action=self._registry.get_action(binding.action_id),
                tokens=typed,
                captured=tuple(captured),
            )
            return ResolutionResult(status="match", match=match, consumed=len(typed))
        if node.edges:
            return ResolutionResult(status="pending", consumed=len(typed))
        return ResolutionResult(status="miss", consumed=len(typed))


__all__ = [
    "KeymapResolver",
    "ResolutionResult",
    "ResolutionMatch",
    "ResolutionStatus",
]
