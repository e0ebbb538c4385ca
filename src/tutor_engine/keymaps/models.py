"""Key bindings, the key sequences they match and the actions they run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

WILDCARD = "<any>"
"""Binding step that matches any single printable key, as in ``r{char}``."""


def normalize_token(token: str) -> str:
    """Canonical form of one key token.

    ``"Ctrl+R"`` and ``"ctrl+r"`` both become ``"ctrl+r"``; modifiers are
    lower-cased and sorted. A bare token is returned unchanged so ``"R"``
    and ``"r"`` stay distinct keys.
    """

    if not token:
        raise ValueError("key token cannot be empty")
    if token == WILDCARD or token == "+" or "+" not in token:
        return token
    *modifiers, key = token.split("+")
    if not key or not all(modifiers):
        raise ValueError(f"malformed key token {token!r}")
    if len(key) == 1:
        key = key.lower()
    return "+".join([*sorted({m.lower() for m in modifiers}), key])


def is_printable_token(token: str) -> bool:
    """True for a single typed character; the wildcard matches only these."""

    return len(token) == 1 and token.isprintable()


@dataclass(frozen=True, slots=True)
class KeySequence:
    """Ordered key tokens a binding waits for, e.g. ``("d", "i", "w")``."""

    tokens: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.tokens:
            raise ValueError("KeySequence requires at least one key")
        object.__setattr__(self, "tokens", tuple(normalize_token(t) for t in self.tokens))

    @classmethod
    def from_strings(cls, *keys: str) -> "KeySequence":
        return cls(tokens=tuple(key for key in keys if key))

    def __len__(self) -> int:
        return len(self.tokens)


@dataclass(frozen=True, slots=True)
class ActionRef:
    """Named editor action; ``handler(context, match)`` returns a ModeResult."""

    id: str
    handler: Callable[..., object]
    description: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ActionRef id cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")

    def __call__(self, *args: object, **kwargs: object) -> object:
        return self.handler(*args, **kwargs)


@dataclass(frozen=True, slots=True)
class Binding:
    """Maps a key sequence in one mode to an action id."""

    id: str
    mode: str
    sequence: KeySequence
    action_id: str
    description: str = ""

    def __post_init__(self) -> None:
        for label, value in (("id", self.id), ("mode", self.mode), ("action_id", self.action_id)):
            if not value:
                raise ValueError(f"binding {label} cannot be empty")

    @property
    def key_signature(self) -> str:
        return " ".join(self.sequence.tokens)


__all__ = [
    "WILDCARD",
    "normalize_token",
    "is_printable_token",
    "KeySequence",
    "ActionRef",
    "Binding",
]
