"""Declarative keymap registry and trie resolver.

The built-in bindings live in :mod:`tutor_engine.keymaps.defaults`, which is
kept out of this namespace because it imports the action modules.
"""

from .models import WILDCARD, ActionRef, Binding, KeySequence, normalize_token
from .registry import KeymapConflictError, KeymapRegistry
from .resolver import KeymapResolver, ResolutionMatch, ResolutionResult

__all__ = [
    "WILDCARD",
    "ActionRef",
    "Binding",
    "KeySequence",
    "normalize_token",
    "KeymapRegistry",
    "KeymapConflictError",
    "KeymapResolver",
    "ResolutionResult",
    "ResolutionMatch",
]
