"""Textual host for the tutor workstation.

``app`` is not imported here so the controller stays usable without a
terminal.
"""

from .controller import TextualTutorAdapter, TextualUIHooks

__all__ = ["TextualTutorAdapter", "TextualUIHooks"]
