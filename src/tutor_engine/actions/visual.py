"""Actions dedicated to Visual mode selections."""

from __future__ import annotations

from tutor_engine.keymaps import ResolutionMatch
from tutor_engine.modes.base_mode import ModeContext, ModeResult

from .core import mutate


def yank_selection(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    selection = context.buffer.state.selection
    text = context.buffer.yank_selection()
    if text is None:
        return ModeResult(consumed=False, status="no_selection")
    context.bus.emit("visual.yank", {"text": text, "range": selection})
    return ModeResult(
        consumed=True, switch_to="normal", status="visual_yank", message=text
    )


def delete_selection(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    selection = context.buffer.state.selection
    if selection is None:
        return ModeResult(consumed=False, status="no_selection")
    with mutate(context, "visual_delete"):
        text = context.buffer.delete_selection()
    context.bus.emit("visual.delete", {"text": text, "range": selection})
    return ModeResult(
        consumed=True, switch_to="normal", status="visual_delete", message=text
    )


__all__ = ["yank_selection", "delete_selection"]
