"""Cursor motions shared by Normal, Visual and Insert bindings."""

from __future__ import annotations

from typing import Callable

from tutor_engine.keymaps import ResolutionMatch
from tutor_engine.modes.base_mode import ModeContext, ModeResult

MotionAction = Callable[[ModeContext, ResolutionMatch], ModeResult]


def _motion(method: str) -> MotionAction:
    def action(context: ModeContext, match: ResolutionMatch) -> ModeResult:
        del match
        getattr(context.buffer, method)()
        return _moved(context)

    action.__name__ = method
    action.__qualname__ = method
    return action


def _moved(context: ModeContext, status: str = "motion") -> ModeResult:
    state = context.buffer.state
    if state.anchor is not None:
        context.bus.emit("visual.selection", {"anchor": state.anchor, "cursor": state.cursor})
    return ModeResult(consumed=True, status=status)


move_left = _motion("move_left")
move_right = _motion("move_right")
move_up = _motion("move_up")
move_down = _motion("move_down")
move_to_line_start = _motion("move_to_line_start")
move_to_line_end = _motion("move_to_line_end")
move_to_first_non_blank = _motion("move_to_first_non_blank")
move_word_forward = _motion("move_word_forward")
move_word_backward = _motion("move_word_backward")
goto_first_line = _motion("goto_first_line")
goto_last_line = _motion("goto_last_line")


def jump_to_matching_bracket(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    if context.buffer.jump_to_matching_bracket() is None:
        return ModeResult(consumed=True, status="no_match")
    return _moved(context)


__all__ = [
    "move_left",
    "move_right",
    "move_up",
    "move_down",
    "move_to_line_start",
    "move_to_line_end",
    "move_to_first_non_blank",
    "move_word_forward",
    "move_word_backward",
    "goto_first_line",
    "goto_last_line",
    "jump_to_matching_bracket",
]
