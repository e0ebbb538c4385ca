"""Text-changing verbs for Normal and Insert mode bindings."""

from __future__ import annotations

from tutor_engine.keymaps import ResolutionMatch
from tutor_engine.modes.base_mode import ModeContext, ModeResult

from .core import mutate

AUTO_PAIRS: dict[str, str] = {"(": ")", "{": "}", "[": "]", '"': '"', "'": "'"}
SKIP_OVER = frozenset(AUTO_PAIRS.values())
TAB_WIDTH = 4


def _edited(status: str, message: str | None = None) -> ModeResult:
    return ModeResult(consumed=True, status=status, message=message)


# -- Normal mode ------------------------------------------------------------


def delete_char(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    with mutate(context, "delete_char"):
        removed = context.buffer.delete_char()
    return _edited("delete_char", removed)


def paste(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    if context.buffer.registers.is_empty():
        return ModeResult(consumed=True, status="register_empty")
    with mutate(context, "paste"):
        context.buffer.paste()
    return _edited("paste")


def undo(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    if not context.buffer.undo():
        return ModeResult(consumed=True, status="undo_empty", message="Already at oldest change")
    context.bus.emit("buffer.changed", "undo")
    return _edited("undo")


def redo(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    if not context.buffer.redo():
        return ModeResult(consumed=True, status="redo_empty", message="Already at newest change")
    context.bus.emit("buffer.changed", "redo")
    return _edited("redo")


def delete_line(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    with mutate(context, "delete_line"):
        removed = context.buffer.delete_line()
    return _edited("delete_line", removed)


def yank_line(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    text = context.buffer.yank_line()
    context.bus.emit("register.yank", {"text": text, "type": "line"})
    return _edited("yank_line", text)


def replace_char(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    char = match.captured[-1] if match.captured else None
    if not char or context.buffer.char_at_cursor() is None:
        return ModeResult(consumed=True, status="noop")
    with mutate(context, "replace_char"):
        context.buffer.replace_char(char)
    return _edited("replace_char", char)


def delete_inner_word(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _delete_word(context, around=False, switch_to=None)


def delete_around_word(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _delete_word(context, around=True, switch_to=None)


def change_inner_word(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _delete_word(context, around=False, switch_to="insert")


def change_around_word(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _delete_word(context, around=True, switch_to="insert")


def _delete_word(context: ModeContext, *, around: bool, switch_to: str | None) -> ModeResult:
    label = "delete_around_word" if around else "delete_inner_word"
    buffer = context.buffer
    with mutate(context, label):
        removed = buffer.delete_around_word() if around else buffer.delete_inner_word()
    if removed is None:
        return ModeResult(consumed=True, status="noop")
    return ModeResult(consumed=True, switch_to=switch_to, status=label, message=removed)


# -- Insert mode ------------------------------------------------------------


def insert_typed(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Insert one typed character, pairing openers and skipping closers."""

    char = match.last_token
    if not char:
        return ModeResult(consumed=False, status="miss")
    buffer = context.buffer
    if char in SKIP_OVER and buffer.char_at_cursor() == char:
        buffer.move_right()
        return ModeResult(consumed=True, status="skip_close")

    with mutate(context, "insert_char"):
        buffer.insert_char(char)
        closing = AUTO_PAIRS.get(char)
        if closing is not None:
            buffer.insert_char(closing)
            buffer.move_left()
    return ModeResult(consumed=True, status="insert")


def insert_newline(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    line = context.buffer.current_line()
    indent = line[: len(line) - len(line.lstrip())]
    with mutate(context, "insert_newline"):
        context.buffer.insert_newline(indent)
    return ModeResult(consumed=True, status="insert")


def insert_tab(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    with mutate(context, "insert_tab"):
        context.buffer.insert_char(" " * TAB_WIDTH)
    return ModeResult(consumed=True, status="insert")


def backspace(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    with mutate(context, "backspace"):
        context.buffer.backspace()
    return ModeResult(consumed=True, status="insert")


def delete_forward(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    with mutate(context, "delete"):
        context.buffer.delete()
    return ModeResult(consumed=True, status="insert")


__all__ = [
    "delete_char",
    "paste",
    "undo",
    "redo",
    "delete_line",
    "yank_line",
    "replace_char",
    "delete_inner_word",
    "delete_around_word",
    "change_inner_word",
    "change_around_word",
    "insert_typed",
    "insert_newline",
    "insert_tab",
    "backspace",
    "delete_forward",
]
