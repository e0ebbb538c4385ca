"""Core action implementations shared across modes."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from tutor_engine.buffer import Transaction
from tutor_engine.keymaps import ResolutionMatch
from tutor_engine.modes.base_mode import ModeContext, ModeResult


@contextmanager
def mutate(context: ModeContext, label: str) -> Iterator[Transaction]:
    """Snapshot the buffer, run the edit, and announce it on the bus."""

    with context.buffer.transaction(label) as tx:
        yield tx
    if tx.changed:
        context.bus.emit("buffer.changed", label)


def enter_insert_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, switch_to="insert", message="enter_insert")


def append_after_cursor(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    row, col = buffer.cursor
    buffer.set_cursor(row, col + 1)
    return ModeResult(consumed=True, switch_to="insert", message="enter_insert")


def append_at_line_end(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.buffer.move_to_line_end()
    return ModeResult(consumed=True, switch_to="insert", message="enter_insert")


def insert_at_line_start(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.buffer.move_to_first_non_blank()
    return ModeResult(consumed=True, switch_to="insert", message="enter_insert")


def open_line_below(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    with mutate(context, "open_line_below"):
        context.buffer.open_line_below()
    return ModeResult(consumed=True, switch_to="insert", message="enter_insert")


def open_line_above(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    with mutate(context, "open_line_above"):
        context.buffer.open_line_above()
    return ModeResult(consumed=True, switch_to="insert", message="enter_insert")


def exit_to_normal_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, switch_to="normal", message="exit_to_normal")


def exit_insert_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.buffer.clamp()
    return ModeResult(consumed=True, switch_to="normal", message="exit_insert")


def enter_visual_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, switch_to="visual", message="enter_visual")


def enter_command_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, switch_to="command", message="enter_command")


__all__ = [
    "mutate",
    "enter_insert_mode",
    "append_after_cursor",
    "append_at_line_end",
    "insert_at_line_start",
    "open_line_below",
    "open_line_above",
    "exit_to_normal_mode",
    "exit_insert_mode",
    "enter_visual_mode",
    "enter_command_mode",
]
