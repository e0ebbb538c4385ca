"""Editing verbs and command handlers bound to keys by the keymaps."""

from .core import (
    append_after_cursor,
    append_at_line_end,
    enter_command_mode,
    enter_insert_mode,
    enter_visual_mode,
    exit_insert_mode,
    exit_to_normal_mode,
    insert_at_line_start,
    mutate,
    open_line_above,
    open_line_below,
)
from .command import CommandHost, require_command_host, submit_command_line

__all__ = [
    "append_after_cursor",
    "append_at_line_end",
    "enter_command_mode",
    "enter_insert_mode",
    "enter_visual_mode",
    "exit_insert_mode",
    "exit_to_normal_mode",
    "insert_at_line_start",
    "mutate",
    "open_line_above",
    "open_line_below",
    "CommandHost",
    "require_command_host",
    "submit_command_line",
]
