"""Built-in keymaps that seed each mode with the tutor's command language."""

from __future__ import annotations

from typing import Iterable

from tutor_engine.actions import command as command_actions
from tutor_engine.actions import core as core_actions
from tutor_engine.actions import editing as editing_actions
from tutor_engine.actions import motion as motion_actions
from tutor_engine.actions import visual as visual_actions

from .models import WILDCARD, ActionRef, Binding, KeySequence
from .registry import KeymapRegistry

DEFAULT_ACTIONS: tuple[ActionRef, ...] = (
    ActionRef("core.enter_insert", core_actions.enter_insert_mode, description="Insert before cursor"),
    ActionRef("core.append", core_actions.append_after_cursor, description="Insert after cursor"),
    ActionRef("core.append_eol", core_actions.append_at_line_end, description="Insert at end of line"),
    ActionRef("core.insert_bol", core_actions.insert_at_line_start, description="Insert at first non-blank"),
    ActionRef("core.open_below", core_actions.open_line_below, description="Open line below"),
    ActionRef("core.open_above", core_actions.open_line_above, description="Open line above"),
    ActionRef("core.exit_to_normal", core_actions.exit_to_normal_mode, description="Return to normal mode"),
    ActionRef("core.exit_insert", core_actions.exit_insert_mode, description="Leave insert mode"),
    ActionRef("core.enter_visual", core_actions.enter_visual_mode, description="Enter visual mode"),
    ActionRef("core.enter_command", core_actions.enter_command_mode, description="Enter command-line mode"),
    ActionRef("motion.left", motion_actions.move_left, description="Move left"),
    ActionRef("motion.right", motion_actions.move_right, description="Move right"),
    ActionRef("motion.up", motion_actions.move_up, description="Move up"),
    ActionRef("motion.down", motion_actions.move_down, description="Move down"),
    ActionRef("motion.line_start", motion_actions.move_to_line_start, description="Start of line"),
    ActionRef("motion.line_end", motion_actions.move_to_line_end, description="End of line"),
    ActionRef("motion.first_non_blank", motion_actions.move_to_first_non_blank, description="First non-blank"),
    ActionRef("motion.word_forward", motion_actions.move_word_forward, description="Next word"),
    ActionRef("motion.word_backward", motion_actions.move_word_backward, description="Previous word"),
    ActionRef("motion.first_line", motion_actions.goto_first_line, description="First line"),
    ActionRef("motion.last_line", motion_actions.goto_last_line, description="Last line"),
    ActionRef("motion.match_bracket", motion_actions.jump_to_matching_bracket, description="Matching bracket"),
    ActionRef("edit.delete_char", editing_actions.delete_char, description="Delete character"),
    ActionRef("edit.paste", editing_actions.paste, description="Paste"),
    ActionRef("edit.undo", editing_actions.undo, description="Undo"),
    ActionRef("edit.redo", editing_actions.redo, description="Redo"),
    ActionRef("edit.delete_line", editing_actions.delete_line, description="Delete line"),
    ActionRef("edit.yank_line", editing_actions.yank_line, description="Yank line"),
    ActionRef("edit.replace_char", editing_actions.replace_char, description="Replace character"),
    ActionRef("edit.delete_inner_word", editing_actions.delete_inner_word, description="Delete inner word"),
    ActionRef("edit.delete_around_word", editing_actions.delete_around_word, description="Delete around word"),
    ActionRef("edit.change_inner_word", editing_actions.change_inner_word, description="Change inner word"),
    ActionRef("edit.change_around_word", editing_actions.change_around_word, description="Change around word"),
    ActionRef("insert.type", editing_actions.insert_typed, description="Insert typed character"),
    ActionRef("insert.newline", editing_actions.insert_newline, description="New line keeping indent"),
    ActionRef("insert.tab", editing_actions.insert_tab, description="Insert four spaces"),
    ActionRef("insert.backspace", editing_actions.backspace, description="Delete backwards"),
    ActionRef("insert.delete", editing_actions.delete_forward, description="Delete forwards"),
    ActionRef("visual.yank_selection", visual_actions.yank_selection, description="Yank selection"),
    ActionRef("visual.delete_selection", visual_actions.delete_selection, description="Delete selection"),
    ActionRef("command.submit_line", command_actions.submit_command_line, description="Run command line"),
    ActionRef("exercise.next", command_actions.next_exercise, description="Next exercise"),
    ActionRef("exercise.previous", command_actions.previous_exercise, description="Previous exercise"),
)

# (mode, keys, action id); ids are derived as "<mode>.<keys>".
_TABLE: tuple[tuple[str, tuple[str, ...], str], ...] = (
    ("normal", ("h",), "motion.left"),
    ("normal", ("LEFT",), "motion.left"),
    ("normal", ("l",), "motion.right"),
    ("normal", ("RIGHT",), "motion.right"),
    ("normal", ("k",), "motion.up"),
    ("normal", ("UP",), "motion.up"),
    ("normal", ("j",), "motion.down"),
    ("normal", ("DOWN",), "motion.down"),
    ("normal", ("0",), "motion.line_start"),
    ("normal", ("$",), "motion.line_end"),
    ("normal", ("^",), "motion.first_non_blank"),
    ("normal", ("w",), "motion.word_forward"),
    ("normal", ("b",), "motion.word_backward"),
    ("normal", ("G",), "motion.last_line"),
    ("normal", ("g", "g"), "motion.first_line"),
    ("normal", ("%",), "motion.match_bracket"),
    ("normal", ("i",), "core.enter_insert"),
    ("normal", ("a",), "core.append"),
    ("normal", ("A",), "core.append_eol"),
    ("normal", ("I",), "core.insert_bol"),
    ("normal", ("o",), "core.open_below"),
    ("normal", ("O",), "core.open_above"),
    ("normal", ("v",), "core.enter_visual"),
    ("normal", (":",), "core.enter_command"),
    ("normal", ("x",), "edit.delete_char"),
    ("normal", ("p",), "edit.paste"),
    ("normal", ("u",), "edit.undo"),
    ("normal", ("ctrl+r",), "edit.redo"),
    ("normal", ("d", "d"), "edit.delete_line"),
    ("normal", ("y", "y"), "edit.yank_line"),
    ("normal", ("r", WILDCARD), "edit.replace_char"),
    ("normal", ("d", "i", "w"), "edit.delete_inner_word"),
    ("normal", ("d", "a", "w"), "edit.delete_around_word"),
    ("normal", ("c", "i", "w"), "edit.change_inner_word"),
    ("normal", ("c", "a", "w"), "edit.change_around_word"),
    ("normal", ("]",), "exercise.next"),
    ("normal", ("[",), "exercise.previous"),
    ("insert", ("ESC",), "core.exit_insert"),
    ("insert", (WILDCARD,), "insert.type"),
    ("insert", ("ENTER",), "insert.newline"),
    ("insert", ("TAB",), "insert.tab"),
    ("insert", ("BACKSPACE",), "insert.backspace"),
    ("insert", ("DELETE",), "insert.delete"),
    ("insert", ("LEFT",), "motion.left"),
    ("insert", ("RIGHT",), "motion.right"),
    ("insert", ("UP",), "motion.up"),
    ("insert", ("DOWN",), "motion.down"),
    ("insert", ("ctrl+z",), "edit.undo"),
    ("insert", ("ctrl+y",), "edit.redo"),
    ("visual", ("ESC",), "core.exit_to_normal"),
    ("visual", ("h",), "motion.left"),
    ("visual", ("l",), "motion.right"),
    ("visual", ("k",), "motion.up"),
    ("visual", ("j",), "motion.down"),
    ("visual", ("0",), "motion.line_start"),
    ("visual", ("$",), "motion.line_end"),
    ("visual", ("w",), "motion.word_forward"),
    ("visual", ("b",), "motion.word_backward"),
    ("visual", ("y",), "visual.yank_selection"),
    ("visual", ("d",), "visual.delete_selection"),
    ("visual", ("x",), "visual.delete_selection"),
    ("command", ("ESC",), "core.exit_to_normal"),
    ("command", ("ENTER",), "command.submit_line"),
)

DEFAULT_BINDINGS: tuple[Binding, ...] = tuple(
    Binding(
        id=f"{mode}.{''.join(keys)}",
        mode=mode,
        sequence=KeySequence.from_strings(*keys),
        action_id=action_id,
    )
    for mode, keys, action_id in _TABLE
)


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    extra_bindings: Iterable[Binding] | None = None,
) -> None:
    """Register built-in actions and bindings for every mode."""

    for action in DEFAULT_ACTIONS:
        registry.register_action(action, replace=replace)

    for binding in (*DEFAULT_BINDINGS, *(extra_bindings or ())):
        registry.register_binding(binding, replace=replace)


__all__ = ["load_default_keymaps", "DEFAULT_ACTIONS", "DEFAULT_BINDINGS"]
