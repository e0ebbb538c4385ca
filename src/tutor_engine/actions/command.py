"""Actions that evaluate ``:`` command lines against the workstation."""

from __future__ import annotations

from functools import partial, wraps
from typing import Callable, Dict, List, MutableMapping, Optional, Protocol, cast

from tutor_engine.errors import TutorError
from tutor_engine.keymaps import ResolutionMatch
from tutor_engine.modes.base_mode import CommandSignal, ModeContext, ModeResult
from tutor_engine.runtime import telemetry

CommandHandler = Callable[..., ModeResult]

logger = telemetry.get_logger("tutor_engine.actions.command")


class CommandHost(Protocol):
    """Surface the command table drives; implemented by ``Workstation``."""

    modified: bool
    status_message: str

    def notify(self, message: str) -> None: ...

    def save(self) -> None: ...

    def reload(self) -> None: ...

    def verify_current(self) -> bool: ...

    def check_all(self) -> Optional[int]: ...

    def show_hint(self) -> None: ...

    def toggle_solution(self) -> None: ...

    def toggle_help(self) -> None: ...

    def toggle_auto_advance(self) -> bool: ...

    def toggle_auto_verify(self) -> bool: ...

    def next_exercise(self) -> None: ...

    def previous_exercise(self) -> None: ...

    def reset_exercise(self) -> None: ...


def require_command_host(context: ModeContext) -> CommandHost:
    host = context.extras.get("command_host")
    if host is None:
        raise RuntimeError("ModeContext.extras missing 'command_host'")
    return cast(CommandHost, host)


def _command_state(context: ModeContext) -> MutableMapping[str, object]:
    state = cast(
        MutableMapping[str, object], context.extras.setdefault("command_state", {})
    )
    state.setdefault("text", "")
    state.setdefault("history", [])
    return state


def _done(
    context: ModeContext,
    status: str,
    *,
    signal: CommandSignal = CommandSignal.CONTINUE,
) -> ModeResult:
    host = require_command_host(context)
    return ModeResult(
        consumed=True,
        switch_to="normal",
        status=status,
        message=host.status_message,
        signal=signal,
    )


def _guarded(handler: CommandHandler) -> CommandHandler:
    """Turn workstation errors into a status message instead of a crash."""

    @wraps(handler)
    def wrapper(context: ModeContext, args: List[str], **options: object) -> ModeResult:
        try:
            return handler(context, args, **options)
        except TutorError as exc:
            logger.warning("command {} failed: {}", handler.__name__, exc)
            require_command_host(context).notify(f"Error: {exc}")
            context.bus.emit("command.error", str(exc))
            return _done(context, "command_error")

    return wrapper


def submit_command_line(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    state = _command_state(context)
    text = str(state.get("text", "")).strip()
    context.bus.emit("command.submit", text)
    history = state.get("history")
    if isinstance(history, list) and text:
        history.append(text)
    state["text"] = ""
    if not text:
        return ModeResult(consumed=True, switch_to="normal", status="command_empty")
    parts = text.split()
    command, args = parts[0], parts[1:]
    handler = _COMMAND_HANDLERS.get(command)
    with telemetry.span("command::execute", component="command", metadata={"command": command}):
        if handler is None:
            return _unknown_command(context, text)
        return handler(context, args)


def _unknown_command(context: ModeContext, command: str) -> ModeResult:
    context.bus.emit("command.error", command)
    require_command_host(context).notify(f"Unknown command: {command} (try :help)")
    return _done(context, "command_unknown")


@_guarded
def _handle_write(context: ModeContext, args: List[str]) -> ModeResult:
    require_command_host(context).save()
    context.bus.emit("command.write", {"args": list(args)})
    return _done(context, "command_write")


@_guarded
def _handle_quit(
    context: ModeContext, args: List[str], *, force: bool = False
) -> ModeResult:
    del args
    host = require_command_host(context)
    if host.modified and not force:
        host.notify("Unsaved changes! Use :q! or :wq")
        return _done(context, "command_quit_refused")
    context.bus.emit("command.quit", {"force": force})
    return _done(context, "command_quit", signal=CommandSignal.CLOSE)


@_guarded
def _handle_write_quit(context: ModeContext, args: List[str]) -> ModeResult:
    require_command_host(context).save()
    context.bus.emit("command.write", {"args": list(args)})
    context.bus.emit("command.quit", {"force": False})
    return _done(context, "command_wq", signal=CommandSignal.CLOSE)


def _handle_quit_all(context: ModeContext, args: List[str]) -> ModeResult:
    del args
    context.bus.emit("command.quit", {"force": True, "all": True})
    return _done(context, "command_quit_all", signal=CommandSignal.QUIT)


@_guarded
def _handle_check(context: ModeContext, args: List[str]) -> ModeResult:
    del args
    passed = require_command_host(context).verify_current()
    return _done(context, "command_check_passed" if passed else "command_check_failed")


@_guarded
def _handle_check_all(context: ModeContext, args: List[str]) -> ModeResult:
    del args
    require_command_host(context).check_all()
    return _done(context, "command_check_all")


def _handle_hint(context: ModeContext, args: List[str]) -> ModeResult:
    del args
    require_command_host(context).show_hint()
    return _done(context, "command_hint")


@_guarded
def _handle_solution(context: ModeContext, args: List[str]) -> ModeResult:
    del args
    require_command_host(context).toggle_solution()
    return _done(context, "command_solution")


@_guarded
def _handle_navigate(
    context: ModeContext, args: List[str], *, forward: bool
) -> ModeResult:
    del args
    host = require_command_host(context)
    if forward:
        host.next_exercise()
    else:
        host.previous_exercise()
    return _done(context, "command_next" if forward else "command_prev")


def _handle_toggle(context: ModeContext, args: List[str], *, setting: str) -> ModeResult:
    del args
    host = require_command_host(context)
    if setting == "auto":
        host.toggle_auto_advance()
    else:
        host.toggle_auto_verify()
    return _done(context, f"command_{setting}")


@_guarded
def _handle_reload(context: ModeContext, args: List[str]) -> ModeResult:
    del args
    host = require_command_host(context)
    host.reload()
    host.notify("Exercise reloaded from disk")
    return _done(context, "command_reload")


@_guarded
def _handle_reset(context: ModeContext, args: List[str]) -> ModeResult:
    del args
    host = require_command_host(context)
    host.reset_exercise()
    host.notify("Exercise reset to original")
    return _done(context, "command_reset")


def _handle_help(context: ModeContext, args: List[str]) -> ModeResult:
    del args
    require_command_host(context).toggle_help()
    return _done(context, "command_help")


def next_exercise(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Normal-mode ``]``."""

    del match
    return _handle_navigate(context, [], forward=True)


def previous_exercise(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Normal-mode ``[``."""

    del match
    return _handle_navigate(context, [], forward=False)


_COMMAND_HANDLERS: Dict[str, CommandHandler] = {
    "w": _handle_write,
    "q": _handle_quit,
    "q!": partial(_handle_quit, force=True),
    "wq": _handle_write_quit,
    "x": _handle_write_quit,
    "qa": _handle_quit_all,
    "quitall": _handle_quit_all,
    "c": _handle_check,
    "checkall": _handle_check_all,
    "h": _handle_hint,
    "hint": _handle_hint,
    "s": _handle_solution,
    "sol": _handle_solution,
    "solution": _handle_solution,
    "n": partial(_handle_navigate, forward=True),
    "next": partial(_handle_navigate, forward=True),
    "p": partial(_handle_navigate, forward=False),
    "prev": partial(_handle_navigate, forward=False),
    "auto": partial(_handle_toggle, setting="auto"),
    "watch": partial(_handle_toggle, setting="watch"),
    "r": _handle_reload,
    "reload": _handle_reload,
    "reset": _handle_reset,
    "help": _handle_help,
}


def command_names() -> tuple[str, ...]:
    return tuple(sorted(_COMMAND_HANDLERS))


__all__ = [
    "CommandHost",
    "require_command_host",
    "submit_command_line",
    "next_exercise",
    "previous_exercise",
    "command_names",
]
