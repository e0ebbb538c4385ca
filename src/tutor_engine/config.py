"""Editor mode configuration and workstation settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

ENV_PREFIX = "TUTOR_ENGINE_"

DEFAULT_STATE_FILE = ".tutor-state.txt"
DEFAULT_CHECK_PARALLELISM = 8
DEFAULT_UNDO_LIMIT = 100
DEFAULT_POLL_INTERVAL_MS = 500


class EditorMode(str, Enum):
    """Available editor modes."""

    NORMAL = "normal"
    INSERT = "insert"
    VISUAL = "visual"
    COMMAND = "command"


@dataclass(frozen=True)
class ModeConfig:
    """Presentation hints a renderer may use for each mode."""

    label: str
    read_only: bool
    color: str


MODE_CONFIGS = {
    EditorMode.NORMAL: ModeConfig("NORMAL", True, "#98C379"),
    EditorMode.INSERT: ModeConfig("INSERT", False, "#E8B86D"),
    EditorMode.VISUAL: ModeConfig("VISUAL", True, "#6EACDA"),
    EditorMode.COMMAND: ModeConfig("COMMAND", True, "#E06C75"),
}


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_flag(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, fallback: Optional[int]) -> Optional[int]:
    value = _env(name)
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


def default_parallelism() -> int:
    """Host parallelism, or the fixed fallback when it cannot be determined."""

    return os.cpu_count() or DEFAULT_CHECK_PARALLELISM


@dataclass(frozen=True)
class Settings:
    """Workstation tunables, overridable through ``TUTOR_ENGINE_*`` variables."""

    state_file: str = DEFAULT_STATE_FILE
    check_parallelism: Optional[int] = None
    undo_limit: int = DEFAULT_UNDO_LIMIT
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    auto_advance: bool = True
    auto_verify: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            state_file=_env("STATE_FILE") or DEFAULT_STATE_FILE,
            check_parallelism=_env_int("CHECK_PARALLELISM", None),
            undo_limit=_env_int("UNDO_LIMIT", DEFAULT_UNDO_LIMIT) or DEFAULT_UNDO_LIMIT,
            poll_interval_ms=_env_int("POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS)
            or DEFAULT_POLL_INTERVAL_MS,
            auto_advance=_env_flag("AUTO_ADVANCE", True),
            auto_verify=_env_flag("AUTO_VERIFY", True),
        )

    @property
    def workers(self) -> int:
        if self.check_parallelism and self.check_parallelism > 0:
            return self.check_parallelism
        return default_parallelism()


__all__ = [
    "EditorMode",
    "ModeConfig",
    "MODE_CONFIGS",
    "Settings",
    "default_parallelism",
    "DEFAULT_STATE_FILE",
    "DEFAULT_CHECK_PARALLELISM",
    "DEFAULT_UNDO_LIMIT",
    "DEFAULT_POLL_INTERVAL_MS",
]
