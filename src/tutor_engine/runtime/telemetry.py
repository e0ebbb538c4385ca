"""Telemetry services built directly on loguru.

This module exposes a narrow surface area for the rest of the engine:

``configure(...)`` -- install the loguru sinks from env vars or a preset
``get_logger(name)`` -- fetch (and cache) a logger bound to a component name
``record_event(name, ...)`` -- emit structured events at a chosen level
``span(name, ...)`` -- context manager timing a block and tagging its component
"""

from __future__ import annotations

import os
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, MutableMapping, Optional, cast

from loguru import logger as _root_logger

ENV_PREFIX = "TUTOR_ENGINE_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "tutor_engine")
DEFAULT_LOG_FILE = os.getenv(f"{ENV_PREFIX}LOG_FILE", "")

CONSOLE_FORMAT = (
    "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | {message}"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[component]} | {message}"

_LOGGER_CACHE: MutableMapping[str, Any] = {}
_ACTIVE_CONFIG: Optional["LogConfig"] = None


@dataclass
class LogConfig:
    """Sink layout applied by ``configure``."""

    level: str = "WARNING"
    console: bool = True
    colorize: bool = True
    json: bool = False
    log_file: str = ""
    file_level: str = "DEBUG"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_flag(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def _format_pairs(data: Dict[str, Any]) -> str:
    return " ".join(f"{key}={_stringify(value)}" for key, value in data.items())


def _resolve_level() -> str:
    return (_env("LOG_LEVEL") or "WARNING").upper()


def _build_preset_config(preset: str) -> LogConfig:
    key = preset.lower()

    if key == "development":
        return LogConfig(level="DEBUG", console=True, colorize=True)
    if key == "production":
        log_path = _env("LOG_FILE", DEFAULT_LOG_FILE) or "tutor_engine.log"
        return LogConfig(level="INFO", console=False, log_file=log_path, file_level="INFO")
    if key == "quiet":
        return LogConfig(level="ERROR", console=False)
    raise ValueError(f"Unknown preset '{preset}'.")


def _build_default_config() -> LogConfig:
    return LogConfig(
        level=_resolve_level(),
        console=not _env_flag("DISABLE_CONSOLE", False),
        colorize=not _env_flag("NO_COLOR", False),
        json=_env_flag("LOG_JSON", False),
        log_file=_env("LOG_FILE") or DEFAULT_LOG_FILE,
    )


def configure(*, config: Optional[LogConfig] = None, preset: Optional[str] = None) -> None:
    """Replace the active loguru sinks.

    Parameters
    ----------
    config:
        Explicit ``LogConfig`` to adopt.
    preset:
        Named preset (``"development"``, ``"production"``, ``"quiet"``).
        ``config`` and ``preset`` are mutually exclusive.
    """

    global _ACTIVE_CONFIG
    if config and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")

    if preset:
        config = _build_preset_config(preset)
    elif config is None:
        config = _build_default_config()

    _root_logger.remove()
    _root_logger.configure(extra={"component": DEFAULT_LOGGER_NAME})
    if config.console:
        _root_logger.add(
            sys.stderr,
            level=config.level,
            format=CONSOLE_FORMAT,
            colorize=config.colorize,
            serialize=config.json,
        )
    if config.log_file:
        _root_logger.add(
            config.log_file,
            level=config.file_level,
            format=FILE_FORMAT,
            serialize=config.json,
            enqueue=True,
        )

    _ACTIVE_CONFIG = config
    _LOGGER_CACHE.clear()


def active_config() -> LogConfig:
    if _ACTIVE_CONFIG is None:
        configure()
    return cast(LogConfig, _ACTIVE_CONFIG)


def get_logger(name: Optional[str] = None) -> Any:
    """Return a cached loguru logger bound to ``name`` as its component."""

    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name not in _LOGGER_CACHE:
        _LOGGER_CACHE[logger_name] = _root_logger.bind(component=logger_name)
    return _LOGGER_CACHE[logger_name]


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit a structured ``event::<name>`` record with key/value payload."""

    log = get_logger(logger_name)
    payload = {"event": name, **(data or {})}
    log.bind(**{key: _stringify(value) for key, value in payload.items()}).log(
        str(level).upper(), "event::{} {}", name, _format_pairs(payload)
    )


@dataclass
class SpanHandle:
    """Handle returned from ``span`` for optional metadata updates."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def _emit(self, level: str, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        payload = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        if extra:
            payload.update({key: _stringify(val) for key, val in extra.items()})
        self.logger.log(level.upper(), "{} {}", message, _format_pairs(payload))

    def fail(self, reason: str) -> None:
        self._emit("error", "span::fail", {"reason": reason})

    def cancel(self, reason: str | None = None) -> None:
        extra = {"reason": reason} if reason else None
        self._emit("warning", "span::cancel", extra)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Time a code block and (optionally) tag it with a component name.

    Parameters
    ----------
    name:
        Operation name written with every span record.
    logger_name:
        Target logger; defaults to the engine logger.
    component:
        If ``True`` use the span name as the component; if a string, use it
        as the component identifier.
    metadata:
        Optional key/value pairs attached to the span records.
    """

    component_name = None
    if component is True:
        component_name = name
    elif isinstance(component, str):
        component_name = component

    handle = SpanHandle(
        logger=get_logger(logger_name),
        span_name=name,
        component_name=component_name,
        metadata={key: _stringify(value) for key, value in (metadata or {}).items()},
    )
    started = time.perf_counter()
    try:
        yield handle
    except Exception as exc:
        handle.fail(str(exc))
        raise
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        handle._emit("trace", "span::done", {"elapsed_ms": f"{elapsed_ms:.3f}"})


# Initialize the sinks once at import so every module logs consistently.
configure()
logger = get_logger()

__all__ = [
    "LogConfig",
    "SpanHandle",
    "active_config",
    "configure",
    "get_logger",
    "record_event",
    "span",
    "logger",
]
