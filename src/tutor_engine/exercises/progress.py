"""Per-exercise verification progress and the views that render it."""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Optional, Protocol, Sequence

from rich.console import Console
from rich.live import Live
from rich.text import Text


class CheckProgress(str, Enum):
    NOT_STARTED = "not_started"
    CHECKING = "checking"
    PASSED = "passed"
    FAILED = "failed"


_GLYPHS = {
    CheckProgress.NOT_STARTED: ("·", "dim"),
    CheckProgress.CHECKING: ("~", "yellow"),
    CheckProgress.PASSED: ("✓", "green"),
    CheckProgress.FAILED: ("✗", "red"),
}


class ProgressView(Protocol):
    def start(self, total: int) -> None:
        ...

    def update(self, progresses: Sequence[CheckProgress]) -> None:
        ...

    def finish(self, progresses: Sequence[CheckProgress]) -> None:
        ...


class NullProgressView:
    """Discards every update."""

    def start(self, total: int) -> None:
        return None

    def update(self, progresses: Sequence[CheckProgress]) -> None:
        return None

    def finish(self, progresses: Sequence[CheckProgress]) -> None:
        return None


def render_progress(progresses: Sequence[CheckProgress]) -> Text:
    """One glyph per exercise followed by a pass/fail tally."""

    result = Text()
    for progress in progresses:
        glyph, style = _GLYPHS[progress]
        result.append(glyph, style=style)
    counts = Counter(progresses)
    result.append("\n")
    result.append(f"{counts[CheckProgress.PASSED]} passed", style="green")
    result.append(" / ")
    result.append(f"{counts[CheckProgress.FAILED]} failed", style="red")
    result.append(f" / {len(progresses)} total")
    return result


class RichProgressView:
    """Redraws the status strip through ``rich.live.Live`` while a pass runs."""

    def __init__(self, console: Optional[Console] = None, *, refresh_per_second: int = 4) -> None:
        self.console = console or Console(stderr=True)
        self.refresh_per_second = refresh_per_second
        self._live: Optional[Live] = None

    def start(self, total: int) -> None:
        self._live = Live(
            render_progress([CheckProgress.NOT_STARTED] * total),
            console=self.console,
            refresh_per_second=self.refresh_per_second,
            transient=True,
        )
        self._live.start()

    def update(self, progresses: Sequence[CheckProgress]) -> None:
        if self._live is not None:
            self._live.update(render_progress(progresses))

    def finish(self, progresses: Sequence[CheckProgress]) -> None:
        if self._live is None:
            return
        self._live.update(render_progress(progresses), refresh=True)
        self._live.stop()
        self._live = None
        self.console.print(render_progress(progresses))


__all__ = [
    "CheckProgress",
    "NullProgressView",
    "ProgressView",
    "RichProgressView",
    "render_progress",
]
