"""Checker collaborators that decide whether an exercise passes."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional, Protocol, Sequence, TextIO

from tutor_engine.errors import CollaboratorFailure
from tutor_engine.runtime import telemetry

from .models import Exercise


class Checker(Protocol):
    """Anything that can verify an exercise; may raise on infrastructure errors."""

    def check(self, exercise: Exercise, sink: Optional[TextIO] = None) -> bool:
        ...


class SubprocessChecker:
    """Runs argv templates with ``{path}`` and ``{name}`` substituted.

    ``argv`` always runs. ``test_argv`` runs for exercises that require tests
    and ``lint_argv`` for those that require linting. The exercise passes
    only when every step exits with status 0; the first failing step stops
    the run. Combined stdout/stderr of each step is written to ``sink``.
    """

    def __init__(
        self,
        argv: Sequence[str],
        *,
        test_argv: Sequence[str] | None = None,
        lint_argv: Sequence[str] | None = None,
        cwd: Path | str | None = None,
        timeout: float | None = None,
    ) -> None:
        if not argv:
            raise ValueError("checker argv cannot be empty")
        self.argv = tuple(argv)
        self.test_argv = tuple(test_argv) if test_argv else None
        self.lint_argv = tuple(lint_argv) if lint_argv else None
        self.cwd = Path(cwd) if cwd is not None else None
        self.timeout = timeout
        self.logger = telemetry.get_logger("tutor_engine.checker")

    def steps(self, exercise: Exercise) -> list[list[str]]:
        templates = [self.argv]
        if exercise.requires_test and self.test_argv:
            templates.append(self.test_argv)
        if exercise.requires_lint and self.lint_argv:
            templates.append(self.lint_argv)
        return [self._expand(template, exercise) for template in templates]

    def check(self, exercise: Exercise, sink: Optional[TextIO] = None) -> bool:
        for argv in self.steps(exercise):
            self.logger.debug("running {} for {}", argv, exercise.name)
            try:
                completed = subprocess.run(
                    argv,
                    cwd=self.cwd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
            except (OSError, subprocess.TimeoutExpired) as exc:
                raise CollaboratorFailure(
                    f"Failed to run {argv[0]}: {exc}", exercise=exercise
                ) from exc
            if sink is not None and completed.stdout:
                sink.write(completed.stdout)
            if completed.returncode != 0:
                return False
        return True

    @staticmethod
    def _expand(template: Sequence[str], exercise: Exercise) -> list[str]:
        return [part.format(path=exercise.path, name=exercise.name) for part in template]


__all__ = ["Checker", "SubprocessChecker"]
