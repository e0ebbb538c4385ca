"""Exercise descriptors handed to the session by the host."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(eq=False)
class Exercise:
    """One exercise: its source file, optional solution, and completion flag.

    Everything except ``done`` is fixed once the exercise list is built.
    """

    name: str
    path: Path
    solution_path: Optional[Path] = None
    hint: str = ""
    requires_test: bool = True
    requires_lint: bool = False
    directory: Optional[str] = None
    done: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("exercise name cannot be empty")
        self.path = Path(self.path)
        if self.solution_path is not None:
            self.solution_path = Path(self.solution_path)
        self.hint = self.hint.strip()

    @classmethod
    def in_tree(
        cls,
        name: str,
        *,
        root: Path | str = "exercises",
        solutions_root: Path | str | None = "solutions",
        directory: Optional[str] = None,
        suffix: str = ".py",
        **fields: object,
    ) -> "Exercise":
        """Derive ``<root>/<directory>/<name><suffix>`` style paths."""

        relative = Path(directory, f"{name}{suffix}") if directory else Path(f"{name}{suffix}")
        solution = Path(solutions_root) / relative if solutions_root is not None else None
        return cls(
            name=name,
            path=Path(root) / relative,
            solution_path=solution,
            directory=directory,
            **fields,  # type: ignore[arg-type]
        )

    @property
    def file_name(self) -> str:
        return self.path.name


__all__ = ["Exercise"]
