"""Single-slot yank register."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class RegisterValue:
    text: str
    type: str = "character"  # character or line


class YankRegister:
    """Holds the most recently yanked or deleted text."""

    def __init__(self) -> None:
        self._value: Optional[RegisterValue] = None

    def get(self) -> Optional[RegisterValue]:
        return self._value

    @property
    def text(self) -> str:
        return self._value.text if self._value else ""

    def is_empty(self) -> bool:
        return self._value is None

    def yank_to(self, text: str, *, register_type: str = "character") -> None:
        self._value = RegisterValue(text=text, type=register_type)

    def clear(self) -> None:
        self._value = None
