from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, eq=False)
class Entry:
    """Immutable key/value pair; identity is the key alone."""

    key: Any
    value: Any

    def __post_init__(self) -> None:
        if self.key is None or self.value is None:
            raise ValueError("Entry key and value must not be None")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"{self.key}:{self.value}"
