"""Shared constants and enumerations for the mini crossword generator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


GRID_SIZE = 5
MIN_SLOT_LENGTH = 3
MAX_SLOT_LENGTH = 5

WILDCARD = "?"
WHITE = "."
BLACK = "#"


class Direction(str, Enum):
    """Word directions supported by the grid."""

    ACROSS = "across"
    DOWN = "down"

    @property
    def step(self) -> Tuple[int, int]:
        return (0, 1) if self is Direction.ACROSS else (1, 0)

    @property
    def suffix(self) -> str:
        return "A" if self is Direction.ACROSS else "D"


ORTHOGONAL_STEPS: Tuple[Tuple[int, int], ...] = ((0, 1), (1, 0), (0, -1), (-1, 0))


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int = GRID_SIZE
    cols: int = GRID_SIZE

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols
