"""Data models supporting the puzzle generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Set, Tuple

from .constants import MAX_SLOT_LENGTH, MIN_SLOT_LENGTH, WILDCARD, Direction

if TYPE_CHECKING:
    from ..data.dictionary import WordEntry


@dataclass
class Cell:
    """Represents a grid cell with metadata."""

    is_black: bool = False
    letter: Optional[str] = None
    clue_number: Optional[int] = None
    placed_by: Set[str] = field(default_factory=set)


@dataclass(eq=False)
class Slot:
    """A maximal white run of 3-5 cells that holds one word."""

    id: str
    direction: Direction
    start_row: int
    start_col: int
    length: int
    cells: Tuple[Tuple[int, int], ...]
    clue_number: int
    pattern: str = ""
    candidates: List["WordEntry"] = field(default_factory=list, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not MIN_SLOT_LENGTH <= self.length <= MAX_SLOT_LENGTH:
            raise ValueError(f"Slot {self.id} has unsupported length {self.length}")
        if len(self.cells) != self.length:
            raise ValueError(
                f"Slot {self.id} declares length {self.length} but covers {len(self.cells)} cells"
            )
        if not self.pattern:
            self.pattern = WILDCARD * self.length

    @property
    def is_filled(self) -> bool:
        return WILDCARD not in self.pattern


@dataclass(frozen=True)
class Intersection:
    """A crossing between ``slot`` and ``other`` at one shared cell."""

    other: Slot
    index_in_this: int
    index_in_other: int
