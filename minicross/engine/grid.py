"""Grid representation, slot detection and placement helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterator, List, Optional, Sequence, Tuple, Union

from ..core.constants import (
    BLACK,
    GRID_SIZE,
    MAX_SLOT_LENGTH,
    MIN_SLOT_LENGTH,
    WHITE,
    WILDCARD,
    Bounds,
    Direction,
)
from ..core.exceptions import GridStateError, LengthMismatchError, SlotPlacementError
from ..core.models import Cell, Intersection, Slot
from ..data.masks import Mask, normalize_rows
from ..data.normalization import clean_word
from ..utils.logger import get_logger
from .intersections import IntersectionIndex


LOGGER = get_logger(__name__)

MaskLike = Union[Mask, Sequence[Sequence[str]]]
Run = Tuple[int, int, int]  # start_row, start_col, length


@dataclass(frozen=True)
class GridSnapshot:
    """Slot patterns and placed slot ids captured before a placement."""

    patterns: Dict[str, str]
    placed: FrozenSet[str]


class GridModel:
    """A 5x5 letter grid with its slots, built fresh for each attempt."""

    def __init__(self, cells: List[List[Cell]], slots: List[Slot], mask_id: Optional[str] = None) -> None:
        self.bounds = Bounds(rows=GRID_SIZE, cols=GRID_SIZE)
        self.cells = cells
        self.slots = slots
        self.mask_id = mask_id
        self.intersections = IntersectionIndex(slots)
        self._slots_by_id: Dict[str, Slot] = {slot.id: slot for slot in slots}
        self._placed: set[str] = set()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def build(cls, mask: MaskLike, mask_id: Optional[str] = None) -> "GridModel":
        """Detect slots in ``mask`` and number them in reading order."""

        if isinstance(mask, Mask):
            rows = normalize_rows(mask.rows)
            mask_id = mask_id or mask.id
        else:
            rows = normalize_rows(mask)

        cells = [[Cell(is_black=rows[r][c] == BLACK) for c in range(GRID_SIZE)] for r in range(GRID_SIZE)]
        runs = {
            Direction.ACROSS: cls._scan_runs(rows, Direction.ACROSS),
            Direction.DOWN: cls._scan_runs(rows, Direction.DOWN),
        }

        starts = {(row, col) for found in runs.values() for row, col, _ in found}
        numbers: Dict[Tuple[int, int], int] = {}
        next_number = 1
        for r in range(GRID_SIZE):
            for c in range(GRID_SIZE):
                if (r, c) in starts:
                    numbers[(r, c)] = next_number
                    cells[r][c].clue_number = next_number
                    next_number += 1

        slots: List[Slot] = []
        for direction, found in runs.items():
            dr, dc = direction.step
            for row, col, length in found:
                number = numbers[(row, col)]
                slots.append(
                    Slot(
                        id=f"{number}{direction.suffix}",
                        direction=direction,
                        start_row=row,
                        start_col=col,
                        length=length,
                        cells=tuple((row + dr * i, col + dc * i) for i in range(length)),
                        clue_number=number,
                    )
                )
        slots.sort(key=lambda slot: (slot.clue_number, slot.direction is Direction.DOWN))
        LOGGER.debug("Built grid %s with %d slots", mask_id or "<anonymous>", len(slots))
        return cls(cells, slots, mask_id)

    @staticmethod
    def _scan_runs(rows: Sequence[str], direction: Direction) -> List[Run]:
        """Collect white runs of 3-5 cells, treating the edge as a black cell."""

        found: List[Run] = []
        for line in range(GRID_SIZE):
            start: Optional[int] = None
            for pos in range(GRID_SIZE + 1):
                if pos < GRID_SIZE:
                    marker = rows[line][pos] if direction is Direction.ACROSS else rows[pos][line]
                    white = marker == WHITE
                else:
                    white = False
                if white and start is None:
                    start = pos
                elif not white and start is not None:
                    length = pos - start
                    if MIN_SLOT_LENGTH <= length <= MAX_SLOT_LENGTH:
                        if direction is Direction.ACROSS:
                            found.append((line, start, length))
                        else:
                            found.append((start, line, length))
                    start = None
        return found

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def cell(self, row: int, col: int) -> Cell:
        return self.cells[row][col]

    def slot(self, slot_id: str) -> Slot:
        return self._slots_by_id[slot_id]

    @property
    def across_slots(self) -> List[Slot]:
        return [slot for slot in self.slots if slot.direction is Direction.ACROSS]

    @property
    def down_slots(self) -> List[Slot]:
        return [slot for slot in self.slots if slot.direction is Direction.DOWN]

    @property
    def placed_slot_ids(self) -> FrozenSet[str]:
        return frozenset(self._placed)

    def unfilled_slots(self) -> Iterator[Slot]:
        return (slot for slot in self.slots if not slot.is_filled)

    def is_complete(self) -> bool:
        return all(slot.is_filled for slot in self.slots)

    def intersections_of(self, slot: Slot) -> Tuple[Intersection, ...]:
        return self.intersections.of(slot)

    def derived_pattern(self, slot: Slot) -> str:
        return "".join(self.cells[r][c].letter or WILDCARD for r, c in slot.cells)

    # ------------------------------------------------------------------
    # Patterns
    # ------------------------------------------------------------------
    def update_patterns(self) -> None:
        for slot in self.slots:
            slot.pattern = self.derived_pattern(slot)

    def verify_patterns(self) -> None:
        """Raise :class:`GridStateError` if a slot pattern disagrees with the cells."""

        for slot in self.slots:
            expected = self.derived_pattern(slot)
            if slot.pattern != expected:
                raise GridStateError(
                    f"Slot {slot.id} pattern '{slot.pattern}' does not match cells '{expected}'"
                )

    # ------------------------------------------------------------------
    # Word placement
    # ------------------------------------------------------------------
    def is_valid_placement(self, word: str, slot: Slot) -> bool:
        if len(word) != slot.length:
            return False
        for row, col in slot.cells:
            if not self.bounds.contains(row, col) or self.cells[row][col].is_black:
                return False
        for crossing in self.intersections.of(slot):
            existing = crossing.other.pattern[crossing.index_in_other]
            if existing != WILDCARD and existing != word[crossing.index_in_this]:
                return False
        return True

    def place_word(self, word: str, slot: Slot) -> None:
        text = clean_word(word)
        if len(text) != slot.length:
            raise LengthMismatchError(
                f"Word '{word}' has {len(text)} letters but slot {slot.id} needs {slot.length}"
            )

        for index, (row, col) in enumerate(slot.cells):
            if not self.bounds.contains(row, col):
                raise SlotPlacementError("Word extends outside grid")
            cell = self.cells[row][col]
            if cell.is_black:
                raise SlotPlacementError("Word overlaps black cell")
            if cell.letter and cell.letter != text[index]:
                raise SlotPlacementError(
                    f"Letter conflict at {(row, col)}: '{cell.letter}' vs '{text[index]}'"
                )

        # All checks passed, mutate grid
        for index, (row, col) in enumerate(slot.cells):
            cell = self.cells[row][col]
            cell.letter = text[index]
            cell.placed_by.add(slot.id)
        self._placed.add(slot.id)
        self.update_patterns()

    def remove_word(self, slot: Slot) -> None:
        """Clear the slot's letters except where another placed word crosses."""

        if slot.id not in self._placed:
            return
        for row, col in slot.cells:
            cell = self.cells[row][col]
            cell.placed_by.discard(slot.id)
            if not cell.placed_by:
                cell.letter = None
        self._placed.discard(slot.id)
        self.update_patterns()

    def snapshot(self) -> GridSnapshot:
        return GridSnapshot(
            patterns={slot.id: slot.pattern for slot in self.slots},
            placed=frozenset(self._placed),
        )

    def restore(self, snapshot: GridSnapshot) -> None:
        """Reset slot patterns, cell letters and placements to ``snapshot``."""

        for slot in self.slots:
            for row, col in slot.cells:
                cell = self.cells[row][col]
                cell.letter = None
                cell.placed_by.clear()

        for slot in self.slots:
            pattern = snapshot.patterns[slot.id]
            slot.pattern = pattern
            for index, (row, col) in enumerate(slot.cells):
                if pattern[index] != WILDCARD:
                    self.cells[row][col].letter = pattern[index]

        for slot_id in snapshot.placed:
            for row, col in self._slots_by_id[slot_id].cells:
                self.cells[row][col].placed_by.add(slot_id)
        self._placed = set(snapshot.placed)
        self.verify_patterns()

    # ------------------------------------------------------------------
    # Serialization helpers
    # ------------------------------------------------------------------
    def to_rows(self) -> List[str]:
        """Render as strings: ``#`` black, ``.`` empty white, else the letter."""

        return [
            "".join(BLACK if cell.is_black else (cell.letter or WHITE) for cell in row)
            for row in self.cells
        ]
