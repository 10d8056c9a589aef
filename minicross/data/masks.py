"""Catalog of 5x5 black/white layouts.

Symbols: ``.`` is a white (fillable) square, ``#`` a black square. Every
layout in the catalog is checked on load: 5x5 shape, connected white
squares, and every white square covered by at least one 3-5 letter run.
"""

from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from ..core.constants import BLACK, GRID_SIZE, MIN_SLOT_LENGTH, ORTHOGONAL_STEPS, WHITE, Bounds
from ..core.exceptions import InvalidMaskError, MaskNotFoundError
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class Mask:
    id: str
    name: str
    rows: Tuple[str, ...]
    description: str = ""


DEFAULT_MASKS: Tuple[Mask, ...] = (
    Mask("t1", "Open Grid", (".....", ".....", ".....", ".....", "....."),
         "Fully open 5x5 grid"),
    Mask("c1", "Bottom Corner L", (".....", ".....", ".....", "#....", "#...."),
         "L-shaped black pattern in bottom left corner"),
    Mask("c2", "Asymmetric Corners", ("#...#", ".....", ".....", ".....", "#...."),
         "Black squares in top corners with bottom left offset"),
    Mask("c3", "Corner Balance", ("#...#", ".....", ".....", ".....", "#...#"),
         "Balanced black squares in opposite corners"),
    Mask("c4", "Diagonal Block", ("##...", "#....", ".....", "....#", "...##"),
         "Diagonal black square pattern from top-left"),
    Mask("c5", "Three Corner", ("#...#", ".....", ".....", "....#", "...##"),
         "Black squares in three corners with bottom right offset"),
    Mask("c6", "Right Edge", (".....", ".....", ".....", "....#", "....#"),
         "Black squares along the right edge"),
    Mask("c7", "Corner Triangle", ("#...#", ".....", ".....", ".....", "#...."),
         "Triangular black pattern in corners"),
    Mask("c8", "Opposite Singles", ("#....", ".....", ".....", ".....", "....#"),
         "Single black squares in opposite corners"),
    Mask("c9", "Top Right Block", ("...##", ".....", ".....", ".....", "....#"),
         "Rectangular black pattern in top right corner"),
    Mask("c10", "Top Left Block", ("##...", "#....", ".....", ".....", "....."),
         "Rectangular black pattern in top left corner"),
    Mask("c11", "Bottom Edge", (".....", ".....", ".....", "#...#", "#...#"),
         "Black squares along the bottom edge"),
    Mask("c12", "Left Edge", ("#....", "#....", ".....", ".....", "....#"),
         "Black squares along the left edge"),
    Mask("c13", "Offset Corners", ("#...#", ".....", ".....", ".....", "#...."),
         "Black squares in offset corner positions"),
    Mask("c14", "Right Singles", ("....#", ".....", ".....", ".....", "....#"),
         "Single black squares on the right side"),
    Mask("c15", "Partial Corners", ("#...#", ".....", ".....", ".....", "#...."),
         "Black squares in partial corner configuration"),
)


def normalize_rows(rows: Sequence[Sequence[str]]) -> Tuple[str, ...]:
    """Convert a 5x5 sequence of markers into a tuple of row strings."""

    if len(rows) != GRID_SIZE:
        raise InvalidMaskError(f"Mask must have {GRID_SIZE} rows, got {len(rows)}")
    normalized: List[str] = []
    for index, row in enumerate(rows):
        text = "".join(row)
        if len(text) != GRID_SIZE:
            raise InvalidMaskError(f"Mask row {index} must have {GRID_SIZE} cells, got {len(text)}")
        unknown = set(text) - {WHITE, BLACK}
        if unknown:
            raise InvalidMaskError(f"Mask row {index} has unknown markers {sorted(unknown)}")
        normalized.append(text)
    return tuple(normalized)


def covered_cells(rows: Sequence[str]) -> Set[Tuple[int, int]]:
    """Cells belonging to at least one white run of 3+ squares."""

    covered: Set[Tuple[int, int]] = set()
    for r in range(GRID_SIZE):
        for run in _runs(rows[r]):
            if len(run) >= MIN_SLOT_LENGTH:
                covered.update((r, c) for c in run)
    for c in range(GRID_SIZE):
        column = "".join(rows[r][c] for r in range(GRID_SIZE))
        for run in _runs(column):
            if len(run) >= MIN_SLOT_LENGTH:
                covered.update((r, c) for r in run)
    return covered


def _runs(line: str) -> Iterator[List[int]]:
    run: List[int] = []
    for index, marker in enumerate(line + BLACK):
        if marker == WHITE:
            run.append(index)
        elif run:
            yield run
            run = []


def is_connected(rows: Sequence[str]) -> bool:
    """True when every white square is reachable from every other one."""

    bounds = Bounds()
    whites = {(r, c) for r in range(GRID_SIZE) for c in range(GRID_SIZE) if rows[r][c] == WHITE}
    if not whites:
        return False
    start = next(iter(sorted(whites)))
    seen = {start}
    queue = deque([start])
    while queue:
        row, col = queue.popleft()
        for dr, dc in ORTHOGONAL_STEPS:
            nr, nc = row + dr, col + dc
            if bounds.contains(nr, nc) and (nr, nc) in whites and (nr, nc) not in seen:
                seen.add((nr, nc))
                queue.append((nr, nc))
    return seen == whites


def validate_mask(mask: Mask) -> None:
    rows = normalize_rows(mask.rows)
    if not is_connected(rows):
        raise InvalidMaskError(f"Mask {mask.id} has disconnected white squares")
    whites = {(r, c) for r in range(GRID_SIZE) for c in range(GRID_SIZE) if rows[r][c] == WHITE}
    covered = covered_cells(rows)
    if not covered:
        raise InvalidMaskError(f"Mask {mask.id} has no 3-5 letter slot")
    stranded = sorted(whites - covered)
    if stranded:
        raise InvalidMaskError(f"Mask {mask.id} has white squares outside any slot: {stranded}")


class MaskCatalog:
    """Read-only collection of validated masks."""

    def __init__(self, masks: Optional[Iterable[Mask]] = None) -> None:
        self._masks: Dict[str, Mask] = {}
        for mask in DEFAULT_MASKS if masks is None else masks:
            validate_mask(mask)
            if mask.id in self._masks:
                raise InvalidMaskError(f"Duplicate mask id {mask.id}")
            self._masks[mask.id] = Mask(mask.id, mask.name, normalize_rows(mask.rows), mask.description)
        if not self._masks:
            raise InvalidMaskError("Mask catalog is empty")

    def __len__(self) -> int:
        return len(self._masks)

    def __iter__(self) -> Iterator[Mask]:
        return iter(self._masks.values())

    def __contains__(self, mask_id: object) -> bool:
        return mask_id in self._masks

    def ids(self) -> List[str]:
        return list(self._masks)

    def get(self, mask_id: str) -> Mask:
        try:
            return self._masks[mask_id]
        except KeyError:
            raise MaskNotFoundError(
                f"Unknown mask '{mask_id}'. Known masks: {', '.join(self._masks)}"
            ) from None

    def choose(self, rng: random.Random) -> Mask:
        """Pick a mask with ``rng``; a seeded RNG gives a reproducible choice."""

        mask = rng.choice(list(self._masks.values()))
        LOGGER.debug("Selected mask %s (%s)", mask.id, mask.name)
        return mask
