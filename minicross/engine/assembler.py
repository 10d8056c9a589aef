"""Turns a solved grid into the puzzle result handed to callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..core.constants import BLACK, Direction
from ..core.exceptions import IncompletePuzzleError
from ..core.models import Slot
from .grid import GridModel


@dataclass
class PuzzleEntry:
    slot_id: str
    number: int
    direction: Direction
    answer: str
    pattern: str
    row: int
    col: int
    length: int
    clue: Optional[str] = None

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "num": self.number,
            "answer": self.answer,
            "row": self.row,
            "col": self.col,
            "length": self.length,
            "pattern": self.pattern,
            "clue": self.clue,
        }


@dataclass
class PuzzleMeta:
    mask_id: Optional[str]
    seed: Optional[int]
    generation_time_ms: float
    attempts: int

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "mask_id": self.mask_id,
            "seed": self.seed,
            "generation_time_ms": round(self.generation_time_ms, 2),
            "attempts": self.attempts,
        }


@dataclass
class Puzzle:
    grid: List[List[str]]
    across: List[PuzzleEntry]
    down: List[PuzzleEntry]
    meta: PuzzleMeta
    entries_by_slot: Dict[str, PuzzleEntry] = field(default_factory=dict, repr=False)

    @property
    def entries(self) -> List[PuzzleEntry]:
        return self.across + self.down

    @property
    def words(self) -> List[str]:
        """Lowercase answers, as held in the word store."""

        return [entry.pattern for entry in self.entries]

    def attach_clues(self, clues: Mapping[str, str]) -> None:
        for slot_id, text in clues.items():
            entry = self.entries_by_slot.get(slot_id)
            if entry is not None:
                entry.clue = text

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "grid": [list(row) for row in self.grid],
            "across": [entry.to_jsonable() for entry in self.across],
            "down": [entry.to_jsonable() for entry in self.down],
            "meta": self.meta.to_jsonable(),
        }


class PuzzleAssembler:
    """Pure transform from a fully filled :class:`GridModel` to a :class:`Puzzle`."""

    def assemble(
        self,
        grid: GridModel,
        *,
        mask_id: Optional[str] = None,
        seed: Optional[int] = None,
        generation_time_ms: float = 0.0,
        attempts: int = 1,
    ) -> Puzzle:
        unfilled = [slot.id for slot in grid.slots if not slot.is_filled]
        if unfilled:
            raise IncompletePuzzleError(f"Cannot assemble puzzle; unfilled slots: {', '.join(unfilled)}")

        letters = [
            [BLACK if cell.is_black else (cell.letter or "").upper() for cell in row]
            for row in grid.cells
        ]
        across = [self._entry(slot) for slot in grid.across_slots]
        down = [self._entry(slot) for slot in grid.down_slots]
        across.sort(key=lambda entry: entry.number)
        down.sort(key=lambda entry: entry.number)

        return Puzzle(
            grid=letters,
            across=across,
            down=down,
            meta=PuzzleMeta(
                mask_id=mask_id if mask_id is not None else grid.mask_id,
                seed=seed,
                generation_time_ms=generation_time_ms,
                attempts=attempts,
            ),
            entries_by_slot={entry.slot_id: entry for entry in across + down},
        )

    @staticmethod
    def _entry(slot: Slot) -> PuzzleEntry:
        return PuzzleEntry(
            slot_id=slot.id,
            number=slot.clue_number,
            direction=slot.direction,
            answer=slot.pattern.upper(),
            pattern=slot.pattern,
            row=slot.start_row,
            col=slot.start_col,
            length=slot.length,
        )
