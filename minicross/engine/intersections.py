"""Crossing lookup between across and down slots."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

from ..core.models import Intersection, Slot


class IntersectionIndex:
    """Precomputed ``(other, index_in_this, index_in_other)`` triples per slot.

    Built once from the slot list of a grid; slot objects are attempt-local,
    so the index is too.
    """

    def __init__(self, slots: Sequence[Slot]) -> None:
        by_cell: Dict[Tuple[int, int], List[Tuple[Slot, int]]] = defaultdict(list)
        for slot in slots:
            for index, cell in enumerate(slot.cells):
                by_cell[cell].append((slot, index))

        self._crossings: Dict[str, Tuple[Intersection, ...]] = {}
        for slot in slots:
            found: List[Intersection] = []
            for index, cell in enumerate(slot.cells):
                for other, other_index in by_cell[cell]:
                    if other is slot or other.direction == slot.direction:
                        continue
                    found.append(Intersection(other, index, other_index))
            self._crossings[slot.id] = tuple(found)

    def of(self, slot: Slot) -> Tuple[Intersection, ...]:
        return self._crossings.get(slot.id, ())

    def count(self, slot: Slot) -> int:
        return len(self.of(slot))

    def crossing_ids(self, slot: Slot) -> List[str]:
        return [crossing.other.id for crossing in self.of(slot)]
