"""Backtracking grid filler with forward checking and MRV slot selection."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from ..core.models import Slot
from ..data.dictionary import WordEntry, WordStore
from ..data.history import WordHistoryFilter
from ..utils.logger import get_logger
from .grid import GridModel

LOGGER = get_logger(__name__)


class FailureReason(str, Enum):
    """Why a single solve attempt gave up."""

    NO_CANDIDATES = "no_candidates"
    EXHAUSTED = "exhausted"
    STEP_BUDGET_EXCEEDED = "step_budget_exceeded"
    BACKTRACK_BUDGET_EXCEEDED = "backtrack_budget_exceeded"
    TIMEOUT = "timeout"


@dataclass
class SolverConfig:
    """Budgets and value-ordering knobs for one attempt."""

    max_steps: int = 50_000
    max_backtracks: int = 10_000
    attempt_timeout_seconds: Optional[float] = 2.0
    candidate_limit: int = 50
    top_fraction: float = 0.3


@dataclass
class SolveOutcome:
    success: bool
    reason: Optional[FailureReason] = None
    assignments: Dict[str, str] = field(default_factory=dict)
    steps: int = 0
    backtracks: int = 0
    max_depth: int = 0
    elapsed_ms: float = 0.0


@dataclass
class _SearchState:
    deadline: Optional[float]
    used: Set[str] = field(default_factory=set)
    assignments: Dict[str, str] = field(default_factory=dict)
    steps: int = 0
    backtracks: int = 0
    max_depth: int = 0
    stop_reason: Optional[FailureReason] = None
    root_dead_end: bool = False
    # (slot id, pattern) -> dictionary words that fit, memoized per attempt
    legal: Dict[Tuple[str, str], Tuple[WordEntry, ...]] = field(default_factory=dict)


Domains = Dict[str, List[WordEntry]]


class BacktrackingSolver:
    """Depth-first search over slot assignments on one :class:`GridModel`.

    Each node forward-checks every slot, picks the unfilled slot with the
    fewest candidates (ties: more crossings, then slot order), and tries
    its candidates in a frequency-biased random order. Placements are
    undone from a pattern snapshot, so a failed solve leaves the grid as
    it was handed in.
    """

    def __init__(
        self,
        store: WordStore,
        rng: Optional[random.Random] = None,
        config: Optional[SolverConfig] = None,
        history: Optional[WordHistoryFilter] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.rng = rng or random.Random()
        self.config = config or SolverConfig()
        self.history = history
        self._clock = clock

    # ------------------------------------------------------------------
    # Public entrypoint
    # ------------------------------------------------------------------
    def solve(self, grid: GridModel, deadline: Optional[float] = None) -> SolveOutcome:
        """Fill ``grid`` in place.

        ``deadline`` is an absolute value of the solver clock; the attempt
        stops at whichever comes first of it and the configured per-attempt
        timeout. Budget exhaustion is reported through the outcome, never
        raised.
        """

        started = self._clock()
        limit = self.config.attempt_timeout_seconds
        attempt_deadline = started + limit if limit is not None else None
        if deadline is not None:
            attempt_deadline = deadline if attempt_deadline is None else min(deadline, attempt_deadline)

        grid.update_patterns()
        state = _SearchState(deadline=attempt_deadline)
        for slot_id in grid.placed_slot_ids:
            word = grid.slot(slot_id).pattern
            state.used.add(word)
            state.assignments[slot_id] = word

        success = self._search(grid, state, depth=0)
        elapsed_ms = (self._clock() - started) * 1000.0

        if success:
            assignments = {slot.id: slot.pattern for slot in grid.slots}
            LOGGER.debug(
                "Solved %s in %d steps, %d backtracks (%.1f ms)",
                grid.mask_id, state.steps, state.backtracks, elapsed_ms,
            )
            return SolveOutcome(
                success=True,
                assignments=assignments,
                steps=state.steps,
                backtracks=state.backtracks,
                max_depth=state.max_depth,
                elapsed_ms=elapsed_ms,
            )

        reason = state.stop_reason
        if reason is None:
            reason = FailureReason.NO_CANDIDATES if state.root_dead_end else FailureReason.EXHAUSTED
        LOGGER.debug(
            "Attempt on %s failed (%s) after %d steps, %d backtracks",
            grid.mask_id, reason.value, state.steps, state.backtracks,
        )
        return SolveOutcome(
            success=False,
            reason=reason,
            steps=state.steps,
            backtracks=state.backtracks,
            max_depth=state.max_depth,
            elapsed_ms=elapsed_ms,
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def _search(self, grid: GridModel, state: _SearchState, depth: int) -> bool:
        reason = self._budget_exceeded(state)
        if reason is not None:
            state.stop_reason = reason
            return False
        state.steps += 1
        state.max_depth = max(state.max_depth, depth)

        domains = self.forward_check(grid, state)
        if domains is None:
            if depth == 0:
                state.root_dead_end = True
            return False
        if not domains:
            return True

        slot = self.select_slot(grid, domains)
        for entry in self.order_candidates(domains[slot.id], state.used):
            if not grid.is_valid_placement(entry.word, slot):
                continue
            snapshot = grid.snapshot()
            grid.place_word(entry.word, slot)
            state.used.add(entry.word)
            state.assignments[slot.id] = entry.word

            if self._search(grid, state, depth + 1):
                return True

            grid.restore(snapshot)
            state.used.discard(entry.word)
            state.assignments.pop(slot.id, None)
            if state.stop_reason is not None:
                return False
            state.backtracks += 1
            if state.backtracks > self.config.max_backtracks:
                state.stop_reason = FailureReason.BACKTRACK_BUDGET_EXCEEDED
                return False
        return False

    def _budget_exceeded(self, state: _SearchState) -> Optional[FailureReason]:
        if state.steps >= self.config.max_steps:
            return FailureReason.STEP_BUDGET_EXCEEDED
        if state.backtracks > self.config.max_backtracks:
            return FailureReason.BACKTRACK_BUDGET_EXCEEDED
        if state.deadline is not None and self._clock() >= state.deadline:
            return FailureReason.TIMEOUT
        return None

    # ------------------------------------------------------------------
    # Forward checking
    # ------------------------------------------------------------------
    def forward_check(self, grid: GridModel, state: _SearchState) -> Optional[Domains]:
        """Refresh every slot's candidates; ``None`` signals a dead end.

        Complete slots contribute no candidates. A complete slot that was
        filled only through its crossings must spell a dictionary word, and
        no two complete slots may share a word.
        """

        complete: Set[str] = set()
        for slot in grid.slots:
            if not slot.is_filled:
                continue
            slot.candidates = []
            word = slot.pattern
            if slot.id not in state.assignments and not self.store.contains(word):
                return None
            if word in complete:
                return None
            complete.add(word)

        domains: Domains = {}
        for slot in grid.unfilled_slots():
            legal = self._legal_candidates(grid, slot, state)
            candidates = [entry for entry in legal if entry.word not in complete]
            slot.candidates = candidates
            if not candidates:
                return None
            domains[slot.id] = candidates
        return domains

    def _legal_candidates(self, grid: GridModel, slot: Slot, state: _SearchState) -> Tuple[WordEntry, ...]:
        key = (slot.id, slot.pattern)
        cached = state.legal.get(key)
        if cached is None:
            cached = tuple(
                entry
                for entry in self.store.find_matching(slot.length, slot.pattern)
                if grid.is_valid_placement(entry.word, slot)
            )
            state.legal[key] = cached
        return cached

    # ------------------------------------------------------------------
    # Variable and value ordering
    # ------------------------------------------------------------------
    def select_slot(self, grid: GridModel, domains: Domains) -> Slot:
        """Fewest candidates first, then most crossings, then slot order."""

        order = {slot.id: index for index, slot in enumerate(grid.slots)}
        return min(
            (grid.slot(slot_id) for slot_id in domains),
            key=lambda slot: (
                len(domains[slot.id]),
                -grid.intersections.count(slot),
                order[slot.id],
            ),
        )

    def order_candidates(self, candidates: Sequence[WordEntry], used: Set[str]) -> List[WordEntry]:
        """Shuffle the top fraction and the remainder separately, top first.

        Used words are skipped and the result is capped at
        ``candidate_limit``.
        """

        pool = self._prefer_fresh(candidates)
        ranked = sorted(pool, key=lambda entry: entry.frequency, reverse=True)
        split = int(len(ranked) * self.config.top_fraction)
        top, rest = ranked[:split], ranked[split:]
        self.rng.shuffle(top)
        self.rng.shuffle(rest)
        ordered = [entry for entry in top + rest if entry.word not in used]
        return ordered[: self.config.candidate_limit]

    def _prefer_fresh(self, candidates: Sequence[WordEntry]) -> Sequence[WordEntry]:
        if self.history is None or not candidates:
            return candidates
        try:
            fresh = self.history.filter_recent(candidates)
        except Exception as exc:  # history is advisory only
            LOGGER.warning("Word history filter failed, using unfiltered candidates: %s", exc)
            return candidates
        return fresh or candidates
