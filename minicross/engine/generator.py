"""Generation driver: mask selection, solve attempts with restart, assembly.

Each attempt builds a fresh :class:`GridModel` from a mask and runs one
:class:`BacktrackingSolver` on it. A failed attempt is recorded and the
driver moves on to a new mask/seed until the attempt cap or the overall
deadline is reached.
"""

from __future__ import annotations

import random
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..core.exceptions import GenerationError
from ..data.dictionary import WordStore
from ..data.history import WordHistory
from ..data.masks import Mask, MaskCatalog
from ..io.clues import ClueGenerator, ClueRequest, TemplateClueGenerator, resolve_clues
from ..utils.logger import get_logger
from .assembler import Puzzle, PuzzleAssembler
from .grid import GridModel
from .solver import BacktrackingSolver, FailureReason, SolveOutcome, SolverConfig


LOGGER = get_logger(__name__)

SEED_SPACE = 2**32


@dataclass
class GenerationRequest:
    seed: Optional[int] = None
    mask_id: Optional[str] = None
    max_attempts: int = 50
    timeout_ms: Optional[int] = 10_000


@dataclass
class GeneratorConfig:
    solver: SolverConfig = field(default_factory=SolverConfig)
    generate_clues: bool = True
    record_history: bool = True


@dataclass
class AttemptRecord:
    attempt: int
    mask_id: str
    seed: int
    reason: Optional[FailureReason]
    steps: int
    backtracks: int
    elapsed_ms: float

    def describe(self) -> str:
        reason = self.reason.value if self.reason else "unknown"
        return f"attempt {self.attempt} on mask {self.mask_id}: {reason}"


@dataclass
class GenerationResult:
    puzzle: Optional[Puzzle]
    seed: int
    attempts: int
    elapsed_ms: float
    failures: List[AttemptRecord] = field(default_factory=list)
    outcome: Optional[SolveOutcome] = None

    @property
    def success(self) -> bool:
        return self.puzzle is not None

    def to_jsonable(self) -> Dict[str, Any]:
        if self.puzzle is None:
            return {}
        return self.puzzle.to_jsonable()


class PuzzleGenerator:
    """High-level orchestrator: pick a mask, solve, assemble, attach clues."""

    def __init__(
        self,
        store: WordStore,
        masks: Optional[MaskCatalog] = None,
        history: Optional[WordHistory] = None,
        clue_generator: Optional[ClueGenerator] = None,
        config: Optional[GeneratorConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.masks = masks or MaskCatalog()
        self.history = history
        self.clue_generator = clue_generator or TemplateClueGenerator()
        self.config = config or GeneratorConfig()
        self.assembler = PuzzleAssembler()
        self._clock = clock

    # ------------------------------------------------------------------
    # Public entrypoints
    # ------------------------------------------------------------------
    def generate(self, request: Optional[GenerationRequest] = None) -> GenerationResult:
        """Generate one puzzle or raise :class:`GenerationError`.

        Load and contract errors (unknown mask, uninitialized store, ...)
        propagate unchanged; only search exhaustion is retried.
        """

        request = request or GenerationRequest()
        if request.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.store.get_by_length(3)  # fail fast if the store was never loaded

        seed = request.seed if request.seed is not None else random.SystemRandom().randrange(SEED_SPACE)
        rng = random.Random(seed)
        fixed_mask = self.masks.get(request.mask_id) if request.mask_id else None

        started = self._clock()
        deadline = started + request.timeout_ms / 1000.0 if request.timeout_ms else None
        failures: List[AttemptRecord] = []

        for attempt in range(1, request.max_attempts + 1):
            if deadline is not None and self._clock() >= deadline:
                LOGGER.info("Generation deadline reached before attempt %d", attempt)
                break

            mask = fixed_mask or self.masks.choose(rng)
            attempt_seed = rng.randrange(SEED_SPACE)
            grid = GridModel.build(mask)
            solver = BacktrackingSolver(
                self.store,
                rng=random.Random(attempt_seed),
                config=self.config.solver,
                history=self.history,
                clock=self._clock,
            )
            outcome = solver.solve(grid, deadline=deadline)

            if not outcome.success:
                record = AttemptRecord(
                    attempt=attempt,
                    mask_id=mask.id,
                    seed=attempt_seed,
                    reason=outcome.reason,
                    steps=outcome.steps,
                    backtracks=outcome.backtracks,
                    elapsed_ms=outcome.elapsed_ms,
                )
                failures.append(record)
                LOGGER.info(
                    "Attempt %d/%d failed on mask %s (%s, %d steps)",
                    attempt, request.max_attempts, mask.id,
                    outcome.reason.value if outcome.reason else "unknown", outcome.steps,
                )
                continue

            elapsed_ms = (self._clock() - started) * 1000.0
            puzzle = self._finish(grid, mask, seed, elapsed_ms, attempt, attempt_seed)
            LOGGER.info(
                "Generated puzzle on mask %s in %d attempt(s), %.1f ms",
                mask.id, attempt, elapsed_ms,
            )
            return GenerationResult(
                puzzle=puzzle,
                seed=seed,
                attempts=attempt,
                elapsed_ms=elapsed_ms,
                failures=failures,
                outcome=outcome,
            )

        elapsed_ms = (self._clock() - started) * 1000.0
        LOGGER.warning("Generation failed after %d attempt(s) in %.1f ms", len(failures), elapsed_ms)
        raise GenerationError(len(failures), elapsed_ms, [record.describe() for record in failures])

    def generate_batch(
        self,
        requests: Sequence[GenerationRequest],
        max_workers: int = 4,
    ) -> List[Optional[GenerationResult]]:
        """Run several independent generations concurrently.

        Workers share only the word store (and the locked history). The
        returned list lines up with ``requests``; failed generations are
        logged and left as ``None``.
        """

        results: List[Optional[GenerationResult]] = [None] * len(requests)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(self.generate, request) for request in requests]
            for index, future in enumerate(futures):
                try:
                    results[index] = future.result()
                except GenerationError as exc:
                    LOGGER.warning("Batch request %d failed: %s", index, exc)
        return results

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _finish(
        self,
        grid: GridModel,
        mask: Mask,
        seed: int,
        elapsed_ms: float,
        attempts: int,
        attempt_seed: int,
    ) -> Puzzle:
        puzzle = self.assembler.assemble(
            grid,
            mask_id=mask.id,
            seed=seed,
            generation_time_ms=elapsed_ms,
            attempts=attempts,
        )

        if self.config.generate_clues:
            clue_requests = [
                ClueRequest(
                    slot_id=entry.slot_id,
                    word=entry.pattern,
                    direction=entry.direction.value,
                    length=entry.length,
                )
                for entry in puzzle.entries
            ]
            puzzle.attach_clues(resolve_clues(self.clue_generator, clue_requests))

        if self.config.record_history and self.history is not None:
            self.history.add_puzzle_words(puzzle.words, puzzle_id=f"{mask.id}-{attempt_seed}")
        return puzzle
