"""Custom exception hierarchy for puzzle generation."""

from __future__ import annotations

from typing import List, Sequence


class CrosswordError(Exception):
    """Base exception for generator failures."""


# Configuration / load errors -------------------------------------------------


class DataLoadError(CrosswordError):
    """Raised when the word list is missing or empty after filtering."""


class NotInitializedError(CrosswordError):
    """Raised when the word store is queried before it was loaded."""


class MaskNotFoundError(CrosswordError):
    """Raised when the mask catalog has no layout with the requested id."""


class InvalidMaskError(CrosswordError):
    """Raised when a mask is not a usable 5x5 black/white layout."""


# Contract violations ----------------------------------------------------------


class LengthMismatchError(CrosswordError):
    """Raised when a word or pattern does not fit the slot length."""


class SlotPlacementError(CrosswordError):
    """Raised when a word would overwrite a black cell or a conflicting letter."""


class GridStateError(CrosswordError):
    """Raised when slot patterns drift from the letters in the grid."""


class IncompletePuzzleError(CrosswordError):
    """Raised when a puzzle is assembled from a grid that still has empty cells."""


# Aggregate failure ------------------------------------------------------------


class GenerationError(CrosswordError):
    """Raised when every generation attempt in the budget failed."""

    def __init__(self, attempts: int, elapsed_ms: float, failures: Sequence[str] = ()) -> None:
        self.attempts = attempts
        self.elapsed_ms = elapsed_ms
        self.failures: List[str] = list(failures)
        last = f"; last failure: {self.failures[-1]}" if self.failures else ""
        super().__init__(
            f"Unable to generate puzzle after {attempts} attempt(s) in {elapsed_ms:.0f} ms{last}"
        )
