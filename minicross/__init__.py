"""Mini crossword generator for 5x5 word grids.

This package exposes the public API surface via:

- ``minicross.data.dictionary.WordStore``: loads words and answers pattern queries.
- ``minicross.engine.generator.PuzzleGenerator``: picks masks, runs the solver, assembles puzzles.
- ``minicross.engine.solver.BacktrackingSolver``: fills one grid within an attempt budget.
"""

from .data.dictionary import DictionaryConfig, WordEntry, WordStore
from .data.history import WordHistory
from .data.masks import Mask, MaskCatalog
from .engine.assembler import Puzzle, PuzzleAssembler
from .engine.generator import GenerationRequest, GenerationResult, GeneratorConfig, PuzzleGenerator
from .engine.grid import GridModel
from .engine.solver import BacktrackingSolver, FailureReason, SolveOutcome, SolverConfig

__all__ = [
    "BacktrackingSolver",
    "DictionaryConfig",
    "FailureReason",
    "GenerationRequest",
    "GenerationResult",
    "GeneratorConfig",
    "GridModel",
    "Mask",
    "MaskCatalog",
    "Puzzle",
    "PuzzleAssembler",
    "PuzzleGenerator",
    "SolveOutcome",
    "SolverConfig",
    "WordEntry",
    "WordHistory",
    "WordStore",
]

__version__ = "0.1.0"
