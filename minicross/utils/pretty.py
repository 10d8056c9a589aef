"""Pretty-print helpers for grids and finished puzzles."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:
    from ..data.dictionary import WordStoreStats
    from ..engine.assembler import Puzzle, PuzzleEntry
    from ..engine.grid import GridModel


def _render_rows(rows: Sequence[Sequence[str]]) -> List[str]:
    width = len(rows[0]) if rows else 0
    lines = ["    " + " ".join(f"{c:>2}" for c in range(width))]
    lines.append("    " + "-" * (3 * width - 1))
    for r, row in enumerate(rows):
        rendered = " ".join(f"{(symbol or '.').upper():>2}" for symbol in row)
        lines.append(f"{r:>2} | {rendered}")
    return lines


def format_grid(grid: GridModel) -> str:
    """Render a grid in progress: ``#`` black, ``.`` empty, else the letter."""

    return "\n".join(_render_rows(grid.to_rows()))


def _format_entries(title: str, entries: Sequence[PuzzleEntry]) -> List[str]:
    lines = [title]
    for entry in entries:
        lines.append(f"  {entry.number:>2}. {entry.clue or ''} ({entry.length})  [{entry.answer}]")
    return lines


def format_puzzle(puzzle: Puzzle) -> str:
    lines = _render_rows(puzzle.grid)
    lines.append("")
    lines.extend(_format_entries("Across", puzzle.across))
    lines.append("")
    lines.extend(_format_entries("Down", puzzle.down))
    meta = puzzle.meta
    lines.append("")
    lines.append(
        f"Mask: {meta.mask_id}  Seed: {meta.seed}  Attempts: {meta.attempts}  "
        f"Time: {meta.generation_time_ms:.1f} ms"
    )
    return "\n".join(lines)


def format_stats(stats: WordStoreStats) -> str:
    lines = ["--- Word store ---"]
    lines.append(f"  Total words:   {stats.total_words}")
    for length, count in stats.words_by_length.items():
        lines.append(f"  {length} letters:     {count}")
    lines.append(f"  Avg frequency: {stats.average_frequency}")
    lines.append(f"  Rejected:      {stats.rejected}")
    lines.append(f"  Duplicates:    {stats.duplicates}")
    if stats.top_words:
        top = ", ".join(f"{entry.word}({entry.frequency})" for entry in stats.top_words)
        lines.append(f"  Top words:     {top}")
    return "\n".join(lines)
