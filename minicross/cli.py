"""CLI entrypoint for the 5x5 mini crossword generator."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .core.exceptions import CrosswordError
from .data.dictionary import WordStore
from .data.history import WordHistory
from .data.masks import MaskCatalog
from .engine.generator import GenerationRequest, GeneratorConfig, PuzzleGenerator
from .engine.solver import SolverConfig
from .io.clues import ClueGenerator, GeminiClueGenerator, TemplateClueGenerator
from .utils.logger import configure_logging, get_logger
from .utils.pretty import format_puzzle, format_stats

LOGGER = get_logger(__name__)

DEFAULT_WORDLIST = "spreadthewordlist.txt"
WORDLIST_ENV = "MINICROSS_WORDLIST"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate 5x5 mini crosswords from a word;frequency list",
    )
    parser.add_argument(
        "--dictionary",
        type=Path,
        default=Path(os.environ.get(WORDLIST_ENV, DEFAULT_WORDLIST)),
        help=f"Path to the word;frequency list (default: ${WORDLIST_ENV} or {DEFAULT_WORDLIST})",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--mask", type=str, default=None, help="Mask id to fill (default: random)")
    parser.add_argument("--max-attempts", type=int, default=50, help="Maximum solve attempts")
    parser.add_argument(
        "--timeout-ms",
        type=int,
        default=10_000,
        help="Overall generation deadline in milliseconds (0 disables it)",
    )
    parser.add_argument(
        "--attempt-timeout",
        type=float,
        default=SolverConfig.attempt_timeout_seconds,
        help="Per-attempt wall-clock budget in seconds",
    )
    parser.add_argument(
        "--clues",
        choices=["template", "gemini", "none"],
        default="template",
        help="Clue source; gemini needs GEMINI_API_KEY",
    )
    parser.add_argument("--format", choices=["json", "text"], default="json", help="Output format")
    parser.add_argument("--output", type=Path, help="Optional path to write the puzzle to")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument("--list-masks", action="store_true", help="List the available masks and exit")
    parser.add_argument(
        "--search",
        metavar="PATTERN",
        help="Print dictionary words matching PATTERN (e.g. 'c?t') and exit",
    )
    parser.add_argument("--limit", type=int, default=20, help="Maximum words printed by --search")
    parser.add_argument("--stats", action="store_true", help="Print word store statistics and exit")
    return parser


def build_clue_generator(kind: str) -> Optional[ClueGenerator]:
    if kind == "gemini":
        return GeminiClueGenerator()
    if kind == "template":
        return TemplateClueGenerator()
    return None


def list_masks(catalog: MaskCatalog) -> List[str]:
    lines: List[str] = []
    for mask in catalog:
        lines.append(f"{mask.id:<4} {mask.name} - {mask.description}")
        lines.extend(f"       {row}" for row in mask.rows)
    return lines


def _emit(text: str, output: Optional[Path]) -> None:
    if output:
        output.write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    catalog = MaskCatalog()
    if args.list_masks:
        _emit("\n".join(list_masks(catalog)), args.output)
        return 0

    try:
        store = WordStore.from_path(args.dictionary)

        if args.stats:
            _emit(format_stats(store.stats()), args.output)
            return 0

        if args.search:
            pattern = args.search.strip().lower()
            matches = store.find_matching(len(pattern), pattern)
            _emit("\n".join(f"{e.word}\t{e.frequency}" for e in matches[: args.limit]), args.output)
            return 0

        generator = PuzzleGenerator(
            store,
            masks=catalog,
            history=WordHistory(),
            clue_generator=build_clue_generator(args.clues),
            config=GeneratorConfig(
                solver=SolverConfig(attempt_timeout_seconds=args.attempt_timeout),
                generate_clues=args.clues != "none",
            ),
        )
        result = generator.generate(
            GenerationRequest(
                seed=args.seed,
                mask_id=args.mask,
                max_attempts=args.max_attempts,
                timeout_ms=args.timeout_ms or None,
            )
        )
    except CrosswordError as exc:
        LOGGER.error("%s", exc)
        return 1

    if result.puzzle is None:
        LOGGER.error("No puzzle generated after %d attempts", result.attempts)
        return 1
    if args.format == "text":
        _emit(format_puzzle(result.puzzle), args.output)
    else:
        payload: Dict[str, Any] = result.to_jsonable()
        _emit(json.dumps(payload, ensure_ascii=False, indent=2), args.output)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
