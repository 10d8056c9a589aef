"""Parsing helpers for ``word;frequency`` word lists."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from ..core.exceptions import DataLoadError
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

SEPARATOR = ";"

RawEntry = Tuple[str, int]


@dataclass
class ParseReport:
    """Counts gathered while reading a word list."""

    lines: int = 0
    parsed: int = 0
    skipped: int = 0


def _parse_int(value: Optional[str]) -> Optional[int]:
    try:
        return int((value or "").strip())
    except (TypeError, ValueError):
        return None


def parse_line(line: str) -> Optional[RawEntry]:
    """Split one ``word;frequency`` line, returning ``None`` when malformed."""

    if SEPARATOR not in line:
        return None
    word, _, frequency_text = line.partition(SEPARATOR)
    word = word.strip()
    frequency = _parse_int(frequency_text)
    if not word or frequency is None or frequency < 0:
        return None
    return word, frequency


def iter_entries(lines: Iterable[str], report: Optional[ParseReport] = None) -> Iterator[RawEntry]:
    """Yield parsed entries, skipping blank and malformed lines."""

    for line in lines:
        if report is not None:
            report.lines += 1
        if not line.strip():
            continue
        entry = parse_line(line)
        if entry is None:
            if report is not None:
                report.skipped += 1
            continue
        if report is not None:
            report.parsed += 1
        yield entry


def read_word_list(path: Path | str, encoding: str = "utf-8") -> List[RawEntry]:
    """Read a UTF-8 ``word;frequency`` file into raw entries."""

    source = Path(path)
    if not source.exists():
        raise DataLoadError(f"Missing word list: {source}")
    report = ParseReport()
    try:
        with source.open("r", encoding=encoding) as handle:
            entries = list(iter_entries(handle, report))
    except (OSError, UnicodeDecodeError) as exc:
        raise DataLoadError(f"Cannot read word list {source}: {exc}") from exc
    LOGGER.info(
        "Read %d entries from %s (%d malformed lines skipped)",
        report.parsed,
        source,
        report.skipped,
    )
    return entries


__all__ = ["ParseReport", "RawEntry", "iter_entries", "parse_line", "read_word_list"]
