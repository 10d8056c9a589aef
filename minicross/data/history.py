"""Rolling history of words used in recent puzzles."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Set, TypeVar

from ..utils.logger import get_logger
from .normalization import clean_word

LOGGER = get_logger(__name__)

T = TypeVar("T")


class WordHistoryFilter(Protocol):
    """Soft freshness filter consulted during value ordering."""

    def is_recently_used(self, word: str) -> bool:
        ...

    def filter_recent(self, candidates: Sequence[T]) -> List[T]:
        ...


@dataclass(frozen=True)
class HistoryEntry:
    word: str
    timestamp: float
    puzzle_id: str


@dataclass
class HistoryStats:
    total_entries: int
    unique_words: int
    unique_puzzles: int
    oldest_entry: Optional[float]
    newest_entry: Optional[float]


class WordHistory:
    """Keeps the words of recent puzzles so new puzzles can avoid them.

    Entries older than ``max_age_hours`` are dropped, and only the newest
    ``max_entries`` entries are kept. ``clock`` returns seconds and can be
    replaced in tests.
    """

    def __init__(
        self,
        max_entries: int = 100,
        max_age_hours: float = 24.0,
        last_n_puzzles: int = 10,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_entries = max_entries
        self.max_age_seconds = max_age_hours * 3600.0
        self.last_n_puzzles = last_n_puzzles
        self._clock = clock
        self._entries: List[HistoryEntry] = []
        self._lock = threading.Lock()

    def add_puzzle_words(self, words: Iterable[str], puzzle_id: str) -> None:
        now = self._clock()
        with self._lock:
            for word in words:
                self._entries.append(HistoryEntry(clean_word(word), now, puzzle_id))
            self._cleanup(now)
        LOGGER.debug("History now holds %d entries", len(self._entries))

    def is_recently_used(self, word: str) -> bool:
        cutoff = self._clock() - self.max_age_seconds
        target = clean_word(word)
        with self._lock:
            return any(entry.word == target and entry.timestamp > cutoff for entry in self._entries)

    def recent_words(self, last_n_puzzles: Optional[int] = None) -> Set[str]:
        """Words used by the ``last_n_puzzles`` most recent puzzles."""

        limit = self.last_n_puzzles if last_n_puzzles is None else last_n_puzzles
        with self._lock:
            newest_first = sorted(self._entries, key=lambda entry: entry.timestamp, reverse=True)
            puzzle_ids: List[str] = []
            for entry in newest_first:
                if entry.puzzle_id not in puzzle_ids:
                    puzzle_ids.append(entry.puzzle_id)
            keep = set(puzzle_ids[:limit])
            return {entry.word for entry in self._entries if entry.puzzle_id in keep}

    def filter_recent(self, candidates: Sequence[T], last_n_puzzles: Optional[int] = None) -> List[T]:
        """Drop candidates (strings or objects with ``.word``) used recently."""

        recent = self.recent_words(last_n_puzzles)
        if not recent:
            return list(candidates)
        return [
            candidate
            for candidate in candidates
            if clean_word(getattr(candidate, "word", candidate)) not in recent
        ]

    def stats(self) -> HistoryStats:
        with self._lock:
            if not self._entries:
                return HistoryStats(0, 0, 0, None, None)
            stamps = [entry.timestamp for entry in self._entries]
            return HistoryStats(
                total_entries=len(self._entries),
                unique_words=len({entry.word for entry in self._entries}),
                unique_puzzles=len({entry.puzzle_id for entry in self._entries}),
                oldest_entry=min(stamps),
                newest_entry=max(stamps),
            )

    def clear(self) -> None:
        with self._lock:
            self._entries = []

    def _cleanup(self, now: float) -> None:
        cutoff = now - self.max_age_seconds
        self._entries = [entry for entry in self._entries if entry.timestamp > cutoff]
        if len(self._entries) > self.max_entries:
            self._entries.sort(key=lambda entry: entry.timestamp, reverse=True)
            self._entries = self._entries[: self.max_entries]
