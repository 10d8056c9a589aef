"""Word list loading and pattern-indexed candidate retrieval."""

from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..core.constants import MAX_SLOT_LENGTH, MIN_SLOT_LENGTH, WILDCARD
from ..core.exceptions import DataLoadError, LengthMismatchError, NotInitializedError
from ..utils.logger import get_logger
from .normalization import clean_word, is_fill_word, is_valid_pattern, normalize_pattern
from .preprocess import RawEntry, parse_line, read_word_list

LOGGER = get_logger(__name__)


@dataclass
class DictionaryConfig:
    """Configuration for word list loading and filtering."""

    path: Path | str | None = None
    min_length: int = MIN_SLOT_LENGTH
    max_length: int = MAX_SLOT_LENGTH
    encoding: str = "utf-8"


@dataclass(frozen=True)
class WordEntry:
    """A sanitized word with its corpus frequency."""

    word: str
    frequency: int

    @property
    def length(self) -> int:
        return len(self.word)


@dataclass
class WordStoreStats:
    total_words: int
    words_by_length: Dict[int, int]
    average_frequency: float
    top_words: List[WordEntry] = field(default_factory=list)
    rejected: int = 0
    duplicates: int = 0


EntryList = Tuple[WordEntry, ...]
# length -> letter -> position -> entries, frequency-descending at every leaf
PositionIndex = Dict[int, Dict[str, Dict[int, EntryList]]]


class WordStore:
    """Frequency-ranked 3-5 letter words with a positional pattern index.

    The store is built once per process and shared by reference. After
    :meth:`initialize` every structure except the pattern cache is
    read-only, so concurrent readers need no locking. Cache insertions are
    last-writer-wins: two threads resolving the same key always compute the
    same tuple.
    """

    def __init__(self, config: Optional[DictionaryConfig] = None) -> None:
        self.config = config or DictionaryConfig()
        self._entries_by_length: Dict[int, EntryList] = {}
        self._position_index: PositionIndex = {}
        self._entry_by_word: Dict[str, WordEntry] = {}
        self._pattern_cache: Dict[Tuple[int, str], EntryList] = {}
        self._init_lock = threading.Lock()
        self._initialized = False
        self._rejected = 0
        self._duplicates = 0

    @classmethod
    def from_path(cls, path: Path | str, **overrides) -> "WordStore":
        store = cls(DictionaryConfig(path=path, **overrides))
        store.load()
        return store

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def load(self) -> None:
        """Read ``config.path`` and initialize the store from it."""

        if self._initialized:
            return
        if self.config.path is None:
            raise DataLoadError("No word list path configured")
        self.initialize(read_word_list(self.config.path, encoding=self.config.encoding))

    def initialize(self, raw_entries: Optional[Iterable[Union[RawEntry, str]]]) -> None:
        """Filter ``raw_entries`` and build the length lists and positional index.

        Entries may be ``(word, frequency)`` pairs or raw ``word;frequency``
        lines. Duplicate words keep the first occurrence. A second call is a
        no-op.
        """

        with self._init_lock:
            if self._initialized:
                LOGGER.debug("Word store already initialized; ignoring reload")
                return
            if raw_entries is None:
                raise DataLoadError("Word list resource is missing")

            buckets: Dict[int, List[WordEntry]] = defaultdict(list)
            accepted: Dict[str, WordEntry] = {}
            rejected = 0
            duplicates = 0
            for raw in raw_entries:
                parsed = parse_line(raw) if isinstance(raw, str) else raw
                if parsed is None:
                    rejected += 1
                    continue
                word, frequency = parsed
                word = clean_word(word)
                if not is_fill_word(word, self.config.min_length, self.config.max_length):
                    rejected += 1
                    continue
                if word in accepted:
                    duplicates += 1
                    continue
                entry = WordEntry(word=word, frequency=max(0, int(frequency)))
                accepted[word] = entry
                buckets[len(word)].append(entry)

            if not accepted:
                raise DataLoadError("Word list is empty after filtering to 3-5 letter words")

            for length in range(self.config.min_length, self.config.max_length + 1):
                ranked = sorted(buckets.get(length, []), key=lambda e: e.frequency, reverse=True)
                self._entries_by_length[length] = tuple(ranked)
                self._position_index[length] = self._build_position_index(ranked)

            self._entry_by_word = accepted
            self._rejected = rejected
            self._duplicates = duplicates
            self._initialized = True

        LOGGER.info(
            "Word store ready: %d words (%s), %d rejected, %d duplicates",
            len(accepted),
            ", ".join(f"{n}:{len(self._entries_by_length[n])}" for n in sorted(self._entries_by_length)),
            rejected,
            duplicates,
        )

    @staticmethod
    def _build_position_index(ranked: List[WordEntry]) -> Dict[str, Dict[int, EntryList]]:
        staging: Dict[str, Dict[int, List[WordEntry]]] = defaultdict(lambda: defaultdict(list))
        for entry in ranked:
            for position, letter in enumerate(entry.word):
                staging[letter][position].append(entry)
        return {
            letter: {position: tuple(entries) for position, entries in by_position.items()}
            for letter, by_position in staging.items()
        }

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise NotInitializedError("Word store not initialized; call initialize() or load() first")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_by_length(self, length: int) -> EntryList:
        """Return every word of ``length``, most frequent first."""

        self._require_initialized()
        return self._entries_by_length.get(length, ())

    def find_matching(self, length: int, pattern: str) -> EntryList:
        """Return the words of ``length`` matching ``pattern``, most frequent first.

        ``pattern`` holds one lowercase letter or ``?`` per position. The
        first fixed position seeds the candidate set from the positional
        index; the seed is then filtered against the full pattern. This does
        not look for the most selective position, which keeps candidate
        ordering identical to a plain scan of the seed list.
        """

        self._require_initialized()
        pattern = normalize_pattern(pattern)
        if len(pattern) != length:
            raise LengthMismatchError(
                f"Pattern '{pattern}' has {len(pattern)} characters, expected {length}"
            )

        key = (length, pattern)
        cached = self._pattern_cache.get(key)
        if cached is not None:
            return cached

        result = self._resolve(length, pattern)
        self._pattern_cache[key] = result
        return result

    def _resolve(self, length: int, pattern: str) -> EntryList:
        if length not in self._entries_by_length or not is_valid_pattern(pattern):
            return ()

        fixed = [(pos, char) for pos, char in enumerate(pattern) if char != WILDCARD]
        if not fixed:
            return self._entries_by_length[length]

        seed_pos, seed_char = fixed[0]
        seed = self._position_index[length].get(seed_char, {}).get(seed_pos, ())
        rest = fixed[1:]
        if not rest:
            return seed
        return tuple(entry for entry in seed if all(entry.word[pos] == char for pos, char in rest))

    def contains(self, word: str) -> bool:
        return clean_word(word) in self._entry_by_word

    def get(self, word: str) -> Optional[WordEntry]:
        return self._entry_by_word.get(clean_word(word))

    # ------------------------------------------------------------------
    # Cache & statistics
    # ------------------------------------------------------------------
    @property
    def cache_size(self) -> int:
        return len(self._pattern_cache)

    def clear_cache(self) -> None:
        """Drop cached pattern results; later queries recompute them."""

        self._pattern_cache.clear()

    def stats(self, top: int = 10) -> WordStoreStats:
        self._require_initialized()
        entries = [entry for bucket in self._entries_by_length.values() for entry in bucket]
        total = len(entries)
        average = sum(entry.frequency for entry in entries) / total if total else 0.0
        top_words = sorted(entries, key=lambda e: e.frequency, reverse=True)[:top]
        return WordStoreStats(
            total_words=total,
            words_by_length={length: len(bucket) for length, bucket in sorted(self._entries_by_length.items())},
            average_frequency=round(average, 2),
            top_words=top_words,
            rejected=self._rejected,
            duplicates=self._duplicates,
        )
