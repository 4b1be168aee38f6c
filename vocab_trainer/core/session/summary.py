"""
Shared bookkeeping for session engines: error log, learned set and summaries
"""

import math
import sys
from collections.abc import Callable, Iterable, Iterator

from ...utils import today_iso
from .models import (
    DictationSummary,
    ErrorKind,
    QueueEntry,
    SessionErrorRecord,
    StudySummary,
    Word,
)


class LearnedSet:
    """Insertion-ordered set of word ids; the latest response decides membership"""

    def __init__(self):
        self._ids: dict[str, None] = {}

    def add(self, word_id: str) -> None:
        self._ids[word_id] = None

    def discard(self, word_id: str) -> None:
        self._ids.pop(word_id, None)

    def __contains__(self, word_id: object) -> bool:
        return word_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def snapshot(self) -> list[str]:
        return list(self._ids)


class ErrorLog:
    """Append-only list of session errors, at most one record per word"""

    def __init__(self, kind: ErrorKind, clock: Callable[[], str] = today_iso):
        self.kind = kind
        self._clock = clock
        self._records: list[SessionErrorRecord] = []
        self._word_ids: set[str] = set()

    def record(self, word: Word) -> bool:
        """Log an error for word; returns False if it was already logged"""
        if word.id in self._word_ids:
            return False

        self._word_ids.add(word.id)
        self._records.append(SessionErrorRecord.for_word(word, self.kind, self._clock()))
        return True

    def __contains__(self, word_id: object) -> bool:
        return word_id in self._word_ids

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self) -> list[SessionErrorRecord]:
        return list(self._records)


def session_size(target_count: float) -> int:
    """Number of candidates a session takes; fractional targets truncate toward zero"""
    if math.isnan(target_count):
        return 0
    if math.isinf(target_count):
        return sys.maxsize if target_count > 0 else 0
    return max(0, int(target_count))


def count_distinct_words(entries: Iterable[QueueEntry | Word]) -> int:
    """Number of distinct vocabulary items among queue entries or words"""
    return len({entry.word_id if isinstance(entry, QueueEntry) else entry.id for entry in entries})


def build_study_summary(
    queue: list[QueueEntry], errors: ErrorLog, learned: LearnedSet
) -> StudySummary:
    return StudySummary(
        reviewed_count=count_distinct_words(queue),
        errors=errors.snapshot(),
        learned_ids=learned.snapshot(),
    )


def build_dictation_summary(
    queue: list[Word], errors: ErrorLog, learned: LearnedSet
) -> DictationSummary:
    return DictationSummary(
        total_count=count_distinct_words(queue),
        errors=errors.snapshot(),
        learned_ids=learned.snapshot(),
    )
