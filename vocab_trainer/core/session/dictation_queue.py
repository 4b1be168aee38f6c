"""
Dictation (spelling) session queue engine
"""

import logging
import random
from collections.abc import Callable, Sequence

from ...exceptions import InvalidSessionOperation
from ...utils import calculate_progress, today_iso
from .models import DictationStep, DictationSummary, ErrorKind, Feedback, Word
from .summary import ErrorLog, LearnedSet, build_dictation_summary, session_size

logger = logging.getLogger(__name__)


def is_correct_spelling(typed_text: str, target: str) -> bool:
    """Case-insensitive exact match after trimming surrounding whitespace"""
    return typed_text.strip().lower() == target.lower()


class DictationQueueEngine:
    """
    Auto-graded spelling session with exactly one exposure per word.

    Each entry goes pending -> graded -> advanced. ``submit`` grades the
    pending entry, ``advance`` moves to the next one. Wrong answers are
    logged as errors and never requeued.
    """

    def __init__(
        self,
        candidate_words: Sequence[Word],
        target_count: float,
        playback_rate: float = 1.0,
        rng: random.Random | None = None,
        clock: Callable[[], str] = today_iso,
    ):
        self.target_count = target_count
        # Opaque hint for the audio layer, may change mid-session
        self.playback_rate = playback_rate

        shuffled = list(candidate_words)
        (rng or random).shuffle(shuffled)
        self._queue: list[Word] = shuffled[: session_size(target_count)]

        self._cursor = 0
        self._feedback: Feedback | None = None
        self._learned = LearnedSet()
        self._errors = ErrorLog(ErrorKind.DICTATION, clock=clock)
        self._summary: DictationSummary | None = None

        logger.info(
            f"Dictation session initialised with {len(self._queue)} words "
            f"(target {target_count}, rate {playback_rate})"
        )

    @property
    def current_word(self) -> Word | None:
        if self._cursor < len(self._queue):
            return self._queue[self._cursor]
        return None

    @property
    def feedback(self) -> Feedback | None:
        """Grade of the current entry, None while pending"""
        return self._feedback

    @property
    def is_graded(self) -> bool:
        return self._feedback is not None

    @property
    def position(self) -> int:
        return self._cursor

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    @property
    def words(self) -> list[Word]:
        return list(self._queue)

    @property
    def is_finished(self) -> bool:
        return self._summary is not None

    @property
    def progress(self) -> int:
        return calculate_progress(self._cursor, len(self._queue))

    @property
    def summary(self) -> DictationSummary | None:
        return self._summary

    def submit(self, typed_text: str) -> Feedback:
        """
        Grade the typed answer for the current word.

        A second submit before advancing leaves the grade untouched and
        returns it again.

        Raises:
            InvalidSessionOperation: no current word (empty or finished)
        """
        word = self.current_word
        if word is None:
            raise InvalidSessionOperation("submit() called with no current word")

        if self._feedback is not None:
            logger.debug(f"Ignoring repeated submit for {word.text!r}")
            return self._feedback

        if is_correct_spelling(typed_text, word.text):
            self._learned.add(word.id)
            self._feedback = Feedback.CORRECT
        else:
            self._learned.discard(word.id)
            self._errors.record(word)
            self._feedback = Feedback.INCORRECT

        logger.debug(f"Dictation of {word.text!r}: typed {typed_text!r} -> {self._feedback.value}")
        return self._feedback

    def advance(self) -> DictationStep:
        """
        Move past the graded entry.

        Returns:
            DictationStep with the next word, or the summary after the last one

        Raises:
            InvalidSessionOperation: current entry not graded yet, or session
                already finished
        """
        if self.current_word is None:
            raise InvalidSessionOperation("advance() called with no current word")
        if self._feedback is None:
            raise InvalidSessionOperation("advance() called before submit()")

        self._cursor += 1
        self._feedback = None

        if self._cursor >= len(self._queue):
            self._summary = build_dictation_summary(self._queue, self._errors, self._learned)
            logger.info(
                f"Dictation session finished: {self._summary.total_count} words, "
                f"{len(self._summary.errors)} errors"
            )
            return DictationStep(summary=self._summary)

        return DictationStep(next_word=self._queue[self._cursor])

    def __len__(self) -> int:
        return len(self._queue)
