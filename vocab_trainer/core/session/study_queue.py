"""
Study (recognition) session queue engine
"""

import logging
from collections.abc import Callable, Sequence

from ...exceptions import InvalidSessionOperation
from ...utils import calculate_progress, today_iso
from .models import ErrorKind, QueueEntry, StudyResponse, StudyStep, StudySummary, Word
from .summary import ErrorLog, LearnedSet, build_study_summary, session_size

logger = logging.getLogger(__name__)

# Extra exposures appended to the tail of the queue per response
REQUEUE_COUNTS = {
    StudyResponse.KNOWN: 0,
    StudyResponse.VAGUE: 1,
    StudyResponse.UNKNOWN: 3,
}


class StudyQueueEngine:
    """
    Self-graded study session over a growing queue.

    The queue starts with the first ``target_count`` candidate words. A
    ``vague`` answer re-appends the word once, an ``unknown`` answer three
    times. Past entries are never removed, so the cursor only moves forward.
    The session ends when the cursor reaches the end of the queue; the call
    that gets it there returns the summary.
    """

    def __init__(
        self,
        candidate_words: Sequence[Word],
        target_count: float,
        clock: Callable[[], str] = today_iso,
    ):
        self.target_count = target_count
        self._queue: list[QueueEntry] = [
            QueueEntry(word) for word in list(candidate_words)[: session_size(target_count)]
        ]
        self._cursor = 0
        self._learned = LearnedSet()
        self._errors = ErrorLog(ErrorKind.LEARNING, clock=clock)
        self._summary: StudySummary | None = None

        logger.info(
            f"Study session initialised with {len(self._queue)} words "
            f"(target {target_count}, {len(candidate_words)} candidates)"
        )

    @property
    def current_entry(self) -> QueueEntry | None:
        """Entry awaiting a response, None once finished or empty"""
        if self._cursor < len(self._queue):
            return self._queue[self._cursor]
        return None

    @property
    def position(self) -> int:
        return self._cursor

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    @property
    def queue(self) -> list[QueueEntry]:
        return list(self._queue)

    @property
    def is_finished(self) -> bool:
        return self._summary is not None

    @property
    def progress(self) -> int:
        return calculate_progress(self._cursor, len(self._queue))

    @property
    def learned_ids(self) -> list[str]:
        return self._learned.snapshot()

    @property
    def summary(self) -> StudySummary | None:
        return self._summary

    def advance(self, word_id: str, response: StudyResponse | str) -> StudyStep:
        """
        Apply a response to the entry under the cursor and move on.

        Args:
            word_id: Id of the word the response is for; must match the
                current entry
            response: ``known``, ``vague`` or ``unknown``

        Returns:
            StudyStep carrying either the next entry or the final summary

        Raises:
            InvalidSessionOperation: session is empty or finished, or the
                word id does not match the current entry
            ValueError: response is not a valid study response
        """
        entry = self.current_entry
        if entry is None:
            raise InvalidSessionOperation(
                "advance() called with no current entry "
                f"(cursor={self._cursor}, queue length={len(self._queue)})"
            )
        if entry.word_id != word_id:
            raise InvalidSessionOperation(
                f"Response for word {word_id} but current entry is {entry.word_id}"
            )

        response = StudyResponse(response)
        word = entry.word

        if response is StudyResponse.KNOWN:
            self._learned.add(word.id)
        else:
            self._learned.discard(word.id)
            self._errors.record(word)
            self._queue.extend(QueueEntry(word) for _ in range(REQUEUE_COUNTS[response]))

        self._cursor += 1
        logger.debug(
            f"Word {word.text!r} answered {response.value}; "
            f"position {self._cursor}/{len(self._queue)}"
        )

        if self._cursor >= len(self._queue):
            self._summary = build_study_summary(self._queue, self._errors, self._learned)
            logger.info(
                f"Study session finished: {self._summary.reviewed_count} words, "
                f"{len(self._summary.errors)} errors, "
                f"{len(self._summary.learned_ids)} learned"
            )
            return StudyStep(summary=self._summary)

        return StudyStep(next_entry=self._queue[self._cursor])

    def __len__(self) -> int:
        return len(self._queue)
