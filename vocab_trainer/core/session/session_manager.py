"""
Session management for the vocabulary trainer
"""

import logging
import uuid
from datetime import datetime

from ...config import Settings, get_settings
from ...exceptions import BookNotFoundError, EmptySessionError, InvalidSessionOperation
from ...utils import Timer, format_duration
from ..database.database_manager import DatabaseManager
from ..database.models import HistoryRecord
from .dictation_queue import DictationQueueEngine
from .models import DictationSummary, ErrorKind, StudySummary, Word
from .study_queue import StudyQueueEngine

logger = logging.getLogger(__name__)

SESSION_STUDY = "study"
SESSION_DICTATION = "dictation"
ERROR_REVIEW_BOOK_NAME = "Error review"


class ActiveSession:
    """The running study or dictation session"""

    def __init__(
        self,
        session_type: str,
        engine: StudyQueueEngine | DictationQueueEngine,
        book_name: str,
        book_id: str | None = None,
    ):
        self.session_id = str(uuid.uuid4())
        self.session_type = session_type
        self.engine = engine
        self.book_name = book_name
        self.book_id = book_id
        self.timer = Timer()
        self.created_at = datetime.now()

    @property
    def is_error_review(self) -> bool:
        return self.book_id is None

    @property
    def summary(self) -> StudySummary | DictationSummary | None:
        return self.engine.summary


class SessionManager:
    """
    Owns the single active session and hands finished summaries to storage.

    Candidate words come from the selected book (learned words excluded) or,
    for an error review, from the error log. Nothing is persisted until the
    finished session is completed; abandoning a session drops it.
    """

    def __init__(self, db_manager: DatabaseManager, settings: Settings | None = None):
        self.db_manager = db_manager
        self.settings = settings or get_settings()
        self.active_session: ActiveSession | None = None

    def start_study(self, book_id: str) -> StudyQueueEngine:
        """Start a study session over the unlearned words of a book"""
        book_name, words = self._load_candidates(book_id)
        engine = StudyQueueEngine(words, self.settings.daily_goal)
        self._activate(ActiveSession(SESSION_STUDY, engine, book_name, book_id))
        return engine

    def start_dictation(self, book_id: str) -> DictationQueueEngine:
        """Start a dictation session over the unlearned words of a book"""
        book_name, words = self._load_candidates(book_id)
        engine = DictationQueueEngine(
            words, self.settings.daily_goal, playback_rate=self.settings.dictation_speed
        )
        self._activate(ActiveSession(SESSION_DICTATION, engine, book_name, book_id))
        return engine

    def start_error_review(
        self, mode: str, kind: ErrorKind | str | None = None
    ) -> StudyQueueEngine | DictationQueueEngine:
        """Start a session over every word in the error log"""
        words = self.db_manager.error_repo.get_review_words(kind)
        if not words:
            raise EmptySessionError("The error log is empty")

        if mode == SESSION_STUDY:
            engine = StudyQueueEngine(words, len(words))
        elif mode == SESSION_DICTATION:
            engine = DictationQueueEngine(
                words, len(words), playback_rate=self.settings.dictation_speed
            )
        else:
            raise ValueError(f"Unknown session mode: {mode}")

        self._activate(ActiveSession(mode, engine, ERROR_REVIEW_BOOK_NAME))
        return engine

    def complete(self) -> HistoryRecord:
        """
        Persist the finished active session and clear it.

        Raises SessionSaveError when storage fails; the session then stays
        active so the caller can retry.
        """
        session = self.active_session
        if session is None:
            raise InvalidSessionOperation("No active session to complete")

        summary = session.summary
        if summary is None:
            raise InvalidSessionOperation("Active session has not finished yet")

        session.timer.stop()

        history = self.db_manager.history_repo.new_record(
            session_type=session.session_type,
            book_name=session.book_name,
            total_words=summary.word_count,
            accuracy=summary.accuracy,
        )
        record = self.db_manager.save_session(
            summary.errors, summary.learned_ids, session.book_id, history
        )

        logger.info(
            f"Completed {session.session_type} session {session.session_id} in "
            f"{format_duration(session.timer.get_elapsed_time())}: {summary.word_count} words, "
            f"{len(summary.learned_ids)} learned, accuracy {summary.accuracy}%"
        )
        self.active_session = None
        return record

    def abandon(self) -> None:
        """Drop the active session without saving anything"""
        if self.active_session is not None:
            logger.info(f"Abandoned {self.active_session.session_type} session")
        self.active_session = None

    def _load_candidates(self, book_id: str) -> tuple[str, list[Word]]:
        book = self.db_manager.book_repo.get_book(book_id)
        if book is None:
            raise BookNotFoundError(book_id)

        words = self.db_manager.book_repo.get_unlearned_words(book_id)
        if not words:
            raise EmptySessionError(f"All words in {book['name']!r} are already learned")
        return book["name"], words

    def _activate(self, session: ActiveSession) -> None:
        if self.active_session is not None:
            logger.warning(
                f"Replacing unfinished {self.active_session.session_type} session"
            )
        self.active_session = session
        session.timer.start()
        logger.info(f"Started {session.session_type} session for {session.book_name!r}")
