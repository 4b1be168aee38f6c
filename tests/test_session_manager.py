"""
Test complete study and dictation flows through the session manager
"""

import pytest

from vocab_trainer.config import Settings
from vocab_trainer.core.database.database_manager import DatabaseManager
from vocab_trainer.core.session.dictation_queue import DictationQueueEngine
from vocab_trainer.core.session.models import ErrorKind, StudyResponse, Word
from vocab_trainer.core.session.session_manager import ERROR_REVIEW_BOOK_NAME, SessionManager
from vocab_trainer.core.session.study_queue import StudyQueueEngine
from vocab_trainer.exceptions import (
    BookNotFoundError,
    EmptySessionError,
    InvalidSessionOperation,
    SessionSaveError,
)


@pytest.fixture
def settings():
    """Test settings"""
    return Settings(daily_goal=2, dictation_speed=1.5, openai_api_key="test_key")


@pytest.fixture
def db_manager(tmp_path):
    manager = DatabaseManager(str(tmp_path / "vocab.db"))
    manager.init_database()
    return manager


@pytest.fixture
def manager(db_manager, settings):
    return SessionManager(db_manager, settings)


@pytest.fixture
def book_id(db_manager):
    words = [
        Word(id="w1", text="apple", definition="苹果"),
        Word(id="w2", text="pear", definition="梨"),
        Word(id="w3", text="plum", definition="李子"),
    ]
    return db_manager.book_repo.create_book("Fruit", words)


def finish_study(engine, responses):
    """Answer entries with the given responses, then known until done"""
    for response in responses:
        engine.advance(engine.current_entry.word_id, response)
    while not engine.is_finished:
        engine.advance(engine.current_entry.word_id, StudyResponse.KNOWN)


class TestStudyFlow:
    """Test study sessions end to end"""

    def test_start_study_uses_daily_goal(self, manager, book_id):
        engine = manager.start_study(book_id)

        assert isinstance(engine, StudyQueueEngine)
        assert [entry.word_id for entry in engine.queue] == ["w1", "w2"]
        assert manager.active_session.book_name == "Fruit"

    def test_complete_persists_results(self, manager, db_manager, book_id):
        """Completing stores errors, learned words and history"""
        engine = manager.start_study(book_id)
        finish_study(engine, [StudyResponse.KNOWN, StudyResponse.UNKNOWN])

        record = manager.complete()

        assert manager.active_session is None
        assert record["type"] == "study"
        assert record["book_name"] == "Fruit"
        assert record["total_words"] == 2
        assert record["accuracy"] == 50

        errors = db_manager.error_repo.get_errors()
        assert [(e.word_id, e.kind) for e in errors] == [("w2", ErrorKind.LEARNING)]

        book = db_manager.book_repo.get_book(book_id)
        assert book["learned_word_ids"] == ["w1", "w2"]
        assert db_manager.history_repo.get_history()[0]["id"] == record["id"]

    def test_failed_save_keeps_session(self, manager, db_manager, book_id):
        """Nothing is half-written when storing errors fails"""
        engine = manager.start_study(book_id)
        finish_study(engine, [StudyResponse.KNOWN, StudyResponse.UNKNOWN])
        with db_manager.get_connection() as conn:
            conn.execute("DROP TABLE error_records")
            conn.commit()

        with pytest.raises(SessionSaveError):
            manager.complete()

        assert manager.active_session is not None
        assert manager.active_session.summary.learned_ids == ["w1", "w2"]
        assert db_manager.book_repo.get_book(book_id)["learned_word_ids"] == []
        assert db_manager.history_repo.get_history() == []

    def test_next_session_skips_learned_words(self, manager, book_id):
        engine = manager.start_study(book_id)
        finish_study(engine, [])
        manager.complete()

        engine = manager.start_study(book_id)

        assert [entry.word_id for entry in engine.queue] == ["w3"]

    def test_all_words_learned(self, manager, db_manager, book_id):
        db_manager.book_repo.mark_words_learned(book_id, ["w1", "w2", "w3"])

        with pytest.raises(EmptySessionError):
            manager.start_study(book_id)

    def test_unknown_book(self, manager):
        with pytest.raises(BookNotFoundError):
            manager.start_study("missing")

    def test_complete_unfinished_session(self, manager, book_id):
        manager.start_study(book_id)

        with pytest.raises(InvalidSessionOperation):
            manager.complete()

    def test_complete_without_session(self, manager):
        with pytest.raises(InvalidSessionOperation):
            manager.complete()

    def test_abandon_saves_nothing(self, manager, db_manager, book_id):
        engine = manager.start_study(book_id)
        engine.advance("w1", StudyResponse.UNKNOWN)

        manager.abandon()

        assert manager.active_session is None
        assert db_manager.error_repo.get_errors() == []
        assert db_manager.history_repo.get_history() == []


class TestDictationFlow:
    """Test dictation sessions end to end"""

    def test_start_dictation(self, manager, book_id):
        engine = manager.start_dictation(book_id)

        assert isinstance(engine, DictationQueueEngine)
        assert engine.queue_length == 2
        assert engine.playback_rate == 1.5

    def test_complete_dictation(self, manager, db_manager, book_id):
        engine = manager.start_dictation(book_id)
        first = engine.current_word
        engine.submit(first.text.upper())
        engine.advance()
        second = engine.current_word
        engine.submit("wrong")
        engine.advance()

        record = manager.complete()

        assert record["type"] == "dictation"
        assert record["total_words"] == 2
        assert record["accuracy"] == 50
        assert db_manager.book_repo.get_book(book_id)["learned_word_ids"] == [first.id]
        errors = db_manager.error_repo.get_errors(ErrorKind.DICTATION)
        assert [e.word_id for e in errors] == [second.id]


class TestErrorReview:
    """Test sessions over the error log"""

    @pytest.fixture
    def logged_errors(self, manager, book_id):
        engine = manager.start_study(book_id)
        finish_study(engine, [StudyResponse.VAGUE, StudyResponse.UNKNOWN])
        manager.complete()

    def test_review_uses_every_error_word(self, manager, logged_errors):
        engine = manager.start_error_review("study")

        assert [entry.word_id for entry in engine.queue] == ["w1", "w2"]
        assert manager.active_session.book_name == ERROR_REVIEW_BOOK_NAME
        assert manager.active_session.is_error_review

    def test_review_dictation_records_history(self, manager, db_manager, logged_errors):
        engine = manager.start_error_review("dictation", kind="learning")
        while not engine.is_finished:
            engine.submit(engine.current_word.text)
            engine.advance()

        record = manager.complete()

        assert record["book_name"] == ERROR_REVIEW_BOOK_NAME
        assert record["accuracy"] == 100

    def test_empty_error_log(self, manager):
        with pytest.raises(EmptySessionError):
            manager.start_error_review("study")

    def test_unknown_mode(self, manager, logged_errors):
        with pytest.raises(ValueError):
            manager.start_error_review("quiz")


class TestSettings:
    """Test configuration defaults and validation"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DAILY_GOAL", raising=False)
        monkeypatch.delenv("DICTATION_SPEED", raising=False)
        settings = Settings(_env_file=None)

        assert settings.daily_goal == 20
        assert settings.dictation_speed == 1.0

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DAILY_GOAL", "35")

        assert Settings(_env_file=None).daily_goal == 35

    def test_dictation_speed_range(self):
        with pytest.raises(ValueError):
            Settings(dictation_speed=3.0)
