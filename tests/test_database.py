"""
Unit tests for database repositories
"""

import pytest

from vocab_trainer.core.database.database_manager import DatabaseManager
from vocab_trainer.core.session.models import ErrorKind, SessionErrorRecord, Word
from vocab_trainer.exceptions import SessionSaveError


@pytest.fixture
def db_manager(tmp_path):
    """Database manager backed by a temporary file"""
    manager = DatabaseManager(str(tmp_path / "vocab.db"))
    manager.init_database()
    return manager


@pytest.fixture
def words():
    return [
        Word(id="w1", text="apple", phonetic="/ˈæp.əl/", definition="苹果"),
        Word(id="w2", text="pear", phonetic="/peər/", definition="梨"),
        Word(id="w3", text="plum", phonetic="/plʌm/", definition="李子"),
    ]


def error(word_id, date, kind=ErrorKind.LEARNING, text=None):
    return SessionErrorRecord(
        word_id=word_id,
        word_text=text or word_id,
        word_definition="",
        word_phonetic="",
        date=date,
        kind=kind,
    )


class TestDatabaseInit:
    """Test schema creation"""

    def test_tables_created(self, db_manager):
        with db_manager.get_connection() as conn:
            cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in cursor.fetchall()}

        assert {"word_books", "book_words", "learned_words", "error_records", "session_history"} <= tables

    def test_init_is_repeatable(self, db_manager):
        db_manager.init_database()


class TestBookRepository:
    """Test word book storage"""

    def test_create_and_get_book(self, db_manager, words):
        book_id = db_manager.book_repo.create_book("Fruit", words)

        book = db_manager.book_repo.get_book(book_id)
        assert book["name"] == "Fruit"
        assert book["words"] == words
        assert book["learned_word_ids"] == []

    def test_get_missing_book(self, db_manager):
        assert db_manager.book_repo.get_book("missing") is None

    def test_list_books(self, db_manager, words):
        db_manager.book_repo.create_book("First", words)
        db_manager.book_repo.create_book("Second", words[:1])

        books = db_manager.book_repo.list_books()

        assert [book["name"] for book in books] == ["First", "Second"]
        assert [book["word_count"] for book in books] == [3, 1]
        assert all(book["learned_count"] == 0 for book in books)

    def test_duplicate_word_ids_keep_first(self, db_manager, words):
        book_id = db_manager.book_repo.create_book("Dupes", words + words[:1])

        assert len(db_manager.book_repo.get_book(book_id)["words"]) == 3

    def test_mark_learned_and_unlearned_words(self, db_manager, words):
        book_id = db_manager.book_repo.create_book("Fruit", words)

        added = db_manager.book_repo.mark_words_learned(book_id, ["w2", "w2"])

        assert added == 1
        unlearned = db_manager.book_repo.get_unlearned_words(book_id)
        assert [word.id for word in unlearned] == ["w1", "w3"]
        assert db_manager.book_repo.get_book(book_id)["learned_word_ids"] == ["w2"]

    def test_mark_learned_merges(self, db_manager, words):
        """Learned ids accumulate across sessions without duplicates"""
        book_id = db_manager.book_repo.create_book("Fruit", words)

        db_manager.book_repo.mark_words_learned(book_id, ["w1"])
        added = db_manager.book_repo.mark_words_learned(book_id, ["w1", "w3"])

        assert added == 1
        assert db_manager.book_repo.get_book(book_id)["learned_word_ids"] == ["w1", "w3"]

    def test_mark_learned_ignores_foreign_ids(self, db_manager, words):
        book_id = db_manager.book_repo.create_book("Fruit", words)

        assert db_manager.book_repo.mark_words_learned(book_id, ["other"]) == 0
        assert db_manager.book_repo.mark_words_learned(book_id, []) == 0

    def test_progress(self, db_manager, words):
        book_id = db_manager.book_repo.create_book("Fruit", words)
        assert db_manager.book_repo.get_progress(book_id) == 0

        db_manager.book_repo.mark_words_learned(book_id, ["w1"])
        assert db_manager.book_repo.get_progress(book_id) == 33

        empty_id = db_manager.book_repo.create_book("Empty", [])
        assert db_manager.book_repo.get_progress(empty_id) == 0

    def test_delete_book(self, db_manager, words):
        book_id = db_manager.book_repo.create_book("Fruit", words)
        db_manager.book_repo.mark_words_learned(book_id, ["w1"])

        assert db_manager.book_repo.delete_book(book_id) is True
        assert db_manager.book_repo.get_book(book_id) is None
        assert db_manager.book_repo.get_unlearned_words(book_id) == []
        assert db_manager.book_repo.delete_book(book_id) is False


class TestErrorRepository:
    """Test the persistent error log"""

    def test_add_and_get_errors(self, db_manager):
        records = [error("w1", "2026-10-18"), error("w2", "2026-10-19", ErrorKind.DICTATION)]

        assert db_manager.error_repo.add_errors(records) == 2
        assert db_manager.error_repo.get_errors() == records
        assert db_manager.error_repo.count_errors() == 2

    def test_add_nothing(self, db_manager):
        assert db_manager.error_repo.add_errors([]) == 0

    def test_filter_by_kind(self, db_manager):
        db_manager.error_repo.add_errors(
            [error("w1", "2026-10-18"), error("w2", "2026-10-19", ErrorKind.DICTATION)]
        )

        dictation = db_manager.error_repo.get_errors(ErrorKind.DICTATION)
        learning = db_manager.error_repo.get_errors("learning")

        assert [record.word_id for record in dictation] == ["w2"]
        assert [record.word_id for record in learning] == ["w1"]

    def test_group_by_date_descending(self, db_manager):
        db_manager.error_repo.add_errors(
            [error("w1", "2026-10-17"), error("w2", "2026-10-19"), error("w3", "2026-10-17")]
        )

        groups = db_manager.error_repo.get_errors_by_date()

        assert [day for day, _ in groups] == ["2026-10-19", "2026-10-17"]
        assert [record.word_id for record in groups[1][1]] == ["w1", "w3"]

    def test_review_words_deduplicated(self, db_manager):
        """Errors from several sessions yield one review word per id"""
        db_manager.error_repo.add_errors(
            [
                error("w1", "2026-10-17", text="apple"),
                error("w2", "2026-10-18", text="pear"),
                error("w1", "2026-10-19", ErrorKind.DICTATION, text="apple"),
            ]
        )

        review = db_manager.error_repo.get_review_words()

        assert [word.id for word in review] == ["w1", "w2"]
        assert review[0].text == "apple"

    def test_clear_errors(self, db_manager):
        db_manager.error_repo.add_errors([error("w1", "2026-10-17")])

        assert db_manager.error_repo.clear_errors() is True
        assert db_manager.error_repo.get_errors() == []


class TestHistoryRepository:
    """Test session history"""

    def test_add_and_list_newest_first(self, db_manager):
        db_manager.history_repo.add_record("study", "Fruit", 10, 80, date=1000.0)
        db_manager.history_repo.add_record("dictation", "Fruit", 5, 60, date=2000.0)

        history = db_manager.history_repo.get_history()

        assert [record["type"] for record in history] == ["dictation", "study"]
        assert history[0]["total_words"] == 5
        assert history[1]["accuracy"] == 80

    def test_accuracy_floored_at_zero(self, db_manager):
        record = db_manager.history_repo.add_record("study", "Fruit", 2, -50)

        assert record["accuracy"] == 0

    def test_limit_and_clear(self, db_manager):
        for i in range(3):
            db_manager.history_repo.add_record("study", f"Book {i}", 1, 100, date=float(i))

        assert len(db_manager.history_repo.get_history(limit=2)) == 2
        assert db_manager.history_repo.clear_history() is True
        assert db_manager.history_repo.get_history() == []


class TestSaveSession:
    """Test storing a finished session in one transaction"""

    def test_saves_everything(self, db_manager, words):
        book_id = db_manager.book_repo.create_book("Fruit", words)
        history = db_manager.history_repo.new_record("study", "Fruit", 2, 50)

        record = db_manager.save_session([error("w2", "2026-10-19")], ["w1", "w2"], book_id, history)

        assert record == history
        assert [e.word_id for e in db_manager.error_repo.get_errors()] == ["w2"]
        assert db_manager.book_repo.get_book(book_id)["learned_word_ids"] == ["w1", "w2"]
        assert db_manager.history_repo.get_history()[0]["id"] == history["id"]

    def test_without_book_marks_every_book(self, db_manager, words):
        first = db_manager.book_repo.create_book("First", words[:2])
        second = db_manager.book_repo.create_book("Second", [Word(id="w9", text="fig")])
        history = db_manager.history_repo.new_record("study", "Error review", 2, 100)

        db_manager.save_session([], ["w2", "w9"], None, history)

        assert db_manager.book_repo.get_book(first)["learned_word_ids"] == ["w2"]
        assert db_manager.book_repo.get_book(second)["learned_word_ids"] == ["w9"]

    def test_failure_rolls_back(self, db_manager, words):
        """A failing write leaves no partial session behind"""
        book_id = db_manager.book_repo.create_book("Fruit", words)
        history = db_manager.history_repo.new_record("study", "Fruit", 2, 50)
        with db_manager.get_connection() as conn:
            conn.execute("DROP TABLE session_history")
            conn.commit()

        with pytest.raises(SessionSaveError):
            db_manager.save_session([error("w2", "2026-10-19")], ["w1"], book_id, history)

        assert db_manager.error_repo.get_errors() == []
        assert db_manager.book_repo.get_book(book_id)["learned_word_ids"] == []
