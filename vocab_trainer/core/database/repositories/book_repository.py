"""
Word book repository: books, their words and learned status
"""

import logging
import time
import uuid
from collections.abc import Iterable

from ....utils import calculate_progress
from ...session.models import Word
from ..connection import DatabaseConnection
from ..models import WordBook, WordBookInfo

logger = logging.getLogger(__name__)


class BookRepository:
    """Repository for word book database operations"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def create_book(self, name: str, words: list[Word]) -> str | None:
        """Create a word book; duplicate word ids keep their first occurrence"""
        book_id = str(uuid.uuid4())
        try:
            with self.db_connection.get_connection() as conn:
                conn.execute(
                    "INSERT INTO word_books (id, name, created_at) VALUES (?, ?, ?)",
                    (book_id, name, time.time()),
                )
                conn.executemany(
                    """
                    INSERT OR IGNORE INTO book_words (
                        book_id, word_id, position, text, phonetic, definition
                    )
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (book_id, word.id, position, word.text, word.phonetic, word.definition)
                        for position, word in enumerate(words)
                    ],
                )
                conn.commit()
                logger.info(f"Created word book {name!r} with {len(words)} words")
                return book_id
        except Exception as e:
            logger.error(f"Error creating word book {name!r}: {e}")
            return None

    def get_book(self, book_id: str) -> WordBook | None:
        """Get a word book with its words and learned ids"""
        try:
            with self.db_connection.get_connection() as conn:
                row = conn.execute(
                    "SELECT id, name, created_at FROM word_books WHERE id = ?",
                    (book_id,),
                ).fetchone()
                if not row:
                    return None

                return WordBook(
                    id=row["id"],
                    name=row["name"],
                    words=self._load_words(conn, book_id),
                    learned_word_ids=self._load_learned_ids(conn, book_id),
                    created_at=row["created_at"],
                )
        except Exception as e:
            logger.error(f"Error getting word book {book_id}: {e}")
            return None

    def list_books(self) -> list[WordBookInfo]:
        """List all word books, oldest first"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    """
                    SELECT b.id, b.name, b.created_at,
                           (SELECT COUNT(*) FROM book_words w WHERE w.book_id = b.id) AS word_count,
                           (SELECT COUNT(*) FROM learned_words l WHERE l.book_id = b.id) AS learned_count
                    FROM word_books b
                    ORDER BY b.created_at, b.rowid
                    """
                )
                return [WordBookInfo(**dict(row)) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(f"Error listing word books: {e}")
            return []

    def delete_book(self, book_id: str) -> bool:
        """Delete a word book and everything attached to it"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute("DELETE FROM word_books WHERE id = ?", (book_id,))
                conn.commit()
                return cursor.rowcount > 0
        except Exception as e:
            logger.error(f"Error deleting word book {book_id}: {e}")
            return False

    def get_unlearned_words(self, book_id: str) -> list[Word]:
        """Words of a book in book order, excluding learned ones"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    """
                    SELECT w.word_id, w.text, w.phonetic, w.definition
                    FROM book_words w
                    LEFT JOIN learned_words l
                        ON l.book_id = w.book_id AND l.word_id = w.word_id
                    WHERE w.book_id = ? AND l.word_id IS NULL
                    ORDER BY w.position
                    """,
                    (book_id,),
                )
                return [self._row_to_word(row) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(f"Error getting unlearned words for book {book_id}: {e}")
            return []

    def mark_words_learned(self, book_id: str, word_ids: Iterable[str]) -> int:
        """Merge word ids into the learned set of a book; returns newly added count"""
        try:
            with self.db_connection.get_connection() as conn:
                added = self.insert_learned(conn, word_ids, book_id)
                conn.commit()
                return added
        except Exception as e:
            logger.error(f"Error marking words learned in book {book_id}: {e}")
            return 0

    def insert_learned(self, conn, word_ids: Iterable[str], book_id: str | None = None) -> int:
        """
        Add word ids to learned sets on an open connection; the caller commits.

        With a book id only that book is touched, otherwise every book holding
        the word. Ids a book does not contain are ignored.
        """
        added = 0
        for word_id in dict.fromkeys(word_ids):
            if book_id is None:
                cursor = conn.execute(
                    """
                    INSERT OR IGNORE INTO learned_words (book_id, word_id)
                    SELECT book_id, word_id FROM book_words WHERE word_id = ?
                    """,
                    (word_id,),
                )
            else:
                cursor = conn.execute(
                    """
                    INSERT OR IGNORE INTO learned_words (book_id, word_id)
                    SELECT book_id, word_id FROM book_words
                    WHERE book_id = ? AND word_id = ?
                    """,
                    (book_id, word_id),
                )
            added += cursor.rowcount
        if added:
            logger.info(f"Marked {added} new words learned in {book_id or 'all books'}")
        return added

    def get_progress(self, book_id: str) -> int:
        """Percentage of a book's words that are learned"""
        try:
            with self.db_connection.get_connection() as conn:
                total = conn.execute(
                    "SELECT COUNT(*) FROM book_words WHERE book_id = ?", (book_id,)
                ).fetchone()[0]
                learned = conn.execute(
                    "SELECT COUNT(*) FROM learned_words WHERE book_id = ?", (book_id,)
                ).fetchone()[0]
                return calculate_progress(learned, total)
        except Exception as e:
            logger.error(f"Error getting progress for book {book_id}: {e}")
            return 0

    def _load_words(self, conn, book_id: str) -> list[Word]:
        cursor = conn.execute(
            """
            SELECT word_id, text, phonetic, definition
            FROM book_words WHERE book_id = ?
            ORDER BY position
            """,
            (book_id,),
        )
        return [self._row_to_word(row) for row in cursor.fetchall()]

    def _load_learned_ids(self, conn, book_id: str) -> list[str]:
        cursor = conn.execute(
            "SELECT word_id FROM learned_words WHERE book_id = ? ORDER BY rowid",
            (book_id,),
        )
        return [row["word_id"] for row in cursor.fetchall()]

    @staticmethod
    def _row_to_word(row) -> Word:
        return Word(
            id=row["word_id"],
            text=row["text"],
            phonetic=row["phonetic"] or "",
            definition=row["definition"] or "",
        )
