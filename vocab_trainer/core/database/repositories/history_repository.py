"""
Session history repository
"""

import logging
import time
import uuid

from ..connection import DatabaseConnection
from ..models import HistoryRecord

logger = logging.getLogger(__name__)


class HistoryRepository:
    """Repository for finished session records"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def add_record(
        self,
        session_type: str,
        book_name: str,
        total_words: int,
        accuracy: int,
        date: float | None = None,
    ) -> HistoryRecord | None:
        """Store a finished session"""
        record = self.new_record(session_type, book_name, total_words, accuracy, date)
        try:
            with self.db_connection.get_connection() as conn:
                self.insert_record(conn, record)
                conn.commit()
                return record
        except Exception as e:
            logger.error(f"Error recording session history: {e}")
            return None

    @staticmethod
    def new_record(
        session_type: str,
        book_name: str,
        total_words: int,
        accuracy: int,
        date: float | None = None,
    ) -> HistoryRecord:
        return HistoryRecord(
            id=str(uuid.uuid4()),
            date=date if date is not None else time.time(),
            type=session_type,
            book_name=book_name,
            total_words=total_words,
            accuracy=max(0, accuracy),
        )

    def insert_record(self, conn, record: HistoryRecord) -> None:
        """Insert a history record on an open connection; the caller commits"""
        conn.execute(
            """
            INSERT INTO session_history (
                id, date, type, book_name, total_words, accuracy
            )
            VALUES (:id, :date, :type, :book_name, :total_words, :accuracy)
            """,
            record,
        )
        logger.info(
            f"Recorded {record['type']} session for {record['book_name']!r}: "
            f"{record['total_words']} words, {record['accuracy']}%"
        )

    def get_history(self, limit: int | None = None) -> list[HistoryRecord]:
        """Finished sessions, newest first"""
        query = "SELECT * FROM session_history ORDER BY date DESC, rowid DESC"
        params: tuple = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (limit,)

        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(query, params)
                return [HistoryRecord(**dict(row)) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(f"Error getting session history: {e}")
            return []

    def clear_history(self) -> bool:
        try:
            with self.db_connection.get_connection() as conn:
                conn.execute("DELETE FROM session_history")
                conn.commit()
                return True
        except Exception as e:
            logger.error(f"Error clearing session history: {e}")
            return False
