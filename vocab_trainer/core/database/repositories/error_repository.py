"""
Error log repository
"""

import logging
from collections.abc import Iterable

from ...session.models import ErrorKind, SessionErrorRecord, Word
from ..connection import DatabaseConnection

logger = logging.getLogger(__name__)


class ErrorRepository:
    """Repository for the persistent error log"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def add_errors(self, records: Iterable[SessionErrorRecord]) -> int:
        """Append session error records; returns how many were stored"""
        records = list(records)
        if not records:
            return 0

        try:
            with self.db_connection.get_connection() as conn:
                stored = self.insert_errors(conn, records)
                conn.commit()
                return stored
        except Exception as e:
            logger.error(f"Error storing error records: {e}")
            return 0

    def insert_errors(self, conn, records: Iterable[SessionErrorRecord]) -> int:
        """Insert error records on an open connection; the caller commits"""
        rows = [
            (
                record.word_id,
                record.word_text,
                record.word_definition,
                record.word_phonetic,
                record.date,
                ErrorKind(record.kind).value,
            )
            for record in records
        ]
        if rows:
            conn.executemany(
                """
                INSERT INTO error_records (
                    word_id, word_text, word_definition, word_phonetic, date, kind
                )
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
            logger.info(f"Stored {len(rows)} error records")
        return len(rows)

    def get_errors(self, kind: ErrorKind | str | None = None) -> list[SessionErrorRecord]:
        """All error records in insertion order, optionally of one kind"""
        query = "SELECT * FROM error_records"
        params: tuple = ()
        if kind is not None:
            query += " WHERE kind = ?"
            params = (ErrorKind(kind).value,)
        query += " ORDER BY id"

        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(query, params)
                return [self._row_to_record(row) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(f"Error getting error records: {e}")
            return []

    def get_errors_by_date(
        self, kind: ErrorKind | str | None = None
    ) -> list[tuple[str, list[SessionErrorRecord]]]:
        """Error records grouped by date, most recent date first"""
        groups: dict[str, list[SessionErrorRecord]] = {}
        for record in self.get_errors(kind):
            groups.setdefault(record.date, []).append(record)
        return sorted(groups.items(), key=lambda item: item[0], reverse=True)

    def get_review_words(self, kind: ErrorKind | str | None = None) -> list[Word]:
        """Words behind the error log, one per word id, first occurrence order"""
        words: dict[str, Word] = {}
        for record in self.get_errors(kind):
            words.setdefault(record.word_id, record.to_word())
        return list(words.values())

    def count_errors(self) -> int:
        try:
            with self.db_connection.get_connection() as conn:
                return conn.execute("SELECT COUNT(*) FROM error_records").fetchone()[0]
        except Exception as e:
            logger.error(f"Error counting error records: {e}")
            return 0

    def clear_errors(self) -> bool:
        """Remove every error record"""
        try:
            with self.db_connection.get_connection() as conn:
                conn.execute("DELETE FROM error_records")
                conn.commit()
                logger.info("Cleared error log")
                return True
        except Exception as e:
            logger.error(f"Error clearing error log: {e}")
            return False

    @staticmethod
    def _row_to_record(row) -> SessionErrorRecord:
        return SessionErrorRecord(
            word_id=row["word_id"],
            word_text=row["word_text"],
            word_definition=row["word_definition"] or "",
            word_phonetic=row["word_phonetic"] or "",
            date=row["date"],
            kind=ErrorKind(row["kind"]),
        )
