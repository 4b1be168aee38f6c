"""
Unified database manager that coordinates all repositories
"""

import logging

from ...exceptions import SessionSaveError
from ..session.models import SessionErrorRecord
from .connection import DatabaseConnection
from .models import HistoryRecord
from .repositories.book_repository import BookRepository
from .repositories.error_repository import ErrorRepository
from .repositories.history_repository import HistoryRepository

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Unified database manager that coordinates all repositories"""

    def __init__(self, db_path: str | None = None):
        self.db_connection = DatabaseConnection(db_path)
        self.book_repo = BookRepository(self.db_connection)
        self.error_repo = ErrorRepository(self.db_connection)
        self.history_repo = HistoryRepository(self.db_connection)

    def init_database(self) -> None:
        """Initialize database tables and indexes"""
        self.db_connection.init_database()
        logger.info(f"Database ready at {self.db_connection.db_path}")

    def save_session(
        self,
        errors: list[SessionErrorRecord],
        learned_ids: list[str],
        book_id: str | None,
        history: HistoryRecord,
    ) -> HistoryRecord:
        """
        Store a finished session in one transaction.

        Errors, learned ids and the history record are written together or
        not at all. A ``book_id`` of None merges learned ids into every book.
        """
        try:
            with self.db_connection.get_connection() as conn:
                self.error_repo.insert_errors(conn, errors)
                self.book_repo.insert_learned(conn, learned_ids, book_id)
                self.history_repo.insert_record(conn, history)
                conn.commit()
                return history
        except Exception as e:
            logger.error(f"Error saving {history['type']} session: {e}")
            raise SessionSaveError(f"Could not save the {history['type']} session") from e

    def get_connection(self):
        """Get database connection for direct SQL access in tests"""
        return self.db_connection.get_connection()


# Global instance
_db_manager = None


def get_db_manager(db_path: str | None = None) -> DatabaseManager:
    """Get global database manager instance"""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(db_path)
    return _db_manager
