"""
Database connection manager for the vocabulary trainer
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from ...config import get_database_path

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Manages SQLite database connections and settings"""

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or get_database_path()
        self._ensure_database_directory()
        self._init_connection_settings()

    def _ensure_database_directory(self) -> None:
        """Ensure the database directory exists"""
        db_dir = Path(self.db_path).parent
        db_dir.mkdir(parents=True, exist_ok=True)

    def _init_connection_settings(self) -> None:
        """Initialize database connection settings"""
        with self.get_connection() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA foreign_keys=ON")
            conn.execute("PRAGMA busy_timeout=30000")

    @contextmanager
    def get_connection(self):
        """Get database connection with proper cleanup"""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys=ON")
            yield conn
        except Exception as e:
            if conn:
                conn.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    def init_database(self) -> None:
        """Initialize database tables"""
        with self.get_connection() as conn:
            self._create_tables(conn)
            self._create_indexes(conn)
            conn.commit()

    def _create_tables(self, conn: sqlite3.Connection) -> None:
        """Create database tables"""
        tables = [
            """
            CREATE TABLE IF NOT EXISTS word_books (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                created_at REAL NOT NULL
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS book_words (
                book_id TEXT NOT NULL,
                word_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                text TEXT NOT NULL,
                phonetic TEXT DEFAULT '',
                definition TEXT DEFAULT '',
                PRIMARY KEY (book_id, word_id),
                FOREIGN KEY (book_id) REFERENCES word_books(id) ON DELETE CASCADE
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS learned_words (
                book_id TEXT NOT NULL,
                word_id TEXT NOT NULL,
                learned_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (book_id, word_id),
                FOREIGN KEY (book_id) REFERENCES word_books(id) ON DELETE CASCADE
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS error_records (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                word_id TEXT NOT NULL,
                word_text TEXT NOT NULL,
                word_definition TEXT DEFAULT '',
                word_phonetic TEXT DEFAULT '',
                date TEXT NOT NULL,
                kind TEXT NOT NULL CHECK (kind IN ('learning', 'dictation'))
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS session_history (
                id TEXT PRIMARY KEY,
                date REAL NOT NULL,
                type TEXT NOT NULL CHECK (type IN ('study', 'dictation')),
                book_name TEXT NOT NULL,
                total_words INTEGER NOT NULL,
                accuracy INTEGER NOT NULL
            )
            """,
        ]

        for table_sql in tables:
            conn.execute(table_sql)

    def _create_indexes(self, conn: sqlite3.Connection) -> None:
        """Create database indexes for performance"""
        indexes = [
            "CREATE INDEX IF NOT EXISTS idx_book_words_position ON book_words(book_id, position)",
            "CREATE INDEX IF NOT EXISTS idx_error_records_date ON error_records(date)",
            "CREATE INDEX IF NOT EXISTS idx_error_records_kind ON error_records(kind)",
            "CREATE INDEX IF NOT EXISTS idx_session_history_date ON session_history(date)",
        ]

        for index_sql in indexes:
            try:
                conn.execute(index_sql)
            except sqlite3.OperationalError as e:
                logger.warning(f"Failed to create index: {index_sql}, error: {e}")
