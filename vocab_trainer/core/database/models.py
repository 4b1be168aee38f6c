"""
Database models for the vocabulary trainer
"""

from typing import Literal, TypedDict

from ..session.models import Word


class WordBook(TypedDict):
    """Word book model"""
    id: str
    name: str
    words: list[Word]
    learned_word_ids: list[str]
    created_at: float


class WordBookInfo(TypedDict):
    """Word book listing entry"""
    id: str
    name: str
    word_count: int
    learned_count: int
    created_at: float


class HistoryRecord(TypedDict):
    """Finished session model"""
    id: str
    date: float  # unix timestamp
    type: Literal["study", "dictation"]
    book_name: str
    total_words: int
    accuracy: int
