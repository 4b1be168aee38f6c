"""
Exception hierarchy for the vocabulary trainer
"""


class VocabTrainerError(Exception):
    """Base class for all trainer errors"""


class InvalidSessionOperation(VocabTrainerError):
    """An engine operation was called in a state that does not allow it"""


class EmptySessionError(VocabTrainerError):
    """A session was requested but there are no words to practise"""


class BookNotFoundError(VocabTrainerError):
    """Requested word book does not exist"""

    def __init__(self, book_id: str):
        super().__init__(f"Word book not found: {book_id}")
        self.book_id = book_id


class WordExtractionError(VocabTrainerError):
    """AI word extraction failed or returned unusable data"""


class SessionSaveError(VocabTrainerError):
    """A finished session could not be written to storage"""
