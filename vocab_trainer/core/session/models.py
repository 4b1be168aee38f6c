"""
Session data models shared by the study and dictation engines
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum

from ...utils import calculate_accuracy


class StudyResponse(str, Enum):
    """Self-graded answer in study mode"""

    KNOWN = "known"
    VAGUE = "vague"
    UNKNOWN = "unknown"


class Feedback(str, Enum):
    """Automatic grade of a dictation entry"""

    CORRECT = "correct"
    INCORRECT = "incorrect"


class ErrorKind(str, Enum):
    """Which session produced an error record"""

    LEARNING = "learning"
    DICTATION = "dictation"


@dataclass(frozen=True)
class Word:
    """Vocabulary item owned by a word book"""

    id: str
    text: str
    phonetic: str = ""
    definition: str = ""


@dataclass(frozen=True)
class QueueEntry:
    """One exposure of a word in a session queue"""

    word: Word
    instance_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def word_id(self) -> str:
        return self.word.id


@dataclass(frozen=True)
class SessionErrorRecord:
    """A word the user got wrong during a session"""

    word_id: str
    word_text: str
    word_definition: str
    word_phonetic: str
    date: str  # ISO date YYYY-MM-DD
    kind: ErrorKind

    @classmethod
    def for_word(cls, word: Word, kind: ErrorKind, date: str) -> "SessionErrorRecord":
        return cls(
            word_id=word.id,
            word_text=word.text,
            word_definition=word.definition,
            word_phonetic=word.phonetic,
            date=date,
            kind=kind,
        )

    def to_word(self) -> Word:
        """Rebuild the vocabulary item this error refers to"""
        return Word(
            id=self.word_id,
            text=self.word_text,
            phonetic=self.word_phonetic,
            definition=self.word_definition,
        )


@dataclass
class StudySummary:
    """Result of a finished study session"""

    reviewed_count: int
    errors: list[SessionErrorRecord]
    learned_ids: list[str]

    @property
    def word_count(self) -> int:
        return self.reviewed_count

    @property
    def accuracy(self) -> int:
        return calculate_accuracy(self.reviewed_count, len(self.errors))


@dataclass
class DictationSummary:
    """Result of a finished dictation session"""

    total_count: int
    errors: list[SessionErrorRecord]
    learned_ids: list[str]

    @property
    def word_count(self) -> int:
        return self.total_count

    @property
    def accuracy(self) -> int:
        return calculate_accuracy(self.total_count, len(self.errors))


@dataclass
class StudyStep:
    """Outcome of one study response: the next entry or the final summary"""

    next_entry: QueueEntry | None = None
    summary: StudySummary | None = None

    @property
    def is_finished(self) -> bool:
        return self.summary is not None


@dataclass
class DictationStep:
    """Outcome of advancing a dictation session"""

    next_word: Word | None = None
    summary: DictationSummary | None = None

    @property
    def is_finished(self) -> bool:
        return self.summary is not None
