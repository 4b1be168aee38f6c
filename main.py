#!/usr/bin/env python3
"""
Vocabulary Trainer
Console entry point
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

from vocab_trainer.config import get_settings
from vocab_trainer.core.database.database_manager import get_db_manager
from vocab_trainer.core.session.dictation_queue import DictationQueueEngine
from vocab_trainer.core.session.models import Feedback, StudyResponse
from vocab_trainer.core.session.session_manager import SESSION_DICTATION, SESSION_STUDY, SessionManager
from vocab_trainer.core.session.study_queue import StudyQueueEngine
from vocab_trainer.exceptions import VocabTrainerError, WordExtractionError
from vocab_trainer.word_extractor import get_word_extractor

logger = logging.getLogger(__name__)

RESPONSE_KEYS = {
    "": StudyResponse.KNOWN,
    "k": StudyResponse.KNOWN,
    "v": StudyResponse.VAGUE,
    "u": StudyResponse.UNKNOWN,
}


def run_study(engine: StudyQueueEngine):
    """Drive a study session from the terminal; Enter reveals, then grades"""
    while not engine.is_finished:
        entry = engine.current_entry
        print(f"\n[{engine.position + 1}/{engine.queue_length}] {entry.word.text}  {entry.word.phonetic}")
        input("  (Enter to reveal) ")
        print(f"  {entry.word.definition}")

        answer = input("  [k]nown (Enter) / [v]ague / [u]nknown: ").strip().lower()
        while answer not in RESPONSE_KEYS:
            answer = input("  Please answer k, v or u: ").strip().lower()

        engine.advance(entry.word_id, RESPONSE_KEYS[answer])
    return engine.summary


def run_dictation(engine: DictationQueueEngine):
    """Drive a dictation session from the terminal"""
    while not engine.is_finished:
        word = engine.current_word
        print(f"\n[{engine.position + 1}/{engine.queue_length}] {word.phonetic}  {word.definition}")
        feedback = engine.submit(input("  Spell it: "))
        if feedback is Feedback.CORRECT:
            print("  Correct")
        else:
            print(f"  Wrong, the answer is: {word.text}")
        input("  (Enter for next) ")
        engine.advance()
    return engine.summary


def print_summary(record) -> None:
    print(
        f"\nSession finished: {record['total_words']} words, "
        f"accuracy {record['accuracy']}%."
    )


def run_session(manager: SessionManager, engine) -> None:
    try:
        if isinstance(engine, StudyQueueEngine):
            run_study(engine)
        else:
            run_dictation(engine)
    except (KeyboardInterrupt, EOFError):
        manager.abandon()
        print("\nSession abandoned.")
        return
    print_summary(manager.complete())


async def import_file(db_manager, path: str, name: str | None) -> None:
    file_path = Path(path)
    content = file_path.read_text(encoding="utf-8", errors="ignore")
    extractor = get_word_extractor()
    try:
        words = await extractor.extract_words(file_path.name, content)
    except WordExtractionError as e:
        logger.error(f"Import of {file_path} failed: {e}")
        print("Could not read vocabulary from this file. Please try again.")
        return

    if not words:
        print("No words found in the file.")
        return

    book_id = db_manager.book_repo.create_book(name or file_path.stem, words)
    if book_id is None:
        print("Could not save the imported words. Please try again.")
        return
    print(f"Imported {len(words)} words into book {book_id}")


def list_books(db_manager) -> None:
    books = db_manager.book_repo.list_books()
    if not books:
        print("No word books yet. Import one with: main.py import FILE")
        return
    for book in books:
        print(
            f"{book['id']}  {book['name']}  "
            f"{book['learned_count']}/{book['word_count']} learned"
        )


def show_errors(db_manager, kind: str | None) -> None:
    groups = db_manager.error_repo.get_errors_by_date(kind)
    if not groups:
        print("The error log is empty.")
        return
    print(f"{db_manager.error_repo.count_errors()} errors logged")
    for day, records in groups:
        print(day)
        for record in records:
            print(f"  [{record.kind.value}] {record.word_text}  {record.word_phonetic}  {record.word_definition}")


def show_history(db_manager) -> None:
    history = db_manager.history_repo.get_history()
    if not history:
        print("No sessions yet.")
        return
    for record in history:
        when = datetime.fromtimestamp(record["date"]).strftime("%m-%d %H:%M")
        print(
            f"{when}  {record['type']:<9} {record['book_name']}  "
            f"{record['total_words']} words  {record['accuracy']}%"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Personal vocabulary trainer")
    commands = parser.add_subparsers(dest="command", required=True)

    import_cmd = commands.add_parser("import", help="Extract words from a file into a new book")
    import_cmd.add_argument("file")
    import_cmd.add_argument("--name", help="Book name (defaults to the file name)")

    books_cmd = commands.add_parser("books", help="List word books")
    books_cmd.add_argument("--delete", metavar="BOOK_ID", help="Delete a word book")

    study_cmd = commands.add_parser("study", help="Recognition session over a book")
    study_cmd.add_argument("book_id")

    dictation_cmd = commands.add_parser("dictation", help="Spelling session over a book")
    dictation_cmd.add_argument("book_id")

    errors_cmd = commands.add_parser("errors", help="Show the error log")
    errors_cmd.add_argument("--kind", choices=["learning", "dictation"])
    errors_cmd.add_argument("--clear", action="store_true")

    review_cmd = commands.add_parser("review", help="Practise the words in the error log")
    review_cmd.add_argument("mode", choices=[SESSION_STUDY, SESSION_DICTATION])
    review_cmd.add_argument("--kind", choices=["learning", "dictation"])

    history_cmd = commands.add_parser("history", help="Show finished sessions")
    history_cmd.add_argument("--clear", action="store_true")

    return parser


def main(argv=None) -> int:
    """Main application entry point"""
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    args = build_parser().parse_args(argv)
    db_manager = get_db_manager()
    db_manager.init_database()
    manager = SessionManager(db_manager, settings)

    try:
        if args.command == "import":
            asyncio.run(import_file(db_manager, args.file, args.name))
        elif args.command == "books":
            if args.delete and not db_manager.book_repo.delete_book(args.delete):
                print(f"No word book with id {args.delete}")
            list_books(db_manager)
        elif args.command == "study":
            run_session(manager, manager.start_study(args.book_id))
        elif args.command == "dictation":
            run_session(manager, manager.start_dictation(args.book_id))
        elif args.command == "errors":
            if args.clear:
                db_manager.error_repo.clear_errors()
            show_errors(db_manager, args.kind)
        elif args.command == "review":
            run_session(manager, manager.start_error_review(args.mode, args.kind))
        elif args.command == "history":
            if args.clear:
                db_manager.history_repo.clear_history()
            show_history(db_manager)
    except VocabTrainerError as e:
        print(e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
