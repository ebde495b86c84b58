"""Entry point for the Speedreader application."""

import argparse
import asyncio
import logging
import sys
from functools import partial
from pathlib import Path

from speedreader.config import AppConfig, load_config
from speedreader.errors import SpeedreaderError
from speedreader.ingestion import DocumentAssembler
from speedreader.models import Document, ReadingSession, now_ms
from speedreader.playback import PlaybackController, RSVPWord, tokenize
from speedreader.playback.autosave import PositionAutosaver
from speedreader.storage import DocumentStore

logger = logging.getLogger(__name__)

# Column where the ORP character is drawn
ORP_COLUMN = 20


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Import documents and speed-read them one word at a time",
    )
    parser.add_argument("--config", type=Path, default=Path("config.yaml"))
    commands = parser.add_subparsers(dest="command", required=True)

    import_cmd = commands.add_parser("import", help="Import a document into the library")
    import_cmd.add_argument("file", type=Path)

    commands.add_parser("list", help="List documents in the library")

    read_cmd = commands.add_parser("read", help="Read a document with RSVP")
    read_cmd.add_argument("document_id")
    read_cmd.add_argument("--wpm", type=int, default=None, help="Words per minute")

    delete_cmd = commands.add_parser("delete", help="Remove a document")
    delete_cmd.add_argument("document_id")

    return parser.parse_args(argv)


def render_word(word: RSVPWord) -> str:
    """Format a word so its ORP character lands on a fixed column."""
    pad = " " * max(0, ORP_COLUMN - len(word.before_orp))
    return f"{pad}{word.before_orp}\033[1;31m{word.orp_char}\033[0m{word.after_orp}"


def _show(word: RSVPWord) -> None:
    sys.stdout.write("\r\033[K" + render_word(word))
    sys.stdout.flush()


async def read_document(
    store: DocumentStore, document: Document, config: AppConfig, wpm: int | None
) -> None:
    """Play a document in the terminal until it completes or is interrupted."""
    if document.word_count == 0:
        logger.warning("Document %s has no words to read", document.id)
        return

    preferences = store.load_preferences()
    loop = asyncio.get_running_loop()
    finished = asyncio.Event()

    controller = PlaybackController(
        tokenize(document.content),
        loop,
        wpm=wpm or preferences.default_speed,
        punctuation_pause=preferences.punctuation_pause,
        position=document.current_position,
        config=config.playback,
    )
    autosaver = PositionAutosaver(
        partial(store.update_progress, document.id),
        interval_seconds=config.playback.autosave_interval_seconds,
        enabled=preferences.auto_save,
    )
    controller.on_position_change(autosaver)
    controller.on_position_change(lambda _: _show(controller.current_word()))
    controller.on_completed(finished.set)

    start_time = now_ms()
    start_position = controller.position
    _show(controller.current_word())
    controller.play()
    try:
        await finished.wait()
    finally:
        controller.close()
        autosaver.flush()
        sys.stdout.write("\n")
        end_time = now_ms()
        words_read = max(controller.position - start_position, 0)
        minutes = (end_time - start_time) / 60000
        store.record_session(
            ReadingSession(
                document_id=document.id,
                start_time=start_time,
                end_time=end_time,
                start_position=start_position,
                end_position=controller.position,
                words_read=words_read,
                average_speed=words_read / minutes if minutes > 0 else 0.0,
            )
        )


def main(argv: list[str] | None = None) -> int:
    """Run one CLI command. Returns the process exit code."""
    args = parse_args(argv)
    config = load_config(args.config)
    logging.basicConfig(level=config.logging.level, format=config.logging.format)

    store = DocumentStore(config.storage.sqlite_path, config.storage.max_sessions)

    if args.command == "import":
        try:
            document = DocumentAssembler(config.ingestion).assemble_file(args.file)
        except SpeedreaderError as exc:
            print(f"Import failed: {exc.user_message()}", file=sys.stderr)
            return 1
        except FileNotFoundError as exc:
            print(f"Import failed: {exc}", file=sys.stderr)
            return 1
        store.upsert(document)
        print(
            f"{document.id}  {document.title} by {document.author}: "
            f"{document.word_count} words, {len(document.chapters)} chapters"
        )
    elif args.command == "list":
        for document in store.load_all():
            print(
                f"{document.id}  {document.title} ({document.format.value}) "
                f"{document.reading_progress}%"
            )
    elif args.command == "read":
        document = store.get(args.document_id)
        if document is None:
            print(f"No document with id {args.document_id}", file=sys.stderr)
            return 1
        try:
            asyncio.run(read_document(store, document, config, args.wpm))
        except KeyboardInterrupt:
            logger.info("Reading interrupted")
    elif args.command == "delete":
        store.delete(args.document_id)

    return 0


if __name__ == "__main__":
    sys.exit(main())
