"""SQLite-backed record store for documents, preferences and sessions.

Saves are best effort: a failed write is logged and the caller carries on.
Loads never fail on bad records; unreadable rows are skipped and missing
preferences fall back to defaults.
"""

import logging
import sqlite3
from pathlib import Path

from pydantic import ValidationError

from speedreader.models.document import Document, now_ms
from speedreader.models.preferences import UserPreferences
from speedreader.models.session import ReadingSession
from speedreader.storage.database import get_connection, initialize_database

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "preferences"


class DocumentStore:
    """Key-value persistence keyed by document id.

    Args:
        db_path: Path to the SQLite database file; created if missing.
        max_sessions: Number of most recent reading sessions to keep.
    """

    def __init__(self, db_path: str | Path, max_sessions: int = 100) -> None:
        self._db_path = Path(db_path)
        self._max_sessions = max_sessions
        initialize_database(self._db_path)

    # ── Documents ───────────────────────────────────────────────────────────

    def load_all(self) -> list[Document]:
        """All stored documents, oldest first."""
        conn = get_connection(self._db_path)
        try:
            rows = conn.execute(
                "SELECT id, payload FROM documents ORDER BY date_added, rowid"
            ).fetchall()
        finally:
            conn.close()

        documents = []
        for row in rows:
            try:
                documents.append(Document.model_validate_json(row["payload"]))
            except ValidationError:
                logger.warning("Skipping unreadable document record %s", row["id"])
        return documents

    def get(self, document_id: str) -> Document | None:
        conn = get_connection(self._db_path)
        try:
            row = conn.execute(
                "SELECT payload FROM documents WHERE id = ?", (document_id,)
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return None
        try:
            return Document.model_validate_json(row["payload"])
        except ValidationError:
            logger.warning("Unreadable document record %s", document_id)
            return None

    def upsert(self, document: Document) -> None:
        """Insert or wholesale-replace a document record."""
        try:
            conn = get_connection(self._db_path)
            try:
                with conn:
                    conn.execute(
                        "INSERT OR REPLACE INTO documents (id, date_added, payload) "
                        "VALUES (?, ?, ?)",
                        (document.id, document.date_added, document.model_dump_json()),
                    )
            finally:
                conn.close()
        except sqlite3.Error:
            logger.exception("Failed to save document %s", document.id)

    def delete(self, document_id: str) -> None:
        try:
            conn = get_connection(self._db_path)
            try:
                with conn:
                    conn.execute("DELETE FROM documents WHERE id = ?", (document_id,))
            finally:
                conn.close()
        except sqlite3.Error:
            logger.exception("Failed to delete document %s", document_id)

    def update_progress(self, document_id: str, position: int) -> Document | None:
        """Store a new reading position for a document.

        Returns:
            The replacement record, or None if the document is unknown.
        """
        document = self.get(document_id)
        if document is None:
            logger.warning("Cannot save progress for unknown document %s", document_id)
            return None
        updated = document.with_position(position, read_at=now_ms())
        self.upsert(updated)
        return updated

    # ── Preferences ─────────────────────────────────────────────────────────

    def load_preferences(self) -> UserPreferences:
        conn = get_connection(self._db_path)
        try:
            row = conn.execute(
                "SELECT value FROM settings WHERE key = ?", (PREFERENCES_KEY,)
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return UserPreferences()
        try:
            return UserPreferences.model_validate_json(row["value"])
        except ValidationError:
            logger.warning("Stored preferences are unreadable, using defaults")
            return UserPreferences()

    def save_preferences(self, preferences: UserPreferences) -> None:
        try:
            conn = get_connection(self._db_path)
            try:
                with conn:
                    conn.execute(
                        "INSERT OR REPLACE INTO settings (key, value, updated_at) "
                        "VALUES (?, ?, CURRENT_TIMESTAMP)",
                        (PREFERENCES_KEY, preferences.model_dump_json()),
                    )
            finally:
                conn.close()
        except sqlite3.Error:
            logger.exception("Failed to save preferences")

    # ── Reading sessions ────────────────────────────────────────────────────

    def record_session(self, session: ReadingSession) -> None:
        """Append a session, keeping only the most recent ``max_sessions``."""
        try:
            conn = get_connection(self._db_path)
            try:
                with conn:
                    conn.execute(
                        "INSERT INTO reading_sessions (id, document_id, payload) "
                        "VALUES (?, ?, ?)",
                        (session.id, session.document_id, session.model_dump_json()),
                    )
                    conn.execute(
                        "DELETE FROM reading_sessions WHERE seq NOT IN "
                        "(SELECT seq FROM reading_sessions ORDER BY seq DESC LIMIT ?)",
                        (self._max_sessions,),
                    )
            finally:
                conn.close()
        except sqlite3.Error:
            logger.exception("Failed to save reading session %s", session.id)

    def load_sessions(self, document_id: str | None = None) -> list[ReadingSession]:
        """Stored sessions, oldest first, optionally for one document."""
        conn = get_connection(self._db_path)
        try:
            if document_id is None:
                rows = conn.execute(
                    "SELECT payload FROM reading_sessions ORDER BY seq"
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT payload FROM reading_sessions WHERE document_id = ? "
                    "ORDER BY seq",
                    (document_id,),
                ).fetchall()
        finally:
            conn.close()

        sessions = []
        for row in rows:
            try:
                sessions.append(ReadingSession.model_validate_json(row["payload"]))
            except ValidationError:
                logger.warning("Skipping unreadable reading session record")
        return sessions
