"""
Family Days — Document Database.

SQLite-backed implementation of the DocumentStore port. Each document is a
JSON object stored under (collection, doc_id), with store-assigned
created_at / updated_at timestamps. Typed readers for the events and users
collections sit on top of it.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from familydays.data.models import Event, UserPreferences, UserProfile, parse_event, parse_user
from familydays.ports.store_port import SERVER_TIMESTAMP, DocumentStore, StoreError

logger = logging.getLogger(__name__)

EVENTS = "events"
USERS = "users"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _resolve_timestamps(data: dict, now: str) -> dict:
    resolved = {}
    for key, value in data.items():
        if value is SERVER_TIMESTAMP:
            resolved[key] = now
        elif isinstance(value, dict):
            resolved[key] = _resolve_timestamps(value, now)
        else:
            resolved[key] = value
    return resolved


class DocumentDB:
    """SQLite-backed document store (implements DocumentStore)."""

    def __init__(self, db_path: str | None = None, timeout: float | None = None) -> None:
        if db_path is None or timeout is None:
            from familydays.config import settings
            db_path = db_path or settings.DATABASE_PATH
            timeout = settings.STORE_TIMEOUT_SECONDS if timeout is None else timeout

        self._db_path = db_path
        self._timeout = timeout
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Commit on success; surface any sqlite failure as StoreError."""
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open store at {self._db_path}: {exc}") from exc
        try:
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Create the documents table if it doesn't exist."""
        with self._transaction() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS documents (
                    collection  TEXT NOT NULL,
                    doc_id      TEXT NOT NULL,
                    data        TEXT NOT NULL,
                    created_at  TEXT NOT NULL,
                    updated_at  TEXT NOT NULL,
                    PRIMARY KEY (collection, doc_id)
                )
            """)
        logger.debug("Documents table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_doc(row: sqlite3.Row) -> tuple[str, dict]:
        return row["doc_id"], json.loads(row["data"])

    # ------------------------------------------------------------------
    # DocumentStore
    # ------------------------------------------------------------------

    def get(self, collection: str, doc_id: str) -> dict | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT doc_id, data FROM documents WHERE collection = ? AND doc_id = ?",
                (collection, doc_id),
            ).fetchone()
        return self._row_to_doc(row)[1] if row else None

    def set(self, collection: str, doc_id: str, data: dict) -> None:
        """Insert or replace a document."""
        now = _now()
        payload = json.dumps(_resolve_timestamps(data, now), default=str)
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO documents (collection, doc_id, data, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (collection, doc_id)
                DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at
                """,
                (collection, doc_id, payload, now, now),
            )

    def create(self, collection: str, doc_id: str, data: dict) -> bool:
        """Insert only if absent. Returns True when this call created the document."""
        now = _now()
        payload = json.dumps(_resolve_timestamps(data, now), default=str)
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO documents (collection, doc_id, data, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (collection, doc_id) DO NOTHING
                """,
                (collection, doc_id, payload, now, now),
            )
            return cursor.rowcount == 1

    def list(self, collection: str) -> list[tuple[str, dict]]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT doc_id, data FROM documents WHERE collection = ? ORDER BY doc_id",
                (collection,),
            ).fetchall()
        return [self._row_to_doc(r) for r in rows]

    def query(self, collection: str, field: str, value: Any) -> list[tuple[str, dict]]:
        """Documents whose top-level ``field`` equals ``value``."""
        with self._transaction() as conn:
            rows = conn.execute(
                """
                SELECT doc_id, data FROM documents
                WHERE collection = ? AND json_extract(data, ?) = ?
                ORDER BY doc_id
                """,
                (collection, f"$.{field}", value),
            ).fetchall()
        return [self._row_to_doc(r) for r in rows]


# ---------------------------------------------------------------------------
# Typed collections
# ---------------------------------------------------------------------------


class EventDB:
    """Read access to the ``events`` collection."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def list_documents(self) -> list[tuple[str, dict]]:
        """All raw event documents. Parsing is left to the caller so one bad
        document does not hide the rest."""
        return self._store.list(EVENTS)

    def get_event(self, event_id: str) -> Event | None:
        data = self._store.get(EVENTS, event_id)
        return parse_event(event_id, data) if data is not None else None

    def add_event(self, event_id: str, data: dict) -> Event:
        """Validate and store an event document."""
        event = parse_event(event_id, data)
        self._store.set(EVENTS, event_id, {**data, "updatedAt": SERVER_TIMESTAMP})
        logger.info("Stored event %s (%s)", event_id, event.title)
        return event


class UserDB:
    """Read access to the ``users`` collection."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def get_profile(self, user_id: str) -> UserProfile | None:
        data = self._store.get(USERS, user_id)
        return parse_user(user_id, data) if data is not None else None

    def get_preferences(self, user_id: str) -> UserPreferences | None:
        profile = self.get_profile(user_id)
        return profile.preferences if profile else None

    def add_profile(self, user_id: str, data: dict) -> UserProfile:
        profile = parse_user(user_id, data)
        self._store.set(USERS, user_id, data)
        logger.info("Stored user %s", user_id)
        return profile
