"""
Reminder Bot — User Database.

The durable store: one user document per chat (``users`` row plus its
``events`` rows), surviving bot restarts. Implements EventStorePort.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from src.core.errors import StoreError
from src.data.models import Event, User

logger = logging.getLogger(__name__)


class UserDB:
    """SQLite-backed storage for registered chats and their events.

    A file path gets a fresh connection per operation. ``":memory:"`` keeps
    one connection for the lifetime of the instance, since every new
    in-memory connection is a separate, empty database.
    """

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from src.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        self._memory_conn: sqlite3.Connection | None = None
        if db_path == ":memory:":
            self._memory_conn = self._open()
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _connect(self) -> sqlite3.Connection:
        if self._memory_conn is not None:
            return self._memory_conn
        return self._open()

    def _init_db(self) -> None:
        """Create the users and events tables if they don't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    chat_id     INTEGER PRIMARY KEY,
                    kind        TEXT NOT NULL,
                    created_at  TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS events (
                    id          INTEGER PRIMARY KEY AUTOINCREMENT,
                    chat_id     INTEGER NOT NULL REFERENCES users(chat_id),
                    happens_at  TEXT    NOT NULL,
                    description TEXT    NOT NULL DEFAULT ''
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_events_chat_id ON events(chat_id)"
            )
        logger.debug("Users/events tables initialized at %s", self._db_path)

    @staticmethod
    def _row_to_event(row: sqlite3.Row) -> Event:
        return Event(
            when=datetime.fromisoformat(row["happens_at"]),
            description=row["description"],
        )

    def is_registered(self, chat_id: int) -> bool:
        """Check if a chat has a user document."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT 1 FROM users WHERE chat_id = ?", (chat_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to look up chat {chat_id}: {exc}") from exc
        return row is not None

    def get_user(self, chat_id: int) -> User | None:
        """Fetch a user and its events (storage order), or None."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT * FROM users WHERE chat_id = ?", (chat_id,),
                ).fetchone()
                if row is None:
                    return None
                event_rows = conn.execute(
                    "SELECT * FROM events WHERE chat_id = ? ORDER BY id", (chat_id,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to load chat {chat_id}: {exc}") from exc

        return User(
            chat_id=row["chat_id"],
            kind=row["kind"],
            events=[self._row_to_event(r) for r in event_rows],
            created_at=row["created_at"],
        )

    def add_user(self, chat_id: int, kind: str) -> User:
        """Register a new chat with an empty event list."""
        now = datetime.now().isoformat()
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT INTO users (chat_id, kind, created_at) VALUES (?, ?, ?)",
                    (chat_id, kind, now),
                )
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to register chat {chat_id}: {exc}") from exc

        logger.info("User registered: chat %d (%s)", chat_id, kind)
        return User(chat_id=chat_id, kind=kind, events=[], created_at=now)

    def replace_events(self, chat_id: int, events: list[Event]) -> None:
        """Replace a chat's whole event list in one transaction."""
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM events WHERE chat_id = ?", (chat_id,))
                conn.executemany(
                    "INSERT INTO events (chat_id, happens_at, description) VALUES (?, ?, ?)",
                    [(chat_id, ev.when.isoformat(), ev.description) for ev in events],
                )
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to save events for chat {chat_id}: {exc}") from exc

        logger.info("Chat %d now has %d event(s)", chat_id, len(events))

    def ping(self) -> None:
        """Liveness check. Raises StoreError if the database is unreachable."""
        try:
            with self._connect() as conn:
                conn.execute("SELECT 1").fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Database ping failed: {exc}") from exc
