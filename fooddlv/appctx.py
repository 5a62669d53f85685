"""The application context: database access, the event hub and user sockets."""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass
from os import PathLike
from typing import Any, Optional, Protocol, Union

from fooddlv.pubsub import LocalPubSub

MEMORY = ":memory:"

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    status INTEGER NOT NULL DEFAULT 1,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
    email TEXT NOT NULL DEFAULT '',
    password TEXT NOT NULL DEFAULT '',
    last_name TEXT NOT NULL DEFAULT '',
    first_name TEXT NOT NULL DEFAULT '',
    phone TEXT,
    roles TEXT NOT NULL DEFAULT 'user' CHECK (roles IN ('user', 'admin')),
    salt TEXT NOT NULL DEFAULT '',
    avatar TEXT
);
CREATE TABLE IF NOT EXISTS notes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    status INTEGER NOT NULL DEFAULT 1,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
    title TEXT NOT NULL DEFAULT '',
    content TEXT NOT NULL DEFAULT '',
    user_id INTEGER,
    image TEXT,
    images TEXT
);
CREATE TABLE IF NOT EXISTS images (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    url TEXT NOT NULL DEFAULT '',
    width INTEGER NOT NULL DEFAULT 0,
    height INTEGER NOT NULL DEFAULT 0
);
"""


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the users, notes and images tables if they are missing."""
    conn.executescript(SCHEMA)
    conn.commit()


class AppSocket(Protocol):
    def emit(self, event: str, message: Any) -> None: ...


@dataclass
class UserSocket:
    """A socket connection bound to the user who owns it."""

    user_id: int
    connection: AppSocket


class SocketEngine:
    """Keeps the open sockets of each user."""

    def __init__(self) -> None:
        self._sockets: dict[int, list[AppSocket]] = {}
        self._lock = threading.Lock()

    def add_socket(self, user_id: int, socket: AppSocket) -> None:
        with self._lock:
            self._sockets.setdefault(user_id, []).append(socket)

    def get_sockets_of(self, user_id: int) -> list[AppSocket]:
        with self._lock:
            return list(self._sockets.get(user_id, ()))


class AppContext:
    """Shared services handed to every request handler and consumer."""

    def __init__(
        self,
        database: Union[str, PathLike] = MEMORY,
        pubsub: Optional[LocalPubSub] = None,
        realtime: Optional[SocketEngine] = None,
    ) -> None:
        self.database = str(database)
        self._pubsub = pubsub if pubsub is not None else LocalPubSub()
        self.realtime = realtime if realtime is not None else SocketEngine()
        self._shared: Optional[sqlite3.Connection] = None
        self._schema_ready = False
        self._lock = threading.Lock()

    @property
    def pubsub(self) -> LocalPubSub:
        return self._pubsub

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def connect(self) -> sqlite3.Connection:
        """Return a database connection with the schema in place.

        An in-memory database is a single connection shared by every caller.
        """
        with self._lock:
            if self.database == MEMORY:
                if self._shared is None:
                    self._shared = self._open()
                    init_schema(self._shared)
                return self._shared
            conn = self._open()
            if not self._schema_ready:
                init_schema(conn)
                self._schema_ready = True
            return conn

    def close(self) -> None:
        self._pubsub.close()
        with self._lock:
            if self._shared is not None:
                self._shared.close()
                self._shared = None

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()