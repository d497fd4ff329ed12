"""
SQLite storage access and a simple migration system.

This module provides the generic data-access component used by the
services: ``get_connection`` opens a connection, ``init_db`` applies
migrations on application start and ``Database`` wraps a connection
with the small set of operations the services need (point lookup,
equality count/scan, insert and delete).  ``get_db`` is the FastAPI
dependency that hands one ``Database`` to each request and closes it
afterwards.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Iterator, List, Optional

from .config import settings

logger = logging.getLogger(__name__)


# Columns of each collection, excluding the ``id`` primary key.  Used to
# reject unknown names before they are interpolated into SQL.
COLLECTIONS: Dict[str, frozenset] = {
    "roadmaps": frozenset(
        {"name", "description", "owner_id", "is_public", "data", "created_at", "updated_at"}
    ),
    "roadmap_tags": frozenset({"roadmap_id", "name"}),
    "issues": frozenset(
        {"roadmap_id", "user_id", "open", "title", "content", "created_at", "updated_at"}
    ),
}


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # roadmap_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Foreign keys are enforced for the lifetime of the
    connection, which is what keeps issues and tags attached to an
    existing roadmap.  Services run storage calls in the threadpool, so
    one request may touch its connection from more than one worker
    thread (never concurrently).
    """
    conn = sqlite3.connect(get_database_path(), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def _check_collection(collection: str) -> frozenset:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection {collection!r}") from None


def _check_field(collection: str, field: str) -> None:
    if field != "id" and field not in _check_collection(collection):
        raise ValueError(f"Unknown field {field!r} for collection {collection!r}")


class Database:
    """Storage access over a single connection.

    Collection and field names are validated against ``COLLECTIONS``;
    values are always bound as query parameters.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def _fetch_one(self, sql: str, params: tuple) -> Optional[sqlite3.Row]:
        # An unfinished statement keeps a read lock until its cursor is closed
        cursor = self.conn.execute(sql, params)
        try:
            return cursor.fetchone()
        finally:
            cursor.close()

    def get(self, collection: str, record_id: int) -> Optional[Dict[str, Any]]:
        """Return the record with the given id, or ``None``."""
        _check_collection(collection)
        row = self._fetch_one(f"SELECT * FROM {collection} WHERE id = ?", (record_id,))
        return dict(row) if row else None

    def count_where(self, collection: str, field: str, value: Any) -> int:
        _check_field(collection, field)
        row = self._fetch_one(
            f"SELECT COUNT(*) AS total FROM {collection} WHERE {field} = ?", (value,)
        )
        return int(row["total"])

    def get_all_where(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        """Return every record whose ``field`` equals ``value``, in insertion order."""
        _check_field(collection, field)
        rows = self.conn.execute(
            f"SELECT * FROM {collection} WHERE {field} = ? ORDER BY id", (value,)
        ).fetchall()
        return [dict(row) for row in rows]

    def insert(self, collection: str, record: Dict[str, Any]) -> int:
        """Insert ``record`` and return the id assigned by the store.

        Any ``id`` key in the record is ignored.  Returns ``-1`` if the
        store rejects the row (e.g. a foreign key or NOT NULL violation).
        """
        columns = _check_collection(collection)
        values = {key: value for key, value in record.items() if key != "id"}
        unknown = set(values) - columns
        if unknown:
            raise ValueError(f"Unknown fields {sorted(unknown)} for collection {collection!r}")
        names = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        try:
            cursor = self.conn.execute(
                f"INSERT INTO {collection} ({names}) VALUES ({placeholders})",
                tuple(values.values()),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            logger.error("Insert into %s failed: %s", collection, e)
            return -1
        return cursor.lastrowid if cursor.lastrowid is not None else -1

    def delete(self, collection: str, record_id: int) -> bool:
        """Delete a record by id.  Returns ``False`` if nothing was deleted."""
        _check_collection(collection)
        try:
            cursor = self.conn.execute(f"DELETE FROM {collection} WHERE id = ?", (record_id,))
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            logger.error("Delete from %s failed: %s", collection, e)
            return False
        return cursor.rowcount > 0

    def close(self) -> None:
        self.conn.close()


async def get_db() -> AsyncIterator[Database]:
    """FastAPI dependency yielding a fresh ``Database`` for one request.

    The connection is closed on every exit path.  To share a pool
    instead, override this dependency; endpoints only depend on the
    ``Database`` interface.
    """
    db = Database(get_connection())
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations.  If you
    add a new migration, append it with an incremented version number.
    """
    migrations: list[tuple[int, str]] = [
        # Migration 1: Initial schema
        (
            1,
            """
            CREATE TABLE IF NOT EXISTS roadmaps (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                description TEXT,
                owner_id INTEGER NOT NULL,
                is_public INTEGER NOT NULL DEFAULT 1,
                data TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS roadmap_tags (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                roadmap_id INTEGER NOT NULL,
                name TEXT NOT NULL,
                FOREIGN KEY(roadmap_id) REFERENCES roadmaps(id) ON DELETE CASCADE
            );

            CREATE TABLE IF NOT EXISTS issues (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                roadmap_id INTEGER NOT NULL,
                user_id INTEGER NOT NULL,
                open INTEGER NOT NULL DEFAULT 1,
                title TEXT NOT NULL,
                content TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY(roadmap_id) REFERENCES roadmaps(id) ON DELETE CASCADE
            );
            """,
        ),
        # Migration 2: lookups by roadmap for tag scans and issue counts
        (
            2,
            """
            CREATE INDEX IF NOT EXISTS idx_roadmap_tags_roadmap_id ON roadmap_tags(roadmap_id);
            CREATE INDEX IF NOT EXISTS idx_issues_roadmap_id ON issues(roadmap_id);
            """,
        ),
    ]

    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in migrations:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
                logger.info("Applied database migration %s", version)
