"""
SQLite‑backed document store and simple migration system.

Documents live in a single ``documents`` table keyed by
``(collection, id)`` with the body stored as JSON text.  Field filters
are evaluated with SQLite's ``json_extract`` so callers can query by
equality or ``null`` without a schema per collection.  The public
surface is deliberately small: whole‑collection fetch, filtered fetch,
get/update/delete by id, append‑insert returning a generated id and an
atomic ``transaction`` helper.

Each operation opens its own connection and runs in a worker thread so
that independent reads awaited together with ``asyncio.gather`` do not
block the event loop.
"""

import asyncio
import json
import logging
import os
import re
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, TypeVar

from .errors import NotFoundError


logger = logging.getLogger(__name__)

T = TypeVar("T")

# (field, operator, value); operator is "==" or "!=".
Filter = Tuple[str, str, Any]

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_OPERATORS = {"==": "IS", "!=": "IS NOT"}

MIGRATIONS: List[Tuple[int, str]] = [
    # Migration 1: document table
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS documents (
            collection TEXT NOT NULL,
            id TEXT NOT NULL,
            data TEXT NOT NULL,
            inserted_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (collection, id)
        );
        """,
    ),
    # Migration 2: speed up active‑loan probes on the loans collection
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_documents_loans_book
            ON documents(collection, json_extract(data, '$.book_id'));
        CREATE INDEX IF NOT EXISTS idx_documents_loans_member
            ON documents(collection, json_extract(data, '$.member_id'));
        """,
    ),
]


def get_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    Absolute paths are used as is.  Relative paths are resolved against
    the project root (the directory containing ``library_api``).
    """
    if os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / database_url).resolve())


def get_connection(database_url: str) -> sqlite3.Connection:
    """Create and return a new SQLite connection in autocommit mode.

    Transactions are opened explicitly with ``BEGIN IMMEDIATE`` by
    :meth:`DocumentStore.transaction`.
    """
    conn = sqlite3.connect(get_database_path(database_url), timeout=30, isolation_level=None)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_cursor(database_url: str) -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection(database_url)
    try:
        yield conn.cursor()
    finally:
        conn.close()


def init_db(database_url: str) -> None:
    """Create the database file if needed and apply pending migrations."""
    with get_cursor(database_url) as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
                logger.info("Applied migration %s", version)


def _encode(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _dumps(data: Dict[str, Any]) -> str:
    return json.dumps(data, default=_encode, ensure_ascii=False)


def _where(filters: Sequence[Filter]) -> Tuple[str, List[Any]]:
    clauses: List[str] = []
    params: List[Any] = []
    for field, op, value in filters:
        if not _FIELD_RE.match(field):
            raise ValueError(f"Invalid field name: {field!r}")
        if op not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {op!r}")
        clauses.append(f"json_extract(data, '$.{field}') {_OPERATORS[op]} ?")
        params.append(value)
    return " AND ".join(clauses), params


class DocumentSession:
    """Synchronous operations bound to one open connection.

    Obtained inside :meth:`DocumentStore.transaction`; every call made
    through the same session belongs to the same transaction.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_doc(row: sqlite3.Row) -> Dict[str, Any]:
        return {"id": row["id"], **json.loads(row["data"])}

    def find(self, collection: str, filters: Sequence[Filter] = ()) -> List[Dict[str, Any]]:
        query = "SELECT id, data FROM documents WHERE collection = ?"
        params: List[Any] = [collection]
        if filters:
            where, extra = _where(filters)
            query += " AND " + where
            params.extend(extra)
        query += " ORDER BY inserted_at, rowid"
        rows = self.conn.execute(query, tuple(params)).fetchall()
        return [self._row_to_doc(row) for row in rows]

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        row = self.conn.execute(
            "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
            (collection, doc_id),
        ).fetchone()
        return self._row_to_doc(row) if row else None

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        body = {k: v for k, v in data.items() if k != "id"}
        self.conn.execute(
            "INSERT INTO documents (collection, id, data) VALUES (?, ?, ?)",
            (collection, doc_id, _dumps(body)),
        )
        return doc_id

    def update(self, collection: str, doc_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Merge ``changes`` into an existing document and return the result."""
        current = self.get(collection, doc_id)
        if current is None:
            raise NotFoundError(f"Documento {collection}/{doc_id} no encontrado.")
        current.pop("id")
        current.update({k: v for k, v in changes.items() if k != "id"})
        self.conn.execute(
            "UPDATE documents SET data = ? WHERE collection = ? AND id = ?",
            (_dumps(current), collection, doc_id),
        )
        return {"id": doc_id, **current}

    def delete(self, collection: str, doc_id: str) -> None:
        self.conn.execute(
            "DELETE FROM documents WHERE collection = ? AND id = ?",
            (collection, doc_id),
        )


class DocumentStore:
    """Asynchronous facade over the SQLite document table."""

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url

    def init_db(self) -> None:
        init_db(self.database_url)

    def _run(self, fn: Callable[[DocumentSession], T], atomic: bool = False) -> T:
        conn = get_connection(self.database_url)
        try:
            if not atomic:
                return fn(DocumentSession(conn))
            conn.execute("BEGIN IMMEDIATE")
            try:
                result = fn(DocumentSession(conn))
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
            return result
        finally:
            conn.close()

    async def _call(self, fn: Callable[[DocumentSession], T], atomic: bool = False) -> T:
        return await asyncio.to_thread(self._run, fn, atomic)

    async def get_all(self, collection: str) -> List[Dict[str, Any]]:
        return await self._call(lambda s: s.find(collection))

    async def find(self, collection: str, filters: Sequence[Filter]) -> List[Dict[str, Any]]:
        return await self._call(lambda s: s.find(collection, filters))

    async def exists(self, collection: str, filters: Sequence[Filter]) -> bool:
        return bool(await self.find(collection, filters))

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        return await self._call(lambda s: s.get(collection, doc_id))

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        return await self._call(lambda s: s.add(collection, data))

    async def update(self, collection: str, doc_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        # Read, merge and write back under one write lock.
        return await self._call(lambda s: s.update(collection, doc_id, changes), atomic=True)

    async def delete(self, collection: str, doc_id: str) -> None:
        await self._call(lambda s: s.delete(collection, doc_id))

    async def transaction(self, fn: Callable[[DocumentSession], T]) -> T:
        """Run ``fn`` inside a single write transaction.

        The transaction takes SQLite's reserved lock up front
        (``BEGIN IMMEDIATE``), so reads made by ``fn`` cannot be
        invalidated by another writer before ``fn`` returns.  Any
        exception rolls the transaction back and propagates.
        """
        return await self._call(fn, atomic=True)
