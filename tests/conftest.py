"""Shared fixtures: SQLite source files and an in-memory backend."""

import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest
import pytest_asyncio

from realtydb.drivers.base import BaseBackend
from realtydb.drivers.database import Database
from realtydb.drivers.sqlite import SQLiteBackend
from realtydb.models.record import RunResult
from realtydb.models.schema import Dialect

REPO_ROOT = Path(__file__).resolve().parent.parent

BLOG_SCHEMA = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT UNIQUE NOT NULL,
    isAdmin BOOLEAN DEFAULT 0,
    createdAt DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE blogs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    isPublished BOOLEAN DEFAULT 1,
    displayOrder INTEGER DEFAULT 0
);

CREATE TABLE blog_images (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    blogId INTEGER NOT NULL,
    imageUrl TEXT NOT NULL UNIQUE,
    FOREIGN KEY (blogId) REFERENCES blogs(id)
);
"""

# Same tables, with the child declared before the table it references.
CHILD_FIRST_SCHEMA = """
CREATE TABLE blog_images (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    blogId INTEGER NOT NULL,
    imageUrl TEXT NOT NULL UNIQUE,
    FOREIGN KEY (blogId) REFERENCES blogs(id)
);

CREATE TABLE blogs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    isPublished BOOLEAN DEFAULT 1,
    displayOrder INTEGER DEFAULT 0
);

CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT UNIQUE NOT NULL,
    isAdmin BOOLEAN DEFAULT 0,
    createdAt DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""

SAMPLE_ROWS: Dict[str, List[Dict[str, Any]]] = {
    "users": [
        {"id": 1, "email": "ann@example.com", "isAdmin": 1, "createdAt": "2024-01-02 03:04:05"},
        {"id": 2, "email": "bob@example.com", "isAdmin": 0, "createdAt": "2024-02-03 04:05:06"},
    ],
    "blogs": [
        {"id": 1, "title": "First", "isPublished": 1, "displayOrder": 0},
        {"id": 2, "title": "Draft", "isPublished": 0, "displayOrder": 3},
    ],
    "blog_images": [
        {"id": 1, "blogId": 1, "imageUrl": "/img/a.jpg"},
        {"id": 2, "blogId": 2, "imageUrl": "/img/b.jpg"},
        {"id": 3, "blogId": 2, "imageUrl": "/img/c.jpg"},
    ],
}


def build_sqlite(path: Path, schema: str, rows: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> Path:
    """Create a SQLite file with the given schema and rows using the stdlib driver."""
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(schema)
        for table, table_rows in (rows or {}).items():
            for row in table_rows:
                columns = ", ".join(row)
                marks = ", ".join("?" for _ in row)
                conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({marks})", list(row.values()))
        conn.commit()
    finally:
        conn.close()
    return path


def query_sqlite(path: Path, sql: str) -> List[tuple]:
    conn = sqlite3.connect(str(path))
    try:
        return conn.execute(sql).fetchall()
    finally:
        conn.close()


class RecordingBackend(BaseBackend):
    """PostgreSQL-dialect backend that records statements instead of running them."""

    dialect = Dialect.POSTGRES
    name = "recording"

    def __init__(
        self,
        rows: Optional[List[Dict[str, Any]]] = None,
        changes: int = 1,
        error: Optional[Exception] = None,
    ):
        self.calls: List[tuple] = []
        self.rows = rows or []
        self.changes = changes
        self.error = error
        self.closed = False

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> RunResult:
        self.calls.append((sql, tuple(params)))
        if self.error:
            raise self.error
        return RunResult(changes=self.changes)

    async def fetch(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        self.calls.append((sql, tuple(params)))
        if self.error:
            raise self.error
        return list(self.rows)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def blog_schema_file(tmp_path):
    path = tmp_path / "schema.sql"
    path.write_text(BLOG_SCHEMA, encoding="utf-8")
    return path


@pytest.fixture
def source_db(tmp_path):
    return build_sqlite(tmp_path / "source.db", BLOG_SCHEMA, SAMPLE_ROWS)


@pytest.fixture
def child_first_source_db(tmp_path):
    return build_sqlite(tmp_path / "child_first.db", CHILD_FIRST_SCHEMA, SAMPLE_ROWS)


@pytest_asyncio.fixture
async def memory_db():
    db = Database(await SQLiteBackend.create(":memory:"))
    yield db
    await db.close()
