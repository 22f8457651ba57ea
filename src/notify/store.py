"""Durable stores for the database notification channel."""

from __future__ import annotations

import abc
import re
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from src.core.exceptions import NotifyConfigError

logger = structlog.get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class NotificationStore(abc.ABC):
    """Accepts notification rows for durable storage."""

    @abc.abstractmethod
    async def insert(self, row: dict[str, Any]) -> None:
        """Persist one row. Raises on storage failure."""

    async def close(self) -> None:
        """Release resources."""


class SqliteNotificationStore(NotificationStore):
    """Appends rows to a SQLite table, creating it on first use.

    Keys beyond the base columns become nullable columns, added the first
    time a row carries them.
    """

    def __init__(self, path: str | Path, table: str = "command_notifications") -> None:
        if not _IDENTIFIER.match(table):
            raise NotifyConfigError(f"Invalid notifications table name: {table!r}")
        self.db_path = Path(path)
        self.table = table
        self._columns: set[str] = set()
        self._initialized = False

    async def init_db(self) -> None:
        """Create the notifications table if it does not exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    level INTEGER NOT NULL,
                    level_name TEXT NOT NULL,
                    message TEXT NOT NULL,
                    context TEXT,
                    created_at TEXT NOT NULL
                )
            """)
            await db.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{self.table}_level ON {self.table} (level)"
            )
            await db.commit()
            self._columns = await self._table_columns(db)
        self._initialized = True
        logger.debug("notification_table_ready", path=str(self.db_path), table=self.table)

    async def _table_columns(self, db: aiosqlite.Connection) -> set[str]:
        async with db.execute(f"PRAGMA table_info({self.table})") as cursor:
            return {str(r[1]).lower() for r in await cursor.fetchall()}

    async def insert(self, row: dict[str, Any]) -> None:
        columns = list(row)
        bad = [c for c in columns if not isinstance(c, str) or not _IDENTIFIER.match(c)]
        if bad:
            raise NotifyConfigError(f"Invalid notification column names: {bad!r}")

        if not self._initialized:
            await self.init_db()

        quoted = ", ".join(f'"{c}"' for c in columns)
        placeholders = ", ".join("?" for _ in columns)
        async with aiosqlite.connect(self.db_path) as db:
            for column in columns:
                if column.lower() not in self._columns:
                    await db.execute(f'ALTER TABLE {self.table} ADD COLUMN "{column}"')
                    self._columns.add(column.lower())
                    logger.info("notification_column_added", table=self.table, column=column)
            await db.execute(
                f"INSERT INTO {self.table} ({quoted}) VALUES ({placeholders})",
                [row[c] for c in columns],
            )
            await db.commit()

    async def fetch_all(self) -> list[dict[str, Any]]:
        """Return every stored row, oldest first."""
        if not self._initialized:
            await self.init_db()

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(f"SELECT * FROM {self.table} ORDER BY id") as cursor:
                rows = await cursor.fetchall()
        return [dict(r) for r in rows]
