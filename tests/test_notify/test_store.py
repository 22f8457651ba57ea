"""Tests for SqliteNotificationStore — lazy table creation, inserts, extra columns, name validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.core.exceptions import NotifyConfigError
from src.notify.store import SqliteNotificationStore


def _row(**kw: object) -> dict[str, object]:
    defaults: dict[str, object] = {
        "level": 250,
        "level_name": "NOTICE",
        "message": "Notice!",
        "context": "{}",
        "created_at": "1970-01-01T00:00:00+00:00",
    }
    defaults.update(kw)
    return defaults


class TestSqliteStore:
    async def test_insert_creates_table(self, tmp_path: Path) -> None:
        store = SqliteNotificationStore(tmp_path / "db" / "notifications.sqlite")
        await store.insert(_row())

        rows = await store.fetch_all()
        assert len(rows) == 1
        assert rows[0]["level"] == 250
        assert rows[0]["level_name"] == "NOTICE"
        assert rows[0]["message"] == "Notice!"
        assert rows[0]["id"] == 1

    async def test_rows_kept_in_order(self, tmp_path: Path) -> None:
        store = SqliteNotificationStore(tmp_path / "n.sqlite")
        await store.insert(_row(message="first"))
        await store.insert(_row(message="second", level=400, level_name="ERROR"))

        rows = await store.fetch_all()
        assert [r["message"] for r in rows] == ["first", "second"]

    async def test_extra_keys_stored(self, tmp_path: Path) -> None:
        store = SqliteNotificationStore(tmp_path / "n.sqlite")
        await store.insert(_row(host="web-1"))
        rows = await store.fetch_all()
        assert rows[0]["host"] == "web-1"
        assert rows[0]["message"] == "Notice!"

    async def test_extra_column_nullable_for_earlier_rows(self, tmp_path: Path) -> None:
        store = SqliteNotificationStore(tmp_path / "n.sqlite")
        await store.insert(_row(message="before"))
        await store.insert(_row(message="after", job_id=42))

        rows = await store.fetch_all()
        assert [r["job_id"] for r in rows] == [None, 42]

    async def test_extra_column_survives_reopen(self, tmp_path: Path) -> None:
        path = tmp_path / "n.sqlite"
        await SqliteNotificationStore(path).insert(_row(host="web-1"))

        reopened = SqliteNotificationStore(path)
        await reopened.insert(_row(host="web-2"))
        assert [r["host"] for r in await reopened.fetch_all()] == ["web-1", "web-2"]

    async def test_keyword_column_name(self, tmp_path: Path) -> None:
        store = SqliteNotificationStore(tmp_path / "n.sqlite")
        await store.insert(_row(order=3))
        assert (await store.fetch_all())[0]["order"] == 3

    @pytest.mark.parametrize("column", ["host name", "x;drop table y", "1col", ""])
    async def test_invalid_column_name(self, tmp_path: Path, column: str) -> None:
        store = SqliteNotificationStore(tmp_path / "n.sqlite")
        with pytest.raises(NotifyConfigError):
            await store.insert({**_row(), column: "v"})
        assert await store.fetch_all() == []

    async def test_custom_table(self, tmp_path: Path) -> None:
        store = SqliteNotificationStore(tmp_path / "n.sqlite", table="iclogger_notifications")
        await store.insert(_row())
        assert store.table == "iclogger_notifications"
        assert len(await store.fetch_all()) == 1

    async def test_fetch_empty(self, tmp_path: Path) -> None:
        store = SqliteNotificationStore(tmp_path / "n.sqlite")
        assert await store.fetch_all() == []

    @pytest.mark.parametrize("table", ["drop table x;", "1abc", "a-b", ""])
    def test_invalid_table_name(self, tmp_path: Path, table: str) -> None:
        with pytest.raises(NotifyConfigError):
            SqliteNotificationStore(tmp_path / "n.sqlite", table=table)
