"""Tests for SQLite connection manager classes.

The async and sync managers initialize the schema lazily and keep
independent connections for :memory: databases.
"""

import threading
from pathlib import Path

import pytest

from agentstat.adapters.storage.sqlite_base import (
    AsyncConnectionManager,
    SQLiteStorageBase,
    SyncConnectionManager,
)

pytestmark = [
    pytest.mark.storage,
    pytest.mark.tier(1),
    pytest.mark.tra("Adapter.SQLiteStore.ConnectionManager"),
]

CELLS_SCHEMA = """
CREATE TABLE IF NOT EXISTS cells (
    row_key BLOB NOT NULL,
    qualifier TEXT NOT NULL,
    value BLOB NOT NULL,
    PRIMARY KEY (row_key, qualifier)
) WITHOUT ROWID;
"""

INSERT_CELL = "INSERT INTO cells (row_key, qualifier, value) VALUES (?, ?, ?)"


class TestAsyncConnectionManager:
    """Tests for AsyncConnectionManager."""

    async def test_schema_is_created_on_first_connection(self) -> None:
        manager = AsyncConnectionManager(":memory:", CELLS_SCHEMA)

        try:
            async with manager.connection() as conn:
                await conn.execute(INSERT_CELL, (b"k1", "5000", b"{}"))
                await conn.commit()
                cursor = await conn.execute("SELECT COUNT(*) FROM cells")
                row = await cursor.fetchone()
                assert row[0] == 1
        finally:
            await manager.close()

    async def test_file_database_survives_reconnects(self, tmp_path: Path) -> None:
        manager = AsyncConnectionManager(str(tmp_path / "cells.db"), CELLS_SCHEMA)

        async with manager.connection() as conn:
            await conn.execute(INSERT_CELL, (b"k1", "5000", b"{}"))
            await conn.commit()
        async with manager.connection() as conn:
            cursor = await conn.execute("SELECT qualifier FROM cells")
            rows = await cursor.fetchall()

        assert [row[0] for row in rows] == ["5000"]


class TestSyncConnectionManager:
    """Tests for SyncConnectionManager."""

    def test_schema_is_created_on_first_connection(self) -> None:
        manager = SyncConnectionManager(":memory:", CELLS_SCHEMA)

        try:
            with manager.connection() as conn:
                conn.execute(INSERT_CELL, (b"k1", "5000", b"{}"))
                conn.commit()
                row = conn.execute("SELECT COUNT(*) FROM cells").fetchone()
                assert row[0] == 1
        finally:
            manager.close()

    def test_memory_database_is_reset_after_close(self) -> None:
        manager = SyncConnectionManager(":memory:", CELLS_SCHEMA)
        with manager.connection() as conn:
            conn.execute(INSERT_CELL, (b"k1", "5000", b"{}"))
            conn.commit()

        manager.close()

        with manager.connection() as conn:
            assert conn.execute("SELECT COUNT(*) FROM cells").fetchone()[0] == 0
        manager.close()


class TestSyncMemoryConnectionSharing:
    """The shared :memory: connection is used by one thread at a time."""

    @pytest.mark.tra("Adapter.SQLiteStore.MemoryConnectionExclusive")
    def test_other_thread_waits_while_connection_is_held(self) -> None:
        manager = SyncConnectionManager(":memory:", CELLS_SCHEMA)
        entered = threading.Event()

        def use_connection() -> None:
            with manager.connection() as conn:
                conn.execute(INSERT_CELL, (b"worker", "5000", b"{}"))
                conn.commit()
                entered.set()

        try:
            with manager.connection():
                worker = threading.Thread(target=use_connection)
                worker.start()
                assert not entered.wait(timeout=0.2)
            worker.join(timeout=5)

            assert entered.is_set()
            with manager.connection() as conn:
                assert conn.execute("SELECT COUNT(*) FROM cells").fetchone()[0] == 1
        finally:
            manager.close()

    def test_nested_use_on_the_same_thread_does_not_block(self) -> None:
        manager = SyncConnectionManager(":memory:", CELLS_SCHEMA)

        try:
            with manager.connection() as outer, manager.connection() as inner:
                assert outer is inner
        finally:
            manager.close()


class TestConnectionManagerIndependence:
    """Sync and async managers are independent for :memory: databases."""

    async def test_memory_databases_do_not_share_rows(self) -> None:
        """Each manager keeps its own in-memory database instance."""
        storage = SQLiteStorageBase(":memory:", CELLS_SCHEMA)

        try:
            async with storage.async_connection() as conn:
                await conn.execute(INSERT_CELL, (b"async", "5000", b"{}"))
                await conn.commit()
            with storage.sync_connection() as conn:
                conn.execute(INSERT_CELL, (b"sync", "5000", b"{}"))
                conn.commit()

            async with storage.async_connection() as conn:
                cursor = await conn.execute("SELECT row_key FROM cells")
                async_keys = [bytes(row[0]) async for row in cursor]
            with storage.sync_connection() as conn:
                sync_keys = [bytes(row[0]) for row in conn.execute("SELECT row_key FROM cells")]

            assert async_keys == [b"async"]
            assert sync_keys == [b"sync"]
        finally:
            await storage.close()

    async def test_file_database_is_shared(self, tmp_path: Path) -> None:
        storage = SQLiteStorageBase(str(tmp_path / "cells.db"), CELLS_SCHEMA)

        async with storage.async_connection() as conn:
            await conn.execute(INSERT_CELL, (b"async", "5000", b"{}"))
            await conn.commit()

        with storage.sync_connection() as conn:
            keys = [bytes(row[0]) for row in conn.execute("SELECT row_key FROM cells")]

        assert keys == [b"async"]
