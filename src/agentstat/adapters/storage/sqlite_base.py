"""Connection management for the SQLite store adapter."""

import asyncio
import sqlite3
import threading
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

import aiosqlite

_MEMORY = ":memory:"


class AsyncConnectionManager:
    """Manages async (aiosqlite) database connections.

    Handles schema initialization and connection lifecycle for async contexts.
    For :memory: databases, maintains a persistent connection since SQLite
    in-memory databases are connection-scoped.
    """

    def __init__(self, db_path: str, schema: str) -> None:
        self._db_path = db_path
        self._schema = schema
        self._initialized = False
        self._init_lock: asyncio.Lock | None = None
        self._persistent_conn: aiosqlite.Connection | None = None

    def _get_lock(self) -> asyncio.Lock:
        """Get or create the initialization lock (lazy to avoid event loop issues)."""
        if self._init_lock is None:
            self._init_lock = asyncio.Lock()
        return self._init_lock

    async def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        async with self._get_lock():
            if self._initialized:
                return
            if self._db_path == _MEMORY:
                self._persistent_conn = await aiosqlite.connect(_MEMORY)
                await self._persistent_conn.executescript(self._schema)
            else:
                async with aiosqlite.connect(self._db_path) as db:
                    await db.execute("PRAGMA journal_mode=WAL")
                    await db.executescript(self._schema)
            self._initialized = True

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Context manager for async database connections.

        File databases get a fresh connection that is closed on exit.
        """
        await self._ensure_initialized()
        if self._db_path == _MEMORY:
            if self._persistent_conn is None:
                raise RuntimeError("Memory database connection not initialized")
            yield self._persistent_conn
            return
        db = await aiosqlite.connect(self._db_path)
        try:
            yield db
        finally:
            await db.close()

    async def close(self) -> None:
        """Close persistent connection (for :memory: databases)."""
        if self._persistent_conn is not None:
            await self._persistent_conn.close()
            self._persistent_conn = None
            self._initialized = False


class SyncConnectionManager:
    """Manages sync (sqlite3) database connections.

    Scans run through this manager. For :memory: databases a single
    persistent connection is shared across threads, so it is opened with
    ``check_same_thread=False`` and handed out to one holder at a time.
    """

    def __init__(self, db_path: str, schema: str) -> None:
        self._db_path = db_path
        self._schema = schema
        self._initialized = False
        self._lock = threading.Lock()
        # reentrant so a holder may nest connection() calls on its own thread
        self._memory_lock = threading.RLock()
        self._persistent_conn: sqlite3.Connection | None = None

    def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            if self._db_path == _MEMORY:
                self._persistent_conn = sqlite3.connect(_MEMORY, check_same_thread=False)
                self._persistent_conn.executescript(self._schema)
            else:
                conn = sqlite3.connect(self._db_path)
                try:
                    conn.execute("PRAGMA journal_mode=WAL")
                    conn.executescript(self._schema)
                    conn.commit()
                finally:
                    conn.close()
            self._initialized = True

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for sync database connections.

        File databases get a fresh connection that is closed on exit. The
        shared :memory: connection is held exclusively until the block exits.
        """
        self._ensure_initialized()
        if self._db_path == _MEMORY:
            with self._memory_lock:
                if self._persistent_conn is None:
                    raise RuntimeError("Sync memory database connection not initialized")
                yield self._persistent_conn
            return
        conn = sqlite3.connect(self._db_path)
        try:
            yield conn
        finally:
            conn.close()

    def close(self) -> None:
        """Close persistent connection (for :memory: databases)."""
        with self._memory_lock:
            if self._persistent_conn is not None:
                self._persistent_conn.close()
                self._persistent_conn = None
                self._initialized = False


class SQLiteStorageBase:
    """Base class for SQLite storage adapters.

    Delegates connection lifecycle to AsyncConnectionManager and
    SyncConnectionManager.

    IMPORTANT - :memory: Database Isolation:
    When using :memory: databases, the sync (sqlite3) and async (aiosqlite)
    connections do NOT share data, since each manager keeps its own
    in-memory database. Rows written with the async methods are then
    invisible to scans. Use a file path when mixing both.
    """

    def __init__(self, db_path: str, schema: str) -> None:
        self._db_path = db_path
        self._async_manager = AsyncConnectionManager(db_path, schema)
        self._sync_manager = SyncConnectionManager(db_path, schema)

    async def close(self) -> None:
        """Close persistent connections (for :memory: databases)."""
        await self._async_manager.close()
        self._sync_manager.close()

    @asynccontextmanager
    async def async_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Context manager for async database connections."""
        async with self._async_manager.connection() as conn:
            yield conn

    @contextmanager
    def sync_connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for sync database connections."""
        with self._sync_manager.connection() as conn:
            yield conn
