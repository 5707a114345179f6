"""SQLite range-scan store for agent stats."""

import heapq
import itertools
import logging
import sqlite3
from collections.abc import Iterator
from typing import TypeVar

from agentstat.adapters.storage.sqlite_base import SQLiteStorageBase
from agentstat.core.distributor import RowKeyDistributorByHashPrefix
from agentstat.core.encoding.row import to_row
from agentstat.core.errors import ScanError
from agentstat.core.models import AgentStat, Tier
from agentstat.core.ports import (
    DEFAULT_COLUMN_FAMILY,
    ResultsExtractor,
    RowMapper,
    ScanRequest,
    StatRow,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)

_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS {table} (
    row_key BLOB NOT NULL,
    family TEXT NOT NULL,
    qualifier TEXT NOT NULL,
    value BLOB NOT NULL,
    PRIMARY KEY (row_key, family, qualifier)
) WITHOUT ROWID;
"""

_STATS_SCHEMA = "".join(_TABLE_SCHEMA.format(table=tier.value) for tier in Tier)

# BLOB comparison is memcmp, i.e. byte-lexicographic order.
_SCAN_QUERY = """
SELECT row_key, qualifier, value FROM {table}
WHERE family = ? AND row_key >= ? AND row_key < ?
ORDER BY row_key ASC, qualifier ASC
"""

_UPSERT_CELL = """
INSERT OR REPLACE INTO {table} (row_key, family, qualifier, value) VALUES (?, ?, ?, ?)
"""

_COUNT_ROWS = "SELECT COUNT(DISTINCT row_key) FROM {table}"

_CLEAR_TABLE = "DELETE FROM {table}"


class SQLiteAgentStatStore(SQLiteStorageBase):
    """SQLite implementation of RangeScannerPort.

    Each tier is a table of (row_key, family, qualifier, value) cells.
    Scans run synchronously on the standard sqlite3 module and fetch
    ``request.caching`` cells per round trip. Writes are offered both
    synchronously and asynchronously (aiosqlite) for ingestion code.

    sqlite3 errors raised while scanning surface as ScanError.

    Args:
        db_path: Database file path, or ":memory:".
        distributor: Optional key distribution; scans fan out over all of
            its buckets.
    """

    def __init__(
        self,
        db_path: str,
        distributor: RowKeyDistributorByHashPrefix | None = None,
    ) -> None:
        super().__init__(db_path, _STATS_SCHEMA)
        self._distributor = distributor

    def _stored_key(self, key: bytes) -> bytes:
        if self._distributor is None:
            return key
        return self._distributor.get_distributed_key(key)

    def _partition_ranges(self, request: ScanRequest) -> list[tuple[bytes, bytes]]:
        bounds = request.bounds
        if self._distributor is None:
            return [(bounds.start, bounds.stop)]
        return list(
            zip(
                self._distributor.get_all_distributed_keys(bounds.start),
                self._distributor.get_all_distributed_keys(bounds.stop),
                strict=True,
            )
        )

    def _scan_partition(
        self, conn: sqlite3.Connection, request: ScanRequest, start: bytes, stop: bytes
    ) -> Iterator[StatRow]:
        cursor = conn.execute(
            _SCAN_QUERY.format(table=request.tier.value),
            (request.column_family, start, stop),
        )
        try:
            for key, cells in itertools.groupby(
                _fetch_cells(cursor, request.caching), key=lambda cell: cell[0]
            ):
                if self._distributor is not None:
                    key = self._distributor.get_original_key(key)
                yield StatRow(
                    key=bytes(key),
                    cells=tuple((qualifier, bytes(value)) for _, qualifier, value in cells),
                )
        finally:
            cursor.close()

    def find(self, request: ScanRequest, mapper: RowMapper) -> list[list[AgentStat]]:
        """Scan every partition and decode its rows."""
        logger.debug("scan %s on %s: %s", request.scan_id, request.tier.value, request.bounds)
        try:
            with self.sync_connection() as conn:
                return [
                    [
                        stat
                        for row in self._scan_partition(conn, request, start, stop)
                        for stat in mapper(row)
                    ]
                    for start, stop in self._partition_ranges(request)
                ]
        except sqlite3.Error as e:
            raise ScanError(f"scan {request.scan_id} on {request.tier.value} failed") from e

    def extract(self, request: ScanRequest, extractor: ResultsExtractor[T]) -> T:
        """Merge all partitions by row key and hand the rows to the extractor."""
        logger.debug("scan %s on %s: %s", request.scan_id, request.tier.value, request.bounds)
        try:
            with self.sync_connection() as conn:
                partitions = [
                    self._scan_partition(conn, request, start, stop)
                    for start, stop in self._partition_ranges(request)
                ]
                rows = heapq.merge(*partitions, key=lambda row: row.key)
                try:
                    return extractor(rows)
                finally:
                    for partition in partitions:
                        partition.close()
        except sqlite3.Error as e:
            raise ScanError(f"scan {request.scan_id} on {request.tier.value} failed") from e

    # --- Write helpers used to populate the store ---

    def _cell_params(
        self, stat: AgentStat, column_family: str
    ) -> list[tuple[bytes, str, str, bytes]]:
        row = to_row(stat)
        key = self._stored_key(row.key)
        return [(key, column_family, qualifier, value) for qualifier, value in row.cells]

    async def write(
        self, tier: Tier, stat: AgentStat, column_family: str = DEFAULT_COLUMN_FAMILY
    ) -> None:
        """Write a sample to a tier."""
        async with self.async_connection() as db:
            await db.executemany(
                _UPSERT_CELL.format(table=tier.value), self._cell_params(stat, column_family)
            )
            await db.commit()

    def write_sync(
        self, tier: Tier, stat: AgentStat, column_family: str = DEFAULT_COLUMN_FAMILY
    ) -> None:
        """Synchronous write for non-async contexts (testing, scripts)."""
        with self.sync_connection() as conn:
            conn.executemany(
                _UPSERT_CELL.format(table=tier.value), self._cell_params(stat, column_family)
            )
            conn.commit()

    async def count(self, tier: Tier) -> int:
        """Return the number of rows stored in a tier."""
        async with self.async_connection() as db:
            async with db.execute(_COUNT_ROWS.format(table=tier.value)) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0

    async def clear(self) -> None:
        """Clear all rows from every tier."""
        async with self.async_connection() as db:
            for tier in Tier:
                await db.execute(_CLEAR_TABLE.format(table=tier.value))
            await db.commit()

    def clear_sync(self) -> None:
        """Synchronous clear for non-async contexts (testing, scripts)."""
        with self.sync_connection() as conn:
            for tier in Tier:
                conn.execute(_CLEAR_TABLE.format(table=tier.value))
            conn.commit()


def _fetch_cells(
    cursor: sqlite3.Cursor, batch_size: int
) -> Iterator[tuple[bytes, str, bytes]]:
    while True:
        batch = cursor.fetchmany(batch_size)
        if not batch:
            return
        yield from batch
