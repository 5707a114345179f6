"""In-memory range-scan store for agent stats."""

import bisect
import heapq
from collections.abc import Iterator
from typing import TypeVar

from agentstat.core.distributor import RowKeyDistributorByHashPrefix
from agentstat.core.encoding.row import to_row
from agentstat.core.models import AgentStat, Tier
from agentstat.core.ports import (
    DEFAULT_COLUMN_FAMILY,
    ResultsExtractor,
    RowMapper,
    ScanRequest,
    StatRow,
)

T = TypeVar("T")

# family -> qualifier -> value
_Families = dict[str, dict[str, bytes]]


class InMemoryAgentStatStore:
    """In-memory implementation of RangeScannerPort.

    Keeps each tier as a sorted list of row keys. Suitable for testing and
    for small deployments where persistence is not required.

    Args:
        distributor: Optional key distribution. When set, rows are spread
            over its buckets and every scan fans out over all of them.

    Attributes:
        scan_count: Number of scans executed.
        rows_delivered: Number of rows handed to results extractors.
    """

    def __init__(self, distributor: RowKeyDistributorByHashPrefix | None = None) -> None:
        self._distributor = distributor
        self._keys: dict[Tier, list[bytes]] = {tier: [] for tier in Tier}
        self._rows: dict[Tier, dict[bytes, _Families]] = {tier: {} for tier in Tier}
        self.scan_count = 0
        self.rows_delivered = 0

    def put(
        self, tier: Tier, stat: AgentStat, column_family: str = DEFAULT_COLUMN_FAMILY
    ) -> None:
        """Store a sample in a tier."""
        self.put_row(tier, to_row(stat), column_family)

    def put_row(
        self, tier: Tier, row: StatRow, column_family: str = DEFAULT_COLUMN_FAMILY
    ) -> None:
        """Store the cells of a row, merging with cells already stored."""
        key = row.key
        if self._distributor is not None:
            key = self._distributor.get_distributed_key(key)
        families = self._rows[tier].get(key)
        if families is None:
            families = {}
            self._rows[tier][key] = families
            bisect.insort(self._keys[tier], key)
        families.setdefault(column_family, {}).update(row.cells)

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
        self, request: ScanRequest, start: bytes, stop: bytes
    ) -> Iterator[StatRow]:
        keys = self._keys[request.tier]
        rows = self._rows[request.tier]
        # rows without the requested family are skipped, not returned empty
        for key in keys[bisect.bisect_left(keys, start) : bisect.bisect_left(keys, stop)]:
            cells = rows[key].get(request.column_family)
            if not cells:
                continue
            if self._distributor is not None:
                key = self._distributor.get_original_key(key)
            yield StatRow(key=key, cells=tuple(sorted(cells.items())))

    def find(self, request: ScanRequest, mapper: RowMapper) -> list[list[AgentStat]]:
        """Scan every partition and decode its rows."""
        self.scan_count += 1
        return [
            [stat for row in self._scan_partition(request, start, stop) for stat in mapper(row)]
            for start, stop in self._partition_ranges(request)
        ]

    def extract(self, request: ScanRequest, extractor: ResultsExtractor[T]) -> T:
        """Merge all partitions by row key and hand the rows to the extractor."""
        self.scan_count += 1
        partitions = [
            self._scan_partition(request, start, stop)
            for start, stop in self._partition_ranges(request)
        ]
        return extractor(self._count_delivered(heapq.merge(*partitions, key=_row_key)))

    def _count_delivered(self, rows: Iterator[StatRow]) -> Iterator[StatRow]:
        for row in rows:
            self.rows_delivered += 1
            yield row

    def clear(self) -> None:
        """Remove all rows from every tier."""
        for tier in Tier:
            self._keys[tier].clear()
            self._rows[tier].clear()


def _row_key(row: StatRow) -> bytes:
    return row.key
