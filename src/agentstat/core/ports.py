"""Port interfaces for range-scan store adapters.

These protocols define the contract the read path uses to scan a tier of
the agent stat store. The core depends only on these interfaces, not on
concrete implementations.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Protocol, TypeVar, runtime_checkable

from agentstat.core.models import AgentStat, Tier
from agentstat.core.rowkey import ScanBounds

T = TypeVar("T")

DEFAULT_COLUMN_FAMILY = "S"
DEFAULT_SCAN_CACHE_SIZE = 256
DEFAULT_SCAN_ID = "AgentStatScan"


@dataclass(frozen=True)
class ScanRequest:
    """A bounded scan against one tier.

    Attributes:
        tier: Tier to scan.
        bounds: Key range, start inclusive and stop exclusive.
        column_family: Only cells of this family are returned.
        caching: Rows buffered per round trip. A performance hint only.
        scan_id: Identifier for store-side diagnostics.
    """

    tier: Tier
    bounds: ScanBounds
    column_family: str = DEFAULT_COLUMN_FAMILY
    caching: int = DEFAULT_SCAN_CACHE_SIZE
    scan_id: str | None = DEFAULT_SCAN_ID


@dataclass(frozen=True)
class StatRow:
    """One physical row returned by a scan.

    Attributes:
        key: Row key as seen by the caller (distribution prefix removed).
        cells: (qualifier, value) pairs of the scanned column family.
    """

    key: bytes
    cells: tuple[tuple[str, bytes], ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.cells


# Decodes one physical row; a row may hold several samples.
RowMapper = Callable[[StatRow], list[AgentStat]]

# Consumes a lazy row iterator and reduces it to a single result.
ResultsExtractor = Callable[[Iterator[StatRow]], T]


@runtime_checkable
class RangeScannerPort(Protocol):
    """Port for range scans over the agent stat store.

    Adapters may spread rows over any number of partitions. Callers must
    not assume a partition count or any order beyond the store-native
    (ascending key) order within a partition.
    Examples: InMemoryAgentStatStore, SQLiteAgentStatStore.
    """

    def find(self, request: ScanRequest, mapper: RowMapper) -> list[list[AgentStat]]:
        """Scan and decode every row in range.

        Args:
            request: Scan to execute.
            mapper: Decoder applied to each row.

        Returns:
            One list per partition, each in store-native order.
        """
        ...

    def extract(self, request: ScanRequest, extractor: ResultsExtractor[T]) -> T:
        """Scan and hand the rows to an extractor.

        The extractor receives a single lazy iterator over all partitions
        and pulls only the rows it needs.

        Returns:
            Whatever the extractor returns.
        """
        ...
