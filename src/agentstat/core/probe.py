"""Existence probe over a scan.

The probe looks at the first scanned row only. It is a cheap, approximate
check for the most recent data in a range, not an exhaustive search.
"""

import logging
from collections.abc import Iterator

from agentstat.core.ports import RowMapper, StatRow

logger = logging.getLogger(__name__)

# Scan caching used by the probe: one row per round trip.
PROBE_CACHE_SIZE = 1


class FirstRowExistsExtractor:
    """Results extractor answering whether the first scanned row has data.

    Args:
        mapper: Optional decoder, used only to log the first row at DEBUG.
    """

    def __init__(self, mapper: RowMapper | None = None) -> None:
        self._mapper = mapper

    def __call__(self, rows: Iterator[StatRow]) -> bool:
        first = next(rows, None)
        if first is None or first.is_empty:
            return False
        if self._mapper is not None and logger.isEnabledFor(logging.DEBUG):
            logger.debug("stat data exists, most recent data: %s", self._mapper(first))
        return True
