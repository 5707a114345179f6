"""Backfilling of aggregated-tier gaps from the raw tier."""

import logging
from collections.abc import Callable, Sequence

from agentstat.core.models import AgentStat, TimeRange

logger = logging.getLogger(__name__)

# Fetches raw samples of a window, in any order.
RawFetcher = Callable[[TimeRange], list[AgentStat]]

# Reduces time-ordered samples into summaries of the given interval.
Aggregator = Callable[[Sequence[AgentStat], int], list[AgentStat]]


def fill_gaps(
    gaps: Sequence[TimeRange],
    fetch_raw: RawFetcher,
    aggregator: Aggregator,
    interval: int,
) -> list[AgentStat]:
    """Synthesize aggregated samples for each gap from raw samples.

    Gaps are processed in order. A gap without raw samples is skipped;
    missing data is not an error. Any exception from ``fetch_raw`` or the
    aggregator propagates and no partial result is returned.

    Args:
        gaps: Gaps in detection order.
        fetch_raw: Raw-tier fetch for one window.
        aggregator: Reduction routine; requires time-ordered input.
        interval: Aggregation interval in milliseconds.

    Returns:
        Backfilled samples, gap by gap in detection order.
    """
    backfilled: list[AgentStat] = []
    for gap in gaps:
        raw = sorted(fetch_raw(gap), key=lambda stat: stat.timestamp)
        if not raw:
            logger.debug("raw tier has no data for %s either", gap.pretty())
            continue
        backfilled.extend(aggregator(raw, interval))
    return backfilled
