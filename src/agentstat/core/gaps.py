"""Gap detection over the aggregated tier."""

from collections.abc import Sequence

from agentstat.core.models import AGGR_SAMPLE_INTERVAL, AgentStat, TimeRange


def detect_gaps(
    stats: Sequence[AgentStat],
    time_range: TimeRange,
    interval: int = AGGR_SAMPLE_INTERVAL,
) -> list[TimeRange]:
    """Find the parts of a window the aggregated samples do not cover.

    Two consecutive samples further apart than two intervals mark a gap;
    anything closer is treated as jitter. A gap ends one collect interval
    before the sample that closes it, since that sample already covers its
    own interval; if that interval reaches back to the previous sample no
    gap is left. A trailing gap runs up to the end of the window.

    Args:
        stats: Aggregated samples, ascending by timestamp.
        time_range: The originally requested window.
        interval: Sampling interval of the aggregated tier in milliseconds.

    Returns:
        Gaps in time-ascending order.
    """
    tolerance = interval * 2
    gaps: list[TimeRange] = []
    last = time_range.from_

    for stat in stats:
        if last + tolerance < stat.timestamp:
            end = stat.timestamp - stat.collect_interval
            # a gap selects (last, end]; nothing is left when end <= last
            if end > last:
                gaps.append(TimeRange(last, end))
        last = stat.timestamp

    if last + tolerance < time_range.to:
        gaps.append(TimeRange(last, time_range.to))

    return gaps
