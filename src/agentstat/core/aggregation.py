"""Reduction of raw samples into fixed-interval summaries."""

from collections.abc import Sequence

from agentstat.core.errors import InvalidArgumentError
from agentstat.core.models import AgentStat


def window_end(timestamp: int, interval: int) -> int:
    """Return the end of the interval window ``(end - interval, end]`` holding timestamp."""
    return -(-timestamp // interval) * interval


def _summarize(window: list[AgentStat], end: int, interval: int) -> AgentStat:
    sums: dict[str, float] = {}
    counts: dict[str, int] = {}
    for stat in window:
        for key, value in stat.values.items():
            sums[key] = sums.get(key, 0.0) + value
            counts[key] = counts.get(key, 0) + 1
    return AgentStat(
        agent_id=window[0].agent_id,
        timestamp=end,
        collect_interval=interval,
        values={key: sums[key] / counts[key] for key in sums},
    )


def aggregate(stats: Sequence[AgentStat], interval: int) -> list[AgentStat]:
    """Reduce time-ordered raw samples to one summary per interval window.

    A sample at ``t`` falls into the window ``(T - interval, T]`` where ``T``
    is ``t`` rounded up to a multiple of the interval, the same span an
    aggregated sample stamped ``T`` covers. Each payload key is averaged
    over the samples of the window that carry it.

    Args:
        stats: Raw samples, ascending by timestamp.
        interval: Window length in milliseconds.

    Returns:
        Summaries ascending by timestamp, one per non-empty window.

    Raises:
        InvalidArgumentError: If the interval is not positive or the samples
            are not in time order.
    """
    if interval <= 0:
        raise InvalidArgumentError(f"interval must be positive, got {interval}")

    summaries: list[AgentStat] = []
    window: list[AgentStat] = []
    current_end: int | None = None
    previous: int | None = None

    for stat in stats:
        if previous is not None and stat.timestamp < previous:
            raise InvalidArgumentError("stats must be sorted by timestamp")
        previous = stat.timestamp

        end = window_end(stat.timestamp, interval)
        if current_end is not None and end != current_end:
            summaries.append(_summarize(window, current_end, interval))
            window = []
        current_end = end
        window.append(stat)

    if window and current_end is not None:
        summaries.append(_summarize(window, current_end, interval))

    return summaries
