"""Query parameter handling shared by framework adapters."""

import time

from agentstat.core.models import TimeRange

# Window used when the caller omits "from".
DEFAULT_WINDOW_MS = 5 * 60 * 1000


def _now_millis() -> int:
    return int(time.time() * 1000)


def parse_time_range(
    from_: int | None,
    to: int | None,
    now_millis: int | None = None,
) -> TimeRange:
    """Build the requested window from optional "from" and "to" parameters.

    Args:
        from_: Window start in epoch milliseconds. Defaults to
            DEFAULT_WINDOW_MS before the end.
        to: Window end in epoch milliseconds. Defaults to now.
        now_millis: Current time, for tests.

    Returns:
        The window as a TimeRange.

    Raises:
        InvalidArgumentError: If the bounds are negative or inverted.
    """
    if to is None:
        to = now_millis if now_millis is not None else _now_millis()
    if from_ is None:
        from_ = max(0, to - DEFAULT_WINDOW_MS)
    return TimeRange(from_, to)
