"""Core domain models for agent stat retrieval."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from agentstat.core.errors import InvalidArgumentError

# Spacing of samples in the aggregated tier, in milliseconds.
AGGR_SAMPLE_INTERVAL = 5000


class Tier(Enum):
    """Storage tier of the agent stat time series.

    The value is the table name the store adapters keep the tier under.
    """

    RAW = "agent_stat"
    AGGREGATED = "agent_stat_aggr"


@dataclass(frozen=True)
class AgentStat:
    """A single performance sample of an agent.

    Attributes:
        agent_id: Identifier of the monitored agent.
        timestamp: Epoch timestamp in milliseconds.
        collect_interval: Sampling period of this record in milliseconds.
        values: Metric payload (e.g., cpu_load, heap_used).
    """

    agent_id: str
    timestamp: int
    collect_interval: int
    values: dict[str, float] = field(default_factory=dict)


def _format_millis(millis: int) -> str:
    return datetime.fromtimestamp(millis / 1000, tz=UTC).isoformat(
        timespec="milliseconds"
    )


@dataclass(frozen=True)
class TimeRange:
    """A time window in epoch milliseconds.

    Used both as a query parameter and as the representation of a gap
    detected in the aggregated tier.

    Attributes:
        from_: Window start in epoch milliseconds.
        to: Window end in epoch milliseconds, never before from_.
    """

    from_: int
    to: int

    def __post_init__(self) -> None:
        if self.from_ < 0 or self.to < 0:
            raise InvalidArgumentError(
                f"range bounds must not be negative: from={self.from_}, to={self.to}"
            )
        if self.from_ > self.to:
            raise InvalidArgumentError(
                f"range from must not be after to: from={self.from_}, to={self.to}"
            )

    @property
    def span(self) -> int:
        """Length of the window in milliseconds."""
        return self.to - self.from_

    def pretty(self) -> str:
        """Render the window with ISO-8601 UTC timestamps for log messages."""
        return f"{_format_millis(self.from_)} ~ {_format_millis(self.to)}"
