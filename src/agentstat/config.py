"""Configuration of the agent stat read path.

Immutable after construction; invalid values fail fast.
"""

import os
from dataclasses import dataclass

from agentstat.core.errors import InvalidArgumentError
from agentstat.core.models import AGGR_SAMPLE_INTERVAL
from agentstat.core.ports import DEFAULT_COLUMN_FAMILY, DEFAULT_SCAN_CACHE_SIZE

_ENV_PREFIX = "AGENTSTAT_"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise InvalidArgumentError(f"{name} must be a boolean, got {raw!r}")


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise InvalidArgumentError(f"{name} must be an integer, got {raw!r}") from e


@dataclass(frozen=True)
class AgentStatDaoConfig:
    """Settings of AgentStatDao.

    Attributes:
        scan_cache_size: Rows buffered per round trip for list scans.
        aggregation_interval: Spacing of the aggregated tier in milliseconds.
        sort_backfilled: Re-sort the aggregated result after backfilling.
            When False, backfilled samples are appended after the fetched
            ones in gap order.
        column_family: Column family holding the samples.
    """

    scan_cache_size: int = DEFAULT_SCAN_CACHE_SIZE
    aggregation_interval: int = AGGR_SAMPLE_INTERVAL
    sort_backfilled: bool = True
    column_family: str = DEFAULT_COLUMN_FAMILY

    def __post_init__(self) -> None:
        if self.scan_cache_size < 1:
            raise InvalidArgumentError(
                f"scan_cache_size must be positive, got {self.scan_cache_size}"
            )
        if self.aggregation_interval < 1:
            raise InvalidArgumentError(
                f"aggregation_interval must be positive, got {self.aggregation_interval}"
            )
        if not self.column_family:
            raise InvalidArgumentError("column_family must not be empty")

    @classmethod
    def from_env(cls) -> "AgentStatDaoConfig":
        """Load configuration from environment variables.

        Variables are prefixed with AGENTSTAT_, e.g.
        AGENTSTAT_SCAN_CACHE_SIZE, AGENTSTAT_AGGREGATION_INTERVAL,
        AGENTSTAT_SORT_BACKFILLED, AGENTSTAT_COLUMN_FAMILY. Unset variables
        keep their defaults.
        """
        kwargs: dict[str, int | bool | str] = {}
        raw = os.getenv(f"{_ENV_PREFIX}SCAN_CACHE_SIZE")
        if raw is not None:
            kwargs["scan_cache_size"] = _parse_int("scan_cache_size", raw)
        raw = os.getenv(f"{_ENV_PREFIX}AGGREGATION_INTERVAL")
        if raw is not None:
            kwargs["aggregation_interval"] = _parse_int("aggregation_interval", raw)
        raw = os.getenv(f"{_ENV_PREFIX}SORT_BACKFILLED")
        if raw is not None:
            kwargs["sort_backfilled"] = _parse_bool("sort_backfilled", raw)
        raw = os.getenv(f"{_ENV_PREFIX}COLUMN_FAMILY")
        if raw is not None:
            kwargs["column_family"] = raw
        return cls(**kwargs)  # type: ignore[arg-type]
