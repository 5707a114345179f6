"""Read path for agent stats over the raw and aggregated tiers."""

import logging
from collections.abc import Sequence

from agentstat.config import AgentStatDaoConfig
from agentstat.core.aggregation import aggregate
from agentstat.core.backfill import Aggregator, fill_gaps
from agentstat.core.encoding.row import AgentStatMapper
from agentstat.core.errors import InvalidArgumentError
from agentstat.core.gaps import detect_gaps
from agentstat.core.merge import flatten, flatten_sorted
from agentstat.core.models import AgentStat, Tier, TimeRange
from agentstat.core.ports import RangeScannerPort, RowMapper, ScanRequest
from agentstat.core.probe import PROBE_CACHE_SIZE, FirstRowExistsExtractor
from agentstat.core.rowkey import scan_bounds

logger = logging.getLogger(__name__)


def _require(agent_id: str | None, time_range: TimeRange | None) -> None:
    if agent_id is None:
        raise InvalidArgumentError("agentId must not be None")
    if time_range is None:
        raise InvalidArgumentError("range must not be None")


class AgentStatDao:
    """Retrieves agent stats from a range-scan store.

    Every public method validates its arguments before touching the store
    and raises InvalidArgumentError without issuing a scan. Scan failures
    propagate unmodified.

    Example:
        ```python
        from agentstat import AgentStatDao, InMemoryAgentStatStore, TimeRange

        dao = AgentStatDao(InMemoryAgentStatStore())
        stats = dao.get_aggregated_agent_stat_list("agent-1", TimeRange(0, 60_000))
        ```
    """

    def __init__(
        self,
        scanner: RangeScannerPort,
        config: AgentStatDaoConfig | None = None,
        mapper: RowMapper | None = None,
        aggregator: Aggregator = aggregate,
    ) -> None:
        """Initialize the DAO with a store and its collaborators.

        Args:
            scanner: Store adapter implementing RangeScannerPort.
            config: Read path settings. Defaults to AgentStatDaoConfig().
            mapper: Row decoder. Defaults to AgentStatMapper().
            aggregator: Reduction routine used for backfilling gaps.
        """
        self._scanner = scanner
        self._config = config or AgentStatDaoConfig()
        self._mapper = mapper or AgentStatMapper()
        self._aggregator = aggregator

    @property
    def config(self) -> AgentStatDaoConfig:
        return self._config

    def _create_scan(
        self,
        tier: Tier,
        agent_id: str,
        time_range: TimeRange,
        caching: int | None = None,
    ) -> ScanRequest:
        request = ScanRequest(
            tier=tier,
            bounds=scan_bounds(agent_id, time_range),
            column_family=self._config.column_family,
            caching=caching if caching is not None else self._config.scan_cache_size,
        )
        logger.debug("create scan: %s", request)
        return request

    def _fetch_raw(self, agent_id: str, time_range: TimeRange) -> list[AgentStat]:
        request = self._create_scan(Tier.RAW, agent_id, time_range)
        return flatten(self._scanner.find(request, self._mapper))

    def get_agent_stat_list(
        self, agent_id: str | None, time_range: TimeRange | None
    ) -> list[AgentStat]:
        """Return raw samples of an agent within ``(from_, to]``.

        Samples come in store-native order, partition by partition; the
        result is not sorted by time.
        """
        _require(agent_id, time_range)
        assert agent_id is not None and time_range is not None
        logger.debug("scan agent stat: agentId=%s, %s", agent_id, time_range)
        return self._fetch_raw(agent_id, time_range)

    def get_aggregated_agent_stat_list(
        self, agent_id: str | None, time_range: TimeRange | None
    ) -> list[AgentStat]:
        """Return aggregated samples of an agent, with gaps backfilled.

        Aggregated samples are fetched and sorted by time. Each part of the
        window the aggregated tier does not cover is re-aggregated from raw
        samples. If a raw fetch fails the whole call fails.

        With ``sort_backfilled`` the combined result is sorted by time;
        otherwise backfilled samples follow the fetched ones in gap order.
        """
        _require(agent_id, time_range)
        assert agent_id is not None and time_range is not None
        logger.debug("scan aggregated agent stat: agentId=%s, %s", agent_id, time_range)

        request = self._create_scan(Tier.AGGREGATED, agent_id, time_range)
        merged = flatten_sorted(self._scanner.find(request, self._mapper))

        interval = self._config.aggregation_interval
        gaps = detect_gaps(merged, time_range, interval)
        for gap in gaps:
            logger.debug(
                "aggregated tier has no data for %s of %s", gap.pretty(), agent_id
            )

        backfilled = fill_gaps(
            gaps,
            lambda gap: self._fetch_raw(agent_id, gap),
            self._aggregator,
            interval,
        )
        return _combine(merged, backfilled, self._config.sort_backfilled)

    def agent_stat_exists(
        self, agent_id: str | None, time_range: TimeRange | None
    ) -> bool:
        """Return whether the raw tier has data for an agent in a window.

        Only the most recent row in range is inspected: a non-empty first
        row means True, an empty first row or no rows means False.
        """
        _require(agent_id, time_range)
        assert agent_id is not None and time_range is not None
        logger.debug(
            "checking for stat data existence: agentId=%s, %s", agent_id, time_range
        )
        request = self._create_scan(
            Tier.RAW, agent_id, time_range, caching=PROBE_CACHE_SIZE
        )
        return self._scanner.extract(request, FirstRowExistsExtractor(self._mapper))


def _combine(
    fetched: list[AgentStat], backfilled: Sequence[AgentStat], sort: bool
) -> list[AgentStat]:
    combined = fetched + list(backfilled)
    if sort and backfilled:
        combined.sort(key=lambda stat: stat.timestamp)
    return combined
