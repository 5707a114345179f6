"""Test doubles and builders shared by the test suites."""

from collections.abc import Callable, Iterator
from typing import Any

from agentstat.core.models import AgentStat, Tier
from agentstat.core.ports import ResultsExtractor, RowMapper, ScanRequest, StatRow


def stat(
    timestamp: int,
    collect_interval: int = 5000,
    agent_id: str = "agent-1",
    **values: float,
) -> AgentStat:
    """Build an AgentStat with a compact call."""
    return AgentStat(
        agent_id=agent_id,
        timestamp=timestamp,
        collect_interval=collect_interval,
        values=dict(values),
    )


def timestamps(stats: list[AgentStat]) -> list[int]:
    return [s.timestamp for s in stats]


class FakeScanner:
    """Scanner returning canned data and recording every request.

    Args:
        partitions: Partition lists returned by find(), per tier.
        rows: Rows fed to extractors by extract().
        fail_on: Tier whose scans raise ``error``.
        error: Exception raised for ``fail_on`` scans.
    """

    def __init__(
        self,
        partitions: dict[Tier, list[list[AgentStat]]] | None = None,
        rows: list[StatRow] | None = None,
        fail_on: Tier | None = None,
        error: Exception | None = None,
    ) -> None:
        self.partitions = partitions or {}
        self.rows = rows or []
        self.fail_on = fail_on
        self.error = error
        self.requests: list[ScanRequest] = []
        self.rows_materialized = 0

    def _check(self, request: ScanRequest) -> None:
        self.requests.append(request)
        if self.fail_on is request.tier and self.error is not None:
            raise self.error

    def find(self, request: ScanRequest, mapper: RowMapper) -> list[list[AgentStat]]:
        self._check(request)
        return [list(p) for p in self.partitions.get(request.tier, [])]

    def extract(self, request: ScanRequest, extractor: ResultsExtractor[Any]) -> Any:
        self._check(request)
        return extractor(self._materialize())

    def _materialize(self) -> Iterator[StatRow]:
        for row in self.rows:
            self.rows_materialized += 1
            yield row


class RecordingScanner:
    """Wraps a real scanner, recording requests and optionally failing.

    Args:
        inner: Scanner the calls are delegated to.
        fail_when: Predicate on the request; matching scans raise ``error``.
        error: Exception raised for matching scans.
    """

    def __init__(
        self,
        inner: Any,
        fail_when: Callable[[ScanRequest], bool] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.inner = inner
        self.fail_when = fail_when
        self.error = error
        self.requests: list[ScanRequest] = []

    def _check(self, request: ScanRequest) -> None:
        self.requests.append(request)
        if self.fail_when is not None and self.fail_when(request):
            assert self.error is not None
            raise self.error

    def find(self, request: ScanRequest, mapper: RowMapper) -> list[list[AgentStat]]:
        self._check(request)
        return self.inner.find(request, mapper)

    def extract(self, request: ScanRequest, extractor: ResultsExtractor[Any]) -> Any:
        self._check(request)
        return self.inner.extract(request, extractor)
