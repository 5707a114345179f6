"""BDD step definitions for gap backfilling."""

from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when
from tests.helpers import stat, timestamps

from agentstat.adapters.storage.in_memory import InMemoryAgentStatStore
from agentstat.config import AgentStatDaoConfig
from agentstat.core.models import AgentStat, Tier, TimeRange
from agentstat.dao import AgentStatDao


@dataclass
class GapFillingContext:
    """State shared between the steps of a scenario."""

    store: InMemoryAgentStatStore = field(default_factory=InMemoryAgentStatStore)
    config: AgentStatDaoConfig = field(default_factory=AgentStatDaoConfig)
    result: list[AgentStat] = field(default_factory=list)


def _millis(csv: str) -> list[int]:
    return [int(part) for part in csv.split(",") if part.strip()]


@pytest.fixture
def ctx() -> GapFillingContext:
    """Fresh scenario context for each test."""
    return GapFillingContext()


@given("an in-memory agent stat store")
def given_store(ctx: GapFillingContext) -> None:
    ctx.store.clear()


@given("backfilled samples are not re-sorted")
def given_unsorted_append(ctx: GapFillingContext) -> None:
    ctx.config = AgentStatDaoConfig(sort_backfilled=False)


@given(parsers.parse('aggregated samples at "{times}"'))
def given_aggregated_samples(ctx: GapFillingContext, times: str) -> None:
    for ts in _millis(times):
        ctx.store.put(Tier.AGGREGATED, stat(ts, cpu=1.0))


@given(parsers.parse('raw samples at "{times}"'))
def given_raw_samples(ctx: GapFillingContext, times: str) -> None:
    for ts in _millis(times):
        ctx.store.put(Tier.RAW, stat(ts, collect_interval=1000, cpu=2.0))


@when(parsers.parse("aggregated stats are requested from {start:d} to {end:d}"))
def when_aggregated_requested(ctx: GapFillingContext, start: int, end: int) -> None:
    dao = AgentStatDao(ctx.store, ctx.config)
    ctx.result = dao.get_aggregated_agent_stat_list("agent-1", TimeRange(start, end))


@then(parsers.parse('the result timestamps are "{times}"'))
def then_result_timestamps(ctx: GapFillingContext, times: str) -> None:
    assert timestamps(ctx.result) == _millis(times)


@then(parsers.parse("the store served {count:d} scans"))
def then_scan_count(ctx: GapFillingContext, count: int) -> None:
    assert ctx.store.scan_count == count
