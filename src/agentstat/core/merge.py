"""Merging of per-partition scan results."""

from collections.abc import Iterable

from agentstat.core.models import AgentStat


def flatten(partitions: Iterable[Iterable[AgentStat]]) -> list[AgentStat]:
    """Concatenate partition results in partition order.

    No re-sorting happens: the result keeps store-native order within each
    partition, which is not global time order.
    """
    merged: list[AgentStat] = []
    for partition in partitions:
        merged.extend(partition)
    return merged


def flatten_sorted(partitions: Iterable[Iterable[AgentStat]]) -> list[AgentStat]:
    """Concatenate partition results and sort ascending by timestamp.

    The sort is stable, so samples sharing a timestamp keep partition order.
    """
    merged = flatten(partitions)
    merged.sort(key=lambda stat: stat.timestamp)
    return merged
