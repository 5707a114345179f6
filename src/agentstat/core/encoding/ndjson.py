"""NDJSON encoder for agent stats.

Each sample becomes one JSON object per line. Payload keys are written in
sorted order so the same sample always produces the same bytes.
"""

import json
from collections.abc import Iterable, Iterator
from typing import Any

from agentstat.core.models import AgentStat


def _to_dict(stat: AgentStat) -> dict[str, Any]:
    return {
        "agentId": stat.agent_id,
        "timestamp": stat.timestamp,
        "collectInterval": stat.collect_interval,
        "values": {key: stat.values[key] for key in sorted(stat.values)},
    }


def iter_stats(stats: Iterable[AgentStat]) -> Iterator[str]:
    """Yield one newline-terminated JSON line per stat, in input order.

    Suitable as the body of a streaming response.
    """
    for stat in stats:
        yield json.dumps(_to_dict(stat)) + "\n"


def encode_stats(stats: Iterable[AgentStat]) -> str:
    """Encode agent stats to a newline-delimited JSON string.

    Returns:
        All lines of iter_stats() joined; empty string if no stats.
    """
    return "".join(iter_stats(stats))
