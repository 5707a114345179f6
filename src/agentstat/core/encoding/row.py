"""Mapping between stored rows and AgentStat records.

Each sample is stored as one cell whose qualifier is the collect interval
and whose value is the JSON-encoded payload. The agent id and timestamp
come from the row key.
"""

import json

from agentstat.core.models import AgentStat
from agentstat.core.ports import StatRow
from agentstat.core.rowkey import decode_row_key, encode_row_key


class AgentStatMapper:
    """Row mapper decoding every cell of a row into an AgentStat."""

    def __call__(self, row: StatRow) -> list[AgentStat]:
        agent_id, timestamp = decode_row_key(row.key)
        return [
            AgentStat(
                agent_id=agent_id,
                timestamp=timestamp,
                collect_interval=int(qualifier),
                values=json.loads(value),
            )
            for qualifier, value in row.cells
        ]


def to_row(stat: AgentStat) -> StatRow:
    """Encode a sample as the row it is stored under."""
    return StatRow(
        key=encode_row_key(stat.agent_id, stat.timestamp),
        cells=(
            (
                str(stat.collect_interval),
                json.dumps(stat.values, sort_keys=True).encode("utf-8"),
            ),
        ),
    )
