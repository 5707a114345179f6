"""agentstat - retrieval of agent performance samples from a two-tier store."""

from agentstat.adapters.storage.in_memory import InMemoryAgentStatStore
from agentstat.adapters.storage.sqlite_stats import SQLiteAgentStatStore
from agentstat.config import AgentStatDaoConfig
from agentstat.core.aggregation import aggregate
from agentstat.core.distributor import RowKeyDistributorByHashPrefix
from agentstat.core.errors import InvalidArgumentError, ScanError
from agentstat.core.models import AGGR_SAMPLE_INTERVAL, AgentStat, Tier, TimeRange
from agentstat.core.ports import RangeScannerPort, ScanRequest, StatRow
from agentstat.dao import AgentStatDao

__all__ = [
    "AGGR_SAMPLE_INTERVAL",
    "AgentStat",
    "AgentStatDao",
    "AgentStatDaoConfig",
    "InMemoryAgentStatStore",
    "InvalidArgumentError",
    "RangeScannerPort",
    "RowKeyDistributorByHashPrefix",
    "SQLiteAgentStatStore",
    "ScanError",
    "ScanRequest",
    "StatRow",
    "Tier",
    "TimeRange",
    "aggregate",
]
