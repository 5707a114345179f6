"""Storage adapters implementing RangeScannerPort."""

from agentstat.adapters.storage.in_memory import InMemoryAgentStatStore
from agentstat.adapters.storage.sqlite_stats import SQLiteAgentStatStore

__all__ = [
    "InMemoryAgentStatStore",
    "SQLiteAgentStatStore",
]
