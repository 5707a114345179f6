"""Shared test fixtures for all test modules."""

from pathlib import Path

import pytest

from agentstat.adapters.storage.in_memory import InMemoryAgentStatStore
from agentstat.core.models import Tier
from tests.helpers import stat

try:
    import httpx
except ImportError:
    httpx = None


@pytest.fixture
def stats_db_path(tmp_path: Path) -> str:
    """Provide a temporary database path for SQLite store tests."""
    return str(tmp_path / "agent_stat.db")


@pytest.fixture
def store() -> InMemoryAgentStatStore:
    """Fixture providing an empty in-memory store."""
    return InMemoryAgentStatStore()


@pytest.fixture
def populated_store() -> InMemoryAgentStatStore:
    """In-memory store with a hole in the aggregated tier.

    Aggregated samples cover 5000-15000 and 40000-45000; raw samples exist
    inside the 15000-35000 hole but not after 45000.
    """
    store = InMemoryAgentStatStore()
    for ts in (5000, 10000, 15000, 40000, 45000):
        store.put(Tier.AGGREGATED, stat(ts, cpu=float(ts)))
    store.put(Tier.RAW, stat(17000, collect_interval=1000, cpu=1.0))
    store.put(Tier.RAW, stat(19000, collect_interval=1000, cpu=3.0))
    store.put(Tier.RAW, stat(22000, collect_interval=1000, cpu=5.0))
    store.put(Tier.RAW, stat(31000, collect_interval=1000, cpu=7.0))
    return store


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            async with asgi_test_client(app) as client:
                response = await client.get("/endpoint")
    """
    if httpx is None:
        pytest.skip("httpx not installed")

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
