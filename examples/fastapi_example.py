"""Example FastAPI application serving agent stats.

Run with:
    uvicorn examples.fastapi_example:app --reload

Endpoints:
    /agents/{agent_id}/stats                      - NDJSON raw samples
    /agents/{agent_id}/stats?from=<ms>&to=<ms>    - raw samples in (from, to]
    /agents/{agent_id}/stats/aggregated           - NDJSON aggregated samples
    /agents/{agent_id}/stats/exists               - {"exists": bool}

Data:
    A background task writes one raw sample per second for "demo-agent"
    and leaves the aggregated tier empty, so aggregated reads are served
    entirely by backfilling from raw samples.
"""

import asyncio
import logging
import os
import random
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from agentstat import (
    AgentStat,
    AgentStatDao,
    AgentStatDaoConfig,
    SQLiteAgentStatStore,
    Tier,
)
from agentstat.adapters.frameworks.fastapi import create_agent_stat_router

logging.basicConfig(level=os.environ.get("AGENTSTAT_LOG_LEVEL", "INFO"))

store = SQLiteAgentStatStore(os.environ.get("AGENTSTAT_DB_PATH", "agent_stat.db"))
dao = AgentStatDao(store, AgentStatDaoConfig.from_env())


async def produce_samples() -> None:
    """Write a raw sample for the demo agent every second."""
    while True:
        sample = AgentStat(
            agent_id="demo-agent",
            timestamp=int(time.time() * 1000),
            collect_interval=1000,
            values={"cpu": random.uniform(0.0, 1.0), "heap": random.uniform(64, 512)},
        )
        await store.write(Tier.RAW, sample)
        await asyncio.sleep(1.0)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    task = asyncio.create_task(produce_samples())
    yield
    task.cancel()
    await store.close()


app = FastAPI(title="Agent Stat Example", lifespan=lifespan)
app.include_router(create_agent_stat_router(dao))
