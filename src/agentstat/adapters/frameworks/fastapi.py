"""FastAPI adapter exposing agent stat endpoints."""

import logging
from collections.abc import Callable
from typing import Annotated, TypeVar

from fastapi import APIRouter, HTTPException, Query, Response
from fastapi.responses import JSONResponse, StreamingResponse

from agentstat.adapters.frameworks.query_params import parse_time_range
from agentstat.core.encoding.ndjson import iter_stats
from agentstat.core.errors import InvalidArgumentError, ScanError
from agentstat.dao import AgentStatDao

logger = logging.getLogger(__name__)

T = TypeVar("T")

FromParam = Annotated[int | None, Query(alias="from")]
ToParam = Annotated[int | None, Query()]

NDJSON = "application/x-ndjson"


def _call(func: Callable[[], T]) -> T:
    """Run a DAO call, translating invalid arguments to HTTP 400."""
    try:
        return func()
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _scan_failed(message: str) -> JSONResponse:
    logger.exception(message)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


def create_agent_stat_router(dao: AgentStatDao) -> APIRouter:
    """Create a FastAPI router with agent stat endpoints.

    Endpoints:
        GET /agents/{agent_id}/stats             - raw samples, NDJSON
        GET /agents/{agent_id}/stats/aggregated  - aggregated samples, NDJSON
        GET /agents/{agent_id}/stats/exists      - {"exists": bool}

    Every endpoint takes optional "from" and "to" query parameters in epoch
    milliseconds.

    Args:
        dao: Read path the endpoints delegate to.

    Returns:
        APIRouter with the endpoints configured.
    """
    router = APIRouter()

    @router.get("/agents/{agent_id}/stats")
    def get_stats(agent_id: str, from_: FromParam = None, to: ToParam = None) -> Response:
        """Return raw samples in store order."""
        try:
            stats = _call(
                lambda: dao.get_agent_stat_list(agent_id, parse_time_range(from_, to))
            )
        except ScanError:
            return _scan_failed(f"Error scanning agent stats of {agent_id}")
        return StreamingResponse(iter_stats(stats), media_type=NDJSON)

    @router.get("/agents/{agent_id}/stats/aggregated")
    def get_aggregated_stats(
        agent_id: str, from_: FromParam = None, to: ToParam = None
    ) -> Response:
        """Return aggregated samples with gaps backfilled."""
        try:
            stats = _call(
                lambda: dao.get_aggregated_agent_stat_list(
                    agent_id, parse_time_range(from_, to)
                )
            )
        except ScanError:
            return _scan_failed(f"Error scanning aggregated agent stats of {agent_id}")
        return StreamingResponse(iter_stats(stats), media_type=NDJSON)

    @router.get("/agents/{agent_id}/stats/exists")
    def stats_exist(
        agent_id: str, from_: FromParam = None, to: ToParam = None
    ) -> Response:
        """Return whether recent raw data exists in the window."""
        try:
            exists = _call(
                lambda: dao.agent_stat_exists(agent_id, parse_time_range(from_, to))
            )
        except ScanError:
            return _scan_failed(f"Error checking agent stats of {agent_id}")
        return JSONResponse(content={"exists": exists})

    return router
