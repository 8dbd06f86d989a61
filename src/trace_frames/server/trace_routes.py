from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from trace_frames.runtime.search_client import TraceSearchExecutor

traces_router = APIRouter(
    prefix="/api/v1/traces",
    tags=["Traces"],
)


def get_executor(request: Request) -> TraceSearchExecutor:
    return request.app.state.executor


@traces_router.get("")
async def list_traces(
    start_time: datetime = Query(..., description="Start of the time range"),
    end_time: datetime = Query(..., description="End of the time range"),
    ref_id: str = Query("A", description="Panel query reference"),
    query: str | None = Query(None, description="Optional 'traceId: <id>' drill-down query"),
    executor: TraceSearchExecutor = Depends(get_executor),
) -> dict[str, Any]:
    """Trace list table, or the single trace view when `query` names a trace"""
    response = await executor.run({"refId": ref_id, "query": query}, start_time, end_time)
    return response.model_dump()


@traces_router.get("/{trace_id}")
async def get_trace(
    trace_id: str,
    start_time: datetime = Query(..., description="Start of the time range"),
    end_time: datetime = Query(..., description="End of the time range"),
    ref_id: str = Query("A", description="Panel query reference"),
    executor: TraceSearchExecutor = Depends(get_executor),
) -> dict[str, Any]:
    response = await executor.get_trace({"refId": ref_id}, trace_id, start_time, end_time)
    return response.model_dump()
