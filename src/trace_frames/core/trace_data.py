from typing import Any

from pydantic import BaseModel


class TraceGroupBucket(BaseModel):
    key: str


class TraceGroupAggregation(BaseModel):
    buckets: list[TraceGroupBucket]


class MetricValue(BaseModel):
    value: Any = None


class DocCount(BaseModel):
    doc_count: int


class TraceBucket(BaseModel):
    """One `traces` bucket of the trace list aggregation"""
    key: str
    trace_group: TraceGroupAggregation
    latency: MetricValue
    error_count: DocCount
    last_updated: MetricValue


class TraceSummaryRow(BaseModel):
    traceId: str
    traceGroup: str
    latencyMs: float | None
    errorCount: int
    lastUpdated: Any = None
