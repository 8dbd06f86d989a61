import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from trace_frames.core.trace_data import TraceBucket, TraceSummaryRow
from trace_frames.exceptions import MissingAggregationDataException

logger = logging.getLogger(__name__)


def extract_trace_buckets(response: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Pull the `traces` buckets out of a trace list search response"""
    try:
        return response["aggregations"]["traces"]["buckets"]
    except (KeyError, TypeError) as e:
        raise MissingAggregationDataException(
            "Trace list response has no 'traces' aggregation"
        ) from e


def _to_summary_row(bucket: Mapping[str, Any]) -> TraceSummaryRow:
    try:
        trace_bucket = TraceBucket.model_validate(bucket)
    except ValidationError as e:
        raise MissingAggregationDataException(
            f"Trace bucket {bucket.get('key', '<unknown>')} is missing aggregation data: {e}"
        ) from e

    if not trace_bucket.trace_group.buckets:
        raise MissingAggregationDataException(
            f"Trace bucket {trace_bucket.key} has no trace group"
        )

    return TraceSummaryRow(
        traceId=trace_bucket.key,
        traceGroup=trace_bucket.trace_group.buckets[0].key,
        latencyMs=trace_bucket.latency.value,
        errorCount=trace_bucket.error_count.doc_count,
        lastUpdated=trace_bucket.last_updated.value,
    )


def transform_trace_list_response(buckets: Sequence[Mapping[str, Any]]) -> list[TraceSummaryRow]:
    """
    Build one summary row per trace bucket.

    Buckets arrive sorted by trace ID from the query and are kept in that order.

    Raises:
        MissingAggregationDataException: If any bucket lacks a sub-aggregation; no rows are returned
    """
    rows = [_to_summary_row(bucket) for bucket in buckets]
    logger.debug(f"Built {len(rows)} trace summary rows")
    return rows
