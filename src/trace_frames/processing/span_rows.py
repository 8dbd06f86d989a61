import logging
from collections.abc import Mapping, Sequence
from typing import Any

from trace_frames.core.span_data import KeyValuePair, SpanRow
from trace_frames.exceptions import MalformedDocumentException
from trace_frames.processing.normalizer import normalize_span
from trace_frames.processing.span_utils import (
    convert_to_key_value,
    convert_to_millis,
    get_stack_traces,
    nanos_to_millis,
    span_has_error,
    transform_events_into_logs,
)

logger = logging.getLogger(__name__)


def extract_span_documents(response: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Pull the span documents out of a single trace search response"""
    documents = []
    for hit in response.get("hits", {}).get("hits", []):
        if "_source" not in hit:
            raise MalformedDocumentException(f"Span hit {hit.get('_id', '<unknown>')} has no _source")
        documents.append(hit["_source"])
    return documents


def transform_span_document(document: Mapping[str, Any]) -> SpanRow:
    span = normalize_span(document)
    has_error = span_has_error(span.events)
    try:
        # the trace view works in milliseconds
        start_time = convert_to_millis(span.startTime)
        logs = transform_events_into_logs(span.events)
    except ValueError as e:
        raise MalformedDocumentException(f"Span {span.spanId} has an invalid timestamp: {e}") from e

    return SpanRow(
        traceID=span.traceId,
        spanID=span.spanId,
        parentSpanID=span.parentSpanId,
        operationName=span.name,
        serviceName=span.serviceName,
        startTime=start_time,
        duration=nanos_to_millis(span.durationInNanos),
        tags=[
            *convert_to_key_value(span.span_attributes),
            # the trace view shows the error icon only when this tag is a boolean
            KeyValuePair(key='error', value=has_error),
        ],
        serviceTags=convert_to_key_value(span.resource_attributes),
        stackTraces=get_stack_traces(span.events) if has_error else None,
        logs=logs,
    )


def transform_trace_response(documents: Sequence[Mapping[str, Any]]) -> list[SpanRow]:
    """
    Build one trace view row per span document, in document order.

    Documents are not de-duplicated by span ID.

    Raises:
        MalformedDocumentException: If any document cannot be normalized; no rows are returned
    """
    rows = [transform_span_document(document) for document in documents]
    logger.debug(f"Built {len(rows)} span rows")
    return rows
