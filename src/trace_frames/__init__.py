from trace_frames.exceptions import (
    MalformedDocumentException,
    MissingAggregationDataException,
    TraceFrameException,
)
from trace_frames.frames.data_frame import create_list_traces_data_frame, create_trace_data_frame
from trace_frames.processing.normalizer import normalize_span, unflatten_document
from trace_frames.processing.span_rows import transform_trace_response
from trace_frames.processing.trace_list import transform_trace_list_response
from trace_frames.queries.trace_queries import create_single_trace_query, create_trace_list_query

__all__ = [
    "MalformedDocumentException",
    "MissingAggregationDataException",
    "TraceFrameException",
    "create_list_traces_data_frame",
    "create_single_trace_query",
    "create_trace_data_frame",
    "create_trace_list_query",
    "normalize_span",
    "transform_trace_list_response",
    "transform_trace_response",
    "unflatten_document",
]
