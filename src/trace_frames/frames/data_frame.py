from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel

from trace_frames.processing.span_rows import transform_trace_response
from trace_frames.processing.trace_list import transform_trace_list_response

# Column order the trace view depends on
SPAN_FIELDS = [
    'traceID',
    'serviceName',
    'parentSpanID',
    'spanID',
    'operationName',
    'startTime',
    'duration',
    'tags',
    'serviceTags',
    'stackTraces',
    'logs',
]

SPAN_FIELD_TYPES = {
    'startTime': 'number',
    'duration': 'number',
    'tags': 'other',
    'serviceTags': 'other',
    'stackTraces': 'other',
    'logs': 'other',
}

TRACE_LINK_VALUE = '${__value.raw}'


class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    TIME = "time"
    OTHER = "other"


class LuceneQueryType(str, Enum):
    LOGS = "Logs"
    TRACES = "Traces"


class Field(BaseModel):
    name: str
    type: FieldType
    values: List[Any] = []
    config: Dict[str, Any] = {}


class DataFrame(BaseModel):
    """Column-oriented table handed to the rendering host"""
    refId: Optional[str] = None
    meta: Dict[str, Any] = {}
    fields: List[Field] = []

    @property
    def length(self) -> int:
        return len(self.fields[0].values) if self.fields else 0

    def field(self, name: str) -> Field:
        for field in self.fields:
            if field.name == name:
                return field
        raise KeyError(name)

    def add(self, row: Dict[str, Any]) -> None:
        # Columns missing from the row get None so every field keeps the same length
        for field in self.fields:
            field.values.append(row.get(field.name))


class QueryResponse(BaseModel):
    data: List[DataFrame] = []
    key: Optional[str] = None


def _ref_id(targets: Sequence[Dict[str, Any]]) -> Optional[str]:
    return targets[0].get('refId') if targets else None


def _trace_id_link(uid: str, name: str) -> Dict[str, Any]:
    return {
        'title': f'Trace: {TRACE_LINK_VALUE}',
        'url': '',
        'internal': {
            'datasourceUid': uid,
            'datasourceName': name,
            'query': {
                'query': f'traceId: {TRACE_LINK_VALUE}',
                'luceneQueryType': LuceneQueryType.TRACES.value,
            },
        },
    }


def create_list_traces_data_frame(
    targets: Sequence[Dict[str, Any]],
    buckets: Sequence[Dict[str, Any]],
    uid: str,
    name: str
) -> QueryResponse:
    """Build the trace list table; the Trace Id column links to the single trace view"""
    rows = transform_trace_list_response(buckets)

    frame = DataFrame(
        refId=_ref_id(targets),
        meta={'preferredVisualisationType': 'table'},
        fields=[
            Field(
                name='Trace Id',
                type=FieldType.STRING,
                values=[row.traceId for row in rows],
                config={'links': [_trace_id_link(uid, name)]},
            ),
            Field(name='Trace Group', type=FieldType.STRING, values=[row.traceGroup for row in rows]),
            Field(name='Latency (ms)', type=FieldType.NUMBER, values=[row.latencyMs for row in rows]),
            Field(name='Error Count', type=FieldType.NUMBER, values=[row.errorCount for row in rows]),
            Field(name='Last Updated', type=FieldType.TIME, values=[row.lastUpdated for row in rows]),
        ],
    )
    return QueryResponse(data=[frame], key=_ref_id(targets))


def create_trace_data_frame(
    targets: Sequence[Dict[str, Any]],
    documents: Sequence[Dict[str, Any]]
) -> QueryResponse:
    # first, transform the span documents to fields the trace view understands
    spans = transform_trace_response(documents)

    frame = DataFrame(
        refId=_ref_id(targets),
        meta={'preferredVisualisationType': 'trace'},
        fields=[
            Field(name=name, type=FieldType(SPAN_FIELD_TYPES.get(name, 'string')))
            for name in SPAN_FIELDS
        ],
    )
    # Add a row for each document
    for span in spans:
        frame.add(span.to_row())

    return QueryResponse(data=[frame], key=_ref_id(targets))
