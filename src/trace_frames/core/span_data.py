from typing import Any, Optional, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class KeyValuePair(BaseModel):
    key: str
    value: Any = None


class LogEntry(BaseModel):
    """A span event as the trace view renders it: a timestamp plus named fields."""
    timestamp: int
    fields: List[KeyValuePair] = []


class SpanEvent(BaseModel):
    name: str
    time: str
    attributes: Dict[str, Any] = {}


class SpanAttributes(BaseModel):
    """Holder for the `span.*` and `resource.*` subtrees of a span document."""
    attributes: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="allow")


class NormalizedSpan(BaseModel):
    """
    A span document after its dot-notated keys have been expanded into nested objects.

    Fields not listed here (traceGroup, traceGroupFields, status, kind, endTime, ...)
    are kept as extra attributes so no part of the source document is lost.
    """
    traceId: str
    spanId: str
    parentSpanId: Optional[str] = None
    name: str
    serviceName: str
    startTime: str
    durationInNanos: int = Field(ge=0)
    span: Optional[SpanAttributes] = None
    resource: Optional[SpanAttributes] = None
    events: List[SpanEvent] = []

    model_config = ConfigDict(extra="allow")

    @property
    def span_attributes(self) -> Optional[Dict[str, Any]]:
        return self.span.attributes if self.span else None

    @property
    def resource_attributes(self) -> Optional[Dict[str, Any]]:
        return self.resource.attributes if self.resource else None


class SpanRow(BaseModel):
    """One row of the trace view data frame."""
    traceID: str
    spanID: str
    parentSpanID: Optional[str] = None
    operationName: str
    serviceName: str
    # milliseconds since epoch
    startTime: int
    # milliseconds
    duration: float
    tags: List[KeyValuePair]
    serviceTags: List[KeyValuePair]
    stackTraces: Optional[List[str]] = None
    logs: List[LogEntry]

    def to_row(self) -> Dict[str, Any]:
        # The trace panel renders an empty stack trace list as "0", so the key is dropped instead
        exclude = {"stackTraces"} if not self.stackTraces else None
        return self.model_dump(exclude=exclude)
