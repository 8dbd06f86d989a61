import re
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from trace_frames.core.span_data import KeyValuePair, LogEntry, SpanEvent

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
NANOS_TO_MILLIS = 0.000001

# Data Prepper writes nanosecond fractions, datetime keeps microseconds
_FRACTION_PATTERN = re.compile(r"(\.\d{6})\d+")


def convert_to_millis(timestamp: str | datetime | int | float) -> int:
    """
    Convert a timestamp to milliseconds since epoch.

    Strings are ISO 8601; a trailing 'Z' and nanosecond fractions are accepted.
    Timestamps without an offset are read as UTC.
    """
    if isinstance(timestamp, (int, float)):
        return int(timestamp)
    if isinstance(timestamp, str):
        value = _FRACTION_PATTERN.sub(r"\1", timestamp.strip().replace('Z', '+00:00'))
        timestamp = datetime.fromisoformat(value)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return (timestamp - EPOCH) // timedelta(milliseconds=1)


def nanos_to_millis(duration_in_nanos: int) -> float:
    return duration_in_nanos * NANOS_TO_MILLIS


def convert_to_key_value(tags: Mapping[str, Any] | None) -> list[KeyValuePair]:
    """Turn an attribute mapping into key/value pairs, keeping the mapping's order"""
    if not tags:
        return []
    return [KeyValuePair(key=key, value=value) for key, value in tags.items()]


def _event_error(event: SpanEvent) -> Any:
    return event.attributes.get('error')


def _format_error_value(value: Any) -> str:
    # Printed the way the trace panel's JavaScript host prints them, e.g. true and 1
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def span_has_error(events: Sequence[SpanEvent]) -> bool:
    return any(_event_error(event) for event in events)


def get_stack_traces(events: Sequence[SpanEvent]) -> list[str] | None:
    """
    Describe every error event as '<event name>: <error>'.

    Returns None rather than an empty list when no event carries an error,
    the trace panel displays an empty list as "0".
    """
    stack_traces = [
        f"{event.name}: {_format_error_value(_event_error(event))}"
        for event in events
        if _event_error(event)
    ]
    return stack_traces or None


def transform_events_into_logs(events: Sequence[SpanEvent]) -> list[LogEntry]:
    return [
        LogEntry(
            timestamp=convert_to_millis(event.time),
            fields=[KeyValuePair(key='name', value=event.name)],
        )
        for event in events
    ]
