import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from trace_frames.core.span_data import NormalizedSpan
from trace_frames.exceptions import MalformedDocumentException

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "."


def _copy_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _copy_value(item) for key, item in value.items()}
    return value


def _merge(target: dict[str, Any], key: str, value: Any, path: str) -> None:
    """Write value under target[key]; mappings merge into mappings, anything else is last-write-wins"""
    existing = target.get(key)
    if isinstance(existing, dict):
        if not isinstance(value, Mapping):
            raise MalformedDocumentException(
                f"Key '{path}' sets a value where other keys define nested fields"
            )
        for sub_key, sub_value in value.items():
            _merge(existing, sub_key, sub_value, f"{path}{PATH_SEPARATOR}{sub_key}")
        return

    if key in target and isinstance(value, Mapping):
        raise MalformedDocumentException(
            f"Key '{path}' defines nested fields under a value set by another key"
        )
    target[key] = _copy_value(value)


def unflatten_document(document: Mapping[str, Any]) -> dict[str, Any]:
    """
    Expand the dot-notated keys of a span document into nested objects.

    OpenSearch returns some fields flattened, e.g. 'span.attributes.http@status_code': 200.
    Each key is split on '.' and the value is written at the end of that path.

    Args:
        document: The `_source` of one span hit

    Returns:
        A new nested dictionary; the input is left untouched

    Raises:
        MalformedDocumentException: If two keys disagree on whether a path holds a value or nested fields
    """
    nested: dict[str, Any] = {}
    for key, value in document.items():
        *parents, leaf = key.split(PATH_SEPARATOR)
        current = nested
        walked = []
        for segment in parents:
            walked.append(segment)
            child = current.get(segment)
            if child is None and segment not in current:
                child = current[segment] = {}
            elif not isinstance(child, dict):
                raise MalformedDocumentException(
                    f"Key '{key}' descends through '{PATH_SEPARATOR.join(walked)}', which holds a value"
                )
            current = child
        _merge(current, leaf, value, key)
    return nested


def normalize_span(document: Mapping[str, Any]) -> NormalizedSpan:
    """Unflatten a span document and validate it into a NormalizedSpan"""
    nested = unflatten_document(document)
    try:
        return NormalizedSpan.model_validate(nested)
    except ValidationError as e:
        logger.debug(f"Span document failed validation: {e}")
        raise MalformedDocumentException(
            f"Invalid span document {nested.get('spanId', '<unknown>')}: {e}"
        ) from e
