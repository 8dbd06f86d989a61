import copy
import logging
import re
from datetime import datetime
from typing import Any

from elasticsearch import AsyncElasticsearch
from opensearchpy import AsyncOpenSearch

from trace_frames.config import Settings
from trace_frames.exceptions import BadRequestException
from trace_frames.frames.data_frame import (
    QueryResponse,
    create_list_traces_data_frame,
    create_trace_data_frame,
)
from trace_frames.processing.span_rows import extract_span_documents
from trace_frames.processing.span_utils import convert_to_millis
from trace_frames.processing.trace_list import extract_trace_buckets
from trace_frames.queries.trace_queries import (
    TIME_FROM,
    TIME_TO,
    create_single_trace_query,
    create_trace_list_query,
)

logger = logging.getLogger(__name__)

# Query the trace list links to, e.g. 'traceId: 00000000000000001c10de244eb9421a'
_TRACE_ID_QUERY = re.compile(r"^\s*traceId\s*:\s*(\S+)\s*$")


def create_db_client(settings: Settings) -> AsyncOpenSearch | AsyncElasticsearch:
    """Create the search client selected by STORE_TYPE"""
    store_type = settings.STORE_TYPE.lower()
    if store_type == "opensearch":
        logger.info(f"Creating OS client for {settings.OS_HOST}")
        return AsyncOpenSearch(
            hosts=[settings.OS_HOST],
            http_auth=(settings.OS_USERNAME, settings.OS_PASSWORD),
            use_ssl=False,
            verify_certs=False,
            ssl_show_warn=False,
            timeout=30,
            max_retries=3,
            retry_on_timeout=True
        )
    elif store_type == "elasticsearch":
        logger.info(f"Creating ES client for {settings.ES_HOST}")
        return AsyncElasticsearch(
            hosts=[settings.ES_HOST],
            basic_auth=(settings.ES_USERNAME, settings.ES_PASSWORD)
        )
    raise ValueError(f"Unsupported store type: {settings.STORE_TYPE}")


def validate_db_client(db_client: Any) -> Any:
    if not isinstance(db_client, (AsyncElasticsearch, AsyncOpenSearch)):
        raise TypeError(
            f"Expected AsyncElasticsearch or AsyncOpenSearch, "
            f"but got {type(db_client).__name__}"
        )
    return db_client


def apply_time_range(body: Any, start_time: str | datetime | int, end_time: str | datetime | int) -> Any:
    """Return a copy of a query body with the $timeFrom / $timeTo placeholders set to epoch milliseconds"""
    replacements = {
        TIME_FROM: convert_to_millis(start_time),
        TIME_TO: convert_to_millis(end_time),
    }

    def _replace(value: Any) -> Any:
        if isinstance(value, dict):
            return {key: _replace(item) for key, item in value.items()}
        if isinstance(value, list):
            return [_replace(item) for item in value]
        if isinstance(value, str) and value in replacements:
            return replacements[value]
        return value

    return _replace(copy.deepcopy(body))


def parse_trace_id_query(query_string: str | None) -> str | None:
    """
    Read the trace ID out of a 'traceId: <id>' query.

    Returns None for an empty query, which lists traces instead.
    """
    if not query_string or not query_string.strip():
        return None
    match = _TRACE_ID_QUERY.match(query_string)
    if not match:
        raise BadRequestException(
            f"Unsupported traces query '{query_string}', expected 'traceId: <trace id>'"
        )
    return match.group(1)


class TraceSearchExecutor:
    """Runs the trace queries against the span index and turns the responses into data frames"""

    def __init__(self, db_client: Any, index: str, datasource_uid: str = "", datasource_name: str = ""):
        self.db_client = validate_db_client(db_client)
        self.index = index
        self.datasource_uid = datasource_uid
        self.datasource_name = datasource_name

    async def search(
        self,
        query: dict[str, Any],
        start_time: str | datetime | int,
        end_time: str | datetime | int
    ) -> dict[str, Any]:
        body = apply_time_range(query["luceneQueryObj"], start_time, end_time)
        logger.info(
            f"Searching {self.index} single_trace={query.get('isSingleTrace', False)} size={body.get('size')}"
        )
        response = await self.db_client.search(index=self.index, body=body)
        # elasticsearch wraps the body in an ObjectApiResponse
        return getattr(response, "body", response)

    async def list_traces(
        self,
        query: dict[str, Any],
        start_time: str | datetime | int,
        end_time: str | datetime | int
    ) -> QueryResponse:
        traces_query = create_trace_list_query(query)
        response = await self.search(traces_query, start_time, end_time)
        return create_list_traces_data_frame(
            [traces_query],
            extract_trace_buckets(response),
            self.datasource_uid,
            self.datasource_name
        )

    async def get_trace(
        self,
        query: dict[str, Any],
        trace_id: str,
        start_time: str | datetime | int,
        end_time: str | datetime | int
    ) -> QueryResponse:
        trace_query = create_single_trace_query(query, trace_id)
        response = await self.search(trace_query, start_time, end_time)
        return create_trace_data_frame([trace_query], extract_span_documents(response))

    async def run(
        self,
        query: dict[str, Any],
        start_time: str | datetime | int,
        end_time: str | datetime | int
    ) -> QueryResponse:
        """Single trace view for a 'traceId: <id>' query, trace list otherwise"""
        trace_id = parse_trace_id_query(query.get("query"))
        if trace_id:
            return await self.get_trace(query, trace_id, start_time, end_time)
        return await self.list_traces(query, start_time, end_time)
