import copy
from typing import Any

TIME_FROM = "$timeFrom"
TIME_TO = "$timeTo"

TRACES_QUERY_MODE = "traces"
TRACE_LIST_HITS_SIZE = 10
TRACE_LIST_PAGE_SIZE = 100
SINGLE_TRACE_SIZE = 1000

# Milliseconds with two decimals: round(ns / 10000) / 100
LATENCY_SCRIPT = """
if (doc.containsKey('traceGroupFields.durationInNanos') && !doc['traceGroupFields.durationInNanos'].empty) {
  return Math.round(doc['traceGroupFields.durationInNanos'].value / 10000) / 100.0
}
return 0
"""

# traceGroupFields.statusCode of an erroneous trace
ERROR_STATUS_CODE = "2"


def _time_range_clause() -> dict:
    return {"range": {"startTime": {"gte": TIME_FROM, "lte": TIME_TO}}}


def _bool_query(must: list[dict]) -> dict:
    return {
        "bool": {
            "must": must,
            "filter": [],
            "should": [],
            "must_not": [],
        }
    }


def create_trace_list_query(query: dict[str, Any]) -> dict[str, Any]:
    """
    Build the query listing every trace in the time range, one aggregation bucket per trace.

    Hits are not used, only the `traces` aggregation:
    - buckets keyed by traceId, ascending
    - latency: max trace duration in milliseconds
    - trace_group: the first traceGroup found in the bucket
    - error_count: spans whose trace status code is an error
    - last_updated: max trace end time
    """
    return {
        **copy.deepcopy(query),
        "luceneQueryMode": TRACES_QUERY_MODE,
        "luceneQueryObj": {
            "size": TRACE_LIST_HITS_SIZE,
            "query": _bool_query([_time_range_clause()]),
            "aggs": {
                "traces": {
                    "terms": {
                        "field": "traceId",
                        "size": TRACE_LIST_PAGE_SIZE,
                        "order": {"_key": "asc"},
                    },
                    "aggs": {
                        "latency": {
                            "max": {
                                "script": {
                                    "source": LATENCY_SCRIPT,
                                    "lang": "painless",
                                }
                            }
                        },
                        "trace_group": {
                            "terms": {
                                "field": "traceGroup",
                                "size": 1,
                            }
                        },
                        "error_count": {
                            "filter": {"term": {"traceGroupFields.statusCode": ERROR_STATUS_CODE}}
                        },
                        "last_updated": {"max": {"field": "traceGroupFields.endTime"}},
                    },
                }
            },
        },
    }


def create_single_trace_query(query: dict[str, Any], trace_id: str) -> dict[str, Any]:
    """Build the query fetching every span document of one trace in the time range"""
    return {
        **copy.deepcopy(query),
        "isSingleTrace": True,
        "luceneQueryMode": TRACES_QUERY_MODE,
        "luceneQueryObj": {
            "size": SINGLE_TRACE_SIZE,
            "query": _bool_query([
                _time_range_clause(),
                {"term": {"traceId": trace_id}},
            ]),
        },
    }


def latency_millis(duration_in_nanos: int | None) -> float:
    """Python rendition of LATENCY_SCRIPT for a single document"""
    if duration_in_nanos is None:
        return 0
    # the script divides a long, so the first division truncates before Math.round sees it
    return round(duration_in_nanos // 10000) / 100.0
