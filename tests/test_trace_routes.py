import unittest
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient
from opensearchpy import AsyncOpenSearch

from trace_frames.runtime.search_client import TraceSearchExecutor
from trace_frames.server.main import create_app
from trace_frames.server.trace_routes import get_executor

BUCKET = {
    "key": "abc",
    "trace_group": {"buckets": [{"key": "checkout"}]},
    "latency": {"value": 42.5},
    "error_count": {"doc_count": 2},
    "last_updated": {"value": "2024-01-01T00:00:00Z"},
}

SPAN = {
    "traceId": "abc",
    "spanId": "s1",
    "name": "GET /",
    "serviceName": "frontend",
    "startTime": "2024-01-01T00:00:00Z",
    "durationInNanos": 1000000,
    "events": [{"name": "exception", "time": "2024-01-01T00:00:00Z", "attributes": {"error": "boom"}}],
}

TIME_RANGE = {"start_time": "2024-01-01T00:00:00Z", "end_time": "2024-01-01T01:00:00Z"}


class TestTraceRoutes(unittest.TestCase):

    def setUp(self):
        self.db_client = AsyncMock(spec=AsyncOpenSearch)
        self.db_client.search = AsyncMock()
        executor = TraceSearchExecutor(self.db_client, "otel-v1-apm-span-*", "os-uid", "OpenSearch")

        self.app = create_app()
        self.app.dependency_overrides[get_executor] = lambda: executor
        # not used as a context manager, so the lifespan never opens a real client
        self.client = TestClient(self.app)

    def test_list_traces(self):
        self.db_client.search.return_value = {"aggregations": {"traces": {"buckets": [BUCKET]}}}

        response = self.client.get("/api/v1/traces", params={**TIME_RANGE, "ref_id": "A"})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["key"], "A")
        fields = {field["name"]: field for field in body["data"][0]["fields"]}
        self.assertEqual(fields["Trace Id"]["values"], ["abc"])
        self.assertEqual(fields["Error Count"]["values"], [2])
        self.assertEqual(fields["Last Updated"]["type"], "time")

    def test_drill_down_query(self):
        self.db_client.search.return_value = {"hits": {"hits": [{"_source": SPAN}]}}

        response = self.client.get("/api/v1/traces", params={**TIME_RANGE, "query": "traceId: abc"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"][0]["meta"]["preferredVisualisationType"], "trace")

    def test_get_trace(self):
        self.db_client.search.return_value = {"hits": {"hits": [{"_source": SPAN}]}}

        response = self.client.get("/api/v1/traces/abc", params=TIME_RANGE)

        self.assertEqual(response.status_code, 200)
        fields = {field["name"]: field for field in response.json()["data"][0]["fields"]}
        self.assertEqual(fields["stackTraces"]["values"], [["exception: boom"]])
        self.assertEqual(fields["logs"]["values"][0][0]["fields"], [{"key": "name", "value": "exception"}])

    def test_bad_query(self):
        response = self.client.get("/api/v1/traces", params={**TIME_RANGE, "query": "service: x"})
        self.assertEqual(response.status_code, 400)
        self.db_client.search.assert_not_called()

    def test_malformed_document(self):
        self.db_client.search.return_value = {"hits": {"hits": [{"_source": {**SPAN, "span": "x", "span.attributes.a": 1}}]}}

        response = self.client.get("/api/v1/traces/abc", params=TIME_RANGE)

        self.assertEqual(response.status_code, 422)
        self.assertIn("span", response.json()["detail"])

    def test_missing_aggregation(self):
        self.db_client.search.return_value = {"aggregations": {"traces": {"buckets": [
            {**BUCKET, "trace_group": {"buckets": []}}
        ]}}}

        response = self.client.get("/api/v1/traces", params=TIME_RANGE)

        self.assertEqual(response.status_code, 502)
        self.assertIn("abc", response.json()["detail"])

    def test_time_range_required(self):
        response = self.client.get("/api/v1/traces")
        self.assertEqual(response.status_code, 422)


if __name__ == '__main__':
    unittest.main()
