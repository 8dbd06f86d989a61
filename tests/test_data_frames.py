import unittest

from trace_frames.exceptions import MissingAggregationDataException
from trace_frames.frames.data_frame import (
    SPAN_FIELDS,
    FieldType,
    create_list_traces_data_frame,
    create_trace_data_frame,
)

BUCKETS = [
    {
        "key": "abc",
        "trace_group": {"buckets": [{"key": "checkout"}]},
        "latency": {"value": 42.5},
        "error_count": {"doc_count": 2},
        "last_updated": {"value": "2024-01-01T00:00:00Z"},
    },
    {
        "key": "def",
        "trace_group": {"buckets": [{"key": "login"}]},
        "latency": {"value": 3.1},
        "error_count": {"doc_count": 0},
        "last_updated": {"value": "2024-01-01T00:05:00Z"},
    },
]


def span_document(span_id, events=()):
    return {
        "traceId": "abc",
        "spanId": span_id,
        "name": "GET /",
        "serviceName": "frontend",
        "startTime": "2024-01-01T00:00:00Z",
        "durationInNanos": 1000000,
        "span.attributes.http@method": "GET",
        "events": list(events),
    }


class TestListTracesDataFrame(unittest.TestCase):

    def setUp(self):
        self.response = create_list_traces_data_frame([{"refId": "A"}], BUCKETS, "os-uid", "OpenSearch")
        self.frame = self.response.data[0]

    def test_columns(self):
        self.assertEqual(
            [(field.name, field.type) for field in self.frame.fields],
            [
                ("Trace Id", FieldType.STRING),
                ("Trace Group", FieldType.STRING),
                ("Latency (ms)", FieldType.NUMBER),
                ("Error Count", FieldType.NUMBER),
                ("Last Updated", FieldType.TIME),
            ]
        )

    def test_values(self):
        self.assertEqual(self.frame.length, 2)
        self.assertEqual(self.frame.field("Trace Id").values, ["abc", "def"])
        self.assertEqual(self.frame.field("Trace Group").values, ["checkout", "login"])
        self.assertEqual(self.frame.field("Latency (ms)").values, [42.5, 3.1])
        self.assertEqual(self.frame.field("Error Count").values, [2, 0])
        self.assertEqual(self.frame.field("Last Updated").values, ["2024-01-01T00:00:00Z", "2024-01-01T00:05:00Z"])

    def test_trace_id_links_to_trace_view(self):
        link = self.frame.field("Trace Id").config["links"][0]
        self.assertEqual(link["title"], "Trace: ${__value.raw}")
        self.assertEqual(link["internal"]["datasourceUid"], "os-uid")
        self.assertEqual(link["internal"]["datasourceName"], "OpenSearch")
        self.assertEqual(link["internal"]["query"], {"query": "traceId: ${__value.raw}", "luceneQueryType": "Traces"})

    def test_response_envelope(self):
        self.assertEqual(self.response.key, "A")
        self.assertEqual(self.frame.refId, "A")
        self.assertEqual(self.frame.meta, {"preferredVisualisationType": "table"})

    def test_missing_trace_group_fails_whole_frame(self):
        broken = [BUCKETS[0], {**BUCKETS[1], "trace_group": {"buckets": []}}]
        with self.assertRaises(MissingAggregationDataException):
            create_list_traces_data_frame([{"refId": "A"}], broken, "", "")


class TestTraceDataFrame(unittest.TestCase):

    def test_fixed_column_order(self):
        frame = create_trace_data_frame([{"refId": "B"}], []).data[0]
        self.assertEqual([field.name for field in frame.fields], SPAN_FIELDS)
        self.assertEqual(frame.length, 0)
        self.assertEqual(frame.meta, {"preferredVisualisationType": "trace"})
        self.assertEqual(frame.field("tags").type, FieldType.OTHER)
        self.assertEqual(frame.field("duration").type, FieldType.NUMBER)

    def test_rows(self):
        error_event = {"name": "exception", "time": "2024-01-01T00:00:00.001Z", "attributes": {"error": "boom"}}
        response = create_trace_data_frame(
            [{"refId": "B"}],
            [span_document("a"), span_document("b", events=[error_event])]
        )
        frame = response.data[0]

        self.assertEqual(response.key, "B")
        self.assertEqual(frame.field("spanID").values, ["a", "b"])
        self.assertEqual(frame.field("duration").values, [1.0, 1.0])
        self.assertEqual(frame.field("startTime").values, [1704067200000, 1704067200000])
        # a span without errors has no stack traces at all
        self.assertEqual(frame.field("stackTraces").values, [None, ["exception: boom"]])
        self.assertEqual(frame.field("logs").values[0], [])
        self.assertEqual(
            frame.field("tags").values[1],
            [{"key": "http@method", "value": "GET"}, {"key": "error", "value": True}]
        )
        self.assertEqual(frame.field("parentSpanID").values, [None, None])


if __name__ == '__main__':
    unittest.main()
