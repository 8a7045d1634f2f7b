"""Unit tests for table projection"""

import logging
from datetime import datetime, timezone

import pytest

from conftest import envelope
from promql_cli.result import MatrixResult, Point, QueryResponse, ResultEnvelope, Series, decode_response
from promql_cli.table import format_timestamp, project, sorted_label_names


class TestSortedLabelNames:
    """Label column ordering"""

    def test_anchors(self):
        labels = {"__name__": "x", "job": "j", "le": "0.5", "instance": "i"}
        assert sorted_label_names(labels) == ["__name__", "instance", "job", "le"]

    def test_plain_lexicographic(self):
        assert sorted_label_names({"c": "", "a": "", "b": ""}) == ["a", "b", "c"]

    def test_le_after_labels_sorting_later(self):
        assert sorted_label_names({"le": "", "zone": "", "__name__": ""}) == ["__name__", "zone", "le"]

    def test_uppercase_sorts_before_lowercase(self):
        assert sorted_label_names({"b": "", "A": "", "_x": ""}) == ["A", "_x", "b"]

    def test_empty(self):
        assert sorted_label_names({}) == []


class TestFormatTimestamp:
    """RFC3339 formatting with microsecond truncation"""

    def test_whole_seconds(self):
        assert format_timestamp(0) == "1970-01-01T00:00:00Z"
        assert format_timestamp(1700000000) == "2023-11-14T22:13:20Z"

    def test_fraction_trailing_zeros_stripped(self):
        assert format_timestamp(1435781451.5) == "2015-07-01T20:10:51.5Z"

    def test_sub_microsecond_truncated(self):
        # 1 + 2**-10 seconds is 1000976.5625 microseconds
        assert format_timestamp(1.0009765625) == "1970-01-01T00:00:01.000976Z"

    def test_half_microsecond_not_rounded_up(self):
        assert format_timestamp(1.0000005) == "1970-01-01T00:00:01Z"

    def test_earliest_year_is_zero_padded(self):
        assert format_timestamp(-62135596800) == "0001-01-01T00:00:00Z"

    @pytest.mark.parametrize("ts,text", [(1e12, "1000000000000.0"), (-1e15, "-1000000000000000.0"), (float("nan"), "nan")])
    def test_unrepresentable_instants_fall_back_to_seconds(self, ts, text):
        assert format_timestamp(ts) == text

    @pytest.mark.parametrize("ts", [1435781451.781, 1700000000.123456, 86400.0000009])
    def test_parses_back_to_same_instant(self, ts):
        text = format_timestamp(ts)
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        expected_micros = int(ts * 1_000_000)
        epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
        delta = parsed - epoch
        assert delta.days * 86_400_000_000 + delta.seconds * 1_000_000 + delta.microseconds == expected_micros


class TestProjectScalar:
    """scalar and string results"""

    @pytest.mark.parametrize("result_type", ["scalar", "string"])
    def test_single_row(self, result_type):
        table = project(decode_response(envelope(result_type, [1700000000, "42"])))
        assert table.header == ["timestamp", "value"]
        assert table.rows == [["2023-11-14T22:13:20Z", "42"]]


class TestProjectVector:
    """vector results"""

    def test_header_and_rows(self, vector_body):
        table = project(decode_response(vector_body))
        assert table.header == ["timestamp", "__name__", "instance", "job", "value"]
        assert table.rows == [
            ["2015-07-01T20:10:51.5Z", "up", "localhost:9090", "prometheus", "1"],
            ["2015-07-01T20:10:51.5Z", "up", "localhost:9100", "node", "0"],
        ]

    def test_plain_labels(self):
        samples = [{"metric": {"c": str(i), "a": "x", "b": "y"}, "value": [1, str(i)]} for i in range(5)]
        table = project(decode_response(envelope("vector", samples)))
        assert table.header == ["timestamp", "a", "b", "c", "value"]
        assert len(table.rows) == 5
        assert [row[3] for row in table.rows] == ["0", "1", "2", "3", "4"]

    def test_histogram_buckets(self):
        samples = [
            {"metric": {"le": le, "__name__": "h_bucket", "job": "api"}, "value": [1, v]}
            for le, v in [("0.1", "3"), ("+Inf", "9")]
        ]
        table = project(decode_response(envelope("vector", samples)))
        assert table.header == ["timestamp", "__name__", "job", "le", "value"]
        assert table.rows[1][1:] == ["h_bucket", "api", "+Inf", "9"]

    def test_no_labels(self):
        table = project(decode_response(envelope("vector", [{"metric": {}, "value": [1, "2"]}])))
        assert table.header == ["timestamp", "value"]
        assert table.rows == [["1970-01-01T00:00:01Z", "2"]]

    def test_empty(self):
        table = project(decode_response(envelope("vector", [])))
        assert table.header == []
        assert table.rows == []

    def test_mixed_label_sets_keep_row_width(self, caplog):
        samples = [
            {"metric": {"a": "1", "b": "2"}, "value": [1, "1"]},
            {"metric": {"a": "3", "c": "4"}, "value": [1, "2"]},
        ]
        with caplog.at_level(logging.WARNING, logger="promql.table"):
            table = project(decode_response(envelope("vector", samples)))
        assert table.header == ["timestamp", "a", "b", "value"]
        assert table.rows[1] == ["1970-01-01T00:00:01Z", "3", "", "2"]
        assert all(len(row) == len(table.header) for row in table.rows)
        assert "mixes label sets" in caplog.text


class TestProjectMatrix:
    """matrix results"""

    def test_rows_per_point(self, matrix_body):
        table = project(decode_response(matrix_body))
        assert table.header == ["timestamp", "__name__", "instance", "job", "value"]
        assert len(table.rows) == 5
        assert [row[2] for row in table.rows] == ["localhost:9090"] * 3 + ["localhost:9091"] * 2
        assert [row[4] for row in table.rows] == ["1", "1", "1", "0", "0.5"]
        assert table.rows[0][0] == "2015-07-01T20:10:30.25Z"
        assert table.rows[4][0] == "2015-07-01T20:10:45.25Z"

    def test_empty(self):
        table = project(decode_response(envelope("matrix", [])))
        assert table.header == []
        assert table.rows == []

    def test_series_without_points(self):
        table = project(decode_response(envelope("matrix", [{"metric": {"job": "a"}, "values": []}])))
        assert table.header == ["timestamp", "job", "value"]
        assert table.rows == []

    def test_out_of_range_point_does_not_fail(self):
        result = MatrixResult(series=[Series(labels={"job": "a"}, points=[Point(1e12, "1"), Point(1, "2")])])
        response = QueryResponse(status="success", data=ResultEnvelope("matrix", None, result))
        table = project(response)
        assert table.rows == [
            ["1000000000000.0", "a", "1"],
            ["1970-01-01T00:00:01Z", "a", "2"],
        ]
