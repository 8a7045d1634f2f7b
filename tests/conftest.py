"""Pytest configuration and fixtures"""

import json

import pytest


def envelope(result_type, result, **extra):
    """Build a successful query API body."""
    doc = {"status": "success", "data": {"resultType": result_type, "result": result}}
    doc.update(extra)
    return json.dumps(doc).encode()


@pytest.fixture
def scalar_body():
    return envelope("scalar", [1435781451.781, "1"])


@pytest.fixture
def vector_body():
    return envelope("vector", [
        {
            "metric": {"__name__": "up", "job": "prometheus", "instance": "localhost:9090"},
            "value": [1435781451.5, "1"],
        },
        {
            "metric": {"__name__": "up", "job": "node", "instance": "localhost:9100"},
            "value": [1435781451.5, "0"],
        },
    ])


@pytest.fixture
def matrix_body():
    return envelope("matrix", [
        {
            "metric": {"__name__": "up", "job": "prometheus", "instance": "localhost:9090"},
            "values": [[1435781430.25, "1"], [1435781445.25, "1"], [1435781460.25, "1"]],
        },
        {
            "metric": {"__name__": "up", "job": "node", "instance": "localhost:9091"},
            "values": [[1435781430.25, "0"], [1435781445.25, "0.5"]],
        },
    ])


@pytest.fixture
def error_body():
    return json.dumps({
        "status": "error",
        "errorType": "bad_data",
        "error": "bad query",
    }).encode()
