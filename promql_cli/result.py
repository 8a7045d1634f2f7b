"""Decode Prometheus query API responses.

The JSON body is decoded in two passes. The first pass reads only the fields
shared by every response (status, error, warnings, data.resultType and the
untyped data.result). The second pass converts data.result into a concrete
shape, selected by resultType:

    scalar, string  [<ts>, "<value>"]
    vector          [{"metric": {...}, "value": [<ts>, "<value>"]}, ...]
    matrix          [{"metric": {...}, "values": [[<ts>, "<value>"], ...]}, ...]

Sample values are kept as strings, exactly as the backend sent them.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Union

from promql_cli.errors import BackendError, MalformedResponse, UnsupportedResultType

log = logging.getLogger("promql.result")

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"

# Timestamps must land in years 1-9999 (UTC) to be displayable
MIN_TIMESTAMP = -62135596800.0
MAX_TIMESTAMP = 253402300800.0


@dataclass(frozen=True)
class ScalarResult:
    timestamp: float
    value: str


@dataclass(frozen=True)
class StringResult:
    timestamp: float
    value: str


@dataclass(frozen=True)
class Sample:
    labels: dict[str, str]
    timestamp: float
    value: str


@dataclass(frozen=True)
class Point:
    timestamp: float
    value: str


@dataclass(frozen=True)
class Series:
    labels: dict[str, str]
    points: list[Point]


@dataclass(frozen=True)
class VectorResult:
    samples: list[Sample]


@dataclass(frozen=True)
class MatrixResult:
    series: list[Series]


ResultPayload = Union[ScalarResult, StringResult, VectorResult, MatrixResult]


@dataclass(frozen=True)
class ResultEnvelope:
    result_type: str
    raw_payload: Any
    result: ResultPayload


@dataclass(frozen=True)
class QueryResponse:
    status: str
    data: ResultEnvelope
    error_message: str | None = None
    warnings: list[str] = field(default_factory=list)


# --- Payload decoders (second pass) ---


def _timestamp(raw: Any, where: str) -> float:
    # bool is an int subclass; JSON true/false is never a timestamp
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise MalformedResponse(f"{where}: timestamp must be a number, got {raw!r}")
    try:
        ts = float(raw)
    except OverflowError:
        ts = math.inf
    if not math.isfinite(ts) or not MIN_TIMESTAMP <= ts < MAX_TIMESTAMP:
        raise MalformedResponse(f"{where}: timestamp out of range, got {ts}")
    return ts


def _pair(raw: Any, where: str) -> tuple[float, str]:
    if not isinstance(raw, list) or len(raw) != 2:
        raise MalformedResponse(f"{where}: expected [timestamp, value], got {raw!r}")
    ts, value = raw
    if not isinstance(value, str):
        raise MalformedResponse(f"{where}: value must be a string, got {value!r}")
    return _timestamp(ts, where), value


def _labels(raw: Any, where: str) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise MalformedResponse(f"{where}: metric must be an object, got {raw!r}")
    for name, value in raw.items():
        if not isinstance(value, str):
            raise MalformedResponse(f"{where}: label {name!r} must be a string, got {value!r}")
    return dict(raw)


def _items(raw: Any, result_type: str) -> list:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise MalformedResponse(f"{result_type} result must be an array")
    return raw


def _item(raw: Any, where: str) -> dict:
    if not isinstance(raw, dict):
        raise MalformedResponse(f"{where}: expected an object, got {raw!r}")
    return raw


def _decode_scalar(raw: Any) -> ScalarResult:
    ts, value = _pair(raw, "scalar result")
    return ScalarResult(timestamp=ts, value=value)


def _decode_string(raw: Any) -> StringResult:
    ts, value = _pair(raw, "string result")
    return StringResult(timestamp=ts, value=value)


def _decode_vector(raw: Any) -> VectorResult:
    samples = []
    for i, item in enumerate(_items(raw, "vector")):
        where = f"vector result[{i}]"
        item = _item(item, where)
        if "value" not in item:
            raise MalformedResponse(f"{where}: missing 'value'")
        ts, value = _pair(item["value"], where)
        samples.append(Sample(labels=_labels(item.get("metric"), where), timestamp=ts, value=value))
    return VectorResult(samples=samples)


def _decode_matrix(raw: Any) -> MatrixResult:
    series = []
    for i, item in enumerate(_items(raw, "matrix")):
        where = f"matrix result[{i}]"
        item = _item(item, where)
        values = item.get("values")
        if not isinstance(values, list):
            raise MalformedResponse(f"{where}: 'values' must be an array")
        points = [Point(*_pair(p, f"{where}.values[{j}]")) for j, p in enumerate(values)]
        series.append(Series(labels=_labels(item.get("metric"), where), points=points))
    return MatrixResult(series=series)


_DECODERS = {
    "scalar": _decode_scalar,
    "string": _decode_string,
    "vector": _decode_vector,
    "matrix": _decode_matrix,
}


# --- Envelope (first pass) ---


def _reject_constant(name: str):
    raise MalformedResponse(f"invalid JSON response: non-standard token {name}")


def _load(body: bytes | str) -> dict:
    try:
        doc = json.loads(body, parse_constant=_reject_constant)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedResponse(f"invalid JSON response: {e}") from e
    if not isinstance(doc, dict):
        raise MalformedResponse("response must be a JSON object")
    return doc


def _backend_error(doc: dict) -> BackendError:
    error_type = doc.get("errorType")
    if not isinstance(error_type, str) or not error_type:
        error_type = None
    message = doc.get("error") or error_type
    if not message or not isinstance(message, str):
        raise MalformedResponse("error response without an error message")
    return BackendError(message, error_type=error_type)


def decode_response(body: bytes | str) -> QueryResponse:
    """Decode a query API body into a QueryResponse.

    Raises:
        MalformedResponse: invalid JSON or missing/mistyped fields.
        BackendError: the backend reported status=error.
        UnsupportedResultType: resultType is not scalar/string/vector/matrix.
    """
    doc = _load(body)

    status = doc.get("status")
    if status == STATUS_ERROR:
        raise _backend_error(doc)
    if status != STATUS_SUCCESS:
        raise MalformedResponse(f"unexpected status: {status!r}")

    data = doc.get("data")
    if not isinstance(data, dict):
        raise MalformedResponse("missing 'data' object")
    result_type = data.get("resultType")
    if not isinstance(result_type, str):
        raise MalformedResponse("missing 'data.resultType'")
    if "result" not in data:
        raise MalformedResponse("missing 'data.result'")
    raw_payload = data["result"]

    decoder = _DECODERS.get(result_type)
    if decoder is None:
        raise UnsupportedResultType(result_type)
    result = decoder(raw_payload)

    warnings = doc.get("warnings") or []
    if not isinstance(warnings, list):
        warnings = [str(warnings)]
    log.debug("Decoded %s result", result_type)

    return QueryResponse(
        status=status,
        data=ResultEnvelope(result_type=result_type, raw_payload=raw_payload, result=result),
        warnings=[str(w) for w in warnings],
    )
