"""Flatten decoded query results into a header/rows table."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from promql_cli.result import (
    MatrixResult,
    QueryResponse,
    ScalarResult,
    StringResult,
    VectorResult,
)

log = logging.getLogger("promql.table")

METRIC_NAME_LABEL = "__name__"
BUCKET_LABEL = "le"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class Table:
    header: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)


def _label_sort_key(name: str) -> tuple[int, str]:
    # metric name at leftmost, histogram bucket bound at rightmost
    if name == METRIC_NAME_LABEL:
        return (0, name)
    if name == BUCKET_LABEL:
        return (2, name)
    return (1, name)


def sorted_label_names(labels) -> list[str]:
    """Label names in column order: __name__ first, le last, the rest sorted."""
    return sorted(labels, key=_label_sort_key)


def format_timestamp(timestamp: float) -> str:
    """Format fractional Unix seconds as an RFC3339 UTC timestamp.

    Precision is truncated to microseconds; trailing zeros of the fraction are
    dropped, and the fraction is omitted when it is zero. Instants outside
    years 1-9999 are returned as the raw seconds.
    """
    try:
        t = _EPOCH + timedelta(microseconds=int(timestamp * 1_000_000))
    except (OverflowError, ValueError):
        # outside what datetime can represent; show the raw seconds
        return repr(timestamp)
    text = t.replace(tzinfo=None, microsecond=0).isoformat()
    if t.microsecond:
        text += "." + f"{t.microsecond:06d}".rstrip("0")
    return text + "Z"


def _label_header(names: list[str]) -> list[str]:
    return ["timestamp", *names, "value"]


def _row(timestamp: float, labels: dict[str, str], names: list[str], value: str) -> list[str]:
    return [format_timestamp(timestamp), *(labels.get(n, "") for n in names), value]


def _check_label_sets(names: list[str], label_sets) -> None:
    expected = set(names)
    for labels in label_sets:
        if set(labels) != expected:
            log.warning(
                "Result mixes label sets; columns follow the first series (%s)",
                ", ".join(names) or "no labels",
            )
            return


def project(response: QueryResponse) -> Table:
    """Build the display table for a successfully decoded response.

    Vector and matrix tables take their label columns from the first
    sample/series. An empty vector or matrix gives an empty table.
    """
    result = response.data.result
    table = Table()

    if isinstance(result, (ScalarResult, StringResult)):
        table.header = ["timestamp", "value"]
        table.rows = [[format_timestamp(result.timestamp), result.value]]

    elif isinstance(result, VectorResult):
        if not result.samples:
            return table
        names = sorted_label_names(result.samples[0].labels)
        _check_label_sets(names, (s.labels for s in result.samples))
        table.header = _label_header(names)
        for sample in result.samples:
            table.rows.append(_row(sample.timestamp, sample.labels, names, sample.value))

    elif isinstance(result, MatrixResult):
        if not result.series:
            return table
        names = sorted_label_names(result.series[0].labels)
        _check_label_sets(names, (s.labels for s in result.series))
        table.header = _label_header(names)
        for series in result.series:
            for point in series.points:
                table.rows.append(_row(point.timestamp, series.labels, names, point.value))

    log.debug("Projected %s result into %d row(s)", response.data.result_type, len(table.rows))
    return table
