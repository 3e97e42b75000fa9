"""Adapter: load BenchmarkDotNet JSON exports into MeasurementReport records.

Only files matching ``*report-full-compressed.json`` directly inside the
results directory are read. Decoding is strict: a missing or wrongly typed
field fails the whole report rather than producing partial numbers.
"""

from __future__ import annotations

import json
import logging
import math
from typing import TYPE_CHECKING, Any

from benchdiff.domain.errors import MalformedReportError, NoResultsFoundError
from benchdiff.domain.models import (
    Benchmark,
    ConfidenceInterval,
    MeasurementReport,
    MemoryMetrics,
    Percentiles,
    Statistics,
)

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger("benchdiff.adapters")

REPORT_PATTERN = "*report-full-compressed.json"

_PERCENTILE_KEYS = ("p0", "p25", "p50", "p67", "p80", "p85", "p90", "p95", "p100")


class _DecodeError(Exception):
    """Internal: a field is missing or has the wrong type."""


def _section(data: Any, key: str, where: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise _DecodeError(f"{where} must be an object")
    value = data.get(key)
    if not isinstance(value, dict):
        raise _DecodeError(f"{where}.{key} must be an object")
    return value


def _number(data: dict[str, Any], key: str, where: str) -> float:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _DecodeError(f"{where}.{key} must be a number")
    if not math.isfinite(value):
        raise _DecodeError(f"{where}.{key} must be a finite number")
    return float(value)


def _integer(data: dict[str, Any], key: str, where: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise _DecodeError(f"{where}.{key} must be an integer")
    return value


def _string(data: dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise _DecodeError(f"{where}.{key} must be a string")
    return value


def _decode_statistics(data: dict[str, Any], where: str) -> Statistics:
    ci = _section(data, "confidenceInterval", where)
    ci_where = f"{where}.confidenceInterval"
    pct = _section(data, "percentiles", where)
    pct_where = f"{where}.percentiles"
    return Statistics(
        mean=_number(data, "mean", where),
        min=_number(data, "min", where),
        max=_number(data, "max", where),
        median=_number(data, "median", where),
        standard_deviation=_number(data, "standardDeviation", where),
        standard_error=_number(data, "standardError", where),
        variance=_number(data, "variance", where),
        skewness=_number(data, "skewness", where),
        kurtosis=_number(data, "kurtosis", where),
        confidence_interval=ConfidenceInterval(
            n=_integer(ci, "n", ci_where),
            mean=_number(ci, "mean", ci_where),
            standard_error=_number(ci, "standardError", ci_where),
            level=_integer(ci, "level", ci_where),
            margin=_number(ci, "margin", ci_where),
            lower=_number(ci, "lower", ci_where),
            upper=_number(ci, "upper", ci_where),
        ),
        percentiles=Percentiles(**{p: _number(pct, p, pct_where) for p in _PERCENTILE_KEYS}),
    )


def _decode_memory(data: dict[str, Any], where: str) -> MemoryMetrics:
    return MemoryMetrics(
        bytes_allocated_per_operation=_integer(data, "bytesAllocatedPerOperation", where),
        gen0_collections=_integer(data, "gen0Collections", where),
        gen1_collections=_integer(data, "gen1Collections", where),
        gen2_collections=_integer(data, "gen2Collections", where),
        total_operations=_integer(data, "totalOperations", where),
    )


def _decode_benchmark(data: Any, where: str) -> Benchmark:
    if not isinstance(data, dict):
        raise _DecodeError(f"{where} must be an object")
    return Benchmark(
        full_name=_string(data, "fullName", where),
        statistics=_decode_statistics(_section(data, "statistics", where), f"{where}.statistics"),
        memory=_decode_memory(_section(data, "memory", where), f"{where}.memory"),
    )


def decode_report(data: Any) -> MeasurementReport:
    """Build a MeasurementReport from an already parsed JSON document.

    Raises:
        ValueError: if the document does not have the expected shape.
    """
    try:
        if not isinstance(data, dict):
            raise _DecodeError("document must be a JSON object")
        benchmarks = data.get("benchmarks")
        if not isinstance(benchmarks, list):
            raise _DecodeError("benchmarks must be an array")
        return MeasurementReport(
            title=_string(data, "title", "report"),
            benchmarks=tuple(
                _decode_benchmark(b, f"benchmarks[{i}]") for i, b in enumerate(benchmarks)
            ),
        )
    except _DecodeError as exc:
        raise ValueError(str(exc)) from exc


def load_report(path: Path) -> MeasurementReport:
    """Read and decode a single report file.

    Raises:
        MalformedReportError: if the file cannot be read or decoded.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedReportError(path, str(exc)) from exc

    try:
        report = decode_report(data)
    except ValueError as exc:
        raise MalformedReportError(path, str(exc)) from exc

    logger.debug(
        "Loaded report %s (%d benchmarks) from %s", report.title, len(report.benchmarks), path
    )
    return report


def load_reports(directory: Path) -> list[MeasurementReport]:
    """Load every report file directly inside *directory*, in file name order.

    Raises:
        NoResultsFoundError: if the directory is missing or has no report files.
        MalformedReportError: if any report file cannot be decoded.
    """
    if not directory.is_dir():
        raise NoResultsFoundError(directory)

    files = sorted(p for p in directory.glob(REPORT_PATTERN) if p.is_file())
    if not files:
        raise NoResultsFoundError(directory)

    return [load_report(f) for f in files]
