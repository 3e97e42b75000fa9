"""JSON reporter -- writes the full comparison as a machine-readable document.

Keys are camelCase; absent values (for example the delta of a benchmark
that only exists on one side) are omitted rather than written as null.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from benchdiff.domain.comparison import ComparisonValue

if TYPE_CHECKING:
    from pathlib import Path

    from benchdiff.console._protocol import ConsoleProtocol
    from benchdiff.domain.comparison import BenchmarkComparison, ComparisonResult

logger = logging.getLogger("benchdiff.reporting")

JSON_FILE_NAME = "benchdiff-results.json"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def change_symbol(value: ComparisonValue[Any]) -> str:
    """One-character verdict: ``?`` unknown, ``=`` unchanged, ``✓`` better, ``✗`` otherwise."""
    delta = value.delta
    if delta is None:
        return "?"
    if delta == 0:
        return "="
    return "✓" if value.is_improvement else "✗"


def value_to_dict(value: ComparisonValue[Any]) -> dict[str, Any]:
    data: dict[str, Any] = {
        "baseline": value.baseline,
        "target": value.target,
        "delta": value.delta,
        "percentageChange": value.percentage_change,
        "direction": value.direction.value,
        "isImprovement": value.is_improvement,
        "isRegression": value.is_regression,
        "hasSignificantChange": value.has_significant_change,
        "changeSymbol": change_symbol(value),
    }
    return {k: v for k, v in data.items() if v is not None}


def _group_to_dict(group: Any) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for f in dataclasses.fields(group):
        attr = getattr(group, f.name)
        if isinstance(attr, ComparisonValue):
            data[_camel(f.name)] = value_to_dict(attr)
        else:
            data[_camel(f.name)] = _group_to_dict(attr)
    return data


def comparison_to_dict(comparison: BenchmarkComparison) -> dict[str, Any]:
    return {
        "fullName": comparison.full_name,
        "statistics": _group_to_dict(comparison.statistics),
        "memory": _group_to_dict(comparison.memory),
    }


def result_to_dict(result: ComparisonResult, *, generated_at: datetime | None = None) -> dict[str, Any]:
    """Convert a ComparisonResult into the JSON report document."""
    summary = result.summary()
    return {
        "generatedAt": (generated_at or datetime.now(UTC)).isoformat(),
        "totalBenchmarks": summary.total,
        "significanceThreshold": result.significance_threshold,
        "summary": {
            "totalBenchmarks": summary.total,
            "improvements": summary.improvements,
            "regressions": summary.regressions,
            "unchanged": summary.unchanged,
            "hasRegressions": summary.has_regressions,
            "hasImprovements": summary.has_improvements,
        },
        "comparisons": [comparison_to_dict(c) for c in result.comparisons],
    }


class JsonReporter:
    """Writes ``benchdiff-results.json`` into the output directory."""

    def __init__(self, output_path: Path, console: ConsoleProtocol) -> None:
        self._output_path = output_path
        self._console = console

    @property
    def output_path(self) -> Path:
        return self._output_path

    def generate(self, result: ComparisonResult) -> None:
        content = (
            json.dumps(result_to_dict(result), indent=2, ensure_ascii=False, allow_nan=False)
            + "\n"
        )
        self._output_path.parent.mkdir(parents=True, exist_ok=True)
        self._output_path.write_text(content, encoding="utf-8")
        logger.info("Wrote JSON report to %s", self._output_path)
        self._console.success(f"JSON report saved to {self._output_path}")
