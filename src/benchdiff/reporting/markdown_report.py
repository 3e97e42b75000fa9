"""Markdown reporter -- writes a summary suitable for a pull request comment."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

    from benchdiff.console._protocol import ConsoleProtocol
    from benchdiff.domain.comparison import (
        BenchmarkComparison,
        ComparisonResult,
        ComparisonValue,
    )

logger = logging.getLogger("benchdiff.reporting")

MARKDOWN_FILE_NAME = "benchdiff-summary.md"

_TABLE_HEADER = (
    "| {label} | Baseline | Target | Delta | % Change | Status |",
    "|--------|----------|--------|-------|----------|--------|",
)


def status_emoji(value: ComparisonValue[Any]) -> str:
    """Status column: only significant changes are coloured."""
    delta = value.delta
    if delta is None:
        return ":question:"
    if delta == 0 or not value.has_significant_change:
        return ":white_circle:"
    if value.is_improvement:
        return ":green_circle:"
    if value.is_regression:
        return ":red_circle:"
    return ":white_circle:"


def _fmt(v: float | None, unit: str) -> str:
    if v is None:
        return "N/A"
    text = str(v) if isinstance(v, int) else f"{v:.2f}"
    return f"{text} {unit}".rstrip()


def metric_row(name: str, value: ComparisonValue[Any], unit: str) -> str:
    pct = value.percentage_change
    percentage = "N/A" if pct is None else f"{pct:+.1f}%"
    return (
        f"| {name} | {_fmt(value.baseline, unit)} | {_fmt(value.target, unit)} | "
        f"{_fmt(value.delta, unit)} | {percentage} | {status_emoji(value)} |"
    )


def render_markdown(result: ComparisonResult) -> str:
    """Render the full Markdown document for *result*."""
    lines = ["# Benchmark Comparison Report", ""]
    if not result.comparisons:
        lines.append("No benchmarks found to compare.")
        return "\n".join(lines) + "\n"

    summary = result.summary()
    lines += [
        "## Summary",
        "",
        f"- **Total Benchmarks**: {summary.total}",
        f"- **Improvements**: {summary.improvements} :green_circle:",
        f"- **Regressions**: {summary.regressions} :red_circle:",
        f"- **Unchanged**: {summary.unchanged} :white_circle:",
        f"- **Significance Threshold**: {result.significance_threshold * 100:g}%",
        "",
    ]
    if summary.has_regressions:
        lines.append("> :warning: **Performance regressions detected!**")
    elif summary.has_improvements:
        lines.append("> :white_check_mark: **Performance improvements detected!**")
    else:
        lines.append("> :information_source: **No significant performance changes detected.**")
    lines += ["", "## Detailed Results", ""]

    for comparison in result.comparisons:
        lines += _benchmark_section(comparison)
        lines.append("")

    return "\n".join(lines).rstrip("\n") + "\n"


def _table(label: str, rows: list[str]) -> list[str]:
    return [_TABLE_HEADER[0].format(label=label), _TABLE_HEADER[1], *rows, ""]


def _benchmark_section(comparison: BenchmarkComparison) -> list[str]:
    stats = comparison.statistics
    memory = comparison.memory
    pct = stats.percentiles
    lines = [f"### {comparison.full_name}", "", "#### Performance Metrics", ""]
    lines += _table(
        "Metric",
        [
            metric_row("Mean", stats.mean, "ns"),
            metric_row("Median", stats.median, "ns"),
            metric_row("Min", stats.min, "ns"),
            metric_row("Max", stats.max, "ns"),
            metric_row("Std Dev", stats.standard_deviation, "ns"),
            metric_row("Std Error", stats.standard_error, "ns"),
        ],
    )
    lines += ["#### Memory Metrics", ""]
    lines += _table(
        "Metric",
        [
            metric_row("Allocated", memory.bytes_allocated_per_operation, "B"),
            metric_row("Gen0", memory.gen0_collections, ""),
            metric_row("Gen1", memory.gen1_collections, ""),
            metric_row("Gen2", memory.gen2_collections, ""),
            metric_row("Operations", memory.total_operations, ""),
        ],
    )
    lines += ["#### Percentiles", ""]
    lines += _table(
        "Percentile",
        [
            metric_row(name.upper(), getattr(pct, name), "ns")
            for name in ("p0", "p25", "p50", "p67", "p80", "p85", "p90", "p95", "p100")
        ],
    )
    return lines


class MarkdownReporter:
    """Writes ``benchdiff-summary.md`` into the output directory."""

    def __init__(self, output_path: Path, console: ConsoleProtocol) -> None:
        self._output_path = output_path
        self._console = console

    @property
    def output_path(self) -> Path:
        return self._output_path

    def generate(self, result: ComparisonResult) -> None:
        self._output_path.parent.mkdir(parents=True, exist_ok=True)
        self._output_path.write_text(render_markdown(result), encoding="utf-8")
        logger.info("Wrote Markdown report to %s", self._output_path)
        self._console.success(f"Markdown report saved to {self._output_path}")
