"""Console reporter -- prints the comparison to the terminal."""

from __future__ import annotations

from typing import TYPE_CHECKING

from benchdiff.domain.comparison import MetricDirection

if TYPE_CHECKING:
    from benchdiff.console._protocol import ConsoleProtocol
    from benchdiff.domain.comparison import (
        BenchmarkComparison,
        ComparisonResult,
        ComparisonValue,
    )

DURATION_UNITS = ("ns", "μs", "ms", "s")

# (fancy, plain) renderings of each result symbol.
_IMPROVEMENT_LOWER = ("▼", "[IMP]")
_IMPROVEMENT_HIGHER = ("▲", "[IMP]")
_REGRESSION_LOWER = ("▼", "[REG]")
_REGRESSION_HIGHER = ("▲", "[REG]")
_STABLE = ("≈", "[STA]")
_IRRELEVANT = (" ", "     ")
_UNCOMPARED = ("○", "     ")


def result_symbol(value: ComparisonValue[float]) -> tuple[tuple[str, str], str]:
    """Pick the symbol pair and style kind for one metric line."""
    if value.direction is MetricDirection.IRRELEVANT:
        return _IRRELEVANT, "neutral"
    if value.baseline is None or value.target is None:
        return _UNCOMPARED, "neutral"
    if not value.has_significant_change:
        return _STABLE, "stable"

    delta = value.delta or 0.0
    if value.is_improvement:
        return (_IMPROVEMENT_LOWER if delta < 0 else _IMPROVEMENT_HIGHER), "improvement"
    if value.is_regression:
        return (_REGRESSION_LOWER if delta < 0 else _REGRESSION_HIGHER), "regression"
    return _STABLE, "stable"


def _smaller_non_zero(a: float | None, b: float | None) -> float:
    if not a:
        return b or 0.0
    if not b:
        return a
    return min(a, b)


def format_durations(value: ComparisonValue[float]) -> tuple[str, str]:
    """Format baseline and target nanoseconds with a shared, scaled unit."""
    baseline = value.baseline
    target = value.target
    if baseline is None and target is None:
        return "n/a", "n/a"

    unit_index = 0
    while (
        _smaller_non_zero(baseline, target) > 1000.0 and unit_index < len(DURATION_UNITS) - 1
    ):
        baseline = baseline / 1000 if baseline is not None else None
        target = target / 1000 if target is not None else None
        unit_index += 1

    unit = DURATION_UNITS[unit_index]

    def fmt(v: float | None) -> str:
        return "n/a" if v is None else f"{v:.2f} {unit}"

    return fmt(baseline), fmt(target)


class ConsoleReporter:
    """Prints mean, error and standard deviation of every benchmark."""

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def generate(self, result: ComparisonResult) -> None:
        self._console.rule("Benchmark comparison report")
        for comparison in result.comparisons:
            self._print_comparison(comparison)
        self._print_summary(result)

    def _decor(self, fancy: str, plain: str = "") -> str:
        return fancy if self._console.fancy else plain

    def _print_comparison(self, comparison: BenchmarkComparison) -> None:
        header = f"{self._decor('🏁 ')}Results for {comparison.full_name}"
        if not comparison.is_compared:
            only = "target" if comparison.statistics.mean.baseline is None else "baseline"
            header += f" ({only} only)"
        self._console.info(header, indent=1)
        self._print_duration("Mean", comparison.statistics.mean)
        self._print_duration("Error", comparison.statistics.standard_error)
        self._print_duration("StdDev", comparison.statistics.standard_deviation)

    def _print_duration(self, name: str, value: ComparisonValue[float]) -> None:
        baseline, target = format_durations(value)
        (fancy, plain), kind = result_symbol(value)

        change = ""
        if value.direction is not MetricDirection.IRRELEVANT:
            pct = value.percentage_change
            if pct is not None:
                change = f" ({pct:+.1f} %)"

        arrow = self._decor("▷▷", "=>")
        self._console.metric(
            self._decor(fancy, plain), kind, f"{name}: {baseline} {arrow} {target}{change}"
        )

    def _print_summary(self, result: ComparisonResult) -> None:
        summary = result.summary()
        stats = self._decor("📊 ")
        if not summary.improvements and not summary.regressions:
            self._console.info(f"{stats}No significant changes detected.")
            return

        self._console.info(f"{stats}Significant changes detected:")
        if summary.improvements:
            self._console.metric(
                self._decor("▼ ▲", "[IMP]"), "improvement", f"improvements: {summary.improvements}"
            )
        if summary.regressions:
            self._console.metric(
                self._decor("▼ ▲", "[REG]"), "regression", f"regressions: {summary.regressions}"
            )
