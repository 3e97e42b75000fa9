"""Benchmark comparison engine.

Pure functions and frozen records that merge the benchmarks of two runs by
name and judge every metric as improved, regressed or unchanged.

Nothing in this module performs I/O. Given well-formed input the only error
it raises is ``AmbiguousBenchmarkNameError`` for a name reported twice on one
side.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from benchdiff.domain.errors import AmbiguousBenchmarkNameError
from benchdiff.domain.models import (
    Benchmark,
    ConfidenceInterval,
    MemoryMetrics,
    Percentiles,
    RunResult,
    Statistics,
)

DEFAULT_SIGNIFICANCE_THRESHOLD = 0.05

T = TypeVar("T", int, float)


class MetricDirection(Enum):
    """Which way a metric has to move to count as an improvement."""

    LOWER_IS_BETTER = "lower_is_better"
    HIGHER_IS_BETTER = "higher_is_better"
    IRRELEVANT = "irrelevant"


LOWER = MetricDirection.LOWER_IS_BETTER
HIGHER = MetricDirection.HIGHER_IS_BETTER
IRRELEVANT = MetricDirection.IRRELEVANT


# ---------------------------------------------------------------------------
# Single metric
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComparisonValue(Generic[T]):
    """Baseline and target values of one numeric metric.

    ``significance_threshold`` is a fraction (0.05 means 5 %). Either side may
    be absent when a benchmark only exists in one of the runs; every derived
    property then reports "no change information".
    """

    baseline: T | None
    target: T | None
    direction: MetricDirection
    significance_threshold: float = DEFAULT_SIGNIFICANCE_THRESHOLD

    @property
    def delta(self) -> T | None:
        """``target - baseline``, or None when a side is missing."""
        if self.baseline is None or self.target is None:
            return None
        return self.target - self.baseline

    @property
    def percentage_change(self) -> float | None:
        """Relative change in percent; None when undefined (missing side or zero baseline)."""
        delta = self.delta
        if delta is None or self.baseline == 0:
            return None
        return float(delta) / float(self.baseline) * 100.0

    @property
    def is_improvement(self) -> bool:
        delta = self.delta
        if delta is None:
            return False
        if self.direction is LOWER:
            return delta < 0
        if self.direction is HIGHER:
            return delta > 0
        return False

    @property
    def is_regression(self) -> bool:
        delta = self.delta
        if delta is None:
            return False
        if self.direction is LOWER:
            return delta > 0
        if self.direction is HIGHER:
            return delta < 0
        return False

    @property
    def has_significant_change(self) -> bool:
        """True when the absolute relative change reaches the threshold."""
        if self.delta == 0:
            return False
        change = self.percentage_change
        if change is None:
            return False
        return abs(change) >= self.significance_threshold * 100.0

    @property
    def is_significant_improvement(self) -> bool:
        return self.is_improvement and self.has_significant_change

    @property
    def is_significant_regression(self) -> bool:
        return self.is_regression and self.has_significant_change


def _field_comparer(
    baseline: object | None,
    target: object | None,
    threshold: float,
) -> Callable[[str, MetricDirection], ComparisonValue[Any]]:
    """Return a helper pairing the same attribute of *baseline* and *target*."""

    def compare_field(name: str, direction: MetricDirection) -> ComparisonValue[Any]:
        return ComparisonValue(
            baseline=getattr(baseline, name) if baseline is not None else None,
            target=getattr(target, name) if target is not None else None,
            direction=direction,
            significance_threshold=threshold,
        )

    return compare_field


# ---------------------------------------------------------------------------
# Grouped metrics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConfidenceIntervalComparison:
    n: ComparisonValue[int]
    mean: ComparisonValue[float]
    standard_error: ComparisonValue[float]
    level: ComparisonValue[int]
    margin: ComparisonValue[float]
    lower: ComparisonValue[float]
    upper: ComparisonValue[float]

    @classmethod
    def build(
        cls,
        baseline: ConfidenceInterval | None,
        target: ConfidenceInterval | None,
        threshold: float,
    ) -> ConfidenceIntervalComparison:
        v = _field_comparer(baseline, target, threshold)
        return cls(
            n=v("n", IRRELEVANT),
            mean=v("mean", LOWER),
            standard_error=v("standard_error", IRRELEVANT),
            level=v("level", IRRELEVANT),
            margin=v("margin", LOWER),
            lower=v("lower", LOWER),
            upper=v("upper", LOWER),
        )


@dataclass(frozen=True)
class PercentilesComparison:
    p0: ComparisonValue[float]
    p25: ComparisonValue[float]
    p50: ComparisonValue[float]
    p67: ComparisonValue[float]
    p80: ComparisonValue[float]
    p85: ComparisonValue[float]
    p90: ComparisonValue[float]
    p95: ComparisonValue[float]
    p100: ComparisonValue[float]

    @classmethod
    def build(
        cls,
        baseline: Percentiles | None,
        target: Percentiles | None,
        threshold: float,
    ) -> PercentilesComparison:
        v = _field_comparer(baseline, target, threshold)
        return cls(
            p0=v("p0", LOWER),
            p25=v("p25", LOWER),
            p50=v("p50", LOWER),
            p67=v("p67", LOWER),
            p80=v("p80", LOWER),
            p85=v("p85", LOWER),
            p90=v("p90", LOWER),
            p95=v("p95", LOWER),
            p100=v("p100", LOWER),
        )


@dataclass(frozen=True)
class StatisticsComparison:
    mean: ComparisonValue[float]
    min: ComparisonValue[float]
    max: ComparisonValue[float]
    median: ComparisonValue[float]
    standard_deviation: ComparisonValue[float]
    standard_error: ComparisonValue[float]
    variance: ComparisonValue[float]
    skewness: ComparisonValue[float]
    kurtosis: ComparisonValue[float]
    confidence_interval: ConfidenceIntervalComparison
    percentiles: PercentilesComparison

    @classmethod
    def build(
        cls,
        baseline: Statistics | None,
        target: Statistics | None,
        threshold: float,
    ) -> StatisticsComparison:
        v = _field_comparer(baseline, target, threshold)
        return cls(
            mean=v("mean", LOWER),
            min=v("min", LOWER),
            max=v("max", LOWER),
            median=v("median", LOWER),
            standard_deviation=v("standard_deviation", IRRELEVANT),
            standard_error=v("standard_error", IRRELEVANT),
            variance=v("variance", IRRELEVANT),
            skewness=v("skewness", IRRELEVANT),
            kurtosis=v("kurtosis", IRRELEVANT),
            confidence_interval=ConfidenceIntervalComparison.build(
                baseline.confidence_interval if baseline is not None else None,
                target.confidence_interval if target is not None else None,
                threshold,
            ),
            percentiles=PercentilesComparison.build(
                baseline.percentiles if baseline is not None else None,
                target.percentiles if target is not None else None,
                threshold,
            ),
        )


@dataclass(frozen=True)
class MemoryMetricsComparison:
    bytes_allocated_per_operation: ComparisonValue[int]
    gen0_collections: ComparisonValue[int]
    gen1_collections: ComparisonValue[int]
    gen2_collections: ComparisonValue[int]
    total_operations: ComparisonValue[int]

    @classmethod
    def build(
        cls,
        baseline: MemoryMetrics | None,
        target: MemoryMetrics | None,
        threshold: float,
    ) -> MemoryMetricsComparison:
        v = _field_comparer(baseline, target, threshold)
        return cls(
            bytes_allocated_per_operation=v("bytes_allocated_per_operation", LOWER),
            gen0_collections=v("gen0_collections", LOWER),
            gen1_collections=v("gen1_collections", LOWER),
            gen2_collections=v("gen2_collections", LOWER),
            total_operations=v("total_operations", HIGHER),
        )


# ---------------------------------------------------------------------------
# Presence of a benchmark on each side
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BothSides:
    baseline: Benchmark
    target: Benchmark

    @property
    def full_name(self) -> str:
        return self.baseline.full_name


@dataclass(frozen=True)
class BaselineOnly:
    baseline: Benchmark

    @property
    def full_name(self) -> str:
        return self.baseline.full_name


@dataclass(frozen=True)
class TargetOnly:
    target: Benchmark

    @property
    def full_name(self) -> str:
        return self.target.full_name


Pairing = BothSides | BaselineOnly | TargetOnly


def _sides(pairing: Pairing) -> tuple[Benchmark | None, Benchmark | None]:
    if isinstance(pairing, BothSides):
        return pairing.baseline, pairing.target
    if isinstance(pairing, BaselineOnly):
        return pairing.baseline, None
    return None, pairing.target


# ---------------------------------------------------------------------------
# Benchmark and run level
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BenchmarkComparison:
    """Every metric of one benchmark, baseline against target."""

    full_name: str
    statistics: StatisticsComparison
    memory: MemoryMetricsComparison

    @classmethod
    def from_pairing(cls, pairing: Pairing, threshold: float) -> BenchmarkComparison:
        baseline, target = _sides(pairing)
        return cls(
            full_name=pairing.full_name,
            statistics=StatisticsComparison.build(
                baseline.statistics if baseline is not None else None,
                target.statistics if target is not None else None,
                threshold,
            ),
            memory=MemoryMetricsComparison.build(
                baseline.memory if baseline is not None else None,
                target.memory if target is not None else None,
                threshold,
            ),
        )

    @property
    def is_compared(self) -> bool:
        """True when the benchmark exists in both runs."""
        mean = self.statistics.mean
        return mean.baseline is not None and mean.target is not None


@dataclass(frozen=True)
class ComparisonSummary:
    """Counts of significant changes, judged on the mean."""

    total: int
    improvements: int
    regressions: int

    @property
    def unchanged(self) -> int:
        return self.total - self.improvements - self.regressions

    @property
    def has_regressions(self) -> bool:
        return self.regressions > 0

    @property
    def has_improvements(self) -> bool:
        return self.improvements > 0


@dataclass(frozen=True)
class ComparisonResult:
    """Ordered benchmark comparisons and the threshold they were judged with."""

    comparisons: tuple[BenchmarkComparison, ...]
    significance_threshold: float

    @classmethod
    def from_runs(
        cls,
        baseline: RunResult,
        target: RunResult,
        significance_threshold: float = DEFAULT_SIGNIFICANCE_THRESHOLD,
    ) -> ComparisonResult:
        pairings = pair_benchmarks(
            index_benchmarks(baseline.benchmarks(), side="baseline"),
            index_benchmarks(target.benchmarks(), side="target"),
        )
        return cls(
            comparisons=tuple(
                BenchmarkComparison.from_pairing(p, significance_threshold) for p in pairings
            ),
            significance_threshold=significance_threshold,
        )

    def summary(self) -> ComparisonSummary:
        return ComparisonSummary(
            total=len(self.comparisons),
            improvements=sum(
                1 for c in self.comparisons if c.statistics.mean.is_significant_improvement
            ),
            regressions=sum(
                1 for c in self.comparisons if c.statistics.mean.is_significant_regression
            ),
        )


def index_benchmarks(benchmarks: Iterable[Benchmark], *, side: str) -> dict[str, Benchmark]:
    """Map full names to benchmarks, rejecting names that occur twice."""
    index: dict[str, Benchmark] = {}
    for benchmark in benchmarks:
        if benchmark.full_name in index:
            raise AmbiguousBenchmarkNameError(side, benchmark.full_name)
        index[benchmark.full_name] = benchmark
    return index


def pair_benchmarks(
    baseline: dict[str, Benchmark],
    target: dict[str, Benchmark],
) -> list[Pairing]:
    """Pair both indexes over the union of their names, sorted by code point."""
    pairings: list[Pairing] = []
    for name in sorted(baseline.keys() | target.keys()):
        base = baseline.get(name)
        tgt = target.get(name)
        if base is not None and tgt is not None:
            pairings.append(BothSides(baseline=base, target=tgt))
        elif base is not None:
            pairings.append(BaselineOnly(baseline=base))
        elif tgt is not None:
            pairings.append(TargetOnly(target=tgt))
    return pairings


def compare(
    baseline: RunResult,
    target: RunResult,
    significance_threshold: float = DEFAULT_SIGNIFICANCE_THRESHOLD,
) -> ComparisonResult:
    """Compare two executed runs. Pure given its inputs."""
    return ComparisonResult.from_runs(baseline, target, significance_threshold)
