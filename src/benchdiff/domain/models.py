"""Core data types for benchdiff.

All types are frozen dataclasses with complete type annotations.
This module has ZERO imports from outside the Python standard library.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# ---------------------------------------------------------------------------
# Measurement report (one BenchmarkDotNet JSON export)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConfidenceInterval:
    """Confidence interval around the mean, as reported by the harness."""

    n: int
    mean: float
    standard_error: float
    level: int
    margin: float
    lower: float
    upper: float


@dataclass(frozen=True)
class Percentiles:
    """Timing percentiles in nanoseconds."""

    p0: float
    p25: float
    p50: float
    p67: float
    p80: float
    p85: float
    p90: float
    p95: float
    p100: float


@dataclass(frozen=True)
class Statistics:
    """Timing distribution summary for one benchmark case (nanoseconds)."""

    mean: float
    min: float
    max: float
    median: float
    standard_deviation: float
    standard_error: float
    variance: float
    skewness: float
    kurtosis: float
    confidence_interval: ConfidenceInterval
    percentiles: Percentiles


@dataclass(frozen=True)
class MemoryMetrics:
    """Allocation and garbage-collection summary for one benchmark case."""

    bytes_allocated_per_operation: int
    gen0_collections: int
    gen1_collections: int
    gen2_collections: int
    total_operations: int


@dataclass(frozen=True)
class Benchmark:
    """One measured case, keyed across runs by ``full_name``."""

    full_name: str
    statistics: Statistics
    memory: MemoryMetrics


@dataclass(frozen=True)
class MeasurementReport:
    """Parsed output of one benchmark executable.

    ``benchmarks`` keeps the order the harness produced them in.
    """

    title: str
    benchmarks: tuple[Benchmark, ...]


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProjectRef:
    """A benchmark project requested by name within a source tree."""

    name: str
    source_directory: Path


@dataclass(frozen=True)
class Run:
    """One side of a comparison (baseline or target)."""

    name: str
    source_directory: Path
    output_directory: Path
    projects: tuple[ProjectRef, ...]

    @classmethod
    def from_source(
        cls,
        name: str,
        source_directory: Path,
        output_directory: Path,
        benchmarks: list[str] | tuple[str, ...],
    ) -> Run:
        """Create a run for the requested benchmark projects in *source_directory*."""
        return cls(
            name=name,
            source_directory=source_directory,
            output_directory=output_directory,
            projects=tuple(ProjectRef(name=b, source_directory=source_directory) for b in benchmarks),
        )

    def project_output_directory(self, project: ProjectRef) -> Path:
        """Directory a project's benchmark artifacts are written to."""
        return self.output_directory / project.name


@dataclass(frozen=True)
class RunResult:
    """Reports collected after executing every project of a run."""

    run: Run
    reports: tuple[MeasurementReport, ...]

    def benchmarks(self) -> list[Benchmark]:
        """All benchmarks across every report, in report order."""
        return [b for report in self.reports for b in report.benchmarks]
