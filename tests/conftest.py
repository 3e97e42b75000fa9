"""Shared pytest fixtures for benchdiff tests.

Provides factory fixtures for the measurement records, BenchmarkDotNet JSON
documents and a fake BenchmarkToolPort that writes canned reports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from bdn_json import write_report
from git_helpers import init_repo

from benchdiff import console as console_module
from benchdiff.console._plain import PlainBackend
from benchdiff.domain.errors import BuildFailedError, RunFailedError
from benchdiff.domain.models import (
    Benchmark,
    ConfidenceInterval,
    MeasurementReport,
    MemoryMetrics,
    Percentiles,
    ProjectRef,
    Run,
    RunResult,
    Statistics,
)

_Factory = Any  # callable[..., model]

# ---------------------------------------------------------------------------
# Measurement record factories
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_statistics() -> _Factory:
    """Factory for Statistics; every derived field scales with ``mean``."""

    def _factory(
        *,
        mean: float = 1000.0,
        standard_deviation: float = 10.0,
        standard_error: float = 2.0,
    ) -> Statistics:
        return Statistics(
            mean=mean,
            min=mean * 0.9,
            max=mean * 1.1,
            median=mean,
            standard_deviation=standard_deviation,
            standard_error=standard_error,
            variance=standard_deviation**2,
            skewness=0.1,
            kurtosis=2.5,
            confidence_interval=ConfidenceInterval(
                n=15,
                mean=mean,
                standard_error=standard_error,
                level=12,
                margin=standard_error * 4,
                lower=mean - standard_error * 4,
                upper=mean + standard_error * 4,
            ),
            percentiles=Percentiles(
                p0=mean * 0.9,
                p25=mean * 0.95,
                p50=mean,
                p67=mean * 1.01,
                p80=mean * 1.02,
                p85=mean * 1.03,
                p90=mean * 1.04,
                p95=mean * 1.05,
                p100=mean * 1.1,
            ),
        )

    return _factory


@pytest.fixture()
def make_memory() -> _Factory:
    """Factory for MemoryMetrics with sensible defaults."""

    def _factory(
        *,
        allocated: int = 64,
        gen0: int = 1,
        gen1: int = 0,
        gen2: int = 0,
        operations: int = 1_000_000,
    ) -> MemoryMetrics:
        return MemoryMetrics(
            bytes_allocated_per_operation=allocated,
            gen0_collections=gen0,
            gen1_collections=gen1,
            gen2_collections=gen2,
            total_operations=operations,
        )

    return _factory


@pytest.fixture()
def make_benchmark(make_statistics: _Factory, make_memory: _Factory) -> _Factory:
    """Factory for Benchmark keyed by ``full_name``."""

    def _factory(
        full_name: str = "Bench.Method",
        *,
        mean: float = 1000.0,
        allocated: int = 64,
        operations: int = 1_000_000,
    ) -> Benchmark:
        return Benchmark(
            full_name=full_name,
            statistics=make_statistics(mean=mean),
            memory=make_memory(allocated=allocated, operations=operations),
        )

    return _factory


@pytest.fixture()
def make_run_result(tmp_path: Path) -> _Factory:
    """Factory for RunResult; each positional list becomes one report."""

    def _factory(*reports: list[Benchmark], name: str = "run") -> RunResult:
        run = Run(
            name=name,
            source_directory=tmp_path / name / "src",
            output_directory=tmp_path / name / "out",
            projects=(),
        )
        return RunResult(
            run=run,
            reports=tuple(
                MeasurementReport(title=f"report-{i}", benchmarks=tuple(benchmarks))
                for i, benchmarks in enumerate(reports)
            ),
        )

    return _factory


# ---------------------------------------------------------------------------
# Mock port implementations
# ---------------------------------------------------------------------------


class FakeBenchmarkTool:
    """BenchmarkToolPort that writes canned reports instead of invoking dotnet.

    ``results`` maps a source directory to ``{project name: [benchmark docs]}``.
    A project missing from the mapping writes no report at all.
    """

    def __init__(
        self,
        results: dict[Path, dict[str, list[dict[str, Any]]]],
        *,
        fail_build: frozenset[str] = frozenset(),
        fail_run: frozenset[str] = frozenset(),
    ) -> None:
        self.results = results
        self.fail_build = fail_build
        self.fail_run = fail_run
        self.calls: list[tuple[str, str, Path]] = []

    def build(self, project: ProjectRef) -> None:
        self.calls.append(("build", project.name, project.source_directory))
        if project.name in self.fail_build:
            raise BuildFailedError(project.name, "error CS1002: ; expected")

    def run(self, project: ProjectRef, output_directory: Path) -> None:
        self.calls.append(("run", project.name, project.source_directory))
        if project.name in self.fail_run:
            raise RunFailedError(project.name, "Unhandled exception")
        docs = self.results.get(project.source_directory, {}).get(project.name)
        if docs is not None:
            write_report(output_directory / "results", project.name, docs)


@pytest.fixture()
def make_tool() -> _Factory:
    """Factory for FakeBenchmarkTool."""

    def _factory(
        results: dict[Path, dict[str, list[dict[str, Any]]]] | None = None,
        **kwargs: Any,
    ) -> FakeBenchmarkTool:
        return FakeBenchmarkTool(results or {}, **kwargs)

    return _factory


# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _plain_console(monkeypatch: pytest.MonkeyPatch) -> None:
    """Every test starts with a quiet plain-text console."""
    monkeypatch.setattr(console_module, "_backend", PlainBackend())


# ---------------------------------------------------------------------------
# Git
# ---------------------------------------------------------------------------


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """A temporary git repo with two commits and a ``v1`` tag on the first."""
    return init_repo(tmp_path / "repo")
