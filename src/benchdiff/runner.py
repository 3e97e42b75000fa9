"""Run lifecycle: build, execute and collect each side of a comparison.

Build and execution go through a ``BenchmarkToolPort`` so the lifecycle can
be driven by the dotnet CLI in production and by a fake in tests. Every step
is fail-fast: the first failing project aborts the comparison.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from benchdiff.adapters.report_loader import load_reports
from benchdiff.domain.comparison import (
    DEFAULT_SIGNIFICANCE_THRESHOLD,
    ComparisonResult,
    compare,
)
from benchdiff.domain.models import MeasurementReport, Run, RunResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from benchdiff.domain.ports import BenchmarkToolPort

logger = logging.getLogger("benchdiff.runner")

RESULTS_DIR = "results"


def _noop(message: str) -> None:
    pass


def prepare(
    run: Run,
    tool: BenchmarkToolPort,
    notify: Callable[[str], None] = _noop,
) -> None:
    """Build every project of *run*, in order, stopping at the first failure."""
    logger.info("Preparing %s (%d projects)", run.name, len(run.projects))
    for project in run.projects:
        notify(f"Building benchmark project: {project.name}")
        tool.build(project)


def execute(
    run: Run,
    tool: BenchmarkToolPort,
    notify: Callable[[str], None] = _noop,
) -> RunResult:
    """Run every project of *run* and load the reports each one wrote."""
    logger.info("Executing %s", run.name)
    reports: list[MeasurementReport] = []
    for project in run.projects:
        notify(f"Running benchmark project: {project.name}")
        output_directory = run.project_output_directory(project)
        output_directory.mkdir(parents=True, exist_ok=True)
        tool.run(project, output_directory)
        loaded = load_reports(output_directory / RESULTS_DIR)
        logger.info("%s: %s produced %d report(s)", run.name, project.name, len(loaded))
        reports.extend(loaded)
    return RunResult(run=run, reports=tuple(reports))


def compare_runs(
    baseline: Run,
    target: Run,
    tool: BenchmarkToolPort,
    *,
    significance_threshold: float = DEFAULT_SIGNIFICANCE_THRESHOLD,
    parallel: bool = False,
    notify: Callable[[str], None] = _noop,
) -> ComparisonResult:
    """Prepare and execute both runs, then compare their results.

    With *parallel* the two executions overlap on separate threads; they
    write to disjoint output directories. Builds always run sequentially.
    """
    for run in (baseline, target):
        notify(f"Preparing benchmarks for {run.name}")
        prepare(run, tool, notify)

    if parallel:
        notify("Running baseline and target benchmarks in parallel")
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="benchdiff") as pool:
            baseline_future = pool.submit(execute, baseline, tool, notify)
            target_future = pool.submit(execute, target, tool, notify)
            baseline_result = baseline_future.result()
            target_result = target_future.result()
    else:
        notify(f"Running benchmarks for {baseline.name}")
        baseline_result = execute(baseline, tool, notify)
        notify(f"Running benchmarks for {target.name}")
        target_result = execute(target, tool, notify)

    result = compare(baseline_result, target_result, significance_threshold)
    logger.info("Compared %d benchmarks", len(result.comparisons))
    return result
