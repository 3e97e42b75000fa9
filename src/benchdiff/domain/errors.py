"""Error taxonomy for benchdiff.

Every error is terminal for the comparison in progress. Nothing here is
retried; the CLI reports the message and exits non-zero.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class BenchdiffError(Exception):
    """Base class for all expected benchdiff failures."""


class ConfigurationError(BenchdiffError):
    """Raised when configuration (file or arguments) is invalid."""


class NoResultsFoundError(BenchdiffError):
    """Raised when a results directory is missing or holds no report files."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        super().__init__(
            f"No benchmark results found in {directory}. "
            "Make sure your benchmark project passes command line arguments to "
            "BenchmarkRunner.Run<>(), for example: "
            "BenchmarkRunner.Run<MyBenchmark>(args: args);"
        )


class MalformedReportError(BenchdiffError):
    """Raised when a report file exists but cannot be decoded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed benchmark report {path}: {reason}")


class ProjectNotFoundError(BenchdiffError):
    """Raised when a requested benchmark project cannot be located."""

    def __init__(self, name: str, searched: tuple[Path, ...]) -> None:
        self.name = name
        self.searched = searched
        locations = ", ".join(str(p) for p in searched)
        super().__init__(f"Benchmark project '{name}' not found (looked in: {locations})")


class _ProjectProcessError(BenchdiffError):
    """Common shape for build and run failures of an external process."""

    action = ""

    def __init__(self, project: str, output: str = "") -> None:
        self.project = project
        self.output = output
        message = f"{self.action} failed for benchmark project '{project}'"
        if output:
            message = f"{message}:\n{output}"
        super().__init__(message)


class BuildFailedError(_ProjectProcessError):
    """Raised when building a benchmark project fails."""

    action = "Build"


class RunFailedError(_ProjectProcessError):
    """Raised when executing a benchmark project fails."""

    action = "Run"


class AmbiguousBenchmarkNameError(BenchdiffError):
    """Raised when one side of a comparison reports the same benchmark twice."""

    def __init__(self, side: str, full_name: str) -> None:
        self.side = side
        self.full_name = full_name
        super().__init__(
            f"Benchmark '{full_name}' appears more than once in the {side} results; "
            "benchmark names must be unique across all projects of a run"
        )


class CheckoutError(BenchdiffError):
    """Raised when a source revision cannot be cloned or checked out."""
