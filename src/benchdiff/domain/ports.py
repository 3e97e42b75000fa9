"""Port interfaces for benchdiff.

All ports are defined as typing.Protocol; structural subtyping means any class
with matching method signatures satisfies the Protocol without inheritance.

This module has ZERO external imports, only stdlib and typing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pathlib import Path

    from benchdiff.domain.comparison import ComparisonResult
    from benchdiff.domain.models import ProjectRef


class BenchmarkToolPort(Protocol):
    """Abstraction over the external build-and-run tool (e.g. the dotnet CLI)."""

    def build(self, project: ProjectRef) -> None:
        """Build the project. Idempotent.

        Raises BuildFailedError carrying the captured diagnostics on failure.
        """
        ...

    def run(self, project: ProjectRef, output_directory: Path) -> None:
        """Execute the project's benchmarks.

        On success, report files exist under ``<output_directory>/results/``.
        Raises RunFailedError on failure.
        """
        ...


class SourceCheckoutPort(Protocol):
    """Abstraction over version acquisition (cloning a revision into a directory)."""

    def checkout(self, ref: str, destination: Path) -> Path:
        """Materialize *ref* in *destination* and return the working directory."""
        ...


class ReporterPort(Protocol):
    """Abstraction over presenting a comparison result."""

    def generate(self, result: ComparisonResult) -> None:
        """Render or persist *result*."""
        ...
