"""Adapter: DotnetCli implements BenchmarkToolPort.

Builds and runs BenchmarkDotNet projects through the ``dotnet`` CLI via
subprocess. Every invocation blocks until the process exits.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from benchdiff.domain.errors import BuildFailedError, ProjectNotFoundError, RunFailedError

if TYPE_CHECKING:
    from benchdiff.domain.models import ProjectRef

logger = logging.getLogger("benchdiff.adapters")

# Arguments forwarded to BenchmarkRunner so it exports JSON into our artifacts dir.
BENCHMARK_ARGUMENTS = (
    "--keepFiles",
    "--stopOnFirstError",
    "--memory",
    "--threading",
    "--exporters",
    "JSON",
)


def resolve_project_file(project: ProjectRef) -> Path:
    """Locate the ``.csproj`` file for a project requested by name.

    ``Foo.csproj`` is taken as is; ``Foo`` is tried as ``Foo.csproj`` and
    then as ``Foo/Foo.csproj``.
    """
    base = project.source_directory / project.name
    if base.suffix.lower() == ".csproj":
        candidates: tuple[Path, ...] = (base,)
    else:
        candidates = (
            base.with_name(base.name + ".csproj"),
            base / f"{base.name}.csproj",
        )
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    raise ProjectNotFoundError(project.name, candidates)


class DotnetCli:
    """Concrete BenchmarkToolPort implementation backed by the dotnet CLI.

    Parameters
    ----------
    executable:
        Name or path of the dotnet executable.
    timeout:
        Seconds before a build or run is abandoned; ``None`` waits forever.
    stream_output:
        Let the child process write straight to the terminal instead of
        capturing its output (used for verbose runs).

    """

    def __init__(
        self,
        executable: str = "dotnet",
        *,
        timeout: float | None = None,
        stream_output: bool = False,
    ) -> None:
        self._executable = executable
        self._timeout = timeout
        self._stream_output = stream_output

    def build(self, project: ProjectRef) -> None:
        """Build the project in Release configuration."""
        project_file = resolve_project_file(project)
        logger.info("Building %s", project_file)
        code, output = self._run(
            ["build", str(project_file), "--configuration", "Release"],
            cwd=project_file.parent,
        )
        if code != 0:
            raise BuildFailedError(project.name, output)

    def run(self, project: ProjectRef, output_directory: Path) -> None:
        """Run the (already built) project, exporting JSON into *output_directory*."""
        project_file = resolve_project_file(project)
        logger.info("Running %s -> %s", project_file, output_directory)
        code, output = self._run(
            [
                "run",
                "--project",
                str(project_file),
                "--no-build",
                "--configuration",
                "Release",
                "--",
                *BENCHMARK_ARGUMENTS,
                "--artifacts",
                str(output_directory),
            ],
            cwd=project_file.parent,
        )
        if code != 0:
            raise RunFailedError(project.name, output)

    def _run(self, args: list[str], *, cwd: Path) -> tuple[int, str]:
        """Run a dotnet command and return (returncode, diagnostic output)."""
        command = [self._executable, *args]
        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                capture_output=not self._stream_output,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError:
            logger.warning("%s not found", self._executable)
            return 127, f"{self._executable} not found"
        except subprocess.TimeoutExpired:
            logger.warning("%s timed out after %ss", " ".join(args[:1]), self._timeout)
            return -1, f"{self._executable} {args[0]} timed out after {self._timeout}s"

        output = ""
        if result.returncode != 0:
            output = (result.stderr or "").strip() or (result.stdout or "").strip()
            output = output[-4000:]
            logger.warning("%s exited with %d", " ".join(command[:2]), result.returncode)
        return result.returncode, output
