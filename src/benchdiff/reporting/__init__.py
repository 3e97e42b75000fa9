"""Reporters that present a ComparisonResult.

Each reporter satisfies ``ReporterPort`` (a single ``generate(result)``
method). ``create_reporter`` builds the reporter for a list of output styles.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from benchdiff.domain.errors import ConfigurationError
from benchdiff.reporting.console_report import ConsoleReporter
from benchdiff.reporting.json_report import JSON_FILE_NAME, JsonReporter
from benchdiff.reporting.markdown_report import MARKDOWN_FILE_NAME, MarkdownReporter

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from benchdiff.console._protocol import ConsoleProtocol
    from benchdiff.domain.comparison import ComparisonResult
    from benchdiff.domain.ports import ReporterPort

logger = logging.getLogger("benchdiff.reporting")

__all__ = [
    "CompositeReporter",
    "ConsoleReporter",
    "JsonReporter",
    "MarkdownReporter",
    "create_reporter",
]


class CompositeReporter:
    """Runs several reporters; one failing does not stop the rest."""

    def __init__(self, reporters: Iterable[ReporterPort], console: ConsoleProtocol) -> None:
        self._reporters = list(reporters)
        self._console = console

    @property
    def reporters(self) -> list[ReporterPort]:
        return list(self._reporters)

    def generate(self, result: ComparisonResult) -> None:
        for reporter in self._reporters:
            try:
                reporter.generate(result)
            except Exception as exc:
                logger.exception("Reporter %s failed", type(reporter).__name__)
                self._console.error(
                    f"Error generating report with {type(reporter).__name__}: {exc}"
                )


def create_reporter(
    styles: Iterable[str],
    output_directory: Path,
    console: ConsoleProtocol,
) -> ReporterPort:
    """Build the reporter for *styles* (``console``, ``json``, ``markdown``).

    A single style yields that reporter directly; several are wrapped in a
    CompositeReporter.
    """
    reporters: list[ReporterPort] = []
    for style in styles:
        key = style.lower()
        if key == "console":
            reporters.append(ConsoleReporter(console))
        elif key == "json":
            reporters.append(JsonReporter(output_directory / JSON_FILE_NAME, console))
        elif key == "markdown":
            reporters.append(MarkdownReporter(output_directory / MARKDOWN_FILE_NAME, console))
        else:
            msg = f"Unknown output style: {style}"
            raise ConfigurationError(msg)

    if not reporters:
        msg = "At least one output style is required"
        raise ConfigurationError(msg)
    if len(reporters) == 1:
        return reporters[0]
    return CompositeReporter(reporters, console)
