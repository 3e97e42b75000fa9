"""benchdiff.console._protocol -- ConsoleProtocol definition.

Pure standard-library typing.Protocol for the benchdiff terminal output system.
No external dependencies allowed in this file.
"""

from __future__ import annotations

from typing import Protocol


class ConsoleProtocol(Protocol):
    """benchdiff terminal output protocol.

    **General messages** -- usable from any module::

        console.info("Preparing benchmarks for baseline (main)")
        console.success("JSON report saved to out/benchdiff-results.json")
        console.warning("Keeping temporary directory /tmp/benchdiff/...")
        console.error("Build failed for benchmark project 'Foo'")
        console.verbose("Output style: console")  # only with --verbose

    **Structured output** -- key-value displays and rules::

        console.rule("Benchmark comparison report")
        console.kv({"Baseline": "main", "Target": "HEAD"})

    **Metric lines** -- used by the console reporter::

        console.metric("▼", "improvement", "Mean: 1.46 μs => 1.20 μs (-17.6 %)")
    """

    @property
    def fancy(self) -> bool:
        """True when the backend can render colours and unicode decorations."""
        ...

    # -- General messages ---------------------------------------------------

    def info(self, message: str, *, indent: int = 0) -> None:
        """Informational message."""
        ...

    def success(self, message: str) -> None:
        """Success / positive-outcome message."""
        ...

    def warning(self, message: str) -> None:
        """Warning message."""
        ...

    def error(self, message: str) -> None:
        """Error message."""
        ...

    def verbose(self, message: str) -> None:
        """Diagnostic message, shown only when verbose output is enabled."""
        ...

    # -- Structured output --------------------------------------------------

    def rule(self, title: str) -> None:
        """Horizontal rule with a title."""
        ...

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        """Display key-value pairs."""
        ...

    # -- Metric lines -------------------------------------------------------

    def metric(self, symbol: str, kind: str, text: str, *, indent: int = 2) -> None:
        """Display *symbol* styled by *kind* followed by *text*.

        *kind* is one of ``improvement``, ``regression``, ``stable`` or
        ``neutral``.
        """
        ...
