"""benchdiff.console._rich -- Rich-based terminal backend.

Provides coloured, structured terminal output using the Rich library.
"""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "info": "default",
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "dim": "dim",
        "improvement": "green",
        "regression": "red",
        "stable": "dark_green",
        "neutral": "default",
    }
)


class RichBackend:
    """ConsoleProtocol implementation backed by Rich."""

    def __init__(self, *, verbose: bool = False, console: Console | None = None) -> None:
        self._con = console or Console(theme=_THEME, highlight=False)
        self._err = Console(theme=_THEME, highlight=False, stderr=True)
        self._verbose = verbose

    @property
    def fancy(self) -> bool:
        return True

    # -- General messages ---------------------------------------------------

    def info(self, message: str, *, indent: int = 0) -> None:
        self._con.print(f"{'  ' * indent}{escape(message)}", style="info")

    def success(self, message: str) -> None:
        self._con.print(f"✓ {escape(message)}", style="success")

    def warning(self, message: str) -> None:
        self._con.print(f"⚠ {escape(message)}", style="warning")

    def error(self, message: str) -> None:
        self._err.print(f"✗ {escape(message)}", style="error")

    def verbose(self, message: str) -> None:
        if self._verbose:
            self._con.print(f"[dim]{escape(message)}[/]")

    # -- Structured output --------------------------------------------------

    def rule(self, title: str) -> None:
        self._con.print()
        self._con.print(Rule(f" {escape(title)} ", style="bold", align="left"))

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        t = Table(
            title=title or None,
            box=box.SIMPLE,
            show_header=False,
            show_edge=False,
            pad_edge=True,
        )
        t.add_column("Key", style="bold", justify="right")
        t.add_column("Value")
        for k, v in data.items():
            t.add_row(escape(k), escape(v))
        self._con.print(t)

    # -- Metric lines -------------------------------------------------------

    def metric(self, symbol: str, kind: str, text: str, *, indent: int = 2) -> None:
        self._con.print(f"{'  ' * indent}[{kind}]{escape(symbol)}[/] {escape(text)}")
