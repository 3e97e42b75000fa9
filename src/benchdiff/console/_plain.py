"""benchdiff.console._plain -- Plain-text fallback backend.

Writes with built-in print() and no external dependencies.
Used when stdout is not a TTY (CI logs) or when explicitly requested.
"""

from __future__ import annotations

import sys


class PlainBackend:
    """ConsoleProtocol implementation using only built-in print()."""

    def __init__(self, *, verbose: bool = False) -> None:
        self._verbose = verbose

    @property
    def fancy(self) -> bool:
        return False

    # -- General messages ---------------------------------------------------

    def info(self, message: str, *, indent: int = 0) -> None:
        print(f"{'  ' * indent}{message}")

    def success(self, message: str) -> None:
        print(f"[ok] {message}")

    def warning(self, message: str) -> None:
        print(f"[warn] {message}")

    def error(self, message: str) -> None:
        print(f"[error] {message}", file=sys.stderr)

    def verbose(self, message: str) -> None:
        if self._verbose:
            print(f"[verbose] {message}")

    # -- Structured output --------------------------------------------------

    def rule(self, title: str) -> None:
        width = 60
        print(f"\n{f' {title} '.center(width, '=')}")

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        if title:
            print(f"\n{title}:")
        if not data:
            return
        max_key = max(len(k) for k in data)
        for k, v in data.items():
            print(f"  {k.rjust(max_key)}: {v}")

    # -- Metric lines -------------------------------------------------------

    def metric(self, symbol: str, kind: str, text: str, *, indent: int = 2) -> None:
        print(f"{'  ' * indent}{symbol} {text}")
