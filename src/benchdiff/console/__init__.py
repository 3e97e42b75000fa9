"""benchdiff.console -- terminal output system.

Usage (any file outside the comparison engine)::

    from benchdiff.console import console

    console.info("Hello")
    console.kv({"Baseline": "main", "Target": "HEAD"})

Configuration (call once in ``cli.py:main()``)::

    from benchdiff.console import configure

    configure(backend="auto", verbose=False)  # "rich" | "plain" | "auto"
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from benchdiff.console._plain import PlainBackend

if TYPE_CHECKING:
    from benchdiff.console._protocol import ConsoleProtocol

BACKENDS = ("auto", "rich", "plain")

# ---------------------------------------------------------------------------
# Global singleton -- defaults to PlainBackend until configure() runs
# ---------------------------------------------------------------------------

_backend: ConsoleProtocol = PlainBackend()


def configure(*, backend: str = "auto", verbose: bool = False) -> None:
    """Select the console backend.

    Should be called at startup (in ``cli.py:main()``) and again once the
    configuration has decided on verbosity.

    Args:
        backend: ``"rich"`` -- always use Rich.
                 ``"plain"`` -- always use plain text.
                 ``"auto"`` (default) -- Rich when stdout is a TTY; plain otherwise.
        verbose: Show ``console.verbose()`` messages.
    """
    global _backend  # noqa: PLW0603

    if backend == "auto":
        backend = "rich" if sys.stdout.isatty() else "plain"

    if backend == "rich":
        from benchdiff.console._rich import RichBackend

        _backend = RichBackend(verbose=verbose)
    else:
        _backend = PlainBackend(verbose=verbose)


def get_console() -> ConsoleProtocol:
    """Return the current backend instance."""
    return _backend


# ---------------------------------------------------------------------------
# Proxy object -- ``from benchdiff.console import console``
# ---------------------------------------------------------------------------


class _ConsoleProxy:
    """Transparent proxy that delegates to the current ``_backend``.

    This lets callers import ``console`` once at module level and
    automatically pick up any later ``configure()`` call.
    """

    def __getattr__(self, name: str) -> object:
        return getattr(_backend, name)


console: ConsoleProtocol = _ConsoleProxy()  # type: ignore[assignment]
