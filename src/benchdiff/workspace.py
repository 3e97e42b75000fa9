"""Temporary workspace holding clones, build artifacts and default output."""

from __future__ import annotations

import logging
import secrets
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from types import TracebackType

logger = logging.getLogger("benchdiff.workspace")


class Workspace:
    """A per-invocation temporary directory.

    Layout: ``<tmp>/benchdiff/<YYYY-MM-DD>/<HHMMSS>_<random>``. Removed when
    the context exits unless :meth:`keep` was called.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._keep = False

    @classmethod
    def create(cls, root: Path | None = None, *, now: datetime | None = None) -> Workspace:
        now = now or datetime.now()
        base = root if root is not None else Path(tempfile.gettempdir())
        path = base / "benchdiff" / f"{now:%Y-%m-%d}" / f"{now:%H%M%S}_{secrets.token_hex(4)}"
        path.mkdir(parents=True, exist_ok=False)
        logger.debug("Created workspace %s", path)
        return cls(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def kept(self) -> bool:
        return self._keep

    def keep(self) -> None:
        """Leave the directory in place after the context exits."""
        self._keep = True

    def subdirectory(self, name: str) -> Path:
        """Return ``<workspace>/<name>``, creating it if needed."""
        sub = self._path / name
        sub.mkdir(parents=True, exist_ok=True)
        return sub

    def delete(self) -> None:
        shutil.rmtree(self._path, ignore_errors=True)
        logger.debug("Deleted workspace %s", self._path)

    def __enter__(self) -> Workspace:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if not self._keep:
            self.delete()

    def __str__(self) -> str:
        return str(self._path)
