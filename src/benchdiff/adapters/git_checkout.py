"""Git adapter implementing SourceCheckoutPort.

Uses subprocess to invoke git commands. Revisions are resolved in the source
repository and materialized in a separate clone so the user's working tree
is never touched.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from benchdiff.domain.errors import CheckoutError

logger = logging.getLogger("benchdiff.adapters")


def _git(args: list[str], *, cwd: Path) -> subprocess.CompletedProcess[str]:
    """Run a git command, raising CheckoutError on a non-zero exit."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise CheckoutError("git executable not found") from exc
    if result.returncode != 0:
        msg = f"git {' '.join(args)} failed: {result.stderr.strip()}"
        raise CheckoutError(msg)
    return result


def detect_repository(start: Path) -> Path:
    """Return the top-level directory of the git repository containing *start*."""
    result = _git(["rev-parse", "--show-toplevel"], cwd=start)
    return Path(result.stdout.strip()).resolve()


class GitCheckout:
    """Concrete SourceCheckoutPort implementation backed by git CLI.

    Parameters
    ----------
    repo_dir:
        Root directory of the source repository. Refs are resolved here.

    """

    def __init__(self, repo_dir: Path) -> None:
        self._root = Path(repo_dir).resolve()

    @property
    def repo_dir(self) -> Path:
        return self._root

    def resolve(self, ref: str) -> str:
        """Resolve a branch, tag or hash to a full commit hash."""
        try:
            result = _git(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], cwd=self._root)
        except CheckoutError as exc:
            msg = f"Commit {ref} does not exist in the repository {self._root}"
            raise CheckoutError(msg) from exc
        return result.stdout.strip()

    def checkout(self, ref: str, destination: Path) -> Path:
        """Clone the repository into *destination* and check out *ref* detached."""
        commit = self.resolve(ref)
        destination.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Cloning %s into %s at %s (%s)", self._root, destination, ref, commit[:12])
        _git(["clone", "--quiet", "--no-checkout", str(self._root), str(destination)], cwd=self._root)
        _git(["checkout", "--quiet", "--detach", commit], cwd=destination)
        return destination
