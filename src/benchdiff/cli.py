#!/usr/bin/env python3
"""
benchdiff CLI -- compare benchmark results between two versions of a codebase.

Usage:
  benchdiff interactive BASELINE [TARGET] [--repo PATH] [--no-delete] [options]
  benchdiff ci BASELINE_DIR TARGET_DIR [options]

Shared options:
  -b/--benchmark NAME   benchmark project to run (repeatable)
  --output-directory    where JSON / Markdown reports are written
  --output-style STYLE  console, json, markdown (repeatable or comma-separated)
  --threshold FRACTION  significance threshold, e.g. 0.05 for 5 %
  --parallel            run baseline and target benchmarks concurrently
  --timeout SECONDS     abandon a build or run after this long
  --verbose             show diagnostics and benchmark tool output
"""

from __future__ import annotations

import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import TYPE_CHECKING

from benchdiff.adapters.dotnet_cli import DotnetCli
from benchdiff.adapters.git_checkout import GitCheckout, detect_repository
from benchdiff.config import (
    LOG_FILE,
    ConfigValues,
    Mode,
    ResolvedConfig,
    load_configuration,
    parse_output_styles,
    validate_threshold,
    validate_timeout,
)
from benchdiff.console import BACKENDS, configure, console
from benchdiff.domain.errors import BenchdiffError, ConfigurationError
from benchdiff.domain.models import Run
from benchdiff.reporting import create_reporter
from benchdiff.runner import compare_runs
from benchdiff.workspace import Workspace

if TYPE_CHECKING:
    from benchdiff.domain.comparison import ComparisonResult
    from benchdiff.domain.ports import BenchmarkToolPort, SourceCheckoutPort

logger = logging.getLogger("benchdiff")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _setup_logging(log_file: Path, *, verbose: bool) -> logging.Handler:
    """Attach a file handler to the root logger and return it."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.addHandler(handler)
    return handler


def _split_names(values: list[str] | None) -> tuple[str, ...] | None:
    if not values:
        return None
    names = [part.strip() for v in values for part in v.split(",")]
    return tuple(n for n in names if n)


def config_from_args(args: argparse.Namespace) -> ConfigValues:
    """Translate parsed arguments into the highest-precedence config layer."""
    return ConfigValues(
        verbose=True if args.verbose else None,
        output_directory=args.output_directory,
        output_style=parse_output_styles(args.output_style) if args.output_style else None,
        benchmarks=_split_names(args.benchmark),
        no_delete=True if getattr(args, "no_delete", False) else None,
        significance_threshold=(
            validate_threshold(args.threshold, source="--threshold")
            if args.threshold is not None
            else None
        ),
        parallel=True if args.parallel else None,
        timeout=validate_timeout(args.timeout, source="--timeout") if args.timeout is not None else None,
    )


def _print_configuration(config: ResolvedConfig, workspace: Workspace) -> None:
    console.verbose("Resolved configuration:")
    console.verbose(f"  Workspace: {workspace.path}")
    console.verbose(f"  Output directory: {config.output_directory}")
    console.verbose(f"  Output style: {', '.join(config.output_style)}")
    console.verbose(f"  Benchmarks: {', '.join(config.benchmarks)}")
    console.verbose(f"  Significance threshold: {config.significance_threshold:g}")
    console.verbose(f"  Parallel: {config.parallel}")
    console.verbose(f"  Timeout: {config.timeout if config.timeout is not None else 'none'}")
    console.verbose(f"  No delete: {config.no_delete}")


def _notify(message: str) -> None:
    console.info(message, indent=1)


def _load_config(
    args: argparse.Namespace,
    base_path: Path,
    mode: Mode,
    workspace: Workspace,
) -> ResolvedConfig:
    config = load_configuration(
        base_path,
        config_from_args(args),
        mode,
        default_output_directory=workspace.path / "out",
    )
    configure(backend=args.console, verbose=config.verbose)
    if config.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    if config.no_delete:
        workspace.keep()
    _print_configuration(config, workspace)
    return config


def _compare(
    baseline: Run,
    target: Run,
    config: ResolvedConfig,
    tool: BenchmarkToolPort | None,
) -> ComparisonResult:
    tool = tool or DotnetCli(timeout=config.timeout, stream_output=config.verbose)
    result = compare_runs(
        baseline,
        target,
        tool,
        significance_threshold=config.significance_threshold,
        parallel=config.parallel,
        notify=_notify,
    )
    create_reporter(config.output_style, config.output_directory, console).generate(result)
    return result


# ---------------------------------------------------------------------------
# CLI commands
# ---------------------------------------------------------------------------


def cmd_interactive(
    args: argparse.Namespace,
    workspace: Workspace,
    tool: BenchmarkToolPort | None = None,
) -> ComparisonResult:
    """Compare two commits of a local git repository."""
    repo = Path(args.repo).resolve() if args.repo else detect_repository(Path.cwd())
    config = _load_config(args, repo, Mode.INTERACTIVE, workspace)

    target_ref = args.target or "HEAD"
    console.kv(
        {
            "Repository": str(repo),
            "Baseline": args.baseline,
            "Target": target_ref if args.target else f"{target_ref} (currently checked out)",
        }
    )

    git: SourceCheckoutPort = GitCheckout(repo)
    runs: list[Run] = []
    for side, ref in (("baseline", args.baseline), ("target", target_ref)):
        console.info(f"Checking out {ref} for {side}")
        source = git.checkout(ref, workspace.path / side / "src")
        runs.append(
            Run.from_source(
                name=f"{side} ({ref})",
                source_directory=source,
                output_directory=workspace.subdirectory(f"{side}/artifacts"),
                benchmarks=config.benchmarks,
            )
        )

    return _compare(runs[0], runs[1], config, tool)


def cmd_ci(
    args: argparse.Namespace,
    workspace: Workspace,
    tool: BenchmarkToolPort | None = None,
) -> ComparisonResult:
    """Compare two already checked-out source directories."""
    baseline_dir = Path(args.baseline).resolve()
    target_dir = Path(args.target).resolve()
    for label, directory in (("Baseline", baseline_dir), ("Target", target_dir)):
        if not directory.is_dir():
            msg = f"{label} directory does not exist: {directory}"
            raise ConfigurationError(msg)

    config = _load_config(args, target_dir, Mode.CI, workspace)
    console.kv({"Baseline": str(baseline_dir), "Target": str(target_dir)})

    baseline = Run.from_source(
        name=f"baseline ({baseline_dir.name})",
        source_directory=baseline_dir,
        output_directory=workspace.subdirectory("baseline/artifacts"),
        benchmarks=config.benchmarks,
    )
    target = Run.from_source(
        name=f"target ({target_dir.name})",
        source_directory=target_dir,
        output_directory=workspace.subdirectory("target/artifacts"),
        benchmarks=config.benchmarks,
    )
    return _compare(baseline, target, config, tool)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    shared = argparse.ArgumentParser(add_help=False)
    shared.add_argument(
        "-b",
        "--benchmark",
        action="append",
        default=None,
        help="Benchmark project to run (repeatable)",
    )
    shared.add_argument("--verbose", action="store_true", help="Enable verbose output")
    shared.add_argument(
        "--output-directory",
        default=None,
        help="Directory for JSON and Markdown reports",
    )
    shared.add_argument(
        "--output-style",
        action="append",
        default=None,
        help="Output styles: console, json, markdown (repeatable or comma-separated)",
    )
    shared.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Significance threshold as a fraction (default: 0.05)",
    )
    shared.add_argument(
        "--parallel",
        action="store_true",
        help="Run baseline and target benchmarks concurrently",
    )
    shared.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds before a build or benchmark run is abandoned",
    )
    shared.add_argument(
        "--console",
        choices=BACKENDS,
        default="auto",
        help="Console output backend (default: auto)",
    )
    shared.add_argument(
        "--log-file",
        default=None,
        help="Write the diagnostic log here (default: inside the workspace, removed with it)",
    )

    parser = argparse.ArgumentParser(
        prog="benchdiff",
        description="Compare benchmark results between two versions of a codebase",
    )
    sub = parser.add_subparsers(dest="command")

    interactive_p = sub.add_parser(
        "interactive",
        parents=[shared],
        help="Compare two commits of a local git repository",
    )
    interactive_p.add_argument("baseline", help="Baseline commit reference (hash, branch or tag)")
    interactive_p.add_argument(
        "target",
        nargs="?",
        default=None,
        help="Target commit reference (defaults to the currently checked out version)",
    )
    interactive_p.add_argument(
        "-r",
        "--repo",
        "--repository-path",
        dest="repo",
        default=None,
        help="Path to the git repository (auto-detected from the current directory)",
    )
    interactive_p.add_argument(
        "--no-delete",
        action="store_true",
        help="Keep the temporary directories after running the benchmarks",
    )

    ci_p = sub.add_parser(
        "ci",
        parents=[shared],
        help="Compare two pre-checked-out source directories",
    )
    ci_p.add_argument("baseline", help="Directory containing the baseline version")
    ci_p.add_argument("target", help="Directory containing the target version")

    return parser


def main(argv: list[str] | None = None, *, tool: BenchmarkToolPort | None = None) -> None:
    """Entry point for the ``benchdiff`` command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in ("interactive", "ci"):
        parser.print_help()
        sys.exit(1)

    configure(backend=args.console, verbose=args.verbose)

    handlers = {"interactive": cmd_interactive, "ci": cmd_ci}
    exit_code = 0
    root_level = logging.getLogger().level
    with Workspace.create() as workspace:
        log_file = Path(args.log_file) if args.log_file else workspace.path / LOG_FILE
        handler = _setup_logging(log_file, verbose=args.verbose)
        logger.info("benchdiff %s started (workspace %s)", args.command, workspace.path)
        try:
            handlers[args.command](args, workspace, tool)
        except BenchdiffError as exc:
            logger.error("%s failed: %s", args.command, exc, exc_info=True)
            console.error(str(exc))
            if args.verbose:
                console.error(traceback.format_exc())
            exit_code = 1
        except KeyboardInterrupt:
            console.warning("Interrupted.")
            exit_code = 130
        finally:
            if workspace.kept:
                console.info(f"Keeping temporary directory {workspace.path}")
            logging.getLogger().removeHandler(handler)
            logging.getLogger().setLevel(root_level)
            handler.close()

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
