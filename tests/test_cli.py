"""Tests for the benchdiff command line."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest
from bdn_json import benchmark_document, write_report

from benchdiff.cli import build_parser, config_from_args, main
from benchdiff.domain.errors import ConfigurationError
from benchdiff.domain.models import ProjectRef


@pytest.fixture(autouse=True)
def _temp_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep workspaces created by main() inside the test's tmp_path."""
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


class VersionedTool:
    """Fake tool whose Hash mean is 1000 ns times the checked-out version."""

    def __init__(self) -> None:
        self.sources: list[Path] = []

    def build(self, project: ProjectRef) -> None:
        self.sources.append(project.source_directory)

    def run(self, project: ProjectRef, output_directory: Path) -> None:
        version = int((project.source_directory / "version.txt").read_text())
        write_report(
            output_directory / "results",
            project.name,
            [benchmark_document("Hash(N:1000)", mean=1000.0 * version)],
        )


class TestParser:
    def test_interactive(self) -> None:
        args = build_parser().parse_args(
            ["interactive", "main", "-b", "A", "-b", "B,C", "--output-style", "json", "--no-delete"]
        )
        assert args.command == "interactive"
        assert args.baseline == "main"
        assert args.target is None
        assert args.no_delete is True

        values = config_from_args(args)
        assert values.benchmarks == ("A", "B", "C")
        assert values.output_style == ("json",)
        assert values.no_delete is True
        assert values.verbose is None
        assert values.significance_threshold is None

    def test_ci(self) -> None:
        args = build_parser().parse_args(
            ["ci", "base", "head", "--threshold", "0.1", "--timeout", "60", "--parallel"]
        )
        values = config_from_args(args)
        assert values.significance_threshold == 0.1
        assert values.timeout == 60.0
        assert values.parallel is True
        assert values.no_delete is None

    def test_invalid_threshold(self) -> None:
        args = build_parser().parse_args(["ci", "base", "head", "--threshold", "-1"])
        with pytest.raises(ConfigurationError):
            config_from_args(args)

    def test_no_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 1
        assert "interactive" in capsys.readouterr().out


class TestCiCommand:
    @pytest.fixture
    def dirs(self, tmp_path: Path) -> tuple[Path, Path]:
        baseline = tmp_path / "baseline"
        target = tmp_path / "target"
        baseline.mkdir()
        target.mkdir()
        return baseline.resolve(), target.resolve()

    def test_reports_written(self, dirs: tuple[Path, Path], tmp_path: Path, make_tool) -> None:
        baseline, target = dirs
        (target / "benchdiff.yaml").write_text("benchmarks: [Bench]\n", encoding="utf-8")
        tool = make_tool(
            {
                baseline: {"Bench": [benchmark_document("Hash(N:1000)", mean=1456.23)]},
                target: {"Bench": [benchmark_document("Hash(N:1000)", mean=1675.67)]},
            }
        )
        reports = tmp_path / "reports"

        main(
            ["ci", str(baseline), str(target), "--output-directory", str(reports), "--console", "plain"],
            tool=tool,
        )

        data = json.loads((reports / "benchdiff-results.json").read_text(encoding="utf-8"))
        assert data["summary"]["regressions"] == 1
        assert "Performance regressions detected" in (reports / "benchdiff-summary.md").read_text(
            encoding="utf-8"
        )

    def test_workspace_kept_by_default(
        self,
        dirs: tuple[Path, Path],
        tmp_path: Path,
        make_tool,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        baseline, target = dirs
        tool = make_tool(
            {
                baseline: {"Bench": [benchmark_document("A")]},
                target: {"Bench": [benchmark_document("A")]},
            }
        )

        main(["ci", str(baseline), str(target), "-b", "Bench", "--console", "plain"], tool=tool)

        out = capsys.readouterr().out
        assert "Keeping temporary directory" in out
        assert list((tmp_path / "tmp" / "benchdiff").glob("*/*/out/benchdiff-results.json"))

    def test_run_names(self, dirs: tuple[Path, Path], make_tool, capsys: pytest.CaptureFixture[str]) -> None:
        baseline, target = dirs
        tool = make_tool(
            {
                baseline: {"Bench": [benchmark_document("A")]},
                target: {"Bench": [benchmark_document("A")]},
            }
        )

        main(
            ["ci", str(baseline), str(target), "-b", "Bench", "--output-style", "console", "--console", "plain"],
            tool=tool,
        )

        out = capsys.readouterr().out
        assert "Preparing benchmarks for baseline (baseline)" in out
        assert "Running benchmarks for target (target)" in out
        assert "No significant changes detected." in out

    def test_missing_directory(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["ci", str(tmp_path / "nope"), str(tmp_path), "-b", "Bench", "--console", "plain"])
        assert excinfo.value.code == 1
        assert "[error] Baseline directory does not exist" in capsys.readouterr().err

    def test_requires_benchmark(self, dirs: tuple[Path, Path], capsys: pytest.CaptureFixture[str]) -> None:
        baseline, target = dirs
        with pytest.raises(SystemExit) as excinfo:
            main(["ci", str(baseline), str(target), "--console", "plain"])
        assert excinfo.value.code == 1
        assert "At least one benchmark must be specified" in capsys.readouterr().err

    def test_build_failure(
        self,
        dirs: tuple[Path, Path],
        tmp_path: Path,
        make_tool,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        baseline, target = dirs
        log_file = tmp_path / "benchdiff.log"
        tool = make_tool(fail_build=frozenset({"Bench"}))

        with pytest.raises(SystemExit) as excinfo:
            main(
                [
                    "ci",
                    str(baseline),
                    str(target),
                    "-b",
                    "Bench",
                    "--console",
                    "plain",
                    "--log-file",
                    str(log_file),
                ],
                tool=tool,
            )

        assert excinfo.value.code == 1
        assert "Build failed for benchmark project 'Bench'" in capsys.readouterr().err
        log = log_file.read_text(encoding="utf-8")
        assert "benchdiff ci started" in log
        assert "ci failed" in log

    @pytest.mark.parametrize(("config", "debug"), [("verbose: true\n", True), ("", False)])
    def test_log_level_follows_config_file(
        self, dirs: tuple[Path, Path], tmp_path: Path, make_tool, config: str, debug: bool
    ) -> None:
        baseline, target = dirs
        (target / "benchdiff.yaml").write_text(f"benchmarks: [Bench]\n{config}", encoding="utf-8")
        tool = make_tool(
            {
                baseline: {"Bench": [benchmark_document("A")]},
                target: {"Bench": [benchmark_document("A")]},
            }
        )
        log_file = tmp_path / "benchdiff.log"

        main(
            ["ci", str(baseline), str(target), "--console", "plain", "--log-file", str(log_file)],
            tool=tool,
        )

        log = log_file.read_text(encoding="utf-8")
        assert (" DEBUG " in log) is debug
        assert "benchdiff ci started" in log

    def test_invalid_output_style(self, dirs: tuple[Path, Path], capsys: pytest.CaptureFixture[str]) -> None:
        baseline, target = dirs
        with pytest.raises(SystemExit):
            main(["ci", str(baseline), str(target), "-b", "B", "--output-style", "html", "--console", "plain"])
        assert "Invalid output style: 'html'" in capsys.readouterr().err


class TestInteractiveCommand:
    def test_compares_two_commits(
        self,
        git_repo: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        tool = VersionedTool()

        main(
            ["interactive", "v1", "--repo", str(git_repo), "-b", "Bench", "--console", "plain"],
            tool=tool,
        )

        out = capsys.readouterr().out
        assert "Preparing benchmarks for baseline (v1)" in out
        assert "Preparing benchmarks for target (HEAD)" in out
        assert "[REG] Mean: 1000.00 ns => 2000.00 ns (+100.0 %)" in out
        assert [p.parts[-2:] for p in tool.sources] == [("baseline", "src"), ("target", "src")]
        # Interactive runs clean up their workspace by default.
        assert not list((tmp_path / "tmp" / "benchdiff").glob("*/*"))

    def test_no_delete(self, git_repo: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(
            [
                "interactive",
                "v1",
                "HEAD",
                "--repo",
                str(git_repo),
                "-b",
                "Bench",
                "--no-delete",
                "--console",
                "plain",
            ],
            tool=VersionedTool(),
        )

        assert "Keeping temporary directory" in capsys.readouterr().out
        kept = list((tmp_path / "tmp" / "benchdiff").glob("*/*/baseline/src/version.txt"))
        assert len(kept) == 1

    def test_config_from_repository(self, git_repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (git_repo / "benchdiff.yaml").write_text(
            "interactive:\n  benchmarks: [Bench]\n  significance_threshold: 2.0\n",
            encoding="utf-8",
        )

        main(["interactive", "v1", "--repo", str(git_repo), "--console", "plain"], tool=VersionedTool())

        assert "No significant changes detected." in capsys.readouterr().out

    def test_unknown_ref(self, git_repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(
                ["interactive", "nope", "--repo", str(git_repo), "-b", "Bench", "--console", "plain"],
                tool=VersionedTool(),
            )
        assert excinfo.value.code == 1
        assert "Commit nope does not exist" in capsys.readouterr().err
