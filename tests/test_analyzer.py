"""Tests for the analyzer CLI."""

import io
import os
import sys
from unittest.mock import patch

import pytest
from rich.console import Console

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analyzer import VERSION, RunOptions, main, parse_options, run
from cleanup import CleanupAborted


class TestParseOptions:
    def test_defaults(self):
        options = parse_options([])
        assert options == RunOptions(mode="audit", depth="fast", dry_run=False, top_n=25, log_path=None)
        assert not options.deep

    def test_cleanup(self):
        assert parse_options(["--cleanup"]).mode == "cleanup"

    def test_dry_run_implies_cleanup(self):
        options = parse_options(["--dry-run"])
        assert options.mode == "cleanup"
        assert options.dry_run

    def test_deep_top_and_log(self):
        options = parse_options(["--deep", "--top", "5", "--log", "/tmp/a.log"])
        assert options.deep
        assert options.top_n == 5
        assert options.log_path == "/tmp/a.log"

    def test_last_depth_flag_wins(self):
        assert parse_options(["--fast", "--deep"]).depth == "deep"
        assert parse_options(["--deep", "--fast"]).depth == "fast"

    @pytest.mark.parametrize(
        "argv",
        [["--bogus"], ["--top", "0"], ["--top", "many"], ["--log"]],
    )
    def test_bad_arguments_exit_2(self, argv):
        with pytest.raises(SystemExit) as exc_info:
            parse_options(argv)
        assert exc_info.value.code == 2

    @pytest.mark.parametrize("flag", ["-v", "--version"])
    def test_version(self, flag, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_options([flag])
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.strip() == f"disk-audit v{VERSION}"


class TestMain:
    def test_unwritable_log_exits_1(self, tmp_path, capsys):
        code = main(["--log", str(tmp_path / "missing" / "audit.log")])
        assert code == 1
        assert "Cannot write log file" in capsys.readouterr().err


@pytest.fixture
def quiet():
    """Silence the shared console and skip the slow read-only sections."""
    with patch("display.console", Console(file=io.StringIO(), width=120)) as out, \
            patch("analyzer.run_audit_sections"), \
            patch("scanner.command_exists", return_value=False):
        yield out


class TestRun:
    @patch("recommender.detect_candidates", return_value=None)
    def test_audit_mode(self, mock_detect, quiet, log, log_lines, tmp_path):
        assert run(RunOptions(), log, home=str(tmp_path)) == 0
        lines = log_lines()
        assert lines[0] == "Disk audit v1.0.0 | Mode: audit | Scan: fast | Dry Run: False"
        assert lines[-1] == "Run finished"
        assert "NEXT STEPS" in quiet.file.getvalue()
        assert mock_detect.call_args.kwargs["deep"] is False

    @patch("recommender.detect_candidates", return_value=None)
    def test_cleanup_mode_runs_engine(self, mock_detect, quiet, log, tmp_path):
        with patch("cleanup.CleanupEngine") as engine_cls:
            code = run(RunOptions(mode="cleanup", dry_run=True), log, home=str(tmp_path))
        assert code == 0
        assert engine_cls.call_args.kwargs["dry_run"] is True
        engine_cls.return_value.run.assert_called_once_with()

    @patch("recommender.detect_candidates", return_value=None)
    def test_abort_exits_130(self, mock_detect, quiet, log, tmp_path):
        with patch("cleanup.CleanupEngine") as engine_cls:
            engine_cls.return_value.run.side_effect = CleanupAborted([])
            assert run(RunOptions(mode="cleanup"), log, home=str(tmp_path)) == 130

    def test_interrupt_during_audit_exits_130(self, quiet, log, log_lines, tmp_path):
        with patch("recommender.detect_candidates", side_effect=KeyboardInterrupt):
            assert run(RunOptions(), log, home=str(tmp_path)) == 130
        assert "ABORTED by user" in log_lines()

    @patch("recommender.detect_candidates")
    def test_deep_dev_report_shown(self, mock_detect, quiet, log, tmp_path):
        mock_detect.return_value = {
            "node_modules": {"count": 3, "size_bytes": 2 * 1024 ** 3},
            "venvs": {"count": 0, "size_bytes": 0},
        }
        run(RunOptions(depth="deep"), log, home=str(tmp_path))
        assert "2.0 GB across 3 node_modules directories" in quiet.file.getvalue()
