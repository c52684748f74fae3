"""Tests for audit_log module."""

import os
import re
import sys
from datetime import datetime

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from audit_log import LogSinkError, close_log, default_log_path, log_path_of, open_log

LINE = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] ")


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "audit.log"
    logger = open_log(str(path), name="disk_audit_test")
    yield logger, path
    close_log(logger)


class TestOpenLog:
    def test_line_format(self, log_file):
        logger, path = log_file
        logger.info("CANDIDATE: %s | %s", "Trash", "2.0 MB")
        lines = path.read_text().splitlines()
        assert len(lines) == 1
        assert LINE.match(lines[0])
        assert lines[0].endswith("] CANDIDATE: Trash | 2.0 MB")

    def test_strips_ansi(self, log_file):
        logger, path = log_file
        logger.info("\x1b[1;31mREFUSED\x1b[0m deletion")
        text = path.read_text()
        assert "\x1b" not in text
        assert text.rstrip().endswith("] REFUSED deletion")

    def test_appends(self, tmp_path):
        path = tmp_path / "audit.log"
        path.write_text("earlier run\n")
        logger = open_log(str(path), name="disk_audit_test")
        logger.info("next run")
        close_log(logger)
        lines = path.read_text().splitlines()
        assert lines[0] == "earlier run"
        assert lines[1].endswith("next run")

    def test_reopen_replaces_handler(self, tmp_path):
        first = open_log(str(tmp_path / "a.log"), name="disk_audit_test")
        second = open_log(str(tmp_path / "b.log"), name="disk_audit_test")
        assert first is second
        assert len(second.handlers) == 1
        assert log_path_of(second) == str(tmp_path / "b.log")
        close_log(second)
        assert log_path_of(second) is None

    def test_unwritable_location(self, tmp_path):
        with pytest.raises(LogSinkError):
            open_log(str(tmp_path / "missing" / "dir" / "audit.log"), name="disk_audit_test")


class TestDefaultLogPath:
    NOW = datetime(2024, 5, 1, 9, 30, 15)

    def test_prefers_desktop(self, tmp_path):
        (tmp_path / "Desktop").mkdir()
        (tmp_path / "Downloads").mkdir()
        path = default_log_path(str(tmp_path), now=self.NOW)
        assert path == str(tmp_path / "Desktop" / "disk-audit-20240501_093015.log")

    def test_falls_back_to_downloads(self, tmp_path):
        (tmp_path / "Downloads").mkdir()
        path = default_log_path(str(tmp_path), now=self.NOW)
        assert os.path.dirname(path) == str(tmp_path / "Downloads")

    def test_falls_back_to_home(self, tmp_path):
        path = default_log_path(str(tmp_path), now=self.NOW)
        assert os.path.dirname(path) == str(tmp_path)
