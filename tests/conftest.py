"""Shared fixtures: a real run log in tmp_path and a captured console."""

import io
import os
import sys

import pytest
from rich.console import Console

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from audit_log import close_log, open_log


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "run.log"


@pytest.fixture
def log(log_path):
    logger = open_log(str(log_path), name="disk_audit_test")
    yield logger
    close_log(logger)


@pytest.fixture
def log_lines(log_path):
    """Call to read the run log written so far (timestamps stripped)."""

    def read():
        if not log_path.exists():
            return []
        return [line.split("] ", 1)[1] for line in log_path.read_text().splitlines()]

    return read


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120)


class ScriptedConfirm:
    """Answers prompts from a fixed list; records every prompt asked."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        if not self.answers:
            return False
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer


@pytest.fixture
def scripted():
    return ScriptedConfirm
