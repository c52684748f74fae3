"""
Cleanup actions, one per category (see categories.build_actions).

Three shapes:
  - delete actions hand paths to the DeletionStrategy
  - tool actions run a package manager / system tool and trust its exit status
  - manual review actions only print guidance and never mutate anything
"""

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import Callable, Optional

from rich.console import Console

import display
from deletion import DeletionOutcome, DeletionStrategy
from registry import Candidate
from scanner import file_size, find_files, human_size

HOME = os.path.expanduser("~")

FAILING_OUTCOMES = {DeletionOutcome.REFUSED, DeletionOutcome.FAILED}


@dataclass
class ActionReport:
    succeeded: bool
    outcomes: list[DeletionOutcome] = field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: list[DeletionOutcome]) -> "ActionReport":
        return cls(not any(o in FAILING_OUTCOMES for o in outcomes), outcomes)


@dataclass
class ActionContext:
    """What an action may touch: the deletion primitive, the log and the operator."""

    strategy: DeletionStrategy
    log: logging.Logger
    console: Console
    confirm: Callable[[str], bool]
    home: str = HOME


def _run_tool(args: list[str]) -> bool:
    """Run an external tool to completion; True on exit status 0."""
    try:
        result = subprocess.run(args, capture_output=True, text=True)
    except (FileNotFoundError, PermissionError):
        return False
    return result.returncode == 0


def _run_shell(command: str) -> bool:
    """Run a shell command line (globs, quoting) to completion; True on exit status 0."""
    try:
        result = subprocess.run(command, shell=True, capture_output=True, text=True)
    except OSError:
        return False
    return result.returncode == 0


class CleanupAction:
    manual_review = False

    def describe(self, candidate: Candidate) -> str:
        """What execute() would do, for dry-run output."""
        raise NotImplementedError

    def execute(self, candidate: Candidate, ctx: ActionContext) -> ActionReport:
        raise NotImplementedError


class DeleteAction(CleanupAction):
    """Delete the candidate path (or a fixed subdirectory of it)."""

    def __init__(self, force_permanent: bool = True, subpath: Optional[str] = None):
        self.force_permanent = force_permanent
        self.subpath = subpath

    def target(self, candidate: Candidate) -> str:
        if self.subpath:
            return os.path.join(candidate.path, self.subpath)
        return candidate.path

    def describe(self, candidate: Candidate) -> str:
        return f"delete {self.target(candidate)}"

    def execute(self, candidate: Candidate, ctx: ActionContext) -> ActionReport:
        outcome = ctx.strategy.delete(self.target(candidate), force_permanent=self.force_permanent)
        return ActionReport.from_outcomes([outcome])


class DeleteContentsAction(CleanupAction):
    """Empty a directory but keep it, like `rm -rf dir/*` (dot-entries survive)."""

    def __init__(self, done_message: str, force_permanent: bool = True):
        self.done_message = done_message
        self.force_permanent = force_permanent

    def describe(self, candidate: Candidate) -> str:
        return f"clear {os.path.join(candidate.path, '*')}"

    def execute(self, candidate: Candidate, ctx: ActionContext) -> ActionReport:
        try:
            entries = sorted(e for e in os.listdir(candidate.path) if not e.startswith("."))
        except OSError as exc:
            display.print_error(f"Cannot read {candidate.path}: {exc.strerror}", out=ctx.console)
            ctx.log.error("FAILED to list: %s (%s)", candidate.path, exc)
            return ActionReport(False)

        outcomes = [
            ctx.strategy.delete(os.path.join(candidate.path, e), force_permanent=self.force_permanent)
            for e in entries
        ]
        report = ActionReport.from_outcomes(outcomes)
        if report.succeeded:
            display.print_ok(self.done_message, out=ctx.console)
        else:
            failed = sum(1 for o in outcomes if o in FAILING_OUTCOMES)
            display.print_error(f"{failed} item(s) in {candidate.path} could not be removed (in use?).", out=ctx.console)
        return report


class DeleteMatchingFilesAction(CleanupAction):
    """Trash every file matching a pattern under a directory of home."""

    def __init__(self, pattern: str, subdir: str = "Downloads", maxdepth: int = 2):
        self.pattern = pattern
        self.subdir = subdir
        self.maxdepth = maxdepth

    def describe(self, candidate: Candidate) -> str:
        return f"move {self.pattern} files under ~/{self.subdir} to the Trash"

    def execute(self, candidate: Candidate, ctx: ActionContext) -> ActionReport:
        root = os.path.join(ctx.home, self.subdir)
        files = [f for f in find_files(root, self.pattern, maxdepth=self.maxdepth) if os.path.isfile(f)]
        outcomes = [ctx.strategy.delete(f) for f in files]
        display.print_ok(f"Processed {len(outcomes)} {self.pattern.lstrip('*')} file(s).", out=ctx.console)
        return ActionReport.from_outcomes(outcomes)


class ExternalToolAction(CleanupAction):
    """
    Run a tool command such as `brew cleanup`.

    final_confirmation asks once more before running (Docker, Time Machine).
    fallback runs when the tool fails (Composer, CocoaPods fall back to
    deleting their cache directory).
    """

    def __init__(
        self,
        args: list[str],
        done_message: str,
        final_confirmation: Optional[str] = None,
        caution: Optional[str] = None,
        fallback: Optional[CleanupAction] = None,
    ):
        self.args = args
        self.done_message = done_message
        self.final_confirmation = final_confirmation
        self.caution = caution
        self.fallback = fallback

    @property
    def command_line(self) -> str:
        return shlex.join(self.args)

    def describe(self, candidate: Candidate) -> str:
        return f"run: {self.command_line}"

    def execute(self, candidate: Candidate, ctx: ActionContext) -> ActionReport:
        if self.caution:
            display.print_warning(self.caution, out=ctx.console)
        if self.final_confirmation:
            if not ctx.confirm(self.final_confirmation):
                display.print_item(f"Skipped {candidate.category}.", out=ctx.console)
                ctx.log.info("SKIPPED (user declined final confirmation): %s", candidate.category)
                return ActionReport(True, [DeletionOutcome.SKIPPED])

        if _run_tool(self.args):
            display.print_ok(self.done_message, out=ctx.console)
            ctx.log.info("TOOL OK: %s", self.command_line)
            return ActionReport(True)

        ctx.log.warning("TOOL FAILED: %s", self.command_line)
        if self.fallback is not None:
            display.print_warning(f"'{self.command_line}' failed; falling back.", out=ctx.console)
            return self.fallback.execute(candidate, ctx)

        display.print_error(f"'{self.command_line}' failed.", out=ctx.console)
        return ActionReport(False)


class ShellCommandAction(CleanupAction):
    """
    Execute a shell command line verbatim, unless the candidate path is protected.

    With no fixed command this runs the candidate's own `command` field;
    that is the generic handler for categories missing from the table.
    """

    def __init__(self, command: Optional[str] = None, note: Optional[str] = None, failure_hint: str = "Command failed."):
        self.command = command
        self.note = note
        self.failure_hint = failure_hint

    def command_for(self, candidate: Candidate) -> str:
        return self.command or candidate.command

    def describe(self, candidate: Candidate) -> str:
        return f"run: {self.command_for(candidate)}"

    def execute(self, candidate: Candidate, ctx: ActionContext) -> ActionReport:
        command = self.command_for(candidate)
        if ctx.strategy.refuse_if_protected(candidate.path):
            return ActionReport(False, [DeletionOutcome.REFUSED])
        if self.note:
            display.print_item(self.note, out=ctx.console)
        display.print_item(f"Running: {command}", out=ctx.console)
        if _run_shell(command):
            display.print_ok(f"{candidate.category}: done.", out=ctx.console)
            ctx.log.info("TOOL OK: %s", command)
            return ActionReport(True)
        display.print_error(self.failure_hint, out=ctx.console)
        ctx.log.warning("TOOL FAILED: %s", command)
        return ActionReport(False)


class ManualReviewAction(CleanupAction):
    """Print guidance only. Content under these categories is never auto-deleted."""

    manual_review = True

    def __init__(self, guidance: list[str], list_pattern: Optional[str] = None, min_size_mb: Optional[int] = None):
        self.guidance = guidance
        self.list_pattern = list_pattern
        self.min_size_mb = min_size_mb

    def describe(self, candidate: Candidate) -> str:
        return f"show manual review guidance for {candidate.category} (nothing is deleted)"

    def execute(self, candidate: Candidate, ctx: ActionContext) -> ActionReport:
        for line in self.guidance:
            display.print_item(line.format(path=candidate.path, home=ctx.home), out=ctx.console)

        if self.list_pattern:
            root = os.path.join(ctx.home, "Downloads")
            for f in find_files(root, self.list_pattern, maxdepth=2, min_size_mb=self.min_size_mb):
                display.print_item(f"{human_size(file_size(f)):>12}  {os.path.basename(f)}", out=ctx.console)
            display.print_item("Delete individually: rm '<path>'", style="dim", out=ctx.console)

        ctx.log.info("MANUAL REVIEW (no changes made): %s", candidate.category)
        return ActionReport(True)
