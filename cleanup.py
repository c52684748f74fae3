"""
Interactive cleanup engine.

Walks the registry one candidate at a time:

    PENDING -> [HIGH_RISK_GATE] -> CONFIRMED | DECLINED -> EXECUTING -> COMPLETED | FAILED

HIGH-risk candidates need two yes answers; every prompt defaults to no.
A failed candidate never stops the run, an interrupt stops it at once.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from rich.console import Console

import display
from actions import ActionContext, CleanupAction
from categories import GENERIC_ACTION, build_actions
from deletion import DeletionOutcome, DeletionStrategy
from guard import ProtectedPathGuard
from registry import Candidate, CandidateRegistry, Risk
from scanner import disk_usage_lines

HOME = os.path.expanduser("~")


class CleanupState(Enum):
    PENDING = "pending"
    HIGH_RISK_GATE = "high_risk_gate"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class CleanupResult:
    candidate: Candidate
    state: CleanupState = CleanupState.PENDING
    outcomes: list[DeletionOutcome] = field(default_factory=list)


class CleanupAborted(Exception):
    """The operator interrupted the run. Completed items stay completed."""

    def __init__(self, results: list[CleanupResult]):
        super().__init__("cleanup aborted by user")
        self.results = results


class CleanupEngine:
    def __init__(
        self,
        registry: CandidateRegistry,
        log: logging.Logger,
        dry_run: bool = False,
        confirm: Optional[Callable[[str], bool]] = None,
        console: Optional[Console] = None,
        guard: Optional[ProtectedPathGuard] = None,
        actions: Optional[dict[str, CleanupAction]] = None,
        fallback_action: CleanupAction = GENERIC_ACTION,
        disk_reader: Callable[[], list[str]] = disk_usage_lines,
        home: str = HOME,
        trash_dir: Optional[str] = None,
    ):
        self.registry = registry
        self.log = log
        self.dry_run = dry_run
        self.console = console if console is not None else display.console
        self.confirm = confirm if confirm is not None else (lambda prompt: display.confirm(prompt, out=self.console))
        self.actions = actions if actions is not None else build_actions()
        self.fallback_action = fallback_action
        self.disk_reader = disk_reader
        self.strategy = DeletionStrategy(
            guard if guard is not None else ProtectedPathGuard(),
            log,
            dry_run=dry_run,
            confirm=self.confirm,
            console=self.console,
            trash_dir=trash_dir,
        )
        self.context = ActionContext(self.strategy, log, self.console, self.confirm, home=home)

    def action_for(self, category: str) -> CleanupAction:
        return self.actions.get(category, self.fallback_action)

    def run(self) -> list[CleanupResult]:
        """
        Process every candidate in display order and return one result each.

        Raises CleanupAborted on Ctrl-C or end of input; the exception
        carries the results gathered so far.
        """
        candidates = self.registry.all()
        display.render_cleanup_intro(len(candidates), self.dry_run, out=self.console)
        if not candidates:
            return []

        results: list[CleanupResult] = []
        for candidate in candidates:
            result = CleanupResult(candidate)
            try:
                self.process(candidate, result)
            except (KeyboardInterrupt, EOFError):
                self.console.print()
                display.print_warning("Aborted. Remaining candidates were not processed.", out=self.console)
                self.log.warning("ABORTED by user during: %s", candidate.category)
                results.append(result)
                raise CleanupAborted(results)
            results.append(result)
            self.console.print()

        display.render_disk_lines("POST-CLEANUP DISK STATUS", self.disk_reader(), out=self.console)
        return results

    def process(self, candidate: Candidate, result: Optional[CleanupResult] = None) -> CleanupResult:
        """Drive one candidate through the confirmation state machine."""
        if result is None:
            result = CleanupResult(candidate)
        category = candidate.category

        display.render_cleanup_candidate(candidate, out=self.console)

        if candidate.risk is Risk.HIGH:
            result.state = CleanupState.HIGH_RISK_GATE
            display.print_warning("This is a HIGH-RISK operation.", out=self.console)
            if not self.confirm(f"Are you SURE you want to proceed with '{category}'?"):
                return self._declined(result)
            self.log.info("USER CONFIRMED HIGH RISK: %s", category)

        if not self.confirm(f"Clean up '{category}' ({display.size_label(candidate.size_bytes)})?"):
            return self._declined(result)

        result.state = CleanupState.CONFIRMED
        self.log.info("USER APPROVED: %s", category)
        action = self.action_for(category)

        if self.dry_run:
            description = action.describe(candidate)
            display.print_item(f"[DRY RUN] Would {description}", style="dim", out=self.console)
            self.log.info("[DRY RUN] Would %s", description)
            result.outcomes.append(DeletionOutcome.SKIPPED)
            result.state = CleanupState.COMPLETED
            return result

        result.state = CleanupState.EXECUTING
        report = action.execute(candidate, self.context)
        result.outcomes.extend(report.outcomes)
        if report.succeeded:
            result.state = CleanupState.COMPLETED
            self.log.info("COMPLETED: %s", category)
        else:
            result.state = CleanupState.FAILED
            self.log.warning("FAILED: %s", category)
        return result

    def _declined(self, result: CleanupResult) -> CleanupResult:
        display.print_item(f"Skipped: {result.candidate.category}", out=self.console)
        self.log.info("SKIPPED (user declined): %s", result.candidate.category)
        result.state = CleanupState.DECLINED
        return result
