"""Tests for cleanup module (interactive cleanup engine)."""

import os
import sys
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from actions import ActionReport, CleanupAction
from categories import GENERIC_ACTION
from cleanup import CleanupAborted, CleanupEngine, CleanupState
from deletion import DeletionOutcome
from guard import ProtectedPathGuard
from registry import Candidate, CandidateRegistry, Risk


class StubAction(CleanupAction):
    def __init__(self, succeeded=True):
        self.succeeded = succeeded
        self.executed = []

    def describe(self, candidate):
        return f"stub {candidate.category}"

    def execute(self, candidate, ctx):
        self.executed.append(candidate.category)
        return ActionReport(self.succeeded)


@pytest.fixture
def home(tmp_path):
    h = tmp_path / "home"
    trash = h / ".Trash"
    trash.mkdir(parents=True)
    (trash / "old.zip").write_bytes(b"x" * 10)
    (trash / "folder").mkdir()
    (trash / ".DS_Store").write_bytes(b"x")
    backup = h / "Library" / "Application Support" / "MobileSync" / "Backup"
    (backup / "device-1").mkdir(parents=True)
    (h / "Documents").mkdir()
    return h


@pytest.fixture
def registry(home):
    registry = CandidateRegistry()
    registry.register(
        Candidate("Trash", 2_000_000, str(home / ".Trash"), Risk.LOW, "Already deleted by user.")
    )
    registry.register(
        Candidate(
            "iOS Backups",
            5_000_000_000,
            str(home / "Library" / "Application Support" / "MobileSync" / "Backup"),
            Risk.HIGH,
            "Local iOS device backups.",
        )
    )
    return registry


@pytest.fixture
def make_engine(registry, home, log, console):
    def make(confirm, dry_run=False, actions=None, reg=None, disk_reader=None):
        return CleanupEngine(
            reg if reg is not None else registry,
            log,
            dry_run=dry_run,
            confirm=confirm,
            console=console,
            guard=ProtectedPathGuard([str(home / "Documents")]),
            actions=actions,
            disk_reader=disk_reader or (lambda: ["Filesystem Size Used Avail"]),
            home=str(home),
            trash_dir=str(home / ".Trash"),
        )

    return make


class TestDryRun:
    def test_nothing_is_touched(self, make_engine, scripted, home, log_lines):
        confirm = scripted(True, True, True)
        results = make_engine(confirm, dry_run=True).run()

        assert [r.candidate.category for r in results] == ["iOS Backups", "Trash"]
        assert all(r.state is CleanupState.COMPLETED for r in results)
        assert [r.outcomes for r in results] == [[DeletionOutcome.SKIPPED], [DeletionOutcome.SKIPPED]]
        assert len([line for line in log_lines() if line.startswith("[DRY RUN]")]) == 2
        assert (home / ".Trash" / "old.zip").exists()
        assert (home / "Library" / "Application Support" / "MobileSync" / "Backup" / "device-1").exists()


class TestConfirmation:
    def test_high_risk_needs_two_yes(self, make_engine, scripted, registry, log_lines):
        confirm = scripted(True, True)
        engine = make_engine(confirm)
        result = engine.process(registry.all()[0])
        assert result.state is CleanupState.COMPLETED
        assert confirm.prompts[0] == "Are you SURE you want to proceed with 'iOS Backups'?"
        assert confirm.prompts[1] == "Clean up 'iOS Backups' (4.7 GB)?"
        assert "USER CONFIRMED HIGH RISK: iOS Backups" in log_lines()
        assert "USER APPROVED: iOS Backups" in log_lines()

    def test_high_risk_gate_declined(self, make_engine, scripted, registry, log_lines):
        stub = StubAction()
        confirm = scripted(False)
        result = make_engine(confirm, actions={"iOS Backups": stub}).process(registry.all()[0])
        assert result.state is CleanupState.DECLINED
        assert len(confirm.prompts) == 1
        assert stub.executed == []
        assert log_lines() == ["SKIPPED (user declined): iOS Backups"]

    def test_high_risk_second_prompt_declined(self, make_engine, scripted, registry):
        stub = StubAction()
        result = make_engine(scripted(True, False), actions={"iOS Backups": stub}).process(registry.all()[0])
        assert result.state is CleanupState.DECLINED
        assert stub.executed == []

    def test_low_risk_single_prompt(self, make_engine, scripted, registry):
        stub = StubAction()
        confirm = scripted(True)
        result = make_engine(confirm, actions={"Trash": stub}).process(registry.all()[1])
        assert result.state is CleanupState.COMPLETED
        assert confirm.prompts == ["Clean up 'Trash' (1.9 MB)?"]
        assert stub.executed == ["Trash"]

    def test_empty_answers_decline_everything(self, make_engine, home):
        stub = StubAction()
        confirm = MagicMock(return_value=False)
        engine = make_engine(confirm, actions={"Trash": stub, "iOS Backups": stub})
        results = engine.run()
        assert [r.state for r in results] == [CleanupState.DECLINED, CleanupState.DECLINED]
        assert stub.executed == []
        assert (home / ".Trash" / "old.zip").exists()


class TestExecution:
    def test_trash_contents_removed(self, make_engine, scripted, home, registry, log_lines):
        result = make_engine(scripted(True)).process(registry.all()[1])
        assert result.state is CleanupState.COMPLETED
        assert sorted(os.listdir(home / ".Trash")) == [".DS_Store"]
        assert "COMPLETED: Trash" in log_lines()

    def test_manual_review_never_mutates(self, make_engine, scripted, home, registry, log_lines):
        result = make_engine(scripted(True, True)).process(registry.all()[0])
        assert result.state is CleanupState.COMPLETED
        assert (home / "Library" / "Application Support" / "MobileSync" / "Backup" / "device-1").exists()
        assert "MANUAL REVIEW (no changes made): iOS Backups" in log_lines()

    def test_protected_candidate_fails(self, make_engine, scripted, home, log_lines):
        registry = CandidateRegistry()
        registry.register(Candidate("Xcode Archives", 500, str(home / "Documents"), Risk.MED, "test"))
        results = make_engine(scripted(True), reg=registry).run()
        assert results[0].state is CleanupState.FAILED
        assert results[0].outcomes == [DeletionOutcome.REFUSED]
        assert (home / "Documents").exists()
        assert "FAILED: Xcode Archives" in log_lines()

    def test_unknown_category_command_is_guarded(self, make_engine, scripted, home, log_lines):
        (home / "Documents" / "thesis.txt").write_text("keep")
        registry = CandidateRegistry()
        registry.register(
            Candidate(
                "Some New Cache",
                500,
                str(home / "Documents"),
                Risk.LOW,
                "test",
                command=f"rm -rf '{home}/Documents'/*",
            )
        )
        results = make_engine(scripted(True), reg=registry).run()
        assert results[0].state is CleanupState.FAILED
        assert results[0].outcomes == [DeletionOutcome.REFUSED]
        assert (home / "Documents" / "thesis.txt").read_text() == "keep"
        assert log_lines().count(f"REFUSED deletion of protected path: {home / 'Documents'}") == 1

    def test_failure_does_not_stop_the_run(self, make_engine, scripted):
        failing, working = StubAction(succeeded=False), StubAction()
        engine = make_engine(scripted(True, True, True), actions={"iOS Backups": failing, "Trash": working})
        results = engine.run()
        assert [r.state for r in results] == [CleanupState.FAILED, CleanupState.COMPLETED]
        assert working.executed == ["Trash"]

    def test_unknown_category_uses_generic_action(self, make_engine):
        engine = make_engine(MagicMock(return_value=False))
        assert engine.action_for("Something New") is GENERIC_ACTION
        assert engine.action_for("Trash") is not GENERIC_ACTION

    def test_post_cleanup_disk_status(self, make_engine, console):
        reader = MagicMock(return_value=["/dev/disk1  500G  200G  300G  40%  /"])
        make_engine(MagicMock(return_value=False), disk_reader=reader).run()
        reader.assert_called_once_with()
        assert "POST-CLEANUP DISK STATUS" in console.file.getvalue()

    def test_empty_registry(self, make_engine, console):
        confirm = MagicMock()
        assert make_engine(confirm, reg=CandidateRegistry()).run() == []
        confirm.assert_not_called()
        assert "Nothing to do" in console.file.getvalue()


class TestAbort:
    def test_interrupt_stops_immediately(self, make_engine, scripted, log_lines):
        stub = StubAction()
        confirm = scripted(True, True, KeyboardInterrupt())
        engine = make_engine(confirm, actions={"iOS Backups": stub, "Trash": stub})
        with pytest.raises(CleanupAborted) as exc_info:
            engine.run()
        results = exc_info.value.results
        assert [r.state for r in results] == [CleanupState.COMPLETED, CleanupState.PENDING]
        assert stub.executed == ["iOS Backups"]
        assert "ABORTED by user during: Trash" in log_lines()

    def test_end_of_input_aborts(self, make_engine, scripted):
        with pytest.raises(CleanupAborted):
            make_engine(scripted(EOFError())).run()
