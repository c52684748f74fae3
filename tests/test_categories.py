"""Tests for categories module."""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from actions import DeleteAction, DeleteContentsAction, ExternalToolAction, ShellCommandAction
from categories import CATEGORIES, MANUAL_REVIEW_CATEGORIES, build_actions, is_manual_review, resolve_path
from registry import Risk

DETECTOR_CATEGORIES = {
    "Xcode Simulators (unavailable)",
    "Homebrew Cache",
    "Docker (prune)",
    "Yarn Cache",
    "Chrome Cache",
    "Brave Cache",
    "DMG Installers",
    "PKG Installers",
    "Large ZIPs in Downloads",
    "Time Machine Snapshots",
}


class TestCategoryTable:
    def test_entries_are_complete(self):
        for name, entry in CATEGORIES.items():
            assert entry["paths"], name
            assert entry["threshold"] > 0, name
            assert isinstance(entry["risk"], Risk), name
            assert entry["reason"], name
            assert entry["command"], name

    def test_ios_backups_is_high_risk(self):
        assert CATEGORIES["iOS Backups"]["risk"] is Risk.HIGH

    def test_resolve_path(self):
        assert resolve_path(".Trash", "/Users/me") == "/Users/me/.Trash"
        assert resolve_path("/private/var/log", "/Users/me") == "/private/var/log"


class TestBuildActions:
    def test_every_category_has_an_action(self):
        actions = build_actions()
        assert set(CATEGORIES) | DETECTOR_CATEGORIES == set(actions)

    def test_dispatch_shapes(self):
        actions = build_actions()
        assert isinstance(actions["Trash"], DeleteContentsAction)
        assert isinstance(actions["Xcode DerivedData"], DeleteAction)
        assert isinstance(actions["Homebrew Cache"], ExternalToolAction)
        assert isinstance(actions["Chrome Cache"], ShellCommandAction)
        assert actions["Docker (prune)"].final_confirmation
        assert isinstance(actions["Composer Cache"].fallback, DeleteAction)

    def test_manual_review_categories(self):
        assert MANUAL_REVIEW_CATEGORIES == {"Large ZIPs in Downloads", "iOS Backups"}
        assert is_manual_review("iOS Backups")
        assert not is_manual_review("Trash")
        assert not is_manual_review("Something New")
